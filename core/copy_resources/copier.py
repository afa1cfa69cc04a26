"""
CopyResources: copy items, item sets, site pages, and whole sites.

Every copy follows the same path (create_resource_copy):

    1. serialize the source into a ResourceTree
    2. run the kind's callback: redact owner/relations, set slug and visibility
    3. fire ``copy_resources.<resource_name>.pre`` so extensions can edit the tree
    4. create the resource from the final tree
    5. fire ``copy_resources.copy_<kind>`` so extensions can copy their own data

Sites go through SiteCopyOrchestrator, which adds pages, homepage,
navigation, settings, and item links on top.

Options (all copy methods):
    visibility: "public", "private", or "inherit" / omitted (keep the source's).
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from models import db
from core.copy_resources import blocks, navigation
from core.copy_resources.errors import SlugCollisionError
from core.copy_resources.hooks import (
    CopyEvent, HookBus, PrePersistEvent,
    post_copy_event_name, pre_persist_event_name,
)
from core.copy_resources.layouts import CoreConfig, load_core_config
from core.copy_resources.link_tables import ITEM_SET_ITEMS
from core.copy_resources.site_copy import SiteCopyOrchestrator
from core.copy_resources.slugs import DEFAULT_MAX_ATTEMPTS, SlugAllocator
from core.copy_resources.store import ResourceStore
from core.copy_resources.tree import COPY_POLICIES, ResourceTree, transform
from core.copy_resources.visibility import Visibility, get_is_public, resolve_is_public

logger = logging.getLogger(__name__)

DEFAULT_SLUG_RETRIES = 3
DEFAULT_PAGE_SIZE = 1000

TreeCallback = Callable[[ResourceTree], None]


class CopyResources:
    """Copy service bound to one store, hook bus, and core configuration.

    Args:
        store: Resource layer (default: a ResourceStore with no owner).
        hooks: Extension hook bus (default: an empty one).
        core_config: Core block layouts / link types (default: built-in).
        slug_max_attempts: Candidates probed per slug allocation.
        slug_retries: Allocations tried when the store reports a slug collision.
        page_size: Pages fetched per query when copying a site's pages.
        cleanup_on_failure: Delete a partially built site copy when a site
            copy stage fails.
    """

    def __init__(self, store: ResourceStore | None = None, hooks: HookBus | None = None,
                 core_config: CoreConfig | None = None, *,
                 slug_max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                 slug_retries: int = DEFAULT_SLUG_RETRIES,
                 page_size: int = DEFAULT_PAGE_SIZE,
                 cleanup_on_failure: bool = False):
        self.store = store if store is not None else ResourceStore()
        self.hooks = hooks if hooks is not None else HookBus()
        self.core_config = core_config if core_config is not None else load_core_config()
        self.slug_max_attempts = slug_max_attempts
        self.slug_retries = max(int(slug_retries), 1)
        self.page_size = max(int(page_size), 1)
        self.cleanup_on_failure = cleanup_on_failure

    # ------------------------------------------------------------------
    # Copy operations
    # ------------------------------------------------------------------

    def copy_item(self, item, options: dict | None = None):
        """Copy an item. Owner and media are never carried over."""
        visibility = Visibility.parse((options or {}).get('visibility'))
        policy = COPY_POLICIES['item']

        def callback(tree: ResourceTree) -> None:
            transform(tree, policy.redactions, {
                'o:is_public': resolve_is_public(tree.get('o:is_public'), visibility),
            })

        item_copy = self.create_resource_copy(policy.resource_name, item, callback)
        logger.info('Copied item %s to item %s', item.id, item_copy.id)

        self.trigger_copied(policy.kind, item, item_copy)
        return item_copy

    def copy_item_set(self, item_set, options: dict | None = None):
        """Copy an item set, including which items belong to it."""
        visibility = Visibility.parse((options or {}).get('visibility'))
        policy = COPY_POLICIES['item_set']

        def callback(tree: ResourceTree) -> None:
            transform(tree, policy.redactions, {
                'o:is_public': resolve_is_public(tree.get('o:is_public'), visibility),
            })

        item_set_copy = self.create_resource_copy(policy.resource_name, item_set, callback)

        linked = ITEM_SET_ITEMS.replicate(item_set.id, item_set_copy.id)
        db.session.commit()
        logger.info(
            'Copied item set %s to item set %s (%s items linked)',
            item_set.id, item_set_copy.id, linked,
        )

        self.trigger_copied(policy.kind, item_set, item_set_copy)
        return item_set_copy

    def copy_site_page(self, site_page, options: dict | None = None):
        """Copy a page within its site under the slug "<slug>-<n>"."""
        visibility = Visibility.parse((options or {}).get('visibility'))
        policy = COPY_POLICIES['site_page']

        def make_callback(slug: str) -> TreeCallback:
            def callback(tree: ResourceTree) -> None:
                transform(tree, policy.redactions, {
                    'o:slug': slug,
                    'o:is_public': resolve_is_public(tree.get('o:is_public'), visibility),
                })
            return callback

        page_copy = self.create_with_unique_slug(
            policy.resource_name, site_page, site_page.slug, make_callback,
        )
        logger.info(
            'Copied site page %s (%s) to %s (%s)',
            site_page.id, site_page.slug, page_copy.id, page_copy.slug,
        )

        self.trigger_copied(policy.kind, site_page, page_copy)
        return page_copy

    def copy_site(self, site, options: dict | None = None):
        """Copy a site with its pages, homepage, navigation, settings, and item links.

        Raises:
            SiteCopyError: If a stage fails; earlier stages stay committed
                unless cleanup_on_failure is set.
        """
        orchestrator = SiteCopyOrchestrator(self, cleanup_on_failure=self.cleanup_on_failure)
        return orchestrator.run(site, options)

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def create_resource_copy(self, resource_name: str, resource, callback: TreeCallback):
        """Create a copy of resource from its tree.

        The callback edits the tree in place. Pre-persist hooks run after it
        and may edit or replace the tree; whatever they leave is created.
        """
        tree = self.store.to_tree(resource)
        callback(tree)

        event = PrePersistEvent(
            name=pre_persist_event_name(resource_name),
            resource=resource,
            tree=tree,
            copier=self,
        )
        self.hooks.trigger(event.name, event)

        return self.store.create(resource_name, event.tree)

    def create_with_unique_slug(self, resource_name: str, resource, base_slug: str,
                                make_callback: Callable[[str], TreeCallback]):
        """create_resource_copy() under a fresh "<base_slug>-<n>" slug.

        A slug taken between probing and creation is allocated again, up to
        slug_retries times.
        """
        allocator = SlugAllocator(self.store, resource_name, self.slug_max_attempts)
        for attempt in range(1, self.slug_retries + 1):
            slug = allocator.allocate(base_slug)
            try:
                return self.create_resource_copy(resource_name, resource, make_callback(slug))
            except SlugCollisionError:
                if attempt >= self.slug_retries:
                    raise
                logger.warning(
                    'Slug %r was taken before the %s copy was created, retrying (%s/%s)',
                    slug, resource_name, attempt, self.slug_retries,
                )

    def trigger_copied(self, kind: str, resource, resource_copy, **extra: Any) -> CopyEvent:
        event = CopyEvent(
            name=post_copy_event_name(kind),
            resource=resource,
            copy=resource_copy,
            copier=self,
            extra=extra,
        )
        return self.hooks.trigger(event.name, event)

    @staticmethod
    def get_is_public(tree, options: dict | None = None) -> bool:
        return get_is_public(tree, options)

    # ------------------------------------------------------------------
    # Extension utilities
    # ------------------------------------------------------------------

    @staticmethod
    def revert_site_block_layouts(site_id: int, original_layout: str) -> int:
        """Rename "<original_layout>__copy" blocks of a site back to original_layout."""
        return blocks.revert_site_block_layouts(site_id, original_layout)

    @staticmethod
    def revert_site_navigation_link_types(site_id: int, original_link_type: str):
        """Rename "<original_link_type>__copy" links of a site back."""
        return navigation.modify_site_navigation(
            site_id, None, navigation.revert_link_type(original_link_type),
        )

    @staticmethod
    def modify_site_navigation(site_id, link_type: str | None, callback):
        """See core.copy_resources.navigation.modify_site_navigation."""
        return navigation.modify_site_navigation(site_id, link_type, callback)

    @staticmethod
    def modify_site_block_data(site_id: int, layout: str, callback) -> int:
        """See core.copy_resources.blocks.modify_site_block_data."""
        return blocks.modify_site_block_data(site_id, layout, callback)
