"""
Site copy orchestration.

A site copy runs a fixed sequence of stages:

    copy_site            site row, slug "<slug>-<n>", navigation emptied
    delete_default_page  drop the "Welcome" page the host adds to new sites
    copy_pages           every source page, foreign block layouts stubbed
    set_homepage         homepage pointed at the copied page
    copy_navigation      navigation rewritten onto the copy
    copy_links           site settings and item membership rows
    post_copy            ``copy_resources.copy_site`` hook

Page ids only exist once the pages are created, so the homepage and the
navigation page links are resolved afterwards through the page map.

Stages commit one by one; there is no enclosing transaction. When a stage
fails, SiteCopyError reports the failed stage, the stages already committed,
and the ids created so far. With cleanup_on_failure the partial copy is
deleted first.
"""
from __future__ import annotations

import logging
from enum import Enum

from models import db
from core.copy_resources.blocks import stub_block_layouts
from core.copy_resources.errors import SiteCopyError
from core.copy_resources.identifiers import IdentifierMap
from core.copy_resources.link_tables import SITE_ITEMS, SITE_SETTINGS
from core.copy_resources.navigation import iter_links, modify_site_navigation, stub_link_types
from core.copy_resources.tree import COPY_POLICIES, ResourceTree, transform
from core.copy_resources.visibility import Visibility, resolve_is_public

logger = logging.getLogger(__name__)


class SiteCopyStage(str, Enum):
    COPY_SITE = 'copy_site'
    DELETE_DEFAULT_PAGE = 'delete_default_page'
    COPY_PAGES = 'copy_pages'
    SET_HOMEPAGE = 'set_homepage'
    COPY_NAVIGATION = 'copy_navigation'
    COPY_LINKS = 'copy_links'
    POST_COPY = 'post_copy'


class SiteCopyOrchestrator:
    """Runs one site copy. Create a new orchestrator per copy."""

    def __init__(self, copier, *, cleanup_on_failure: bool = False):
        self.copier = copier
        self.store = copier.store
        self.core_config = copier.core_config
        self.cleanup_on_failure = cleanup_on_failure

        self.page_map = IdentifierMap()
        self.completed_stages: list[SiteCopyStage] = []
        self.site_copy = None
        self.site_copy_id = None

    def run(self, site, options: dict | None = None):
        """Copy site and return the copy.

        Raises:
            InvalidOptionError: Before any stage, for a bad option.
            SiteCopyError: When a stage fails; the cause is chained.
        """
        visibility = Visibility.parse((options or {}).get('visibility'))
        source_id = site.id

        stages = (
            (SiteCopyStage.COPY_SITE, lambda: self._copy_site(site, visibility)),
            (SiteCopyStage.DELETE_DEFAULT_PAGE, self._delete_default_page),
            (SiteCopyStage.COPY_PAGES, lambda: self._copy_pages(site)),
            (SiteCopyStage.SET_HOMEPAGE, lambda: self._set_homepage(site)),
            (SiteCopyStage.COPY_NAVIGATION, lambda: self._copy_navigation(site)),
            (SiteCopyStage.COPY_LINKS, lambda: self._copy_links(site)),
            (SiteCopyStage.POST_COPY, lambda: self._post_copy(site)),
        )

        for stage, step in stages:
            try:
                step()
            except Exception as exc:
                self._fail(stage, exc)
            self.completed_stages.append(stage)
            logger.debug('Site %s copy: stage %s done', source_id, stage.value)

        logger.info(
            'Copied site %s to site %s (%s pages)',
            source_id, self.site_copy_id, len(self.page_map),
        )
        return self.site_copy

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _copy_site(self, site, visibility: Visibility) -> None:
        policy = COPY_POLICIES['site']

        def make_callback(slug: str):
            def callback(tree: ResourceTree) -> None:
                # An empty navigation keeps the host from linking its default page.
                transform(tree, policy.redactions, {
                    'o:slug': slug,
                    'o:navigation': [],
                    'o:is_public': resolve_is_public(tree.get('o:is_public'), visibility),
                })
            return callback

        self.site_copy = self.copier.create_with_unique_slug(
            policy.resource_name, site, site.slug, make_callback,
        )
        self.site_copy_id = self.site_copy.id

    def _delete_default_page(self) -> None:
        default_pages = self.store.search('site_pages', site_id=self.site_copy_id, per_page=1)
        if default_pages:
            self.store.delete('site_pages', default_pages[0].id)

    def _source_pages(self, site):
        page_number = 1
        while True:
            batch = self.store.search(
                'site_pages', site_id=site.id,
                page=page_number, per_page=self.copier.page_size,
            )
            yield from batch
            if len(batch) < self.copier.page_size:
                return
            page_number += 1

    def _copy_pages(self, site) -> None:
        block_layouts = self.core_config.block_layouts
        site_copy_id = self.site_copy_id

        def callback(tree: ResourceTree) -> None:
            tree['o:site'] = ResourceTree({'o:id': site_copy_id})
            stub_block_layouts(tree, block_layouts)

        # List every source page before creating any copy.
        for page in list(self._source_pages(site)):
            page_copy = self.copier.create_resource_copy('site_pages', page, callback)
            self.page_map.record(page.id, page_copy.id)

    def _set_homepage(self, site) -> None:
        if site.homepage_id is None:
            return
        homepage_copy_id = self.page_map.resolve(site.homepage_id, what='homepage')
        self.store.set_site_homepage(self.site_copy_id, homepage_copy_id)

    def _copy_navigation(self, site) -> None:
        links = modify_site_navigation(
            (site.id, self.site_copy_id), None,
            stub_link_types(self.core_config.navigation_links, self.page_map),
        )
        logger.debug(
            'Site %s copy: %s navigation links rewritten',
            site.id, sum(1 for _ in iter_links(links or [])),
        )

    def _copy_links(self, site) -> None:
        settings = SITE_SETTINGS.replicate(site.id, self.site_copy_id)
        items = SITE_ITEMS.replicate(site.id, self.site_copy_id)
        db.session.commit()
        logger.debug(
            'Site %s copy: %s settings and %s item links replicated',
            site.id, settings, items,
        )

    def _post_copy(self, site) -> None:
        self.copier.trigger_copied(
            'site', site, self.site_copy, site_page_map=dict(self.page_map),
        )

    # ------------------------------------------------------------------
    # Failure
    # ------------------------------------------------------------------

    def _fail(self, stage: SiteCopyStage, exc: Exception):
        db.session.rollback()
        logger.error(
            'Site copy failed at stage %s (completed: %s, site copy id: %s): %s',
            stage.value, [s.value for s in self.completed_stages], self.site_copy_id, exc,
        )

        cleaned_up = False
        if self.cleanup_on_failure and self.site_copy_id is not None:
            cleaned_up = self._discard_partial_copy()

        raise SiteCopyError(
            stage,
            completed_stages=self.completed_stages,
            site_copy_id=self.site_copy_id,
            site_page_map=self.page_map,
            cleaned_up=cleaned_up,
        ) from exc

    def _discard_partial_copy(self) -> bool:
        try:
            self.store.delete('sites', self.site_copy_id)
        except Exception:
            db.session.rollback()
            logger.exception(
                'Could not delete partial site copy %s; remove it manually',
                self.site_copy_id,
            )
            return False
        logger.warning('Deleted partial site copy %s', self.site_copy_id)
        return True
