"""
ResourceStore: create/read/delete resources from JSON-LD trees.

This is the host's resource layer as seen by the copy engine: it turns a
ResourceTree into rows (create), looks rows up (get, search, find_by_slug),
and serializes rows back into trees (to_tree). Creating a site also runs the
host's defaults: a "Welcome" page, plus a navigation link to it when the
tree carries no "o:navigation" key.

Every write commits. Uniqueness clashes on a slug are raised as
SlugCollisionError; every other database error propagates after rollback.
"""
from __future__ import annotations

import json
import logging

from sqlalchemy import delete as sql_delete, update
from sqlalchemy.exc import IntegrityError

from models import (
    db, Item, ItemSet, Site, SitePage, SitePageBlock, site_setting,
)
from core.copy_resources.errors import ResourceNotFoundError, SlugCollisionError
from core.copy_resources.tree import ResourceTree

logger = logging.getLogger(__name__)

RESOURCE_MODELS = {
    'items': Item,
    'item_sets': ItemSet,
    'site_pages': SitePage,
    'sites': Site,
}

SLUGGED_RESOURCES = frozenset({'sites', 'site_pages'})

DEFAULT_PER_PAGE = 25

WELCOME_PAGE_SLUG = 'welcome'
WELCOME_PAGE_TITLE = 'Welcome'
WELCOME_PAGE_HTML = '<p>Welcome to your new site. This is an example page.</p>'


class ResourceStore:
    """Resource access for one acting user.

    Args:
        owner_id: Owner given to created resources whose tree has no
            "o:owner" reference (copies never do).
    """

    def __init__(self, owner_id: int | None = None):
        self.owner_id = owner_id

    # --- lookup ----------------------------------------------------------

    @staticmethod
    def model(resource_name: str):
        try:
            return RESOURCE_MODELS[resource_name]
        except KeyError:
            raise ValueError(
                f'Unknown resource {resource_name!r}. '
                f'Must be one of: {sorted(RESOURCE_MODELS)}'
            ) from None

    def get(self, resource_name: str, resource_id):
        return db.session.get(self.model(resource_name), resource_id)

    def require(self, resource_name: str, resource_id):
        resource = self.get(resource_name, resource_id)
        if resource is None:
            raise ResourceNotFoundError(resource_name, resource_id)
        return resource

    def find_by_slug(self, resource_name: str, slug: str):
        if resource_name not in SLUGGED_RESOURCES:
            raise ValueError(f'{resource_name} have no slug')
        return self.model(resource_name).query.filter_by(slug=slug).first()

    def search(self, resource_name: str, *, page: int = 1,
               per_page: int = DEFAULT_PER_PAGE, **filters) -> list:
        """List resources ordered by id, one page at a time.

        Filters match columns by equality; items also accept item_set_id and
        site_id membership filters. None-valued filters are ignored.
        """
        model = self.model(resource_name)
        query = model.query

        for key, value in filters.items():
            if value is None:
                continue
            if model is Item and key == 'item_set_id':
                query = query.filter(Item.item_sets.any(ItemSet.id == value))
            elif model is Item and key == 'site_id':
                query = query.filter(Item.sites.any(Site.id == value))
            elif key in model.__table__.c:
                query = query.filter(model.__table__.c[key] == value)
            else:
                raise ValueError(f'Unknown filter {key!r} for {resource_name}')

        page = max(int(page), 1)
        per_page = max(int(per_page), 1)
        return (
            query.order_by(model.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )

    @staticmethod
    def to_tree(resource) -> ResourceTree:
        return ResourceTree.from_resource(resource)

    # --- create ----------------------------------------------------------

    def create(self, resource_name: str, tree: ResourceTree):
        """Create a resource from tree and commit.

        Raises:
            SlugCollisionError: If the slug was taken in the meantime.
            ResourceNotFoundError: If the tree references a missing resource.
            ValueError: If the tree lacks a required key.
        """
        if not isinstance(tree, ResourceTree):
            tree = ResourceTree(tree)
        builder = getattr(self, f'_build_{resource_name}', None)
        if builder is None:
            self.model(resource_name)
            raise ValueError(f'{resource_name} cannot be created from a tree')

        resource = builder(tree)
        db.session.add(resource)
        try:
            db.session.flush()
            if resource_name == 'sites':
                self._add_site_defaults(resource, tree)
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            if resource_name in SLUGGED_RESOURCES and 'slug' in str(exc.orig).lower():
                logger.warning(
                    'Slug %r collided while creating %s', tree.get('o:slug'), resource_name,
                )
                raise SlugCollisionError(resource_name, tree.get('o:slug')) from exc
            raise
        except Exception:
            db.session.rollback()
            raise
        return resource

    def _owner_id(self, tree: ResourceTree):
        owner_id = tree.get_id('o:owner')
        return owner_id if owner_id is not None else self.owner_id

    @staticmethod
    def _required_str(tree: ResourceTree, key: str, resource_name: str) -> str:
        value = tree.get_str(key)
        if not value:
            raise ValueError(f'{resource_name} requires {key!r}')
        return value

    def _build_items(self, tree: ResourceTree) -> Item:
        # Media is ingested by the host from uploads; "o:media" and
        # "o:primary_media" are never created from a tree.
        item = Item(
            owner_id=self._owner_id(tree),
            title=tree.get_str('o:title'),
            is_public=tree.get_bool('o:is_public', True),
            values=list(tree.get_list('o:values')),
        )
        item.item_sets = [self.require('item_sets', i) for i in tree.get_ids('o:item_set')]
        item.sites = [self.require('sites', i) for i in tree.get_ids('o:site')]
        return item

    def _build_item_sets(self, tree: ResourceTree) -> ItemSet:
        return ItemSet(
            owner_id=self._owner_id(tree),
            title=tree.get_str('o:title'),
            is_public=tree.get_bool('o:is_public', True),
            is_open=tree.get_bool('o:is_open', False),
            values=list(tree.get_list('o:values')),
        )

    def _build_site_pages(self, tree: ResourceTree) -> SitePage:
        site_id = tree.get_id('o:site')
        if site_id is None:
            raise ValueError('site_pages requires an "o:site" reference')
        self.require('sites', site_id)

        slug = self._required_str(tree, 'o:slug', 'site_pages')
        blocks = []
        for position, block in enumerate(tree.get_list('o:block')):
            layout = block.get('o:layout')
            if not layout:
                raise ValueError(f'Block {position} of page {slug!r} has no "o:layout"')
            blocks.append(SitePageBlock(
                layout=layout,
                data=dict(block.get('o:data') or {}),
                position=position,
            ))

        return SitePage(
            site_id=site_id,
            slug=slug,
            title=tree.get_str('o:title') or slug,
            is_public=tree.get_bool('o:is_public', True),
            blocks=blocks,
        )

    def _build_sites(self, tree: ResourceTree) -> Site:
        slug = self._required_str(tree, 'o:slug', 'sites')
        return Site(
            owner_id=self._owner_id(tree),
            slug=slug,
            title=tree.get_str('o:title') or slug,
            summary=tree.get_str('o:summary'),
            theme=tree.get_str('o:theme', 'default'),
            is_public=tree.get_bool('o:is_public', True),
            item_pool=dict(tree.get_tree('o:item_pool') or {}),
            navigation='[]',
        )

    @staticmethod
    def _add_site_defaults(site: Site, tree: ResourceTree) -> None:
        welcome = SitePage(
            site_id=site.id,
            slug=WELCOME_PAGE_SLUG,
            title=WELCOME_PAGE_TITLE,
            is_public=True,
            blocks=[
                SitePageBlock(layout='pageTitle', data={}, position=0),
                SitePageBlock(layout='html', data={'html': WELCOME_PAGE_HTML}, position=1),
            ],
        )
        db.session.add(welcome)
        db.session.flush()

        navigation = tree.get('o:navigation')
        if navigation is None:
            navigation = [{'type': 'page', 'data': {'label': '', 'id': welcome.id}, 'links': []}]
        site.navigation = json.dumps(navigation)

    # --- update / delete -------------------------------------------------

    def set_site_homepage(self, site_id: int, page_id: int | None) -> None:
        sites = Site.__table__
        result = db.session.execute(
            update(sites).where(sites.c.id == site_id).values(homepage_id=page_id)
        )
        if result.rowcount == 0:
            db.session.rollback()
            raise ResourceNotFoundError('sites', site_id)
        db.session.commit()

    def delete(self, resource_name: str, resource_id) -> None:
        """Delete a resource and what it owns, then commit."""
        resource = self.require(resource_name, resource_id)

        if resource_name == 'sites':
            db.session.execute(
                sql_delete(site_setting).where(site_setting.c.site_id == resource_id)
            )
        elif resource_name == 'site_pages':
            sites = Site.__table__
            db.session.execute(
                update(sites).where(sites.c.homepage_id == resource_id).values(homepage_id=None)
            )

        db.session.delete(resource)
        db.session.commit()
        logger.debug('Deleted %s %s', resource_name, resource_id)
