"""
Site navigation trees: parsing, walking, and the copy/revert link policies.

Navigation is stored on the site row as a JSON list of links:

    [{"type": "page", "data": {"id": 4, "label": ""}, "links": [...]}, ...]

It is read and written raw, bypassing the ORM, so that a walk can read the
source site and write the copy in one pass.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from sqlalchemy import select, update

from models import db, Site
from core.copy_resources.errors import ResourceNotFoundError
from core.copy_resources.layouts import LayoutClassifier, stub_name

logger = logging.getLogger(__name__)


@dataclass
class NavigationLink:
    """One navigation node. `links` are its children and is never None."""

    type: str
    data: dict[str, Any] = field(default_factory=dict)
    links: list[NavigationLink] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: dict) -> NavigationLink:
        if 'type' not in raw:
            raise ValueError(f'Navigation link without a type: {raw!r}')
        return cls(
            type=raw['type'],
            data=dict(raw.get('data') or {}),
            links=[cls.from_dict(child) for child in raw.get('links') or []],
        )

    def to_dict(self) -> dict:
        return {
            'type': self.type,
            'data': self.data,
            'links': [child.to_dict() for child in self.links],
        }


LinkCallback = Callable[[NavigationLink], None]


def parse_navigation(raw) -> list[NavigationLink]:
    """Build links from stored JSON text or an already decoded list."""
    if raw is None or raw == '':
        return []
    if isinstance(raw, (str, bytes)):
        raw = json.loads(raw)
    if not raw:
        return []
    if not isinstance(raw, list):
        raise TypeError(f'Navigation must be a list, got {type(raw).__name__}')
    return [NavigationLink.from_dict(link) for link in raw]


def dump_navigation(links: list[NavigationLink]) -> str:
    return json.dumps([link.to_dict() for link in links])


def walk(links: list[NavigationLink], link_type: str | None,
         callback: LinkCallback) -> list[NavigationLink]:
    """Depth-first, pre-order walk that mutates links in place.

    The callback runs on every link, or only on links of link_type when one
    is given. Children are walked whether or not their parent matched, and
    the walker's result replaces each child list. Returns links.
    """
    for link in links:
        if link_type is None or link.type == link_type:
            callback(link)
        link.links = walk(link.links or [], link_type, callback)
    return links


def iter_links(links: list[NavigationLink]) -> Iterator[NavigationLink]:
    """Pre-order iteration over every link in the tree."""
    for link in links:
        yield link
        yield from iter_links(link.links)


# ---------------------------------------------------------------------------
# Link policies
# ---------------------------------------------------------------------------

def stub_link_types(classifier: LayoutClassifier, page_map) -> LinkCallback:
    """Policy used by a site copy.

    Foreign link types become "<type>__copy", and page links are pointed at
    the copied page. A page link to a page that was not copied raises
    UnresolvedReferenceError.
    """
    def callback(link: NavigationLink) -> None:
        link.type = classifier.stub(link.type)
        if link.type == 'page':
            link.data['id'] = page_map.resolve(
                link.data.get('id'), what='navigation page link',
            )
    return callback


def revert_link_type(original_link_type: str) -> LinkCallback:
    """Policy that turns "<original>__copy" back into original."""
    stubbed = stub_name(original_link_type)

    def callback(link: NavigationLink) -> None:
        if link.type == stubbed:
            link.type = original_link_type
    return callback


# ---------------------------------------------------------------------------
# Raw storage
# ---------------------------------------------------------------------------

def read_site_navigation(site_id: int) -> list[NavigationLink]:
    sites = Site.__table__
    row = db.session.execute(
        select(sites.c.navigation).where(sites.c.id == site_id)
    ).first()
    if row is None:
        raise ResourceNotFoundError('sites', site_id)
    return parse_navigation(row[0])


def write_site_navigation(site_id: int, links: list[NavigationLink]) -> None:
    sites = Site.__table__
    result = db.session.execute(
        update(sites).where(sites.c.id == site_id).values(navigation=dump_navigation(links))
    )
    if result.rowcount == 0:
        raise ResourceNotFoundError('sites', site_id)


def modify_site_navigation(site_id, link_type: str | None,
                           callback: LinkCallback) -> list[NavigationLink] | None:
    """Walk a site's navigation with callback and save the result.

    Args:
        site_id: A site id, or a (from_site_id, to_site_id) pair to read
            one site's navigation and write the result onto another.
        link_type: Only call callback on links of this type (None for all).
        callback: Mutates a NavigationLink in place.

    Returns:
        The saved links, or None if the source navigation was empty and
        nothing was written.
    """
    if isinstance(site_id, (tuple, list)):
        from_site_id, to_site_id = (int(i) for i in site_id)
    else:
        from_site_id = to_site_id = int(site_id)

    links = read_site_navigation(from_site_id)
    if not links:
        return None

    walk(links, link_type, callback)
    write_site_navigation(to_site_id, links)
    db.session.commit()
    logger.debug(
        'Rewrote navigation of site %s into site %s (link type filter: %s)',
        from_site_id, to_site_id, link_type,
    )
    return links
