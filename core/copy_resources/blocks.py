"""
Page block layouts: stubbing on copy, reverting and rewriting afterwards.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from sqlalchemy import select, update

from models import db, SitePage, SitePageBlock
from core.copy_resources.layouts import LayoutClassifier, stub_name
from core.copy_resources.tree import ResourceTree

logger = logging.getLogger(__name__)


def stub_block_layouts(tree: ResourceTree, classifier: LayoutClassifier) -> ResourceTree:
    """Rename foreign block layouts in a page tree to their stub.

    Blocks are kept in place with their data, so the page keeps its shape.
    """
    for block in tree.get_list('o:block'):
        layout = block.get('o:layout')
        if layout is not None:
            block['o:layout'] = classifier.stub(layout)
    return tree


def _site_page_ids(site_id: int):
    pages = SitePage.__table__
    return select(pages.c.id).where(pages.c.site_id == site_id)


def revert_site_block_layouts(site_id: int, original_layout: str) -> int:
    """Rename "<original_layout>__copy" blocks of a site back to original_layout.

    Returns:
        Number of blocks reverted.
    """
    blocks = SitePageBlock.__table__
    result = db.session.execute(
        update(blocks)
        .where(blocks.c.layout == stub_name(original_layout))
        .where(blocks.c.page_id.in_(_site_page_ids(site_id)))
        .values(layout=original_layout)
    )
    db.session.commit()
    logger.info(
        'Reverted %s %r blocks on site %s', result.rowcount, original_layout, site_id,
    )
    return result.rowcount


def modify_site_block_data(site_id: int, layout: str,
                           callback: Callable[[Any], None]) -> int:
    """Pass the data of each `layout` block on a site to callback and save it.

    The callback mutates the data in place.

    Returns:
        Number of blocks rewritten.
    """
    blocks = SitePageBlock.__table__
    rows = db.session.execute(
        select(blocks.c.id, blocks.c.data)
        .where(blocks.c.layout == layout)
        .where(blocks.c.page_id.in_(_site_page_ids(site_id)))
        .order_by(blocks.c.id)
    ).all()

    for block_id, data in rows:
        if data is None:
            data = {}
        callback(data)
        db.session.execute(
            update(blocks).where(blocks.c.id == block_id).values(data=data)
        )

    db.session.commit()
    return len(rows)
