"""
Set-based copying of link rows (memberships and settings).

These rows carry no identity of their own, so they are duplicated with a
single INSERT ... SELECT instead of going through the resource layer. The
caller commits.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import Table, insert, literal, select

from models import db

logger = logging.getLogger(__name__)


def _table(table) -> Table:
    if isinstance(table, Table):
        return table
    try:
        return db.metadata.tables[table]
    except KeyError:
        raise LookupError(f'Unknown table {table!r}') from None


def replicate(table, key_column: str, source_key, dest_key,
              columns: Iterable[str] | None = None) -> int:
    """Copy every row with key_column == source_key, rewriting it to dest_key.

    Args:
        table: A Table or a table name from the application metadata.
        key_column: The scoping foreign key column.
        source_key: Rows to copy.
        dest_key: Value written into key_column of the new rows.
        columns: Columns to copy (default: all). key_column is always included.

    Returns:
        Number of rows inserted.
    """
    table = _table(table)
    names = list(columns) if columns is not None else [c.name for c in table.columns]
    if key_column not in names:
        names.append(key_column)

    key = table.c[key_column]
    selected = [
        literal(dest_key, type_=key.type).label(name) if name == key_column else table.c[name]
        for name in names
    ]
    stmt = insert(table).from_select(names, select(*selected).where(key == source_key))
    result = db.session.execute(stmt)
    logger.debug(
        'Replicated %s rows of %s from %s=%s to %s',
        result.rowcount, table.name, key_column, source_key, dest_key,
    )
    return result.rowcount


@dataclass(frozen=True)
class LinkTable:
    """A link table copied by one of its foreign keys."""

    name: str
    key_column: str
    columns: tuple[str, ...]

    def replicate(self, source_key, dest_key) -> int:
        return replicate(self.name, self.key_column, source_key, dest_key, self.columns)


ITEM_SET_ITEMS = LinkTable('item_item_set', 'item_set_id', ('item_id', 'item_set_id'))
SITE_ITEMS = LinkTable('item_site', 'site_id', ('item_id', 'site_id'))
SITE_SETTINGS = LinkTable('site_setting', 'site_id', ('id', 'site_id', 'value'))
