"""
Source id -> copy id mapping built during a composite copy.
"""
from __future__ import annotations

from core.copy_resources.errors import UnresolvedReferenceError


def normalize_id(value):
    """Ids read back from JSON may be digit strings."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return value


class IdentifierMap(dict):
    """Maps source ids to copy ids. Lookups through resolve() never guess."""

    def record(self, source_id, copy_id) -> None:
        self[normalize_id(source_id)] = copy_id

    def resolve(self, source_id, what: str = 'reference'):
        """Copy id for source_id.

        Raises:
            UnresolvedReferenceError: If source_id was never recorded.
        """
        key = normalize_id(source_id)
        if key is None or key not in self:
            raise UnresolvedReferenceError(source_id, what)
        return self[key]
