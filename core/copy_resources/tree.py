"""
ResourceTree: the mutable JSON-LD tree a copy is built from.

A tree is serialized from the source resource, redacted and overridden
according to COPY_POLICIES, handed to pre-persist hooks, and finally passed
to ResourceStore.create(). Every stage mutates the same tree in place; none
of them clone it.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, Mapping


def _wrap(value):
    if isinstance(value, ResourceTree):
        return value
    if isinstance(value, dict):
        return ResourceTree(value)
    if isinstance(value, list):
        return [_wrap(v) for v in value]
    return value


class ResourceTree(dict):
    """Ordered string-keyed tree of scalars, nested trees, and lists.

    Nested dicts are wrapped on construction so typed accessors work at any
    depth. Values assigned later are stored as given.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for key, value in self.items():
            self[key] = _wrap(value)

    @classmethod
    def from_json(cls, raw: str) -> ResourceTree:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise TypeError(f'Expected a JSON object, got {type(data).__name__}')
        return cls(data)

    @classmethod
    def from_resource(cls, resource) -> ResourceTree:
        # JSON round trip so the tree never aliases model state.
        return cls.from_json(json.dumps(resource.to_json_ld()))

    def to_json(self) -> str:
        return json.dumps(self)

    # --- typed accessors ------------------------------------------------

    def get_tree(self, key: str) -> ResourceTree | None:
        value = self.get(key)
        if value is None:
            return None
        if not isinstance(value, dict):
            raise TypeError(f'{key!r} holds {type(value).__name__}, not a tree')
        if not isinstance(value, ResourceTree):
            value = self[key] = ResourceTree(value)
        return value

    def get_list(self, key: str) -> list:
        value = self.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise TypeError(f'{key!r} holds {type(value).__name__}, not a list')
        return value

    def get_str(self, key: str, default: str | None = None) -> str | None:
        value = self.get(key)
        if value is None:
            return default
        return str(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return bool(value)

    def get_id(self, key: str):
        """Id of a `{"o:id": n}` reference stored under key, or None."""
        ref = self.get_tree(key)
        if ref is None:
            return None
        return ref.get('o:id')

    def get_ids(self, key: str) -> list:
        """Ids of a list of `{"o:id": n}` references."""
        return [ref['o:id'] for ref in self.get_list(key) if ref and ref.get('o:id') is not None]

    def drop(self, *keys: str) -> ResourceTree:
        for key in keys:
            self.pop(key, None)
        return self


def transform(tree: ResourceTree, redactions: Iterable[str] = (),
              overrides: Mapping[str, Any] | None = None) -> ResourceTree:
    """Remove redacted keys, then set overrides. Mutates and returns tree."""
    tree.drop(*redactions)
    for key, value in (overrides or {}).items():
        tree[key] = _wrap(value)
    return tree


# ---------------------------------------------------------------------------
# Per-kind copy policy
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CopyPolicy:
    """Which API resource a kind is created through and what it never carries over."""

    kind: str
    resource_name: str
    redactions: tuple[str, ...] = ()


COPY_POLICIES = {
    'item': CopyPolicy(
        kind='item',
        resource_name='items',
        redactions=('o:owner', 'o:primary_media', 'o:media'),
    ),
    'item_set': CopyPolicy(
        kind='item_set',
        resource_name='item_sets',
        redactions=('o:owner',),
    ),
    'site_page': CopyPolicy(
        kind='site_page',
        resource_name='site_pages',
    ),
    'site': CopyPolicy(
        kind='site',
        resource_name='sites',
        redactions=('o:owner', 'o:page', 'o:homepage', 'o:navigation'),
    ),
}
