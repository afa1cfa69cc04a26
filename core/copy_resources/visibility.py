"""
Visibility of a copy: forced public, forced private, or inherited.
"""
from __future__ import annotations

from enum import Enum

from core.copy_resources.errors import InvalidOptionError


class Visibility(str, Enum):
    PUBLIC = 'public'
    PRIVATE = 'private'
    INHERIT = 'inherit'

    @classmethod
    def parse(cls, value) -> Visibility:
        """Parse the `visibility` copy option. None and '' mean inherit."""
        if value is None or value == '':
            return cls.INHERIT
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidOptionError(
                f'Invalid visibility {value!r}. '
                f'Must be one of: {sorted(v.value for v in cls)}'
            ) from None


def resolve_is_public(source_is_public, visibility=None) -> bool:
    visibility = Visibility.parse(visibility)
    if visibility is Visibility.PUBLIC:
        return True
    if visibility is Visibility.PRIVATE:
        return False
    return bool(source_is_public)


def get_is_public(tree, options=None) -> bool:
    """The `o:is_public` value for the copy of tree."""
    return resolve_is_public(tree.get('o:is_public'), (options or {}).get('visibility'))
