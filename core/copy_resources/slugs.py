"""
Slug allocation for copied sites and pages.

A copy of "expo" becomes "expo-1", or "expo-2" if "expo-1" is taken, and
so on. Probing and creation are separate statements, so two concurrent
copies can pick the same slug; the loser gets a SlugCollisionError from the
store and allocates again.
"""
from __future__ import annotations

from core.copy_resources.errors import SlugExhaustedError

DEFAULT_MAX_ATTEMPTS = 1000


def numbered_slug(base_slug: str, iteration: int) -> str:
    return f'{base_slug}-{iteration}'


class SlugAllocator:
    """Finds the first unused `<base>-<n>` slug, n starting at 1."""

    def __init__(self, store, resource_name: str, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        if max_attempts < 1:
            raise ValueError('max_attempts must be at least 1')
        self.store = store
        self.resource_name = resource_name
        self.max_attempts = max_attempts

    def allocate(self, base_slug: str) -> str:
        """Return the first free slug.

        Raises:
            SlugExhaustedError: If max_attempts candidates are all taken.
        """
        for iteration in range(1, self.max_attempts + 1):
            slug = numbered_slug(base_slug, iteration)
            if self.store.find_by_slug(self.resource_name, slug) is None:
                return slug
        raise SlugExhaustedError(base_slug, self.max_attempts)
