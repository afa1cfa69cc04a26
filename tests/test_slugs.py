"""
Tests for slug allocation.
"""
import pytest

from core.copy_resources.errors import SlugExhaustedError
from core.copy_resources.slugs import SlugAllocator, numbered_slug
from core.copy_resources.store import ResourceStore


class FakeStore:
    """Store stub that knows a fixed set of taken slugs."""

    def __init__(self, taken):
        self.taken = set(taken)
        self.probes = []

    def find_by_slug(self, resource_name, slug):
        self.probes.append(slug)
        return object() if slug in self.taken else None


@pytest.mark.copy
class TestSlugAllocator:

    def test_first_candidate_is_one(self):
        assert SlugAllocator(FakeStore([]), 'sites').allocate('expo') == 'expo-1'

    def test_skips_taken_candidates(self):
        store = FakeStore(['x-1', 'x-2'])
        assert SlugAllocator(store, 'sites').allocate('x') == 'x-3'
        assert store.probes == ['x-1', 'x-2', 'x-3']

    def test_base_slug_itself_is_never_probed(self):
        store = FakeStore(['x'])
        assert SlugAllocator(store, 'sites').allocate('x') == 'x-1'

    def test_exhaustion(self):
        store = FakeStore(['x-1', 'x-2', 'x-3'])
        with pytest.raises(SlugExhaustedError) as exc_info:
            SlugAllocator(store, 'sites', max_attempts=3).allocate('x')
        assert exc_info.value.base_slug == 'x'
        assert exc_info.value.attempts == 3
        assert len(store.probes) == 3

    def test_max_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            SlugAllocator(FakeStore([]), 'sites', max_attempts=0)

    def test_numbered_slug(self):
        assert numbered_slug('about-us', 12) == 'about-us-12'


@pytest.mark.copy
class TestSlugAllocatorWithStore:

    def test_probes_existing_sites(self, app, make_site):
        make_site('expo')
        make_site('expo-1')
        assert SlugAllocator(ResourceStore(), 'sites').allocate('expo') == 'expo-2'

    def test_probes_pages_across_sites(self, app, make_site, make_page):
        one = make_site('one')
        two = make_site('two')
        make_page(one, 'about')
        make_page(two, 'about-1')
        assert SlugAllocator(ResourceStore(), 'site_pages').allocate('about') == 'about-2'

    def test_unslugged_resource_is_rejected(self, app):
        with pytest.raises(ValueError):
            SlugAllocator(ResourceStore(), 'items').allocate('x')
