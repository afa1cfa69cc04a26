"""
Tests for navigation parsing, the tree walker, link policies, and
modify_site_navigation.
"""
import json

import pytest

from models import db, Site
from core.copy_resources.errors import ResourceNotFoundError, UnresolvedReferenceError
from core.copy_resources.identifiers import IdentifierMap
from core.copy_resources.layouts import LayoutClassifier
from core.copy_resources.navigation import (
    NavigationLink, dump_navigation, iter_links, modify_site_navigation,
    parse_navigation, read_site_navigation, revert_link_type,
    stub_link_types, walk,
)


NAVIGATION = [
    {'type': 'page', 'data': {'id': 1, 'label': 'One'}, 'links': [
        {'type': 'url', 'data': {'url': 'https://example.com'}, 'links': [
            {'type': 'page', 'data': {'id': 2}, 'links': []},
        ]},
        {'type': 'mapLink', 'data': {'zoom': 3}},
    ]},
    {'type': 'page', 'data': {'id': 3}, 'links': []},
]


@pytest.fixture
def links():
    return parse_navigation(json.dumps(NAVIGATION))


@pytest.mark.navigation
class TestParsing:

    def test_children_are_never_none(self, links):
        map_link = links[0].links[1]
        assert map_link.type == 'mapLink'
        assert map_link.links == []

    @pytest.mark.parametrize('raw', [None, '', '[]', [], 'null'])
    def test_empty_navigation(self, raw):
        assert parse_navigation(raw) == []

    def test_link_without_type_is_rejected(self):
        with pytest.raises(ValueError):
            parse_navigation([{'data': {}}])

    def test_non_list_is_rejected(self):
        with pytest.raises(TypeError):
            parse_navigation('{"type": "page"}')

    def test_dump_is_lossless(self, links):
        dumped = json.loads(dump_navigation(links))
        assert dumped[0]['links'][1] == {'type': 'mapLink', 'data': {'zoom': 3}, 'links': []}
        assert parse_navigation(dumped) == links

    def test_iter_links_is_pre_order(self, links):
        assert [link.type for link in iter_links(links)] == [
            'page', 'url', 'page', 'mapLink', 'page',
        ]


@pytest.mark.navigation
class TestWalk:

    def test_visits_every_node_once(self, links):
        visited = []
        walk(links, None, visited.append)
        assert len(visited) == 5
        assert len({id(link) for link in visited}) == 5

    def test_filter_limits_callback_not_recursion(self, links):
        visited = []
        walk(links, 'page', lambda link: visited.append(link.data['id']))
        # The nested page sits under a url link and is still reached.
        assert visited == [1, 2, 3]

    def test_mutations_are_kept(self, links):
        def relabel(link):
            link.data['label'] = link.type.upper()

        result = walk(links, None, relabel)
        assert result is links
        assert [link.data['label'] for link in iter_links(links)] == [
            'PAGE', 'URL', 'PAGE', 'MAPLINK', 'PAGE',
        ]

    def test_empty_list(self):
        assert walk([], None, lambda link: None) == []


@pytest.mark.navigation
class TestLinkPolicies:

    def test_stub_link_types_remaps_pages(self, links):
        page_map = IdentifierMap({1: 11, 2: 12, 3: 13})
        walk(links, None, stub_link_types(LayoutClassifier(['page', 'url']), page_map))

        assert [(link.type, link.data.get('id')) for link in iter_links(links)] == [
            ('page', 11), ('url', None), ('page', 12), ('mapLink__copy', None), ('page', 13),
        ]

    def test_stubbed_page_type_is_not_remapped(self):
        links = [NavigationLink('page', {'id': 99})]
        walk(links, None, stub_link_types(LayoutClassifier(['url']), IdentifierMap()))
        assert links[0].type == 'page__copy'
        assert links[0].data == {'id': 99}

    def test_missing_page_raises(self, links):
        page_map = IdentifierMap({1: 11, 3: 13})
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            walk(links, None, stub_link_types(LayoutClassifier(['page', 'url']), page_map))
        assert exc_info.value.source_id == 2

    def test_revert_link_type(self):
        links = [
            NavigationLink('mapLink__copy', links=[NavigationLink('mapLink__copy')]),
            NavigationLink('other__copy'),
            NavigationLink('mapLink'),
        ]
        walk(links, None, revert_link_type('mapLink'))
        assert [link.type for link in iter_links(links)] == [
            'mapLink', 'mapLink', 'other__copy', 'mapLink',
        ]


@pytest.mark.navigation
class TestModifySiteNavigation:

    def test_rewrites_in_place(self, app, make_site):
        site = make_site('nav', navigation=NAVIGATION)

        def relabel(link):
            link.data['label'] = 'changed'

        result = modify_site_navigation(site.id, 'url', relabel)
        assert [link.type for link in result] == ['page', 'page']

        db.session.expire_all()
        stored = db.session.get(Site, site.id).navigation_links
        assert stored[0]['links'][0]['data']['label'] == 'changed'
        assert stored[0]['data']['label'] == 'One'

    def test_pair_reads_source_writes_target(self, app, make_site):
        source = make_site('source', navigation=NAVIGATION)
        target = make_site('target')

        modify_site_navigation((source.id, target.id), 'mapLink', lambda link: None)

        db.session.expire_all()
        assert db.session.get(Site, target.id).navigation_links == json.loads(
            dump_navigation(parse_navigation(NAVIGATION))
        )
        assert db.session.get(Site, source.id).navigation_links == NAVIGATION

    def test_empty_navigation_is_left_alone(self, app, make_site):
        source = make_site('empty')
        target = make_site('target', navigation=[{'type': 'url', 'data': {}, 'links': []}])
        calls = []

        assert modify_site_navigation((source.id, target.id), None, calls.append) is None
        assert calls == []
        db.session.expire_all()
        assert db.session.get(Site, target.id).navigation_links[0]['type'] == 'url'

    def test_unknown_site(self, app):
        with pytest.raises(ResourceNotFoundError):
            read_site_navigation(424242)
