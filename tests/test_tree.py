"""
Tests for ResourceTree, the copy redaction policy, visibility, and the
identifier map.
"""
import pytest

from core.copy_resources.errors import InvalidOptionError, UnresolvedReferenceError
from core.copy_resources.identifiers import IdentifierMap, normalize_id
from core.copy_resources.tree import COPY_POLICIES, ResourceTree, transform
from core.copy_resources.visibility import Visibility, get_is_public, resolve_is_public


@pytest.mark.copy
class TestResourceTree:

    def test_nested_dicts_are_wrapped(self):
        tree = ResourceTree({
            'o:site': {'o:id': 3},
            'o:block': [{'o:layout': 'html', 'o:data': {'html': '<p/>'}}],
        })
        assert isinstance(tree['o:site'], ResourceTree)
        assert isinstance(tree['o:block'][0], ResourceTree)
        assert isinstance(tree['o:block'][0]['o:data'], ResourceTree)

    def test_from_json_rejects_non_objects(self):
        with pytest.raises(TypeError):
            ResourceTree.from_json('[1, 2]')

    def test_typed_accessors(self):
        tree = ResourceTree.from_json(
            '{"o:title": 12, "o:is_public": 0, "o:site": {"o:id": 4},'
            ' "o:item_set": [{"o:id": 1}, null, {"o:id": 2}]}'
        )
        assert tree.get_str('o:title') == '12'
        assert tree.get_str('o:missing', 'x') == 'x'
        assert tree.get_bool('o:is_public') is False
        assert tree.get_bool('o:missing', True) is True
        assert tree.get_id('o:site') == 4
        assert tree.get_id('o:missing') is None
        assert tree.get_ids('o:item_set') == [1, 2]
        assert tree.get_list('o:missing') == []

    def test_typed_accessors_reject_wrong_shapes(self):
        tree = ResourceTree({'o:title': 'x', 'o:site': {'o:id': 1}})
        with pytest.raises(TypeError):
            tree.get_list('o:title')
        with pytest.raises(TypeError):
            tree.get_tree('o:title')
        with pytest.raises(TypeError):
            tree.get_list('o:site')

    def test_get_tree_returns_stored_subtree(self):
        tree = ResourceTree()
        tree['o:item_pool'] = {'fulltext_search': ''}
        pool = tree.get_tree('o:item_pool')
        pool['resource_class_id'] = 5
        assert tree['o:item_pool']['resource_class_id'] == 5

    def test_drop_ignores_missing_keys(self):
        tree = ResourceTree({'a': 1, 'b': 2})
        assert tree.drop('a', 'zzz') is tree
        assert tree == {'b': 2}


@pytest.mark.copy
class TestTransform:

    def test_redacts_then_overrides_in_place(self):
        tree = ResourceTree({'o:owner': {'o:id': 1}, 'o:slug': 'a', 'o:title': 'A'})
        result = transform(tree, ('o:owner',), {'o:slug': 'a-1'})
        assert result is tree
        assert tree == {'o:slug': 'a-1', 'o:title': 'A'}

    def test_override_may_reset_a_redacted_key(self):
        tree = ResourceTree({'o:navigation': [{'type': 'url'}]})
        transform(tree, ('o:navigation',), {'o:navigation': []})
        assert tree['o:navigation'] == []

    def test_overrides_are_wrapped(self):
        tree = transform(ResourceTree(), (), {'o:site': {'o:id': 9}})
        assert tree.get_id('o:site') == 9

    @pytest.mark.parametrize('kind,redacted', [
        ('item', {'o:owner', 'o:primary_media', 'o:media'}),
        ('item_set', {'o:owner'}),
        ('site_page', set()),
        ('site', {'o:owner', 'o:page', 'o:homepage', 'o:navigation'}),
    ])
    def test_policy_table(self, kind, redacted):
        assert set(COPY_POLICIES[kind].redactions) == redacted

    def test_policies_name_their_api_resource(self):
        names = {p.kind: p.resource_name for p in COPY_POLICIES.values()}
        assert names == {
            'item': 'items',
            'item_set': 'item_sets',
            'site_page': 'site_pages',
            'site': 'sites',
        }


@pytest.mark.copy
class TestVisibility:

    @pytest.mark.parametrize('source,visibility,expected', [
        (True, 'public', True),
        (False, 'public', True),
        (True, 'private', False),
        (False, 'private', False),
        (True, 'inherit', True),
        (False, 'inherit', False),
        (True, None, True),
        (False, None, False),
        (False, '', False),
    ])
    def test_truth_table(self, source, visibility, expected):
        assert resolve_is_public(source, visibility) is expected

    def test_parse_is_case_insensitive(self):
        assert Visibility.parse(' Public ') is Visibility.PUBLIC
        assert Visibility.parse(Visibility.PRIVATE) is Visibility.PRIVATE

    def test_unknown_value_is_rejected(self):
        with pytest.raises(InvalidOptionError) as exc_info:
            Visibility.parse('hidden')
        assert 'hidden' in str(exc_info.value)
        assert isinstance(exc_info.value, ValueError)

    def test_get_is_public_reads_the_tree(self):
        tree = ResourceTree({'o:is_public': False})
        assert get_is_public(tree) is False
        assert get_is_public(tree, {'visibility': 'public'}) is True
        assert get_is_public(ResourceTree(), {}) is False


@pytest.mark.site_copy
class TestIdentifierMap:

    def test_resolve_recorded_id(self):
        ids = IdentifierMap()
        ids.record(10, 110)
        assert ids.resolve(10) == 110

    def test_digit_strings_match_int_ids(self):
        ids = IdentifierMap()
        ids.record('10', 110)
        assert ids.resolve(10) == 110
        assert ids.resolve(' 10') == 110
        assert normalize_id('abc') == 'abc'

    @pytest.mark.parametrize('missing', [11, None, 'x'])
    def test_miss_raises(self, missing):
        ids = IdentifierMap({10: 110})
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            ids.resolve(missing, what='homepage')
        assert exc_info.value.source_id == missing
        assert exc_info.value.what == 'homepage'
