from __future__ import annotations

import string

from hypothesis import given
from hypothesis import strategies as st

from json_normalizer.flattening import (
    deep_merge,
    diff,
    flatten,
    json_equal,
    list_paths,
    to_query_string,
    unflatten,
)

NESTED = {
    'a': 1,
    'b': {'c': 2, 'd': [3, {'e': 4}]},
}

# Letter-only keys: numeric keys would be rebuilt as lists and keys
# containing the separator would split.
keys = st.text(alphabet=string.ascii_letters, min_size=1, max_size=6)
leaves = (
    st.none()
    | st.booleans()
    | st.integers()
    | st.floats(allow_nan=False, allow_infinity=False)
    | st.text(max_size=10)
)
json_trees = st.recursive(
    leaves,
    lambda children: st.lists(children, max_size=4) | st.dictionaries(keys, children, max_size=4),
    max_leaves=20,
)
documents = st.dictionaries(keys, json_trees, max_size=5)


def test_flatten_nested_data():
    assert flatten(NESTED) == {'a': 1, 'b.c': 2, 'b.d.0': 3, 'b.d.1.e': 4}


def test_flatten_keeps_empty_containers_as_leaves():
    assert flatten({'e': {}, 'l': [], 'n': None}) == {'e': {}, 'l': [], 'n': None}
    assert flatten({}) == {}


def test_flatten_with_custom_separator():
    assert flatten({'a': {'b': 1}}, sep='/') == {'a/b': 1}


def test_unflatten_rebuilds_lists():
    assert unflatten({'a': 1, 'b.c': 2, 'b.d.0': 3, 'b.d.1.e': 4}) == NESTED


def test_unflatten_keeps_sparse_numeric_keys_as_mappings():
    assert unflatten({'a.0': 'x', 'a.2': 'y'}) == {'a': {'0': 'x', '2': 'y'}}


@given(documents)
def test_flatten_unflatten_round_trip(data):
    assert unflatten(flatten(data)) == data


def test_list_paths():
    assert list_paths({'a': {'b': [10, 20]}}) == ['a', 'a.b', 'a.b.0', 'a.b.1']


def test_deep_merge_merges_nested_mappings():
    base = {'a': 1, 'nested': {'b': 2, 'c': 3}}
    override = {'nested': {'c': 30, 'd': 4}}
    assert deep_merge(base, override) == {'a': 1, 'nested': {'b': 2, 'c': 30, 'd': 4}}
    assert base == {'a': 1, 'nested': {'b': 2, 'c': 3}}


def test_deep_merge_replaces_non_mapping_values():
    assert deep_merge({'a': {'b': 1}}, {'a': [1, 2]}) == {'a': [1, 2]}
    assert deep_merge({'a': [1]}, {'a': [2]}) == {'a': [2]}


def test_diff():
    changes = diff({'a': 1, 'b': 2, 'c': 3}, {'a': 1, 'b': 20, 'd': 4})
    assert changes == {
        'added': {'d': 4},
        'removed': {'c': 3},
        'changed': {'b': {'from': 2, 'to': 20}},
    }


def test_diff_treats_booleans_and_numbers_as_different():
    assert diff({'flag': 1}, {'flag': True})['changed'] == {'flag': {'from': 1, 'to': True}}
    assert diff({'n': 1}, {'n': 1.0})['changed'] == {}


def test_json_equal():
    assert json_equal({'a': [1, {'b': None}]}, {'a': [1, {'b': None}]})
    assert not json_equal(True, 1)
    assert not json_equal([1], {'0': 1})


def test_query_string():
    data = {
        'a': 1,
        'user': {'name': 'John Doe'},
        'tags': ['x', 'y'],
        'ok': True,
        'n': None,
    }
    assert to_query_string(data) == 'a=1&user[name]=John%20Doe&tags[0]=x&tags[1]=y&ok=true&n='
    assert to_query_string(data, encode=False) == 'a=1&user[name]=John Doe&tags[0]=x&tags[1]=y&ok=true&n='


def test_query_string_encodes_reserved_characters():
    assert to_query_string({'q': 'a&b=c/d'}) == 'q=a%26b%3Dc%2Fd'
