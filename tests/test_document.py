from __future__ import annotations

import enum
import json
from datetime import datetime, timedelta, timezone

import pytest

from json_normalizer.coercers import coerce_int
from json_normalizer.document import JsonDocument
from json_normalizer.formats import CurrencyValue
from json_normalizer.resolver import PathFailureReason


class Status(enum.Enum):
    ACTIVE = 'active'
    SUSPENDED = 'suspended'


@pytest.fixture
def payload():
    return {
        'id': '123',
        'name': '  Ada Lovelace  ',
        'active': 'true',
        'score': '98.5',
        'created': 1684931696789,
        'website': 'https://example.com/about us',
        'timeout': 'PT1H30M',
        'phone': '+1 (555) 123-4567',
        'price': '$1,234.56',
        'status': 'Suspended',
        'tags': 'math, computing , poetry',
        'big': '123456789012345678901234567890',
        'user': {
            'profile': {'age': '36', 'email': 'ada@example.com'},
            'roles': ['admin', 'editor'],
        },
        'items': [{'id': 1}, 'junk', {'id': '2'}],
        'empty': None,
    }


@pytest.fixture
def document(payload):
    return JsonDocument(payload)


def test_construction_copies_input(payload):
    document = JsonDocument(payload)
    payload['user']['profile']['age'] = '99'
    assert document.get_int_path('user.profile.age') == 36


def test_construction_rejects_non_mappings():
    with pytest.raises(TypeError):
        JsonDocument([1, 2, 3])


def test_from_json():
    document = JsonDocument.from_json('{"a": {"b": "5"}}')
    assert document.get_int_path('a.b') == 5
    assert not document.has_errors


def test_from_json_with_bad_text_gives_empty_document():
    document = JsonDocument.from_json('{not json')
    assert document.raw_data == {}
    assert document.errors[0].startswith('Failed to parse JSON: ')


def test_from_json_with_non_object_gives_empty_document():
    document = JsonDocument.from_json('[1, 2]')
    assert document.raw_data == {}
    assert document.errors == ('Failed to parse JSON: expected a JSON object, got list',)


def test_from_api_response():
    assert JsonDocument.from_api_response('{"a": 1}').get_int('a') == 1
    assert JsonDocument.from_api_response({'a': 1}).get_int('a') == 1
    document = JsonDocument.from_api_response(42)
    assert document.raw_data == {}
    assert document.errors == ('Invalid response type: expected str or dict, got int',)


def test_from_map_safe_distinguishes_non_mappings():
    assert JsonDocument.from_map_safe([1]) is None
    assert JsonDocument.from_map_safe(None) is None
    assert JsonDocument.from_map_safe({}) == JsonDocument({})


def test_typed_getters_by_key(document):
    assert document.get_int('id') == 123
    assert document.get_string('id') == '123'
    assert document.get_trimmed_string('name') == 'Ada Lovelace'
    assert document.get_lower_string('name') == 'ada lovelace'
    assert document.get_upper_string('name') == 'ADA LOVELACE'
    assert document.get_bool('active') is True
    assert document.get_double('score') == 98.5
    assert document.get_num('score') == 98.5
    assert document.get_date_time('created') == datetime(2023, 5, 24, 12, 34, 56, 789000, tzinfo=timezone.utc)
    assert document.get_uri('website').path == '/about%20us'
    assert document.get_duration('timeout') == timedelta(minutes=90)
    assert document.get_phone('phone') == '+15551234567'
    assert document.get_currency('price') == CurrencyValue(1234.56, 'USD')
    assert document.get_slug('name') == 'ada-lovelace'
    assert document.get_big_int('big') == 123456789012345678901234567890
    assert document.get_enum('status', Status) is Status.SUSPENDED


def test_missing_keys_are_absent_or_default(document):
    assert document.get_int('missing') is None
    assert document.get_int('missing', default=7) == 7
    assert document.get_int('name', default=0) == 0
    assert document.get_string('empty', default='n/a') == 'n/a'
    assert document.get_enum('missing', Status, Status.ACTIVE) is Status.ACTIVE
    assert not document.has_errors


def test_typed_getters_by_path(document):
    assert document.get_int_path('user.profile.age') == 36
    assert document.get_string_path('user.roles.1') == 'editor'
    assert document.get_int_path('items.2.id') == 2
    assert document.get_double_path('score') == 98.5
    assert document.get_bool_path('active') is True
    assert document.get_trimmed_string_path('name') == 'Ada Lovelace'
    assert document.get_duration_path('timeout') == timedelta(minutes=90)
    assert document.get_enum_path('status', Status) is Status.SUSPENDED
    assert not document.has_errors


def test_failed_path_lookups_are_logged(document):
    assert document.get_string_path('user.address.city') is None
    assert document.get_int_path('user.roles.9', default=-1) == -1
    assert document.errors == (
        'Key "address" not found in path "user.address"',
        'Array index 9 out of bounds (0-1) in path "user.roles.9"',
    )
    reasons = [failure.reason for failure in document.path_failures]
    assert reasons == [PathFailureReason.KEY_NOT_FOUND, PathFailureReason.INDEX_OUT_OF_BOUNDS]

    document.clear_errors()
    assert not document.has_errors
    assert document.path_failures == ()


def test_has_path_does_not_log(document):
    assert document.has_path('user.profile.email')
    assert not document.has_path('user.profile.phone')
    assert not document.has_errors


def test_conditional_getters(document):
    assert document.get_int_if('id', lambda v: v > 100) == 123
    assert document.get_int_if('id', lambda v: v > 1000) is None
    assert document.get_string_if('status', lambda v: v.islower()) is None


def test_nested_objects_and_lists(document):
    profile = document.get_object_path('user.profile')
    assert profile.get_string('email') == 'ada@example.com'
    assert document.get_object('user').get_list('roles', str) == ['admin', 'editor']
    assert document.get_object('name') is None

    items = document.get_object_list('items')
    assert [item.get_int('id') for item in items] == [1, 2]
    assert document.get_list_path('user.roles', lambda v: v.upper()) == ['ADMIN', 'EDITOR']
    assert document.get_list_or_empty('missing', coerce_int) == []
    assert document.get_list_path_or_empty('user.missing', coerce_int) == []
    assert document.get_comma_separated_list('tags') == ['math', 'computing', 'poetry']


def test_batch_getters_preserve_absent_keys(document):
    assert document.get_ints(['id', 'missing']) == {'id': 123, 'missing': None}
    assert document.get_strings(['id']) == {'id': '123'}
    assert document.get_bools(['active', 'id']) == {'active': True, 'id': None}
    assert document.get_multiple(['score'], document.get_double) == {'score': 98.5}


def test_fallback_getters(document):
    assert document.get_string_with_fallbacks(['nickname', 'id']) == '123'
    assert document.get_int_with_fallbacks(['userId', 'name', 'id']) == 123
    assert document.get_bool_with_fallbacks(['enabled', 'active']) is True
    assert document.get_with_fallbacks(['a', 'b'], document.get_string) is None


def test_required_keys_and_paths(document):
    assert document.has_required_keys(['id', 'name'])
    assert not document.has_required_keys(['id', 'email', 'empty'])
    assert document.errors[-1] == 'Missing required keys: email, empty'

    assert document.has_required_paths(['user.profile.email'])
    assert not document.has_required_paths(['user.profile.email', 'user.address'])
    assert document.errors[-1] == 'Missing required paths: user.address'


def test_merge_and_deep_merge():
    base = JsonDocument({'a': 1, 'nested': {'b': 2, 'c': 3}})
    other = JsonDocument({'nested': {'c': 30, 'd': 4}})
    assert base.merge(other).raw_data == {'a': 1, 'nested': {'c': 30, 'd': 4}}
    assert base.deep_merge(other).raw_data == {'a': 1, 'nested': {'b': 2, 'c': 30, 'd': 4}}
    assert base.raw_data == {'a': 1, 'nested': {'b': 2, 'c': 3}}


def test_diff():
    changes = JsonDocument({'a': 1, 'b': 2, 'c': 3}).diff(JsonDocument({'a': 1, 'b': 20, 'd': 4}))
    assert changes['added'] == {'d': 4}
    assert changes['removed'] == {'c': 3}
    assert changes['changed'] == {'b': {'from': 2, 'to': 20}}


def test_pick_select_and_exclude(document):
    picked = document.pick(['user.profile.email', 'id', 'no.such.path'])
    assert picked.raw_data == {'user': {'profile': {'email': 'ada@example.com'}}, 'id': '123'}
    assert document.select(['id', 'missing']).raw_data == {'id': '123'}
    assert 'user' not in document.exclude(['user']).keys
    assert not document.has_errors


def test_transformations(document):
    counts = JsonDocument({'a': '1', 'b': 'x', 'c': 3})
    doubled = counts.map_values(lambda k, v: (k, coerce_int(v) * 2) if coerce_int(v) is not None else None)
    assert doubled == {'a': 2, 'c': 6}
    assert counts.map_values_or_empty(lambda k, v: None) == {}
    upper = document.transform_values(lambda k, v: isinstance(v, str), lambda k, v: v.upper())
    assert upper.get_string('status') == 'SUSPENDED'
    assert upper.get_int('created') == 1684931696789
    strings_only = document.filter_keys(lambda k, v: isinstance(v, str))
    assert 'user' not in strings_only.keys
    assert document.transform(lambda doc: doc.get_int('id') + 1) == 124


def test_flatten_unflatten_and_query_string():
    document = JsonDocument({'user': {'name': 'John Doe', 'tags': ['a', 'b']}, 'page': 2})
    flat = document.flatten()
    assert flat == {'user.name': 'John Doe', 'user.tags.0': 'a', 'user.tags.1': 'b', 'page': 2}
    assert JsonDocument.unflatten(flat) == document
    assert document.to_query_string() == 'user[name]=John%20Doe&user[tags][0]=a&user[tags][1]=b&page=2'


def test_to_json_and_repr():
    document = JsonDocument({'a': 1, 'b': [True, None]})
    assert document.to_json() == '{"a":1,"b":[true,null]}'
    assert json.loads(document.to_json(indent=2)) == {'a': 1, 'b': [True, None]}
    assert repr(document) == "JsonDocument({'a': 1, 'b': [True, None]})"


def test_equality_is_structural():
    assert JsonDocument({'a': 1}) == JsonDocument({'a': 1})
    assert JsonDocument({'a': 1}) != JsonDocument({'a': True})
    with pytest.raises(TypeError):
        hash(JsonDocument({}))
