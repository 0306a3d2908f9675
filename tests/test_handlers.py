from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

from json_normalizer.formats import CurrencyValue
from json_normalizer.handlers_compare import (
    compare_documents_handler,
    handle_primary_upload,
    merge_documents_handler,
)
from json_normalizer.handlers_inspect import (
    COERCIONS,
    display_value,
    flatten_handler,
    load_document_from_text,
    prepare_document_payload,
    resolve_path_handler,
)


def write_json(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding='utf-8')
    return str(path)


def test_coercions_cover_the_scalar_coercers():
    assert {'raw', 'int', 'double', 'bool', 'datetime', 'duration', 'currency'} <= set(COERCIONS)
    assert COERCIONS['raw']({'a': 1}) == {'a': 1}


def test_load_document_from_text():
    data, paths_update, status = load_document_from_text('{"a": {"b": 1}}')
    assert data == {'a': {'b': 1}}
    assert paths_update['choices'] == ['a', 'a.b']
    assert paths_update['value'] == 'a'
    assert status == 'Successfully loaded. Found 2 addressable paths.'


def test_load_document_from_bad_text():
    data, paths_update, status = load_document_from_text('{oops')
    assert data == {}
    assert paths_update['choices'] == []
    assert status.startswith('Loaded with problems: Failed to parse JSON: ')
    assert load_document_from_text('   ')[2] == 'No JSON text provided.'


def test_prepare_document_payload_from_file(tmp_path):
    path = write_json(tmp_path, 'doc.json', {'items': [1, 2]})
    data, paths_update, status = prepare_document_payload(path)
    assert data == {'items': [1, 2]}
    assert paths_update['choices'] == ['items', 'items.0', 'items.1']
    assert prepare_document_payload(None)[2] == 'No file uploaded.'


def test_prepare_document_payload_with_invalid_file(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('{nope', encoding='utf-8')
    data, _, status = prepare_document_payload(str(path))
    assert data is None
    assert status.startswith('Error parsing JSON: ')


def test_resolve_path_handler():
    data = {'stock': {'count': '42', 'label': 'many'}}
    assert resolve_path_handler(data, 'stock.count', 'int') == ({'raw': '42', 'coerced': 42}, 'Resolved.')
    assert resolve_path_handler(data, 'stock.size', 'int') == (None, 'Key "size" not found in path "stock.size"')
    assert resolve_path_handler(data, 'stock.label', 'int') == (
        None, 'Value at "stock.label" could not be coerced to int.'
    )
    assert resolve_path_handler(None, 'a', 'raw') == (None, 'No data loaded.')
    assert resolve_path_handler(data, '', 'raw') == (None, 'Enter a path to resolve.')


def test_display_value():
    assert display_value(datetime(2024, 1, 1, tzinfo=timezone.utc)) == '2024-01-01T00:00:00+00:00'
    assert display_value(timedelta(minutes=1)) == {'milliseconds': 60000, 'text': '0:01:00'}
    assert display_value(CurrencyValue(5.0, 'USD')) == {'amount': 5.0, 'currency_code': 'USD'}
    assert display_value(10 ** 20) == '100000000000000000000'
    assert display_value(7) == 7


def test_flatten_handler():
    flat, query = flatten_handler({'a': {'b': 'x y'}})
    assert flat == {'a.b': 'x y'}
    assert query == 'a[b]=x%20y'
    assert flatten_handler({'a': {'b': 'x y'}}, False)[1] == 'a[b]=x y'
    assert flatten_handler(None) == (None, '')


def test_compare_upload_and_diff(tmp_path):
    data, status = handle_primary_upload(write_json(tmp_path, 'a.json', {'a': 1, 'b': 2}))
    assert data == {'a': 1, 'b': 2}
    assert status == 'Primary document: Successfully loaded. Found 2 top-level keys.'

    _, status = handle_primary_upload(write_json(tmp_path, 'list.json', [1, 2]))
    assert status == 'Primary document: Expected a JSON object at the top level.'

    changes, summary = compare_documents_handler({'a': 1, 'b': 2, 'c': 3}, {'a': 1, 'b': 20, 'd': 4})
    assert changes['changed'] == {'b': {'from': 2, 'to': 20}}
    assert summary == 'Added: 1 | Removed: 1 | Changed: 1.'
    assert compare_documents_handler(None, {}) == (None, 'Upload both documents before comparing.')


def test_merge_documents_handler_writes_file(tmp_path, monkeypatch):
    monkeypatch.setattr('tempfile.tempdir', str(tmp_path))
    path, status, preview = merge_documents_handler(
        {'a': 1, 'nested': {'b': 2, 'c': 3}},
        {'nested': {'c': 30, 'd': 4}},
        'combined',
    )
    assert path.endswith('combined.json')
    assert status == 'Merged 2 top-level keys.'
    assert preview == {'a': 1, 'nested': {'b': 2, 'c': 30, 'd': 4}}
    with open(path, encoding='utf-8') as f:
        assert json.load(f) == preview
