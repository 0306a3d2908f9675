from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List
from urllib.parse import quote

from .coercers import coerce_string
from .paths import PATH_SEPARATOR, join_path
from .resolver import set_value_by_path


def json_equal(left: Any, right: Any) -> bool:
    """Deep equality over JSON values that keeps ``true`` apart from ``1``."""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(json_equal(value, right[key]) for key, value in left.items())
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(json_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, (dict, list, tuple)) or isinstance(right, (dict, list, tuple)):
        return False
    return left == right


def flatten(data: Any, sep: str = PATH_SEPARATOR, parent_key: str = '') -> Dict[str, Any]:
    """Flatten nested mappings and lists into ``{'a.b.0': leaf}`` form.

    Empty mappings and lists below the root are kept as leaves so that
    unflatten can restore them.
    """
    flat: Dict[str, Any] = {}

    if isinstance(data, dict):
        items = [(str(k), v) for k, v in data.items()]
    elif isinstance(data, (list, tuple)):
        items = [(str(i), v) for i, v in enumerate(data)]
    else:
        if parent_key:
            flat[parent_key] = data
        return flat

    if not items and parent_key:
        flat[parent_key] = {} if isinstance(data, dict) else []
        return flat

    for key, value in items:
        current_key = join_path(parent_key, key, sep)
        if isinstance(value, (dict, list, tuple)):
            flat.update(flatten(value, sep, current_key))
        else:
            flat[current_key] = value
    return flat


def _listify(node: Any) -> Any:
    """Turn mappings keyed ``'0'..'n-1'`` back into lists, bottom-up."""
    if isinstance(node, list):
        return [_listify(item) for item in node]
    if not isinstance(node, dict):
        return node
    converted = {key: _listify(value) for key, value in node.items()}
    if converted and all(key.isascii() and key.isdigit() for key in converted):
        indices = sorted(int(key) for key in converted)
        if indices == list(range(len(indices))) and all(str(i) in converted for i in indices):
            return [converted[str(i)] for i in indices]
    return converted


def unflatten(flat: Dict[str, Any], sep: str = PATH_SEPARATOR) -> Dict[str, Any]:
    """Inverse of flatten: build nested data from dot-path keys."""
    result: Dict[str, Any] = {}
    for key, value in flat.items():
        set_value_by_path(result, str(key), deepcopy(value), sep)
    return {key: _listify(value) for key, value in result.items()}


def list_paths(data: Any, parent_key: str = '') -> List[str]:
    """Every path that resolves inside ``data``, containers included."""
    paths: List[str] = []
    if isinstance(data, dict):
        children = data.items()
    elif isinstance(data, (list, tuple)):
        children = enumerate(data)
    else:
        return paths
    for key, value in children:
        current_key = join_path(parent_key, key)
        paths.append(current_key)
        paths.extend(list_paths(value, current_key))
    return paths


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Only when both sides hold a mapping at the same key are they merged
    recursively; otherwise the override value replaces the base value.
    """
    merged = deepcopy(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def diff(old: Dict[str, Any], new: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Compare the top-level keys of two mappings.

    Returns ``added`` (only in ``new``), ``removed`` (only in ``old``) and
    ``changed`` (``{'from': old, 'to': new}`` for unequal values).
    """
    added = {key: value for key, value in new.items() if key not in old}
    removed = {key: value for key, value in old.items() if key not in new}
    changed = {
        key: {'from': value, 'to': new[key]}
        for key, value in old.items()
        if key in new and not json_equal(value, new[key])
    }
    return {'added': added, 'removed': removed, 'changed': changed}


def _query_value(value: Any) -> str:
    if value is None:
        return ''
    return coerce_string(value)


def _query_pairs(value: Any, name: str) -> List[tuple]:
    if isinstance(value, dict):
        pairs = []
        for key, item in value.items():
            pairs.extend(_query_pairs(item, f"{name}[{key}]"))
        return pairs
    if isinstance(value, (list, tuple)):
        pairs = []
        for index, item in enumerate(value):
            pairs.extend(_query_pairs(item, f"{name}[{index}]"))
        return pairs
    return [(name, _query_value(value))]


def to_query_string(data: Dict[str, Any], encode: bool = True) -> str:
    """Render a mapping as ``a=1&user[name]=John&tags[0]=x``.

    Values are percent-encoded unless ``encode`` is False; keys and their
    bracket notation are left as they are.
    """
    pairs = []
    for key, value in data.items():
        pairs.extend(_query_pairs(value, str(key)))
    if encode:
        return '&'.join(f"{name}={quote(text, safe='')}" for name, text in pairs)
    return '&'.join(f"{name}={text}" for name, text in pairs)

