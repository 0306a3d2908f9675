from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional

from .paths import PATH_SEPARATOR, join_path, parse_index, split_path


class PathFailureReason(enum.Enum):
    EMPTY_PATH = 'empty_path'
    NULL_VALUE = 'null_value'
    KEY_NOT_FOUND = 'key_not_found'
    INVALID_INDEX = 'invalid_index'
    INDEX_OUT_OF_BOUNDS = 'index_out_of_bounds'
    NOT_A_CONTAINER = 'not_a_container'


@dataclass(frozen=True)
class PathFailure:
    """Why a path could not be resolved, and where traversal stopped."""

    reason: PathFailureReason
    segment: str
    path: str
    message: str


@dataclass(frozen=True)
class PathResolution:
    value: Any = None
    failure: Optional[PathFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _fail(reason: PathFailureReason, segment: str, path: str, message: str) -> PathResolution:
    return PathResolution(failure=PathFailure(reason, segment, path, message))


def resolve_path(data: Any, path: str) -> PathResolution:
    """Walk ``data`` along a dot path.

    Mappings are entered by key and lists by integer index. A null leaf is a
    successful resolution; a null met before the last segment is a failure.
    Never raises for malformed paths or wrongly shaped data.
    """
    if not path:
        return _fail(PathFailureReason.EMPTY_PATH, '', '', 'Path cannot be empty')

    current = data
    current_path = ''
    for part in split_path(path):
        current_path = join_path(current_path, part)

        if current is None:
            return _fail(
                PathFailureReason.NULL_VALUE, part, current_path,
                f'Path "{current_path}" resolved to null',
            )

        if isinstance(current, dict):
            if part not in current:
                return _fail(
                    PathFailureReason.KEY_NOT_FOUND, part, current_path,
                    f'Key "{part}" not found in path "{current_path}"',
                )
            current = current[part]
        elif isinstance(current, (list, tuple)):
            index = parse_index(part)
            if index is None:
                return _fail(
                    PathFailureReason.INVALID_INDEX, part, current_path,
                    f'Invalid array index "{part}" in path "{current_path}"',
                )
            if index < 0 or index >= len(current):
                return _fail(
                    PathFailureReason.INDEX_OUT_OF_BOUNDS, part, current_path,
                    f'Array index {index} out of bounds (0-{len(current) - 1}) in path "{current_path}"',
                )
            current = current[index]
        else:
            return _fail(
                PathFailureReason.NOT_A_CONTAINER, part, current_path,
                f'Cannot access property "{part}" on non-object value at path "{current_path}"',
            )

    return PathResolution(value=current)


def get_value_by_path(data: Any, path: str) -> Any:
    """Retrieve the value at a dot path, or None when it cannot be reached."""
    return resolve_path(data, path).value


def has_path(data: Any, path: str) -> bool:
    if not path:
        return False

    current = data
    for part in split_path(path):
        if isinstance(current, dict):
            if part not in current:
                return False
            current = current[part]
        elif isinstance(current, (list, tuple)):
            index = parse_index(part)
            if index is None or index < 0 or index >= len(current):
                return False
            current = current[index]
        else:
            return False
    return True


def set_value_by_path(data: Any, path: str, value: Any, sep: str = PATH_SEPARATOR) -> Any:
    """Set a value in nested data by dot path, creating mappings on the way.

    Existing lists are written by index and padded with None when the index
    lies past the end. A segment that cannot address an existing list leaves
    ``data`` untouched.
    """
    if not path:
        return value

    if not isinstance(data, dict):
        return value

    parts = split_path(path, sep)
    current: Any = data
    for part in parts[:-1]:
        nxt = _child(current, part)
        if not isinstance(nxt, (dict, list)):
            nxt = {}
            if not _assign(current, part, nxt):
                return data
        current = nxt
    _assign(current, parts[-1], value)
    return data


def _child(container: Any, part: str) -> Any:
    if isinstance(container, dict):
        return container.get(part)
    index = parse_index(part)
    if index is None or index < 0 or index >= len(container):
        return None
    return container[index]


def _assign(container: Any, part: str, value: Any) -> bool:
    if isinstance(container, dict):
        container[part] = value
        return True
    index = parse_index(part)
    if index is None or index < 0:
        return False
    while len(container) <= index:
        container.append(None)
    container[index] = value
    return True
