from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from .coercers import coerce_string

T = TypeVar('T')
K = TypeVar('K')
V = TypeVar('V')

ItemCoercer = Callable[[Any], Optional[T]]
EntryCoercer = Callable[[Any, Any], Optional[Tuple[K, V]]]


def coerce_list(value: Any, item_coercer: ItemCoercer) -> Optional[List[T]]:
    """Normalize a list, a single item or null into a list of coerced items.

    Items the coercer rejects are dropped. A bare item is promoted to a
    one-element list; if it cannot be coerced the result is None rather
    than an empty list.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        items = (item_coercer(item) for item in value)
        return [item for item in items if item is not None]
    single = item_coercer(value)
    return [single] if single is not None else None


def coerce_list_required(value: Any, item_coercer: ItemCoercer) -> List[T]:
    """Like coerce_list, but never None: failures give an empty list."""
    result = coerce_list(value, item_coercer)
    return result if result is not None else []


def coerce_map(value: Any, entry_coercer: EntryCoercer) -> Optional[Dict[K, V]]:
    """Rebuild a mapping from the ``(key, value)`` pairs ``entry_coercer`` emits.

    The coercer returns a pair to keep (possibly transformed) or None to
    drop the entry. Non-mapping input gives None.
    """
    if not isinstance(value, dict):
        return None
    result: Dict[K, V] = {}
    for key, item in value.items():
        entry = entry_coercer(key, item)
        if entry is None:
            continue
        new_key, new_value = entry
        result[new_key] = new_value
    return result


def coerce_map_required(value: Any, entry_coercer: EntryCoercer) -> Dict[K, V]:
    result = coerce_map(value, entry_coercer)
    return result if result is not None else {}


def coerce_comma_separated_list(value: Any) -> Optional[List[str]]:
    """Split ``'food, travel , code'`` into ``['food', 'travel', 'code']``.

    A list input has each element rendered as text and trimmed; blanks are
    dropped either way.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        rendered = (coerce_string(item) for item in value)
        return [text.strip() for text in rendered if text is not None and text.strip()]
    if isinstance(value, str):
        if not value.strip():
            return None
        return [part.strip() for part in value.split(',') if part.strip()]
    return None
