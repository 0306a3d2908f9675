from __future__ import annotations

import logging
from copy import deepcopy
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar
from urllib.parse import SplitResult

from .coercers import (
    Number,
    coerce_big_int,
    coerce_bool,
    coerce_date_time,
    coerce_double,
    coerce_enum,
    coerce_int,
    coerce_lower_string,
    coerce_num,
    coerce_string,
    coerce_trimmed_string,
    coerce_upper_string,
    coerce_uri,
)
from .containers import (
    EntryCoercer,
    ItemCoercer,
    coerce_comma_separated_list,
    coerce_list,
    coerce_list_required,
    coerce_map,
    coerce_map_required,
)
from .flattening import deep_merge, diff, flatten, json_equal, to_query_string, unflatten
from .formats import CurrencyValue, coerce_currency, coerce_duration, coerce_phone, coerce_slug
from .io_utils import parse_json_text, to_json_text
from .paths import PATH_SEPARATOR
from .resolver import PathFailure, has_path, resolve_path, set_value_by_path

logger = logging.getLogger(__name__)

T = TypeVar('T')


class JsonDocument:
    """Typed, path-aware access to one JSON object.

    The mapping is copied on construction; later changes to the source are
    not seen. Failed path lookups and construction problems are recorded in
    a per-instance diagnostic log (``errors``) instead of raising.

    Instances are not thread-safe: the diagnostic log is unsynchronized
    mutable state, so callers sharing one document across threads must
    serialize access themselves.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TypeError(f"JsonDocument expects a dict, got {type(data).__name__}")
        self._data: Dict[str, Any] = deepcopy(data)
        self._errors: List[str] = []
        self._path_failures: List[PathFailure] = []

    # --- construction -----------------------------------------------------

    @classmethod
    def from_map(cls, data: Dict[str, Any]) -> 'JsonDocument':
        return cls(data)

    @classmethod
    def from_json(cls, text: str) -> 'JsonDocument':
        """Parse JSON text; bad text gives an empty document with a logged error."""
        data, error = parse_json_text(text)
        if error is not None:
            document = cls()
            document._add_error(f"Failed to parse JSON: {error}")
            return document
        if not isinstance(data, dict):
            document = cls()
            document._add_error(
                f"Failed to parse JSON: expected a JSON object, got {type(data).__name__}"
            )
            return document
        return cls(data)

    @classmethod
    def from_api_response(cls, response: Any) -> 'JsonDocument':
        if isinstance(response, str):
            return cls.from_json(response)
        if isinstance(response, dict):
            return cls.from_map(response)
        document = cls()
        document._add_error(
            f"Invalid response type: expected str or dict, got {type(response).__name__}"
        )
        return document

    @classmethod
    def from_map_safe(cls, data: Any) -> Optional['JsonDocument']:
        """Wrap ``data`` only if it is a mapping; otherwise None, not an empty document."""
        if isinstance(data, dict):
            return cls(data)
        return None

    @classmethod
    def unflatten(cls, flat: Dict[str, Any], sep: str = PATH_SEPARATOR) -> 'JsonDocument':
        return cls(unflatten(flat, sep))

    # --- diagnostics ------------------------------------------------------

    @property
    def errors(self) -> Tuple[str, ...]:
        return tuple(self._errors)

    @property
    def path_failures(self) -> Tuple[PathFailure, ...]:
        return tuple(self._path_failures)

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    def clear_errors(self) -> None:
        self._errors.clear()
        self._path_failures.clear()

    def _add_error(self, message: str) -> None:
        logger.debug("JsonDocument: %s", message)
        self._errors.append(message)

    # --- raw access -------------------------------------------------------

    @property
    def raw_data(self) -> Dict[str, Any]:
        return self._data

    @property
    def keys(self) -> List[str]:
        return list(self._data.keys())

    def has_key(self, key: str) -> bool:
        return key in self._data

    def has_path(self, path: str) -> bool:
        """Check a path without touching the diagnostic log."""
        return has_path(self._data, path)

    def get_raw(self, key: str) -> Any:
        return self._data.get(key)

    def get_path(self, path: str) -> Any:
        """Resolve a dot path; failures are logged and give None."""
        resolution = resolve_path(self._data, path)
        if not resolution.ok:
            self._path_failures.append(resolution.failure)
            self._add_error(resolution.failure.message)
            return None
        return resolution.value

    def _by_key(self, key: str, coercer: Callable[[Any], Optional[T]], default=None):
        result = coercer(self._data.get(key))
        return default if result is None else result

    def _by_path(self, path: str, coercer: Callable[[Any], Optional[T]], default=None):
        result = coercer(self.get_path(path))
        return default if result is None else result

    # --- typed getters by key ---------------------------------------------

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        return self._by_key(key, coerce_int, default)

    def get_double(self, key: str, default: Optional[float] = None) -> Optional[float]:
        return self._by_key(key, coerce_double, default)

    def get_num(self, key: str, default: Optional[Number] = None) -> Optional[Number]:
        return self._by_key(key, coerce_num, default)

    def get_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        return self._by_key(key, coerce_bool, default)

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._by_key(key, coerce_string, default)

    def get_trimmed_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._by_key(key, coerce_trimmed_string, default)

    def get_lower_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._by_key(key, coerce_lower_string, default)

    def get_upper_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._by_key(key, coerce_upper_string, default)

    def get_date_time(self, key: str, default: Optional[datetime] = None) -> Optional[datetime]:
        return self._by_key(key, coerce_date_time, default)

    def get_uri(self, key: str, default: Optional[SplitResult] = None) -> Optional[SplitResult]:
        return self._by_key(key, coerce_uri, default)

    def get_big_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        return self._by_key(key, coerce_big_int, default)

    def get_duration(self, key: str, default: Optional[timedelta] = None) -> Optional[timedelta]:
        return self._by_key(key, coerce_duration, default)

    def get_phone(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._by_key(key, coerce_phone, default)

    def get_slug(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._by_key(key, coerce_slug, default)

    def get_currency(self, key: str, default: Optional[CurrencyValue] = None) -> Optional[CurrencyValue]:
        return self._by_key(key, coerce_currency, default)

    def get_enum(self, key: str, choices: Iterable[T], fallback: Optional[T] = None) -> Optional[T]:
        return coerce_enum(self._data.get(key), choices, fallback)

    # --- typed getters by path --------------------------------------------

    def get_int_path(self, path: str, default: Optional[int] = None) -> Optional[int]:
        return self._by_path(path, coerce_int, default)

    def get_double_path(self, path: str, default: Optional[float] = None) -> Optional[float]:
        return self._by_path(path, coerce_double, default)

    def get_num_path(self, path: str, default: Optional[Number] = None) -> Optional[Number]:
        return self._by_path(path, coerce_num, default)

    def get_bool_path(self, path: str, default: Optional[bool] = None) -> Optional[bool]:
        return self._by_path(path, coerce_bool, default)

    def get_string_path(self, path: str, default: Optional[str] = None) -> Optional[str]:
        return self._by_path(path, coerce_string, default)

    def get_trimmed_string_path(self, path: str, default: Optional[str] = None) -> Optional[str]:
        return self._by_path(path, coerce_trimmed_string, default)

    def get_date_time_path(self, path: str, default: Optional[datetime] = None) -> Optional[datetime]:
        return self._by_path(path, coerce_date_time, default)

    def get_uri_path(self, path: str, default: Optional[SplitResult] = None) -> Optional[SplitResult]:
        return self._by_path(path, coerce_uri, default)

    def get_big_int_path(self, path: str, default: Optional[int] = None) -> Optional[int]:
        return self._by_path(path, coerce_big_int, default)

    def get_duration_path(self, path: str, default: Optional[timedelta] = None) -> Optional[timedelta]:
        return self._by_path(path, coerce_duration, default)

    def get_phone_path(self, path: str, default: Optional[str] = None) -> Optional[str]:
        return self._by_path(path, coerce_phone, default)

    def get_slug_path(self, path: str, default: Optional[str] = None) -> Optional[str]:
        return self._by_path(path, coerce_slug, default)

    def get_currency_path(self, path: str, default: Optional[CurrencyValue] = None) -> Optional[CurrencyValue]:
        return self._by_path(path, coerce_currency, default)

    def get_enum_path(self, path: str, choices: Iterable[T], fallback: Optional[T] = None) -> Optional[T]:
        return coerce_enum(self.get_path(path), choices, fallback)

    # --- conditional getters ----------------------------------------------

    def get_int_if(self, key: str, condition: Callable[[int], bool]) -> Optional[int]:
        value = self.get_int(key)
        return value if value is not None and condition(value) else None

    def get_string_if(self, key: str, condition: Callable[[str], bool]) -> Optional[str]:
        value = self.get_string(key)
        return value if value is not None and condition(value) else None

    # --- nested objects and lists -----------------------------------------

    def get_object(self, key: str) -> Optional['JsonDocument']:
        return self.from_map_safe(self._data.get(key))

    def get_object_path(self, path: str) -> Optional['JsonDocument']:
        return self.from_map_safe(self.get_path(path))

    def get_object_list(self, key: str) -> Optional[List['JsonDocument']]:
        """Wrap each mapping in a list value; other items are dropped."""
        return coerce_list(self._data.get(key), self.from_map_safe)

    def get_object_list_path(self, path: str) -> Optional[List['JsonDocument']]:
        return coerce_list(self.get_path(path), self.from_map_safe)

    def get_list(self, key: str, item_coercer: ItemCoercer) -> Optional[List[Any]]:
        return coerce_list(self._data.get(key), item_coercer)

    def get_list_or_empty(self, key: str, item_coercer: ItemCoercer) -> List[Any]:
        return coerce_list_required(self._data.get(key), item_coercer)

    def get_list_path(self, path: str, item_coercer: ItemCoercer) -> Optional[List[Any]]:
        return coerce_list(self.get_path(path), item_coercer)

    def get_list_path_or_empty(self, path: str, item_coercer: ItemCoercer) -> List[Any]:
        return coerce_list_required(self.get_path(path), item_coercer)

    def get_comma_separated_list(self, key: str) -> Optional[List[str]]:
        return coerce_comma_separated_list(self._data.get(key))

    # --- batch and fallback access ----------------------------------------

    def get_multiple(self, keys: Iterable[str], getter: Callable[[str], Optional[T]]) -> Dict[str, Optional[T]]:
        """Apply ``getter`` to every key; absent results stay in the mapping as None."""
        return {key: getter(key) for key in keys}

    def get_strings(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        return self.get_multiple(keys, self.get_string)

    def get_ints(self, keys: Iterable[str]) -> Dict[str, Optional[int]]:
        return self.get_multiple(keys, self.get_int)

    def get_bools(self, keys: Iterable[str]) -> Dict[str, Optional[bool]]:
        return self.get_multiple(keys, self.get_bool)

    def get_with_fallbacks(self, keys: Iterable[str], getter: Callable[[str], Optional[T]]) -> Optional[T]:
        """Return the first non-None result of ``getter`` over ``keys``, in order."""
        for key in keys:
            value = getter(key)
            if value is not None:
                return value
        return None

    def get_string_with_fallbacks(self, keys: Iterable[str]) -> Optional[str]:
        return self.get_with_fallbacks(keys, self.get_string)

    def get_int_with_fallbacks(self, keys: Iterable[str]) -> Optional[int]:
        return self.get_with_fallbacks(keys, self.get_int)

    def get_bool_with_fallbacks(self, keys: Iterable[str]) -> Optional[bool]:
        return self.get_with_fallbacks(keys, self.get_bool)

    def has_required_keys(self, keys: Iterable[str]) -> bool:
        missing = [key for key in keys if self._data.get(key) is None]
        if missing:
            self._add_error(f"Missing required keys: {', '.join(missing)}")
            return False
        return True

    def has_required_paths(self, paths: Iterable[str]) -> bool:
        missing = []
        for path in paths:
            resolution = resolve_path(self._data, path)
            if not resolution.ok or resolution.value is None:
                missing.append(path)
        if missing:
            self._add_error(f"Missing required paths: {', '.join(missing)}")
            return False
        return True

    # --- transformation ---------------------------------------------------

    def map_values(self, mapper: EntryCoercer) -> Optional[Dict[Any, Any]]:
        return coerce_map(self._data, mapper)

    def map_values_or_empty(self, mapper: EntryCoercer) -> Dict[Any, Any]:
        return coerce_map_required(self._data, mapper)

    def transform(self, transformer: Callable[['JsonDocument'], T]) -> T:
        return transformer(self)

    def transform_values(
        self,
        condition: Callable[[str, Any], bool],
        transformer: Callable[[str, Any], Any],
    ) -> 'JsonDocument':
        transformed = {
            key: transformer(key, value) if condition(key, value) else value
            for key, value in self._data.items()
        }
        return JsonDocument(transformed)

    def filter_keys(self, condition: Callable[[str, Any], bool]) -> 'JsonDocument':
        return JsonDocument({k: v for k, v in self._data.items() if condition(k, v)})

    def merge(self, other: 'JsonDocument') -> 'JsonDocument':
        """Shallow merge; keys of ``other`` win."""
        merged = dict(self._data)
        merged.update(other._data)
        return JsonDocument(merged)

    def deep_merge(self, other: 'JsonDocument') -> 'JsonDocument':
        return JsonDocument(deep_merge(self._data, other._data))

    def diff(self, other: 'JsonDocument') -> Dict[str, Dict[str, Any]]:
        return diff(self._data, other._data)

    def pick(self, paths: Iterable[str]) -> 'JsonDocument':
        """Keep only the given paths, preserving their nesting."""
        picked: Dict[str, Any] = {}
        for path in paths:
            resolution = resolve_path(self._data, path)
            if resolution.ok:
                set_value_by_path(picked, path, deepcopy(resolution.value))
        return JsonDocument(picked)

    def select(self, keys: Iterable[str]) -> 'JsonDocument':
        return JsonDocument({key: self._data[key] for key in keys if key in self._data})

    def exclude(self, keys: Iterable[str]) -> 'JsonDocument':
        dropped = set(keys)
        return JsonDocument({k: v for k, v in self._data.items() if k not in dropped})

    def flatten(self, sep: str = PATH_SEPARATOR) -> Dict[str, Any]:
        return flatten(self._data, sep)

    def to_query_string(self, encode: bool = True) -> str:
        return to_query_string(self._data, encode)

    def to_json(self, indent: Optional[int] = None) -> str:
        return to_json_text(self._data, indent)

    # --- dunder -----------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JsonDocument):
            return NotImplemented
        return json_equal(self._data, other._data)

    __hash__ = None

    def __repr__(self) -> str:
        return f"JsonDocument({self._data!r})"
