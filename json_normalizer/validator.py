"""Rule-based validation over a JsonDocument.

Every rule returns a new validator carrying the errors found so far, so
rules chain without mutating shared state::

    result = (JsonValidator(doc)
              .required('email')
              .email('email')
              .between('age', 0, 120))
    result.ensure_valid()

Apart from the ``required*`` rules, a rule is skipped when its field is
missing or null.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Pattern, Union

from .coercers import coerce_date_time
from .document import JsonDocument
from .flattening import json_equal
from .formats import coerce_phone, luhn_checksum_valid
from .resolver import resolve_path

_EMAIL_RE = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
_UUID_RE = re.compile(
    r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'
)

MIN_PHONE_DIGITS = 10


class ValidationFailed(ValueError):
    """Raised by ensure_valid; ``errors`` maps field paths to messages."""

    def __init__(self, errors: Mapping[str, str]):
        self.errors = dict(errors)
        summary = '; '.join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Validation failed: {summary}")


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class JsonValidator:
    def __init__(self, document: JsonDocument, errors: Optional[Mapping[str, str]] = None):
        self._document = document
        self._errors: Dict[str, str] = dict(errors or {})

    @property
    def document(self) -> JsonDocument:
        return self._document

    @property
    def errors(self) -> Mapping[str, str]:
        return MappingProxyType(self._errors)

    @property
    def is_valid(self) -> bool:
        return not self._errors

    def ensure_valid(self) -> 'JsonValidator':
        if self._errors:
            raise ValidationFailed(self._errors)
        return self

    def _fail(self, field: str, message: str) -> 'JsonValidator':
        errors = dict(self._errors)
        errors[field] = message
        return JsonValidator(self._document, errors)

    def _merge(self, errors: Mapping[str, str]) -> 'JsonValidator':
        if not errors:
            return self
        merged = dict(self._errors)
        merged.update(errors)
        return JsonValidator(self._document, merged)

    def _present(self, key: str) -> bool:
        return self._document.get_raw(key) is not None

    def _check(self, key: str, valid: Callable[[Any], bool], message: str) -> 'JsonValidator':
        if not self._present(key):
            return self
        if valid(self._document.get_raw(key)):
            return self
        return self._fail(key, message)

    # --- presence ---------------------------------------------------------

    def required(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        if self._present(key):
            return self
        return self._fail(key, message or f'Field "{key}" is required')

    def required_path(self, path: str, message: Optional[str] = None) -> 'JsonValidator':
        resolution = resolve_path(self._document.raw_data, path)
        if resolution.ok and resolution.value is not None:
            return self
        return self._fail(path, message or f'Path "{path}" is required')

    def required_when(self, key: str, other_key: str, expected: Any, message: Optional[str] = None) -> 'JsonValidator':
        """Require ``key`` when ``other_key`` holds ``expected``."""
        if json_equal(self._document.get_raw(other_key), expected):
            return self.required(key, message)
        return self

    def when(
        self,
        key: str,
        condition: Callable[[Any], bool],
        then: Callable[['JsonValidator'], 'JsonValidator'],
    ) -> 'JsonValidator':
        if condition(self._document.get_raw(key)):
            return then(self)
        return self

    # --- types ------------------------------------------------------------

    def string(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(key, lambda v: isinstance(v, str), message or f'Field "{key}" must be a string')

    def integer(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(
            key, lambda v: self._document.get_int(key) is not None,
            message or f'Field "{key}" must be an integer',
        )

    def boolean(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(
            key, lambda v: self._document.get_bool(key) is not None,
            message or f'Field "{key}" must be a boolean',
        )

    def number(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(
            key, lambda v: self._document.get_double(key) is not None,
            message or f'Field "{key}" must be a number',
        )

    def date(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(
            key, lambda v: self._document.get_date_time(key) is not None,
            message or f'Field "{key}" must be a valid date',
        )

    def array(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(key, lambda v: isinstance(v, list), message or f'Field "{key}" must be an array')

    def object(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(key, lambda v: isinstance(v, dict), message or f'Field "{key}" must be an object')

    # --- strings ----------------------------------------------------------

    def _string_check(self, key: str, valid: Callable[[str], bool], message: str) -> 'JsonValidator':
        if not self._present(key):
            return self
        value = self._document.get_string(key)
        if value is None or valid(value):
            return self
        return self._fail(key, message)

    def min_length(self, key: str, length: int, message: Optional[str] = None) -> 'JsonValidator':
        return self._string_check(
            key, lambda v: len(v) >= length,
            message or f'Field "{key}" must be at least {length} characters long',
        )

    def max_length(self, key: str, length: int, message: Optional[str] = None) -> 'JsonValidator':
        return self._string_check(
            key, lambda v: len(v) <= length,
            message or f'Field "{key}" must be at most {length} characters long',
        )

    def pattern(self, key: str, regex: Union[str, Pattern[str]], message: Optional[str] = None) -> 'JsonValidator':
        compiled = re.compile(regex) if isinstance(regex, str) else regex
        return self._string_check(
            key, lambda v: compiled.search(v) is not None,
            message or f'Field "{key}" has an invalid format',
        )

    def email(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self.pattern(key, _EMAIL_RE, message or f'Field "{key}" must be a valid email address')

    def uuid(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self.pattern(key, _UUID_RE, message or f'Field "{key}" must be a valid UUID')

    def url(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        def valid(_):
            uri = self._document.get_uri(key)
            return uri is not None and uri.scheme.lower() in ('http', 'https') and bool(uri.netloc)

        return self._check(key, valid, message or f'Field "{key}" must be a valid URL')

    def phone(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        def valid(value):
            normalized = coerce_phone(value)
            return normalized is not None and len(normalized.lstrip('+')) >= MIN_PHONE_DIGITS

        return self._check(key, valid, message or f'Field "{key}" must be a valid phone number')

    def credit_card(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        def valid(value):
            digits = ''.join(ch for ch in str(value) if ch.isdigit())
            return 13 <= len(digits) <= 19 and luhn_checksum_valid(digits)

        return self._check(key, valid, message or f'Field "{key}" must be a valid credit card number')

    def contains(self, key: str, substring: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._string_check(
            key, lambda v: substring in v,
            message or f'Field "{key}" must contain "{substring}"',
        )

    def starts_with(self, key: str, prefix: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._string_check(
            key, lambda v: v.startswith(prefix),
            message or f'Field "{key}" must start with "{prefix}"',
        )

    def ends_with(self, key: str, suffix: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._string_check(
            key, lambda v: v.endswith(suffix),
            message or f'Field "{key}" must end with "{suffix}"',
        )

    # --- numbers and dates ------------------------------------------------

    def _number_check(self, key: str, valid: Callable[[float], bool], message: str) -> 'JsonValidator':
        if not self._present(key):
            return self
        value = self._document.get_num(key)
        if value is None or valid(value):
            return self
        return self._fail(key, message)

    def min(self, key: str, minimum: float, message: Optional[str] = None) -> 'JsonValidator':
        return self._number_check(key, lambda v: v >= minimum, message or f'Field "{key}" must be at least {minimum}')

    def max(self, key: str, maximum: float, message: Optional[str] = None) -> 'JsonValidator':
        return self._number_check(key, lambda v: v <= maximum, message or f'Field "{key}" must be at most {maximum}')

    def between(self, key: str, minimum: float, maximum: float, message: Optional[str] = None) -> 'JsonValidator':
        return self._number_check(
            key, lambda v: minimum <= v <= maximum,
            message or f'Field "{key}" must be between {minimum} and {maximum}',
        )

    def date_range(
        self,
        key: str,
        min: Optional[datetime] = None,
        max: Optional[datetime] = None,
        message: Optional[str] = None,
    ) -> 'JsonValidator':
        def valid(value):
            parsed = coerce_date_time(value)
            if parsed is None:
                return False
            if min is not None and parsed < _aware(min):
                return False
            if max is not None and parsed > _aware(max):
                return False
            return True

        return self._check(key, valid, message or f'Field "{key}" must be a date within the allowed range')

    # --- values and arrays ------------------------------------------------

    def one_of(self, key: str, allowed: Iterable[Any], message: Optional[str] = None) -> 'JsonValidator':
        allowed = list(allowed)
        return self._check(
            key, lambda v: any(json_equal(v, item) for item in allowed),
            message or f'Field "{key}" must be one of: {", ".join(str(a) for a in allowed)}',
        )

    def min_items(self, key: str, count: int, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(
            key, lambda v: isinstance(v, list) and len(v) >= count,
            message or f'Field "{key}" must have at least {count} items',
        )

    def max_items(self, key: str, count: int, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(
            key, lambda v: isinstance(v, list) and len(v) <= count,
            message or f'Field "{key}" must have at most {count} items',
        )

    def unique(self, key: str, message: Optional[str] = None) -> 'JsonValidator':
        def valid(value):
            if not isinstance(value, list):
                return False
            for index, item in enumerate(value):
                if any(json_equal(item, other) for other in value[index + 1:]):
                    return False
            return True

        return self._check(key, valid, message or f'Field "{key}" must contain unique items')

    def equals(self, key: str, other_key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(
            key, lambda v: json_equal(v, self._document.get_raw(other_key)),
            message or f'Field "{key}" must match "{other_key}"',
        )

    def different(self, key: str, other_key: str, message: Optional[str] = None) -> 'JsonValidator':
        return self._check(
            key, lambda v: not json_equal(v, self._document.get_raw(other_key)),
            message or f'Field "{key}" must differ from "{other_key}"',
        )

    def custom(self, key: str, validator: Callable[[Any], bool], message: Optional[str] = None) -> 'JsonValidator':
        return self._check(key, validator, message or f'Field "{key}" is invalid')

    # --- nesting ----------------------------------------------------------

    def nested(
        self,
        key: str,
        rules: Callable[['JsonValidator'], 'JsonValidator'],
        message: Optional[str] = None,
    ) -> 'JsonValidator':
        """Validate an object field; nested errors are keyed ``key.field``."""
        if not self._present(key):
            return self
        child = self._document.get_object(key)
        if child is None:
            return self._fail(key, message or f'Field "{key}" must be an object')
        result = rules(JsonValidator(child))
        return self._merge({f"{key}.{field}": text for field, text in result.errors.items()})

    def each_item(
        self,
        key: str,
        rules: Callable[['JsonValidator', int], 'JsonValidator'],
        message: Optional[str] = None,
    ) -> 'JsonValidator':
        """Validate every object in an array; errors are keyed ``key[i].field``."""
        if not self._present(key):
            return self
        value = self._document.get_raw(key)
        if not isinstance(value, list):
            return self._fail(key, message or f'Field "{key}" must be an array')
        found: Dict[str, str] = {}
        for index, item in enumerate(value):
            child = JsonDocument.from_map_safe(item)
            if child is None:
                continue
            result = rules(JsonValidator(child), index)
            for field, text in result.errors.items():
                found[f"{key}[{index}].{field}"] = text
        return self._merge(found)
