"""Flexible coercion of loosely typed JSON values into Python types.

Every coercer accepts any JSON-like value and returns either the typed value
or None. None stands for "missing", "null" and "unparseable" alike; no
coercer raises for malformed input. The ``required_*`` variants return a
fixed zero value instead of None.

``bool`` is a subclass of ``int`` in Python, but a JSON boolean is not a
number: the numeric coercers treat ``True``/``False`` as an unsupported type.
"""
from __future__ import annotations

import enum
import json
import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional, TypeVar, Union
from urllib.parse import SplitResult, quote, urlsplit

T = TypeVar('T')

Number = Union[int, float]

# Integers below this are seconds since the epoch, anything else milliseconds.
EPOCH_SECONDS_THRESHOLD = 10_000_000_000

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_INT_RE = re.compile(r'[+-]?\d+')
_FLOAT_RE = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')
_FLOAT_SPECIALS = {'nan', '+nan', '-nan', 'infinity', '+infinity', '-infinity'}

# int() and str() refuse numbers past sys.get_int_max_str_digits(); long
# digit runs are converted in chunks of this size.
_DIGIT_CHUNK = 1000

_ISO_DATETIME_RE = re.compile(
    r'[+-]?\d{4}-?\d{2}-?\d{2}'
    r'(?:[Tt ]\d{2}(?::?\d{2}(?::?\d{2}(?:[.,]\d+)?)?)?'
    r'(?:[Zz]|[+-]\d{2}(?::?\d{2})?)?)?'
)

# RFC 3986 reserved and unreserved characters survive URI coercion untouched.
_URI_SAFE = ":/?#[]@!$&'()*+,;=%~"
_BAD_ESCAPE_RE = re.compile(r'%(?![0-9A-Fa-f]{2})')


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_int_text(text: str) -> Optional[int]:
    """Parse plain base-10 integer text; surrounding whitespace is allowed."""
    text = text.strip()
    if not _INT_RE.fullmatch(text):
        return None
    digits = text.lstrip('+-')
    result = 0
    for start in range(0, len(digits), _DIGIT_CHUNK):
        chunk = digits[start:start + _DIGIT_CHUNK]
        result = result * 10 ** len(chunk) + int(chunk)
    return -result if text.startswith('-') else result


def int_to_text(value: int) -> str:
    """Base-10 text for any int, however many digits it has."""
    if abs(value) < 10 ** _DIGIT_CHUNK:
        return str(value)
    remaining = abs(value)
    chunks = []
    base = 10 ** _DIGIT_CHUNK
    while remaining:
        remaining, chunk = divmod(remaining, base)
        chunks.append(chunk)
    head = str(chunks.pop())
    body = ''.join(str(chunk).zfill(_DIGIT_CHUNK) for chunk in reversed(chunks))
    return ('-' if value < 0 else '') + head + body


def parse_float_text(text: str) -> Optional[float]:
    text = text.strip()
    if _FLOAT_RE.fullmatch(text) or text.lower() in _FLOAT_SPECIALS:
        return float(text.lower().replace('infinity', 'inf'))
    return None


def coerce_int(value: Any) -> Optional[int]:
    """Coerce to int. Floats are truncated toward zero."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    if isinstance(value, str):
        if value == '':
            return None
        return parse_int_text(value)
    return None


def coerce_double(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return None
    if isinstance(value, str):
        if value == '':
            return None
        return parse_float_text(value)
    return None


def coerce_num(value: Any) -> Optional[Number]:
    """Coerce to int or float, keeping whichever the input denotes."""
    if value is None or isinstance(value, bool):
        return None
    if _is_number(value):
        return value
    if isinstance(value, str):
        if value == '':
            return None
        parsed = parse_int_text(value)
        if parsed is not None:
            return parsed
        return parse_float_text(value)
    return None


def coerce_bool(value: Any) -> Optional[bool]:
    """Coerce ``true``/``false``/``1``/``0`` (any case) and the ints 1/0."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in ('true', '1'):
            return True
        if lowered in ('false', '0'):
            return False
        return None
    if isinstance(value, int):
        if value == 1:
            return True
        if value == 0:
            return False
    return None


def coerce_string(value: Any) -> Optional[str]:
    """Render any non-null value as text.

    Booleans render as ``true``/``false`` and containers as JSON text, so the
    result reads the way the value looked on the wire.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            return str(value)
    if isinstance(value, int):
        return int_to_text(value)
    return str(value)


def coerce_trimmed_string(value: Any) -> Optional[str]:
    text = coerce_string(value)
    if text is None:
        return None
    text = text.strip()
    return text or None


def coerce_lower_string(value: Any) -> Optional[str]:
    text = coerce_trimmed_string(value)
    return text.lower() if text is not None else None


def coerce_upper_string(value: Any) -> Optional[str]:
    text = coerce_trimmed_string(value)
    return text.upper() if text is not None else None


def epoch_to_datetime(value: int) -> Optional[datetime]:
    """Convert an epoch number to a UTC datetime.

    Values below EPOCH_SECONDS_THRESHOLD are read as seconds, the rest as
    milliseconds. Timestamps outside the datetime range give None.
    """
    millis = value * 1000 if value < EPOCH_SECONDS_THRESHOLD else value
    try:
        return EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        return None


def _parse_iso_datetime(text: str) -> Optional[datetime]:
    if not _ISO_DATETIME_RE.fullmatch(text):
        return None
    normalized = text.replace('t', 'T').replace('z', 'Z')
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def coerce_date_time(value: Any) -> Optional[datetime]:
    """Coerce ISO-8601 text or an epoch number to an aware UTC datetime.

    Naive ISO strings are taken to be UTC already. Numeric strings that are
    not ISO dates go through the same epoch handling as integers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, int):
        return epoch_to_datetime(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        parsed = _parse_iso_datetime(text)
        if parsed is not None:
            return parsed
        number = parse_int_text(text)
        if number is not None:
            return epoch_to_datetime(number)
    return None


def coerce_uri(value: Any) -> Optional[SplitResult]:
    """Coerce text to a URI, percent-encoding rather than rejecting bad input.

    ``'not a uri'`` becomes the relative reference ``not%20a%20uri``.
    """
    if value is None:
        return None
    if isinstance(value, SplitResult):
        return value
    if not isinstance(value, str) or value == '':
        return None
    encoded = quote(_BAD_ESCAPE_RE.sub('%25', value), safe=_URI_SAFE)
    try:
        return urlsplit(encoded)
    except ValueError:
        # Unbalanced or malformed IPv6 brackets.
        return urlsplit(encoded.replace('[', '%5B').replace(']', '%5D'))


def _member_name(member: Any) -> str:
    if isinstance(member, enum.Enum):
        return member.name
    return str(member)


def coerce_enum(value: Any, choices: Iterable[T], fallback: Optional[T] = None) -> Optional[T]:
    """Match a name (case-insensitive) or an ordinal index against ``choices``.

    ``choices`` is an Enum class or any sequence of members. Unmatched input
    gives ``fallback``.
    """
    members = list(choices)
    if value is None or not members:
        return fallback
    if isinstance(value, enum.Enum) and value in members:
        return value
    if isinstance(value, str):
        wanted = value.lower()
        for member in members:
            if _member_name(member).lower() == wanted:
                return member
        return fallback
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value < len(members):
            return members[value]
    return fallback


def coerce_big_int(value: Any) -> Optional[int]:
    """Coerce to an arbitrary-precision int. Floats are not accepted."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        if value == '':
            return None
        return parse_int_text(value)
    return None


def required_int(value: Any) -> int:
    result = coerce_int(value)
    return 0 if result is None else result


def required_double(value: Any) -> float:
    result = coerce_double(value)
    return 0.0 if result is None else result


def required_num(value: Any) -> Number:
    result = coerce_num(value)
    return 0 if result is None else result


def required_bool(value: Any) -> bool:
    result = coerce_bool(value)
    return False if result is None else result


def required_string(value: Any) -> str:
    result = coerce_string(value)
    return '' if result is None else result


def required_big_int(value: Any) -> int:
    result = coerce_big_int(value)
    return 0 if result is None else result


def required_date_time(value: Any) -> datetime:
    result = coerce_date_time(value)
    return EPOCH if result is None else result
