"""Coercers for structured text: durations, phone numbers, slugs and money."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .coercers import coerce_double, coerce_int, coerce_string, parse_float_text, parse_int_text

CURRENCY_SYMBOLS: Mapping[str, str] = MappingProxyType({
    '$': 'USD',
    '€': 'EUR',
    '£': 'GBP',
    '¥': 'JPY',
    '₹': 'INR',
    '₽': 'RUB',
    '₿': 'BTC',
})

_ISO_DURATION_RE = re.compile(
    r'P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?',
    re.IGNORECASE,
)
# "ms" is listed before "m" and "s" so that 500ms is not read as 500 minutes.
_HUMAN_DURATION_RE = re.compile(r'(\d+(?:\.\d+)?)\s*(ms|d|h|m|s)', re.IGNORECASE)
# The whole text must be unit tokens; "5 minutes ago" is not a duration.
_HUMAN_DURATION_FULL_RE = re.compile(r'(?:\s*\d+(?:\.\d+)?\s*(?:ms|d|h|m|s))+\s*', re.IGNORECASE)

_DURATION_UNITS = {
    'd': 'days',
    'h': 'hours',
    'm': 'minutes',
    's': 'seconds',
    'ms': 'milliseconds',
}
_DURATION_KEYS = (
    ('days', 'd'),
    ('hours', 'h'),
    ('minutes', 'm'),
    ('seconds', 's'),
    ('milliseconds', 'ms'),
)

_SLUG_STRIP_RE = re.compile(r'[^\w\s-]', re.ASCII)
_SLUG_SPACE_RE = re.compile(r'[\s_]+')
_SLUG_DASH_RE = re.compile(r'-+')

_TRAILING_CODE_RE = re.compile(r'^(.*?)\s*([A-Z]{3})$', re.DOTALL)


@dataclass(frozen=True)
class CurrencyValue:
    amount: float
    currency_code: Optional[str] = None

    def __str__(self) -> str:
        if self.currency_code:
            return f"{self.amount} {self.currency_code}"
        return str(self.amount)


def _duration_from_mapping(value: Mapping[Any, Any]) -> timedelta:
    parts = {}
    for long_key, short_key in _DURATION_KEYS:
        total = 0
        for key in (long_key, short_key):
            amount = coerce_int(value.get(key))
            if amount is not None:
                total += amount
        parts[long_key] = total
    return timedelta(**parts)


def _duration_from_iso(text: str) -> Optional[timedelta]:
    match = _ISO_DURATION_RE.fullmatch(text)
    if match is None or not any(match.groups()):
        return None
    days, hours, minutes, seconds = match.groups()
    return timedelta(
        days=int(days or 0),
        hours=int(hours or 0),
        minutes=int(minutes or 0),
        milliseconds=round(float(seconds or 0) * 1000),
    )


def _duration_from_tokens(text: str) -> Optional[timedelta]:
    if not _HUMAN_DURATION_FULL_RE.fullmatch(text):
        return None
    tokens = _HUMAN_DURATION_RE.findall(text)
    if not tokens:
        return None
    total = timedelta()
    for amount, unit in tokens:
        total += timedelta(**{_DURATION_UNITS[unit.lower()]: float(amount)})
    return total


def coerce_duration(value: Any) -> Optional[timedelta]:
    """Coerce a duration from milliseconds, a unit mapping or text.

    Text is tried as ISO-8601 (``P1DT2H30M``), then as unit tokens
    (``1h 30m``, ``500ms``), then as a plain count of milliseconds.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, timedelta):
        return value
    try:
        if isinstance(value, int):
            return timedelta(milliseconds=value)
        if isinstance(value, dict):
            return _duration_from_mapping(value)
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return None
            parsed = _duration_from_iso(text)
            if parsed is None:
                parsed = _duration_from_tokens(text)
            if parsed is None:
                millis = parse_int_text(text)
                if millis is not None:
                    parsed = timedelta(milliseconds=millis)
            return parsed
    except (OverflowError, ValueError):
        # Out of timedelta range, or past the int/str conversion limit.
        return None
    return None


def coerce_phone(value: Any) -> Optional[str]:
    """Keep only the digits of a phone number, plus one leading ``+``."""
    text = coerce_string(value)
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    digits = ''.join(ch for ch in text if '0' <= ch <= '9')
    if not digits:
        return None
    return '+' + digits if text.startswith('+') else digits


def coerce_slug(value: Any) -> Optional[str]:
    text = coerce_string(value)
    if text is None:
        return None
    text = text.strip().lower()
    if not text:
        return None
    text = _SLUG_STRIP_RE.sub('', text)
    text = _SLUG_SPACE_RE.sub('-', text)
    text = _SLUG_DASH_RE.sub('-', text).strip('-')
    return text or None


def _currency_from_text(text: str) -> Optional[CurrencyValue]:
    text = text.strip()
    negative = False
    if text.startswith('-') and text[1:2] in CURRENCY_SYMBOLS:
        negative = True
        text = text[1:]

    code = None
    for symbol, symbol_code in CURRENCY_SYMBOLS.items():
        if text.startswith(symbol):
            code = symbol_code
            text = text[len(symbol):]
            break

    match = _TRAILING_CODE_RE.match(text)
    if match is not None:
        text = match.group(1)
        if code is None:
            code = match.group(2)

    amount = parse_float_text(text.replace(',', '').replace(' ', ''))
    if amount is None:
        return None
    return CurrencyValue(-amount if negative else amount, code)


def coerce_currency(value: Any) -> Optional[CurrencyValue]:
    """Coerce a money amount from a number, a mapping or formatted text.

    Mappings use ``amount``/``value`` and ``currency``/``currencyCode``.
    Text may start with a known symbol (``$1,234.56``) or end with a
    three-letter code (``100.00 USD``).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, CurrencyValue):
        return value
    if isinstance(value, (int, float)):
        amount = coerce_double(value)
        return CurrencyValue(amount) if amount is not None else None
    if isinstance(value, dict):
        amount = coerce_double(value.get('amount'))
        if amount is None:
            amount = coerce_double(value.get('value'))
        if amount is None:
            return None
        code = coerce_string(value.get('currency'))
        if code is None:
            code = coerce_string(value.get('currencyCode'))
        return CurrencyValue(amount, code)
    if isinstance(value, str):
        if not value.strip():
            return None
        return _currency_from_text(value)
    return None


def luhn_checksum_valid(number: str) -> bool:
    """Luhn (mod 10) check over the digits of ``number``."""
    digits = [int(ch) for ch in number if ch.isdigit()]
    if not digits:
        return False
    total = 0
    for position, digit in enumerate(reversed(digits)):
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def required_duration(value: Any) -> timedelta:
    result = coerce_duration(value)
    return timedelta() if result is None else result


def required_phone(value: Any) -> str:
    result = coerce_phone(value)
    return '' if result is None else result


def required_slug(value: Any) -> str:
    result = coerce_slug(value)
    return '' if result is None else result


def required_currency(value: Any) -> CurrencyValue:
    result = coerce_currency(value)
    return CurrencyValue(0.0) if result is None else result
