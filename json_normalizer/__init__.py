"""Defensive normalization of loosely typed JSON.

The Gradio inspector lives in `app.py`. This package contains:
- flexible coercers turning inconsistent JSON values into Python types
- a dot-path resolver over nested mappings and lists
- `JsonDocument`, a typed, path-aware wrapper with a diagnostic log
- structural helpers (flatten, deep merge, diff, query strings)
- a chaining validator and API-response extractors
"""
from .coercers import (
    EPOCH_SECONDS_THRESHOLD,
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
    required_big_int,
    required_bool,
    required_date_time,
    required_double,
    required_int,
    required_num,
    required_string,
)
from .containers import (
    coerce_comma_separated_list,
    coerce_list,
    coerce_list_required,
    coerce_map,
    coerce_map_required,
)
from .document import JsonDocument
from .formats import (
    CURRENCY_SYMBOLS,
    CurrencyValue,
    coerce_currency,
    coerce_duration,
    coerce_phone,
    coerce_slug,
    required_currency,
    required_duration,
    required_phone,
    required_slug,
)
from .resolver import PathFailure, PathFailureReason, PathResolution, has_path, resolve_path
from .validator import JsonValidator, ValidationFailed

__all__ = [
    'CURRENCY_SYMBOLS',
    'EPOCH_SECONDS_THRESHOLD',
    'CurrencyValue',
    'JsonDocument',
    'JsonValidator',
    'PathFailure',
    'PathFailureReason',
    'PathResolution',
    'ValidationFailed',
    'coerce_big_int',
    'coerce_bool',
    'coerce_comma_separated_list',
    'coerce_currency',
    'coerce_date_time',
    'coerce_double',
    'coerce_duration',
    'coerce_enum',
    'coerce_int',
    'coerce_list',
    'coerce_list_required',
    'coerce_lower_string',
    'coerce_map',
    'coerce_map_required',
    'coerce_num',
    'coerce_phone',
    'coerce_slug',
    'coerce_string',
    'coerce_trimmed_string',
    'coerce_upper_string',
    'coerce_uri',
    'has_path',
    'required_big_int',
    'required_bool',
    'required_currency',
    'required_date_time',
    'required_double',
    'required_duration',
    'required_int',
    'required_num',
    'required_phone',
    'required_slug',
    'required_string',
    'resolve_path',
]
