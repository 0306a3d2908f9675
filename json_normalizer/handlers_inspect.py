from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional
from urllib.parse import SplitResult

import gradio as gr

from .coercers import (
    coerce_big_int,
    coerce_bool,
    coerce_date_time,
    coerce_double,
    coerce_int,
    coerce_num,
    coerce_string,
    coerce_trimmed_string,
    coerce_uri,
)
from .document import JsonDocument
from .flattening import list_paths
from .formats import CurrencyValue, coerce_currency, coerce_duration, coerce_phone, coerce_slug
from .io_utils import read_json_content

COERCIONS: Dict[str, Callable[[Any], Any]] = {
    'raw': lambda value: value,
    'int': coerce_int,
    'double': coerce_double,
    'num': coerce_num,
    'bool': coerce_bool,
    'string': coerce_string,
    'trimmed string': coerce_trimmed_string,
    'datetime': coerce_date_time,
    'uri': coerce_uri,
    'big int': coerce_big_int,
    'duration': coerce_duration,
    'phone': coerce_phone,
    'slug': coerce_slug,
    'currency': coerce_currency,
}


def display_value(value: Any) -> Any:
    """Render a coerced value as something gr.JSON can show."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, timedelta):
        return {'milliseconds': round(value.total_seconds() * 1000), 'text': str(value)}
    if isinstance(value, SplitResult):
        return value.geturl()
    if isinstance(value, CurrencyValue):
        return asdict(value)
    if isinstance(value, int) and not isinstance(value, bool) and abs(value) > 2 ** 53:
        return str(value)
    return value


def describe_document(document: JsonDocument) -> str:
    if document.has_errors:
        return "Loaded with problems: " + "; ".join(document.errors)
    return f"Successfully loaded. Found {len(list_paths(document.raw_data))} addressable paths."


def prepare_document_payload(file_obj):
    if file_obj is None:
        return None, gr.update(choices=[], value=None), "No file uploaded."

    try:
        data = read_json_content(file_obj)
    except Exception as e:
        return None, gr.update(choices=[], value=None), f"Error parsing JSON: {str(e)}"

    document = JsonDocument.from_api_response(data)
    paths = list_paths(document.raw_data)
    default_path = paths[0] if paths else None
    return document.raw_data, gr.update(choices=paths, value=default_path), describe_document(document)


def load_document_from_text(text: Optional[str]):
    if not text or not text.strip():
        return None, gr.update(choices=[], value=None), "No JSON text provided."

    document = JsonDocument.from_json(text)
    paths = list_paths(document.raw_data)
    default_path = paths[0] if paths else None
    return document.raw_data, gr.update(choices=paths, value=default_path), describe_document(document)


def resolve_path_handler(data, path, coercion):
    """Resolve ``path`` and run the chosen coercer; returns (result, diagnostics)."""
    if data is None:
        return None, "No data loaded."
    if not path:
        return None, "Enter a path to resolve."

    coercer = COERCIONS.get(coercion or 'raw', COERCIONS['raw'])
    document = JsonDocument.from_map_safe(data)
    if document is None:
        return None, "Loaded data is not a JSON object."

    raw = document.get_path(path)
    if document.has_errors:
        return None, "\n".join(document.errors)

    coerced = coercer(raw)
    if coerced is None and raw is not None:
        return None, f'Value at "{path}" could not be coerced to {coercion}.'
    return {'raw': raw, 'coerced': display_value(coerced)}, "Resolved."


def flatten_handler(data, encode_query: bool = True):
    if data is None:
        return None, ""
    document = JsonDocument.from_map_safe(data)
    if document is None:
        return None, ""
    return document.flatten(), document.to_query_string(encode=bool(encode_query))
