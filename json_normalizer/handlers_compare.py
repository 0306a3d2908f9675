from __future__ import annotations

import os
import tempfile
from uuid import uuid4

from .document import JsonDocument
from .io_utils import read_json_content


def handle_compare_upload(file_obj, label_prefix):
    if file_obj is None:
        return None, f"{label_prefix}: No file uploaded."

    try:
        data = read_json_content(file_obj)
    except Exception as e:
        return None, f"{label_prefix}: Error parsing JSON: {str(e)}"

    document = JsonDocument.from_map_safe(data)
    if document is None:
        return None, f"{label_prefix}: Expected a JSON object at the top level."
    return document.raw_data, f"{label_prefix}: Successfully loaded. Found {len(document.keys)} top-level keys."


def handle_primary_upload(file_obj):
    return handle_compare_upload(file_obj, "Primary document")


def handle_secondary_upload(file_obj):
    return handle_compare_upload(file_obj, "Secondary document")


def perform_comparison(primary_data, secondary_data):
    if primary_data is None or secondary_data is None:
        raise ValueError("Upload both documents before comparing.")

    primary = JsonDocument.from_map_safe(primary_data)
    secondary = JsonDocument.from_map_safe(secondary_data)
    if primary is None or secondary is None:
        raise ValueError("Both documents must be JSON objects.")
    return primary, secondary


def compare_documents_handler(primary_data, secondary_data):
    try:
        primary, secondary = perform_comparison(primary_data, secondary_data)
    except ValueError as exc:
        return None, str(exc)

    changes = primary.diff(secondary)
    summary = (
        f"Added: {len(changes['added'])} | "
        f"Removed: {len(changes['removed'])} | "
        f"Changed: {len(changes['changed'])}."
    )
    return changes, summary


def merge_documents_handler(primary_data, secondary_data, file_name):
    """Deep-merge secondary over primary and write the result to a temp file."""
    try:
        primary, secondary = perform_comparison(primary_data, secondary_data)
    except ValueError as exc:
        return None, str(exc), None

    merged = primary.deep_merge(secondary)

    output_name = (file_name or f"merged_{uuid4().hex}").strip()
    if not output_name.lower().endswith('.json'):
        output_name += '.json'

    path = os.path.join(tempfile.gettempdir(), output_name)
    try:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(merged.to_json(indent=2))
    except OSError as exc:
        return None, f"Error writing merged file: {str(exc)}", None

    return path, f"Merged {len(merged.keys)} top-level keys.", merged.raw_data
