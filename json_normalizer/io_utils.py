from __future__ import annotations

import json
import logging
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)


def parse_json_text(text: str) -> Tuple[Any, Optional[str]]:
    """Decode JSON text, returning ``(data, None)`` or ``(None, error)``."""
    try:
        return json.loads(text), None
    except (TypeError, ValueError) as exc:
        logger.debug("JSON decode failed: %s", exc)
        return None, str(exc)


def read_json_content(file_obj):
    """Read JSON content from an uploaded file or file path."""
    if file_obj is None:
        raise ValueError("No file uploaded.")

    if hasattr(file_obj, 'read'):
        if hasattr(file_obj, 'seek'):
            file_obj.seek(0)
        content = file_obj.read()
        if isinstance(content, bytes):
            content = content.decode('utf-8')
        return json.loads(content)

    path = file_obj.name if hasattr(file_obj, 'name') else file_obj
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def to_json_text(data: Any, indent: Optional[int] = None) -> str:
    """Serialize to compact JSON text, or pretty-printed when ``indent`` is set."""
    separators = (',', ':') if indent is None else None
    return json.dumps(data, ensure_ascii=False, indent=indent, separators=separators, default=str)
