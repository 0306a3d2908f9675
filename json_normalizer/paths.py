from __future__ import annotations

import re
from typing import List, Optional

PATH_SEPARATOR = '.'

_INDEX_RE = re.compile(r'[+-]?\d+')


def split_path(path: str, sep: str = PATH_SEPARATOR) -> List[str]:
    """Split a dot path into its segments.

    Segments are kept verbatim, so ``'a..b'`` addresses the empty key
    between ``a`` and ``b``. The empty path yields no segments.
    """
    if path is None or path == '':
        return []
    if not isinstance(path, str):
        path = str(path)
    return path.split(sep)


def join_path(prefix: str, segment, sep: str = PATH_SEPARATOR) -> str:
    if not isinstance(segment, str):
        segment = str(segment)
    return f"{prefix}{sep}{segment}" if prefix else segment


def parse_index(segment: str) -> Optional[int]:
    """Parse a list index segment as a base-10 integer, or None."""
    if not isinstance(segment, str) or not _INDEX_RE.fullmatch(segment):
        return None
    try:
        return int(segment)
    except ValueError:
        return None
