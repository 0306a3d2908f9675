"""Pull common API-response shapes out of a JsonDocument.

Field names differ from one API to the next, so each extractor tries the
usual spellings in turn.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from .coercers import coerce_string
from .document import JsonDocument


@dataclass(frozen=True)
class PaginationInfo:
    total: Optional[int] = None
    page: Optional[int] = None
    limit: Optional[int] = None
    has_more: Optional[bool] = None
    next_page: Optional[int] = None

    @property
    def total_pages(self) -> Optional[int]:
        if self.total is not None and self.limit is not None and self.limit > 0:
            return math.ceil(self.total / self.limit)
        return None

    @property
    def has_next_page(self) -> bool:
        if self.has_more is not None:
            return self.has_more
        if self.next_page is not None:
            return True
        if self.page is not None and self.total_pages is not None:
            return self.page < self.total_pages
        return False

    def copy_with(self, **changes) -> 'PaginationInfo':
        return replace(self, **changes)


@dataclass(frozen=True)
class ApiError:
    message: Optional[str] = None
    code: Optional[str] = None
    details: Optional[str] = None
    errors: Optional[Tuple[str, ...]] = None

    @property
    def user_message(self) -> str:
        if self.message is not None:
            return self.message
        if self.errors:
            return self.errors[0]
        return 'An unknown error occurred'

    def has_error_code(self, code: str) -> bool:
        return self.code == code

    def copy_with(self, **changes) -> 'ApiError':
        return replace(self, **changes)


@dataclass(frozen=True)
class UserInfo:
    id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None

    @property
    def full_name(self) -> Optional[str]:
        if self.first_name is not None and self.last_name is not None:
            return f"{self.first_name} {self.last_name}"
        return self.name

    def copy_with(self, **changes) -> 'UserInfo':
        return replace(self, **changes)


@dataclass(frozen=True)
class TimestampInfo:
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def age(self) -> Optional[timedelta]:
        if self.created_at is None:
            return None
        return datetime.now(timezone.utc) - self.created_at

    @property
    def time_since_update(self) -> Optional[timedelta]:
        if self.updated_at is None:
            return None
        return datetime.now(timezone.utc) - self.updated_at

    def copy_with(self, **changes) -> 'TimestampInfo':
        return replace(self, **changes)


def get_pagination_info(
    document: JsonDocument,
    total_key: str = 'total',
    page_key: str = 'page',
    limit_key: str = 'limit',
    per_page_key: str = 'per_page',
    has_more_key: str = 'has_more',
    next_page_key: str = 'next_page',
) -> Optional[PaginationInfo]:
    """Read pagination fields; None when none of them is present."""
    limit = document.get_int(limit_key)
    if limit is None:
        limit = document.get_int(per_page_key)
    info = PaginationInfo(
        total=document.get_int(total_key),
        page=document.get_int(page_key),
        limit=limit,
        has_more=document.get_bool(has_more_key),
        next_page=document.get_int(next_page_key),
    )
    if info == PaginationInfo():
        return None
    return info


def _first_present(*candidates):
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _error_messages(value) -> Optional[Tuple[str, ...]]:
    if not isinstance(value, list):
        return None
    messages: List[str] = []
    for item in value:
        if isinstance(item, str):
            messages.append(item)
        elif isinstance(item, dict):
            text = coerce_string(item.get('message'))
            if text is not None:
                messages.append(text)
    return tuple(messages)


def get_api_error(
    document: JsonDocument,
    message_key: str = 'message',
    error_key: str = 'error',
    code_key: str = 'code',
    details_key: str = 'details',
    errors_key: str = 'errors',
) -> Optional[ApiError]:
    """Read an error payload in either flat or ``{"error": {...}}`` form.

    Nested lookups go through ``has_path`` first so that a flat payload does
    not fill the document's diagnostic log.
    """
    def nested(path: str) -> Optional[str]:
        return document.get_string_path(path) if document.has_path(path) else None

    flat_error = document.get_raw(error_key)
    message = _first_present(
        document.get_string(message_key),
        coerce_string(flat_error) if not isinstance(flat_error, dict) else None,
        nested(f"{error_key}.message"),
    )
    code = _first_present(document.get_string(code_key), nested(f"{error_key}.code"))
    details = _first_present(document.get_string(details_key), nested(f"{error_key}.details"))
    errors = _error_messages(document.get_raw(errors_key))

    if message is None and code is None and errors is None:
        return None
    return ApiError(message=message, code=code, details=details, errors=errors)


def get_user_info(document: JsonDocument) -> UserInfo:
    return UserInfo(
        id=document.get_int_with_fallbacks(['id', 'userId', 'user_id']),
        name=document.get_string_with_fallbacks(['name', 'username', 'displayName', 'display_name']),
        email=document.get_string_with_fallbacks(['email', 'emailAddress', 'email_address']),
        first_name=document.get_string_with_fallbacks(['firstName', 'first_name', 'fname']),
        last_name=document.get_string_with_fallbacks(['lastName', 'last_name', 'lname']),
        avatar=document.get_string_with_fallbacks(
            ['avatar', 'avatarUrl', 'avatar_url', 'profilePicture', 'profile_picture']
        ),
    )


def get_timestamp_info(
    document: JsonDocument,
    created_key: str = 'created_at',
    updated_key: str = 'updated_at',
    deleted_key: str = 'deleted_at',
) -> TimestampInfo:
    """Read timestamps from top-level keys, falling back to ``timestamps.*``."""
    def read(key: str, nested: str):
        value = document.get_date_time(key)
        if value is None and document.has_path(nested):
            value = document.get_date_time_path(nested)
        return value

    return TimestampInfo(
        created_at=read(created_key, 'timestamps.created'),
        updated_at=read(updated_key, 'timestamps.updated'),
        deleted_at=read(deleted_key, 'timestamps.deleted'),
    )
