"""Timestamp helpers.

Every timestamp the service stores or returns is an ISO-8601 UTC string with
millisecond precision and a ``Z`` suffix, e.g. ``2026-01-01T00:00:00.000Z``.
SQLite defaults write the same shape, so plain string comparison orders them.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

SQL_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ', 'now')"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    value = value.astimezone(timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f'{value.microsecond // 1000:03d}Z'


def utc_now_iso(offset: Optional[timedelta] = None) -> str:
    now = utc_now()
    if offset is not None:
        now += offset
    return to_iso(now)


def parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace('Z', '+00:00'))
