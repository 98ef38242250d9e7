"""Timezone-aware clock utilities.

All timestamps in pulseops are either UTC-aware datetimes or integer
milliseconds since the epoch.  This module is the single source of "now"
so tests can monkey-patch it trivially.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def now_ms() -> int:
    """Return the current time as integer milliseconds since the epoch."""
    return int(utc_now().timestamp() * 1000)
