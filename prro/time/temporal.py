"""
PRRO Time — Temporal Helpers
==============================
Pure functions for elapsed-time arithmetic.
All functions take explicit datetime arguments. No hidden clock access.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


def elapsed_minutes(start: datetime, now: datetime) -> int:
    """
    Whole minutes elapsed from start to now, floored.

    A `now` earlier than `start` yields a negative count; callers
    decide whether that is meaningful.
    """
    if start.tzinfo is None or now.tzinfo is None:
        raise ValueError("elapsed_minutes requires timezone-aware datetimes.")
    return int((now - start).total_seconds() // 60)


def format_duration(minutes: int) -> str:
    """Render minutes as '45m', '2h' or '2h 30m'."""
    hours, mins = divmod(max(int(minutes), 0), 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def to_local(dt: datetime, time_zone: str) -> datetime:
    """Convert an aware datetime into the named IANA time zone."""
    if dt.tzinfo is None:
        raise ValueError("to_local requires a timezone-aware datetime.")
    return dt.astimezone(ZoneInfo(time_zone))


def document_date(dt: datetime, time_zone: str) -> str:
    """Fiscal document date, DDMMYYYY in the given zone."""
    return to_local(dt, time_zone).strftime("%d%m%Y")


def document_time(dt: datetime, time_zone: str) -> str:
    """Fiscal document time, HHMMSS in the given zone."""
    return to_local(dt, time_zone).strftime("%H%M%S")
