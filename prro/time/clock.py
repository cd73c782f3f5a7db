"""
PRRO Time — Explicit Clock Protocol
=====================================
Doctrine: NO datetime.now() inside chain logic.
Time is passed explicitly to pure functions, or injected via
the Clock protocol into stateful components (chain builder,
document meta).

Fiscal documents carry time to the second (ORDERTIME is HHMMSS),
so clocks here report whole seconds: a record's created_at and the
time printed in its document never disagree.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, Protocol


class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        """Return current UTC time, whole seconds."""
        ...  # pragma: no cover


class SystemClock:
    """Wall-clock time in UTC, truncated to the second."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc).replace(microsecond=0)


class FixedClock:
    """
    Test clock: returns a fixed timestamp until advanced.

    Usage:
        clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        clock.advance(minutes=90)

    Offline durations are measured against this clock, so it only
    moves forward.
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt.astimezone(timezone.utc)

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, seconds: float = 0, *, minutes: float = 0) -> None:
        step = timedelta(seconds=seconds, minutes=minutes)
        if step < timedelta(0):
            raise ValueError("FixedClock cannot move backwards.")
        self._fixed_dt = self._fixed_dt + step


# ── Process default ───────────────────────────────────────────
# Used when a component is built without an explicit clock.

_default_clock: Clock = SystemClock()


def get_default_clock() -> Clock:
    return _default_clock


def set_default_clock(clock: Clock) -> Clock:
    """Install a new default clock; returns the one it replaced."""
    global _default_clock
    previous, _default_clock = _default_clock, clock
    return previous


@contextmanager
def use_clock(clock: Clock) -> Iterator[Clock]:
    """Temporarily install `clock` as the default (tests, replays)."""
    previous = set_default_clock(clock)
    try:
        yield clock
    finally:
        set_default_clock(previous)


def now_utc() -> datetime:
    """Current UTC time from the default clock."""
    return _default_clock.now_utc()
