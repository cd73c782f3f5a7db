"""
Tests for prro.time — Clock protocol and elapsed-time helpers.
"""

import pytest
from datetime import datetime, timedelta, timezone

from prro.time import (
    FixedClock,
    SystemClock,
    document_date,
    document_time,
    elapsed_minutes,
    format_duration,
    get_default_clock,
    now_utc,
    set_default_clock,
    to_local,
    use_clock,
)


T0 = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


# ── Clock Tests ──────────────────────────────────────────────

class TestSystemClock:
    def test_returns_utc_datetime(self):
        dt = SystemClock().now_utc()
        assert dt.tzinfo == timezone.utc

    def test_whole_seconds(self):
        assert SystemClock().now_utc().microsecond == 0


class TestFixedClock:
    def test_returns_fixed_time(self):
        clock = FixedClock(T0)
        assert clock.now_utc() == T0
        assert clock.now_utc() == T0

    def test_rejects_naive_datetime(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            FixedClock(datetime(2025, 1, 1))

    def test_advance_seconds_and_minutes(self):
        clock = FixedClock(T0)
        clock.advance(30)
        clock.advance(minutes=90)
        assert clock.now_utc() == T0 + timedelta(minutes=90, seconds=30)

    def test_cannot_move_backwards(self):
        clock = FixedClock(T0)
        with pytest.raises(ValueError, match="backwards"):
            clock.advance(-1)
        assert clock.now_utc() == T0

    def test_normalised_to_utc(self):
        kyiv = timezone(timedelta(hours=3))
        clock = FixedClock(datetime(2025, 6, 15, 15, 0, 0, tzinfo=kyiv))
        assert clock.now_utc() == T0
        assert clock.now_utc().tzinfo == timezone.utc


class TestDefaultClock:
    def test_set_returns_previous(self):
        original = get_default_clock()
        fixed = FixedClock(T0)
        previous = set_default_clock(fixed)
        try:
            assert previous is original
            assert get_default_clock() is fixed
            assert now_utc() == T0
        finally:
            set_default_clock(original)

    def test_use_clock_restores_on_exit(self):
        original = get_default_clock()
        with use_clock(FixedClock(T0)) as clock:
            assert now_utc() == T0
            assert get_default_clock() is clock
        assert get_default_clock() is original

    def test_use_clock_restores_on_error(self):
        original = get_default_clock()
        with pytest.raises(RuntimeError):
            with use_clock(FixedClock(T0)):
                raise RuntimeError("boom")
        assert get_default_clock() is original


# ── Temporal Helpers ─────────────────────────────────────────

class TestElapsedMinutes:
    def test_floors_partial_minutes(self):
        assert elapsed_minutes(T0, T0 + timedelta(minutes=5, seconds=59)) == 5

    def test_zero_at_start(self):
        assert elapsed_minutes(T0, T0) == 0

    def test_rejects_naive(self):
        with pytest.raises(ValueError):
            elapsed_minutes(datetime(2025, 1, 1), T0)


class TestFormatDuration:
    @pytest.mark.parametrize(
        "minutes, expected",
        [(0, "0m"), (45, "45m"), (120, "2h"), (150, "2h 30m"), (2160, "36h")],
    )
    def test_formats(self, minutes, expected):
        assert format_duration(minutes) == expected

    def test_negative_clamped(self):
        assert format_duration(-5) == "0m"


class TestDocumentStamps:
    def test_kyiv_winter_offset(self):
        dt = datetime(2025, 1, 31, 22, 30, 5, tzinfo=timezone.utc)
        assert document_date(dt, "Europe/Kyiv") == "01022025"
        assert document_time(dt, "Europe/Kyiv") == "003005"

    def test_to_local_keeps_instant(self):
        local = to_local(T0, "Europe/Kyiv")
        assert local == T0
        assert local.utcoffset() == timedelta(hours=3)
