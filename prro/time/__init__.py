"""
PRRO Time — Public API
========================
Explicit clock protocol and temporal helpers.
Doctrine: NO datetime.now() in chain logic.
"""

from prro.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    now_utc,
    set_default_clock,
    use_clock,
)
from prro.time.temporal import (
    document_date,
    document_time,
    elapsed_minutes,
    format_duration,
    to_local,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "use_clock",
    "now_utc",
    "elapsed_minutes",
    "format_duration",
    "to_local",
    "document_date",
    "document_time",
]
