"""
PRRO Offline — Session Duration Policy
========================================
Caps how long offline mode may run: per session and per calendar month.

evaluate() is pure: all time is passed in explicitly.
can_continue() is the gate the chain builder enforces.
warnings_for() is advisory only and never blocks recording.
"""

from __future__ import annotations

from datetime import datetime

from prro.config.offline import (
    DEFAULT_OFFLINE_CONFIG,
    MAX_MONTHLY_MINUTES,
    MAX_SESSION_MINUTES,
    OfflineConfig,
)
from prro.offline.models import SessionStats
from prro.time.temporal import elapsed_minutes, format_duration

__all__ = [
    "MAX_SESSION_MINUTES",
    "MAX_MONTHLY_MINUTES",
    "evaluate",
    "can_continue",
    "warnings_for",
]


def evaluate(
    session_start: datetime,
    prior_monthly_minutes: int,
    document_count: int,
    now: datetime,
    *,
    session_id: str = "",
    config: OfflineConfig = DEFAULT_OFFLINE_CONFIG,
) -> SessionStats:
    """
    Compute offline usage for a session as of `now`.

    Args:
        session_start:         When the offline session began.
        prior_monthly_minutes: Offline minutes already used this month
                               by earlier sessions.
        document_count:        Documents recorded so far in the session.
        now:                   Evaluation instant.

    Returns:
        SessionStats with remaining_minutes clamped to >= 0.
    """
    if prior_monthly_minutes < 0:
        raise ValueError("prior_monthly_minutes must be >= 0.")

    current = elapsed_minutes(session_start, now)
    monthly = prior_monthly_minutes + current

    remaining = min(
        config.max_session_minutes - current,
        config.max_monthly_minutes - monthly,
    )

    return SessionStats(
        session_id=str(session_id),
        current_duration=current,
        monthly_duration=monthly,
        document_count=document_count,
        over_daily_limit=current > config.max_session_minutes,
        over_monthly_limit=monthly > config.max_monthly_minutes,
        remaining_minutes=max(remaining, 0),
    )


def can_continue(stats: SessionStats) -> bool:
    """True iff neither limit is exceeded and some time remains."""
    return (
        not stats.over_daily_limit
        and not stats.over_monthly_limit
        and stats.remaining_minutes > 0
    )


def warnings_for(
    stats: SessionStats,
    *,
    config: OfflineConfig = DEFAULT_OFFLINE_CONFIG,
) -> list[str]:
    """Human-readable advisories for the operator."""
    warnings: list[str] = []

    if 0 < stats.remaining_minutes <= config.expiry_warning_minutes:
        warnings.append(
            f"Offline mode ends in {format_duration(stats.remaining_minutes)}."
        )

    if stats.over_daily_limit:
        warnings.append(
            f"Offline session limit exceeded "
            f"({format_duration(config.max_session_minutes)})."
        )

    if stats.over_monthly_limit:
        warnings.append(
            f"Monthly offline limit exceeded "
            f"({format_duration(config.max_monthly_minutes)})."
        )

    if stats.monthly_duration > config.monthly_warning_minutes:
        warnings.append(
            f"Used {format_duration(stats.monthly_duration)} of "
            f"{format_duration(config.max_monthly_minutes)} monthly offline allowance."
        )

    return warnings
