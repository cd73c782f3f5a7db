"""
PRRO Config — Offline Mode Settings
=====================================
Offline limits and document defaults.

Values come from the Django setting PRRO_OFFLINE (a dict) when
settings are configured; otherwise the statutory defaults apply.
Pure functions never read settings themselves; they receive an
OfflineConfig explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

# 36 hours per offline session, 168 hours per calendar month.
MAX_SESSION_MINUTES = 2160
MAX_MONTHLY_MINUTES = 10080
MONTHLY_WARNING_MINUTES = 8400
EXPIRY_WARNING_MINUTES = 60
MAX_PACKAGE_SIZE = 100
DEFAULT_TIME_ZONE = "Europe/Kyiv"


@dataclass(frozen=True)
class OfflineConfig:
    """
    Offline mode configuration.

    Fields:
        max_session_minutes: cap on a single offline session
        max_monthly_minutes: cap on cumulative offline time per month
        monthly_warning_minutes: usage above which a monthly advisory is raised
        expiry_warning_minutes: remaining time at or below which an
            "about to expire" advisory is raised
        max_package_size: documents per transmission package
        time_zone: IANA zone used for document dates and times
        testing: mark generated documents with TESTING=1
    """

    max_session_minutes: int = MAX_SESSION_MINUTES
    max_monthly_minutes: int = MAX_MONTHLY_MINUTES
    monthly_warning_minutes: int = MONTHLY_WARNING_MINUTES
    expiry_warning_minutes: int = EXPIRY_WARNING_MINUTES
    max_package_size: int = MAX_PACKAGE_SIZE
    time_zone: str = DEFAULT_TIME_ZONE
    testing: bool = False

    def __post_init__(self) -> None:
        for name in (
            "max_session_minutes",
            "max_monthly_minutes",
            "monthly_warning_minutes",
            "expiry_warning_minutes",
            "max_package_size",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"{name} must be int >= 1, got {value!r}.")
        if self.monthly_warning_minutes > self.max_monthly_minutes:
            raise ValueError(
                "monthly_warning_minutes must not exceed max_monthly_minutes."
            )
        if not self.time_zone or not isinstance(self.time_zone, str):
            raise ValueError("time_zone must be a non-empty string.")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "OfflineConfig":
        """Build from a settings dict; keys are case-insensitive field names."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            name = key.lower()
            if name not in known:
                raise ValueError(f"Unknown PRRO_OFFLINE setting '{key}'.")
            kwargs[name] = value
        return cls(**kwargs)


DEFAULT_OFFLINE_CONFIG = OfflineConfig()


def load_offline_config(overrides: Optional[Mapping[str, Any]] = None) -> OfflineConfig:
    """
    Resolve the active OfflineConfig.

    Order: defaults ← settings.PRRO_OFFLINE ← overrides.
    """
    from django.conf import settings
    from django.core.exceptions import ImproperlyConfigured

    values: dict[str, Any] = {}
    try:
        values.update(getattr(settings, "PRRO_OFFLINE", {}) or {})
    except ImproperlyConfigured:
        # No DJANGO_SETTINGS_MODULE and no settings.configure(): defaults apply.
        pass
    if overrides:
        values.update(overrides)
    if not values:
        return DEFAULT_OFFLINE_CONFIG
    return OfflineConfig.from_mapping(values)
