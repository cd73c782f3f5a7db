"""
PRRO Config — Public API
==========================
Offline limits and document defaults (Django settings backed).
"""

from prro.config.offline import (
    DEFAULT_OFFLINE_CONFIG,
    DEFAULT_TIME_ZONE,
    EXPIRY_WARNING_MINUTES,
    MAX_MONTHLY_MINUTES,
    MAX_PACKAGE_SIZE,
    MAX_SESSION_MINUTES,
    MONTHLY_WARNING_MINUTES,
    OfflineConfig,
    load_offline_config,
)

__all__ = [
    "OfflineConfig",
    "DEFAULT_OFFLINE_CONFIG",
    "load_offline_config",
    "MAX_SESSION_MINUTES",
    "MAX_MONTHLY_MINUTES",
    "MONTHLY_WARNING_MINUTES",
    "EXPIRY_WARNING_MINUTES",
    "MAX_PACKAGE_SIZE",
    "DEFAULT_TIME_ZONE",
]
