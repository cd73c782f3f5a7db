"""
PRRO Offline Store persistence public API.
"""

from prro.offline_store.persistence.errors import (
    PersistResult,
    StoreRejectionCode,
    StoreViolatedRule,
)
from prro.offline_store.persistence.repository import load_session_records
from prro.offline_store.persistence.service import mark_transmitted, persist_record

__all__ = [
    "persist_record",
    "load_session_records",
    "mark_transmitted",
    "PersistResult",
    "StoreRejectionCode",
    "StoreViolatedRule",
]
