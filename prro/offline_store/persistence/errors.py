"""
PRRO Offline Store - Persistence Errors
=======================================
Deterministic rejection codes and the result type of persist_record().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from prro.offline.verification import Rejection


class StoreRejectionCode:
    """Rejection codes for store appends."""

    LOCAL_NUM_OUT_OF_SEQUENCE = "LOCAL_NUM_OUT_OF_SEQUENCE"
    PREV_HASH_MISMATCH = "PREV_HASH_MISMATCH"
    DOC_HASH_MISMATCH = "DOC_HASH_MISMATCH"
    DUPLICATE_LOCAL_NUM = "DUPLICATE_LOCAL_NUM"
    TRANSACTION_ABORTED = "TRANSACTION_ABORTED"


class StoreViolatedRule:
    """Rule identifiers for audit trail during store appends."""

    GAPLESS_NUMBERING = "GAPLESS_NUMBERING"
    HASH_CHAIN = "HASH_CHAIN"
    DOCUMENT_INTEGRITY = "DOCUMENT_INTEGRITY"
    ATOMIC_PERSISTENCE = "ATOMIC_PERSISTENCE"


@dataclass(frozen=True)
class PersistResult:
    """
    accepted=True  → record stored, `entry_id` set
    accepted=False → nothing stored, see `rejection`
    """

    accepted: bool
    rejection: Optional[Rejection] = None
    entry_id: Optional[str] = None
