"""
PRRO Offline — Chain Data Model
=================================
Frozen value types shared by the offline chain components.

Doctrine:
- Records are created once by the chain builder and never mutated.
- The session counter advances only through allocate_local_number().
- The seed never appears in repr(), logs, or documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

Amount = Union[Decimal, int, float, str]


# ══════════════════════════════════════════════════════════════
# DOCUMENT KINDS
# ══════════════════════════════════════════════════════════════

class DocumentKind(Enum):
    """Kinds of documents recorded in an offline chain."""
    SESSION_BEGIN = "SESSION_BEGIN"
    SESSION_END = "SESSION_END"
    SALE = "SALE"
    REFUND = "REFUND"
    Z_REPORT = "Z_REPORT"

    @property
    def is_financial(self) -> bool:
        return self in FINANCIAL_KINDS


FINANCIAL_KINDS = frozenset({DocumentKind.SALE, DocumentKind.REFUND, DocumentKind.Z_REPORT})


def to_amount(value: Optional[Amount]) -> Optional[Decimal]:
    """Normalise a monetary value to Decimal (None passes through)."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("total_amount must be a number, not bool.")
    if isinstance(value, Decimal):
        amount = value
    else:
        # str() first so 75.5 becomes Decimal("75.5"), not its binary expansion
        amount = Decimal(str(value))
    if not amount.is_finite():
        raise ValueError(f"total_amount must be finite, got {value!r}.")
    return amount


# ══════════════════════════════════════════════════════════════
# OFFLINE SESSION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OfflineSession:
    """
    One offline excursion, as issued by the fiscal server.

    Fields:
        session_id: server-issued identifier (decimal digits)
        seed: server-issued checksum salt (secret)
        start_time: when the session began (timezone-aware)
        next_local_num: next local number to hand out (starts at 1)
    """

    session_id: str
    seed: str = field(repr=False)
    start_time: datetime
    next_local_num: int = 1

    def __post_init__(self) -> None:
        session_id = str(self.session_id).strip() if self.session_id is not None else ""
        if not session_id or not session_id.isascii() or not session_id.isdigit():
            raise ValueError("session_id must be a non-empty string of digits.")
        object.__setattr__(self, "session_id", session_id)
        if self.seed is None or not str(self.seed):
            raise ValueError("seed must be non-empty.")
        object.__setattr__(self, "seed", str(self.seed))
        if not isinstance(self.start_time, datetime) or self.start_time.tzinfo is None:
            raise ValueError("start_time must be a timezone-aware datetime.")
        if not isinstance(self.next_local_num, int) or self.next_local_num < 1:
            raise ValueError("next_local_num must be int >= 1.")


def allocate_local_number(session: OfflineSession) -> tuple[OfflineSession, int]:
    """
    Hand out the session's next local number.

    Returns (updated_session, allocated_number). The input session is
    left untouched; the caller owns storing the updated one.
    """
    allocated = session.next_local_num
    return replace(session, next_local_num=allocated + 1), allocated


# ══════════════════════════════════════════════════════════════
# CHAIN RECORD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OfflineDocumentRecord:
    """One link in the offline document chain."""

    kind: DocumentKind
    xml: str
    offline_local_num: int
    fiscal_num: Optional[str]
    control_number: int
    prev_doc_hash: Optional[str]
    doc_hash: str
    created_at: datetime
    total_amount: Optional[Decimal] = None
    uid: Optional[str] = None

    @property
    def is_financial(self) -> bool:
        return self.kind.is_financial


# ══════════════════════════════════════════════════════════════
# CONTROL NUMBER INPUT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ControlNumberInput:
    """
    Fields that feed the control-number checksum.

    date is DDMMYYYY, time is HHMMSS (document local time).
    """

    seed: str = field(repr=False)
    date: str
    time: str
    local_num: int
    register_fiscal_num: str
    local_register_num: str
    total_amount: Optional[Decimal] = None
    prev_doc_hash: Optional[str] = None

    def __post_init__(self) -> None:
        if len(self.date) != 8 or not self.date.isdigit():
            raise ValueError(f"date must be DDMMYYYY, got {self.date!r}.")
        if len(self.time) != 6 or not self.time.isdigit():
            raise ValueError(f"time must be HHMMSS, got {self.time!r}.")
        if not isinstance(self.local_num, int) or self.local_num < 0:
            raise ValueError("local_num must be int >= 0.")
        object.__setattr__(self, "total_amount", to_amount(self.total_amount))


# ══════════════════════════════════════════════════════════════
# SESSION STATS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SessionStats:
    """Derived offline usage figures; recomputed on demand, never stored."""

    session_id: str
    current_duration: int
    monthly_duration: int
    document_count: int
    over_daily_limit: bool
    over_monthly_limit: bool
    remaining_minutes: int
