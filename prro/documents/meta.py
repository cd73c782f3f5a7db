"""
PRRO Documents — Document Meta
================================
UID, date and time stamped onto every document head.

Both the clock and the id source are injectable so that document
assembly is deterministic under test.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from prro.config.offline import DEFAULT_OFFLINE_CONFIG, OfflineConfig
from prro.time.clock import Clock, get_default_clock
from prro.time.temporal import document_date, document_time


class IdProvider(Protocol):
    """Injectable source of document UIDs."""

    def new_id(self) -> str:
        ...  # pragma: no cover


class Uuid4Provider:
    """Production id source: random UUID4."""

    def new_id(self) -> str:
        return str(uuid.uuid4())


@dataclass(frozen=True)
class DocumentMeta:
    uid: str
    date: str  # DDMMYYYY
    time: str  # HHMMSS
    testing: bool
    timestamp: datetime


def create_meta(
    *,
    clock: Optional[Clock] = None,
    id_provider: Optional[IdProvider] = None,
    config: OfflineConfig = DEFAULT_OFFLINE_CONFIG,
) -> DocumentMeta:
    """Stamp a new document: fresh UID, current local date and time."""
    timestamp = (clock or get_default_clock()).now_utc()
    return DocumentMeta(
        uid=(id_provider or Uuid4Provider()).new_id(),
        date=document_date(timestamp, config.time_zone),
        time=document_time(timestamp, config.time_zone),
        testing=config.testing,
        timestamp=timestamp,
    )
