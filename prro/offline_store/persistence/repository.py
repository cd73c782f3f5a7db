"""
PRRO Offline Store - Persistence Repository
===========================================
Low-level ORM helpers used by the persistence service.
"""

from __future__ import annotations

from datetime import datetime

from prro.offline.models import DocumentKind, OfflineDocumentRecord
from prro.offline_store.models import EntryStatus, OfflineDocumentEntry


_FINANCIAL_KIND_VALUES = tuple(
    kind.value for kind in DocumentKind if kind.is_financial
)


def save_entry(entry_data: dict) -> OfflineDocumentEntry:
    """
    Persist one entry row.

    The caller (persistence service) owns all validation and transactional guards.
    """
    return OfflineDocumentEntry.objects.create(**entry_data)


def get_latest_entry(
    session_id: str,
    *,
    lock: bool = False,
) -> OfflineDocumentEntry | None:
    """
    Fetch the highest-numbered entry of a session.

    lock=True enables row-level lock for transactional chain checks.
    """
    query = (
        OfflineDocumentEntry.objects.filter(session_id=session_id)
        .order_by("-offline_local_num")
    )
    if lock:
        query = query.select_for_update()
    return query.first()


def get_latest_pending_financial_entry(
    session_id: str,
) -> OfflineDocumentEntry | None:
    return (
        OfflineDocumentEntry.objects.filter(
            session_id=session_id,
            status=EntryStatus.PENDING,
            kind__in=_FINANCIAL_KIND_VALUES,
        )
        .order_by("-offline_local_num")
        .first()
    )


def update_status(
    session_id: str,
    *,
    up_to_local_num: int,
    transmitted_at: datetime,
) -> int:
    """
    Bulk PENDING → TRANSMITTED. Queryset update bypasses the model's
    insert-only save() guard; this is the only mutation the store allows.
    """
    return OfflineDocumentEntry.objects.filter(
        session_id=session_id,
        status=EntryStatus.PENDING,
        offline_local_num__lte=up_to_local_num,
    ).update(status=EntryStatus.TRANSMITTED, transmitted_at=transmitted_at)


def entry_to_record(entry: OfflineDocumentEntry) -> OfflineDocumentRecord:
    return OfflineDocumentRecord(
        kind=DocumentKind(entry.kind),
        xml=entry.xml,
        offline_local_num=entry.offline_local_num,
        fiscal_num=entry.fiscal_num,
        control_number=entry.control_number,
        prev_doc_hash=entry.prev_doc_hash,
        doc_hash=entry.doc_hash,
        created_at=entry.created_at,
        total_amount=entry.total_amount,
        uid=entry.uid,
    )


def load_session_records(
    session_id: str,
    *,
    pending_only: bool = False,
) -> tuple[OfflineDocumentRecord, ...]:
    """
    Load one session's records in chain order.

    Ordering rule:
        offline_local_num ASC
    """
    query = OfflineDocumentEntry.objects.filter(session_id=session_id)
    if pending_only:
        query = query.filter(status=EntryStatus.PENDING)
    return tuple(
        entry_to_record(entry)
        for entry in query.order_by("offline_local_num")
    )
