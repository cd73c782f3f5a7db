"""
PRRO Offline Store — Persistence Service
=========================================
The single controlled write path for offline chain records.

There is exactly ONE lawful way to store a record:
    persist_record(record, session_id=...)

Write flow:
    1. Verify the document hash against the stored XML
    2. Inside one transaction, lock the session head and check
       a. local number == head + 1 (1 for an empty session)
       b. prev_doc_hash == hash of the latest PENDING financial entry
          (None when there is none, and always None for SESSION_BEGIN)
    3. Insert
    4. Return success or rejection

Entries marked TRANSMITTED no longer anchor the hash chain: a builder
cleared after a successful upload starts a fresh chain while local
numbering continues.

This service does NOT:
- Auto-correct hashes or numbers
- Retry on failure
- Swallow errors silently
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db import IntegrityError, transaction

from prro.offline.metadata import compute_document_hash
from prro.offline.models import DocumentKind, OfflineDocumentRecord
from prro.offline.verification import Rejection
from prro.offline_store.persistence.errors import (
    PersistResult,
    StoreRejectionCode,
    StoreViolatedRule,
)
from prro.offline_store.persistence.repository import (
    get_latest_entry,
    get_latest_pending_financial_entry,
    save_entry,
    update_status,
)
from prro.time import now_utc

logger = logging.getLogger("prro.store")


def _reject(
    code: str,
    message: str,
    rule: str,
    record: OfflineDocumentRecord,
    session_id: str,
) -> PersistResult:
    logger.warning(
        f"Store append rejected for session {session_id} "
        f"#{record.offline_local_num}: {code}."
    )
    return PersistResult(
        accepted=False,
        rejection=Rejection(
            code=code,
            message=message,
            violated_rule=rule,
            offline_local_num=record.offline_local_num,
        ),
    )


def _check_chain_position(
    record: OfflineDocumentRecord,
    session_id: str,
) -> Optional[PersistResult]:
    latest = get_latest_entry(session_id, lock=True)
    expected_num = 1 if latest is None else latest.offline_local_num + 1
    if record.offline_local_num != expected_num:
        return _reject(
            StoreRejectionCode.LOCAL_NUM_OUT_OF_SEQUENCE,
            (
                f"Local number {record.offline_local_num} does not follow the "
                f"stored head; expected {expected_num}."
            ),
            StoreViolatedRule.GAPLESS_NUMBERING,
            record,
            session_id,
        )

    expected_prev = None
    if record.kind is not DocumentKind.SESSION_BEGIN:
        anchor = get_latest_pending_financial_entry(session_id)
        if anchor is not None:
            expected_prev = anchor.doc_hash
    if record.prev_doc_hash != expected_prev:
        return _reject(
            StoreRejectionCode.PREV_HASH_MISMATCH,
            (
                "Previous hash does not match the latest pending financial "
                f"entry. Provided: '{record.prev_doc_hash}', "
                f"expected: '{expected_prev}'."
            ),
            StoreViolatedRule.HASH_CHAIN,
            record,
            session_id,
        )
    return None


def persist_record(
    record: OfflineDocumentRecord,
    *,
    session_id: str,
) -> PersistResult:
    """
    Store one chain record after re-checking its place in the chain.

    Returns:
        PersistResult: accepted=True with entry_id, or accepted=False
        with an explicit Rejection. Nothing is written on rejection.
    """
    session_id = str(session_id)

    computed = compute_document_hash(record.xml)
    if record.doc_hash != computed:
        return _reject(
            StoreRejectionCode.DOC_HASH_MISMATCH,
            (
                f"Provided doc_hash does not match computed hash. "
                f"Provided: '{record.doc_hash}', computed: '{computed}'."
            ),
            StoreViolatedRule.DOCUMENT_INTEGRITY,
            record,
            session_id,
        )

    try:
        with transaction.atomic():
            position = _check_chain_position(record, session_id)
            if position is not None:
                return position

            entry = save_entry({
                "session_id": session_id,
                "offline_local_num": record.offline_local_num,
                "kind": record.kind.value,
                "xml": record.xml,
                "uid": record.uid,
                "fiscal_num": record.fiscal_num,
                "control_number": record.control_number,
                "total_amount": record.total_amount,
                "prev_doc_hash": record.prev_doc_hash,
                "doc_hash": record.doc_hash,
                "created_at": record.created_at,
            })
    except IntegrityError as exc:
        if "uq_offline_session_local_num" in str(exc) or "UNIQUE" in str(exc):
            return _reject(
                StoreRejectionCode.DUPLICATE_LOCAL_NUM,
                (
                    f"Concurrent append conflict: local number "
                    f"{record.offline_local_num} is already stored."
                ),
                StoreViolatedRule.GAPLESS_NUMBERING,
                record,
                session_id,
            )
        return _reject(
            StoreRejectionCode.TRANSACTION_ABORTED,
            f"Persistence transaction aborted: {exc}",
            StoreViolatedRule.ATOMIC_PERSISTENCE,
            record,
            session_id,
        )

    logger.info(
        f"Stored offline {record.kind.value} {record.fiscal_num} "
        f"for session {session_id}."
    )
    return PersistResult(accepted=True, entry_id=str(entry.entry_id))


def mark_transmitted(
    session_id: str,
    up_to_local_num: int,
) -> int:
    """
    Mark every PENDING entry up to and including `up_to_local_num` as
    TRANSMITTED. Returns the number of entries updated.
    """
    if up_to_local_num < 1:
        raise ValueError(f"up_to_local_num must be >= 1, got {up_to_local_num}")
    updated = update_status(
        str(session_id),
        up_to_local_num=up_to_local_num,
        transmitted_at=now_utc(),
    )
    logger.info(
        f"Marked {updated} offline entries of session {session_id} "
        f"transmitted (through #{up_to_local_num})."
    )
    return updated
