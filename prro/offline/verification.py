"""
PRRO Offline — Chain Verifier
===============================
Re-validates a recorded (or reloaded) offline document log before
it is packaged for transmission.

Checks, per record:
1. Local numbers are gapless and strictly increasing
2. doc_hash equals SHA-256 of the stored XML
3. Fiscal number decodes and agrees with local number, control
   number and session id; the XML carries it in ORDERTAXNUM
4. prev_doc_hash links to the previous FINANCIAL record
   (absent for the first financial record of the log)
5. SESSION_BEGIN only first, nothing after SESSION_END

Every violation is reported as an explicit Rejection. The verifier
does not stop at the first one, does not auto-correct, and does not
reorder. Empty or oversized logs only produce advisories.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from prro.config.offline import MAX_PACKAGE_SIZE
from prro.offline.control_number import is_valid_control_number
from prro.offline.errors import MalformedFiscalNumberError
from prro.offline.fiscal_number import decode_fiscal_number
from prro.offline.metadata import compute_document_hash
from prro.offline.models import DocumentKind, OfflineDocumentRecord


# ══════════════════════════════════════════════════════════════
# REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ChainRejectionCode:
    """All possible rejection codes for chain verification."""

    MISSING_SESSION_BEGIN = "MISSING_SESSION_BEGIN"
    UNEXPECTED_SESSION_BEGIN = "UNEXPECTED_SESSION_BEGIN"
    RECORD_AFTER_SESSION_END = "RECORD_AFTER_SESSION_END"
    LOCAL_NUM_OUT_OF_SEQUENCE = "LOCAL_NUM_OUT_OF_SEQUENCE"
    DOC_HASH_MISMATCH = "DOC_HASH_MISMATCH"
    PREV_HASH_MISMATCH = "PREV_HASH_MISMATCH"
    FISCAL_NUM_MALFORMED = "FISCAL_NUM_MALFORMED"
    FISCAL_NUM_MISMATCH = "FISCAL_NUM_MISMATCH"
    SESSION_ID_MISMATCH = "SESSION_ID_MISMATCH"
    CONTROL_NUMBER_OUT_OF_RANGE = "CONTROL_NUMBER_OUT_OF_RANGE"
    METADATA_NOT_IN_DOCUMENT = "METADATA_NOT_IN_DOCUMENT"


class ChainViolatedRule:
    """Rule identifiers for the audit trail."""

    SESSION_FRAMING = "SESSION_FRAMING"
    GAPLESS_NUMBERING = "GAPLESS_NUMBERING"
    DOCUMENT_INTEGRITY = "DOCUMENT_INTEGRITY"
    HASH_CHAIN = "HASH_CHAIN"
    FISCAL_NUMBER = "FISCAL_NUMBER"


# ══════════════════════════════════════════════════════════════
# RESULTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Rejection:
    """One explicit, auditable reason the chain is not acceptable."""

    code: str
    message: str
    violated_rule: str
    offline_local_num: Optional[int] = None


@dataclass(frozen=True)
class ChainVerificationResult:
    """
    accepted=True  → log may be packaged and transmitted
    accepted=False → at least one rejection; see `rejections`
    """

    accepted: bool
    rejections: tuple[Rejection, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(rejection.code for rejection in self.rejections)


# ══════════════════════════════════════════════════════════════
# VERIFIER
# ══════════════════════════════════════════════════════════════

def _check_fiscal_number(
    record: OfflineDocumentRecord,
    session_id: Optional[str],
) -> list[Rejection]:
    num = record.offline_local_num
    rejections: list[Rejection] = []

    if not is_valid_control_number(record.control_number):
        rejections.append(Rejection(
            code=ChainRejectionCode.CONTROL_NUMBER_OUT_OF_RANGE,
            message=f"Control number {record.control_number!r} is outside [1, 9999].",
            violated_rule=ChainViolatedRule.FISCAL_NUMBER,
            offline_local_num=num,
        ))

    try:
        parsed = decode_fiscal_number(record.fiscal_num)
    except MalformedFiscalNumberError as exc:
        rejections.append(Rejection(
            code=ChainRejectionCode.FISCAL_NUM_MALFORMED,
            message=str(exc),
            violated_rule=ChainViolatedRule.FISCAL_NUMBER,
            offline_local_num=num,
        ))
        return rejections

    if parsed.local_num != num or parsed.control_number != record.control_number:
        rejections.append(Rejection(
            code=ChainRejectionCode.FISCAL_NUM_MISMATCH,
            message=(
                f"Fiscal number {record.fiscal_num} disagrees with record "
                f"(local {num}, control {record.control_number})."
            ),
            violated_rule=ChainViolatedRule.FISCAL_NUMBER,
            offline_local_num=num,
        ))

    if session_id is not None and str(parsed.session_id) != session_id:
        rejections.append(Rejection(
            code=ChainRejectionCode.SESSION_ID_MISMATCH,
            message=(
                f"Fiscal number {record.fiscal_num} belongs to session "
                f"{parsed.session_id}, expected {session_id}."
            ),
            violated_rule=ChainViolatedRule.FISCAL_NUMBER,
            offline_local_num=num,
        ))

    if f"<ORDERTAXNUM>{record.fiscal_num}</ORDERTAXNUM>" not in record.xml:
        rejections.append(Rejection(
            code=ChainRejectionCode.METADATA_NOT_IN_DOCUMENT,
            message=f"Document XML does not carry fiscal number {record.fiscal_num}.",
            violated_rule=ChainViolatedRule.DOCUMENT_INTEGRITY,
            offline_local_num=num,
        ))

    return rejections


def _normalise_session_id(session_id) -> str:
    text = str(session_id).strip()
    if not text or not text.isascii() or not text.isdigit():
        raise ValueError(
            f"session_id must be a string of decimal digits, got {session_id!r}."
        )
    return str(int(text))


def verify_offline_chain(
    records: Sequence[OfflineDocumentRecord],
    *,
    session_id: Optional[str] = None,
    expect_session_begin: bool = True,
    max_package_size: int = MAX_PACKAGE_SIZE,
) -> ChainVerificationResult:
    """
    Verify an offline log in chain order.

    Args:
        records:              The log, oldest first.
        session_id:           Expected session; defaults to the first
                              record's fiscal number session.
                              Must be decimal digits; ValueError otherwise.
        expect_session_begin: False for a log collected after clear(),
                              which legitimately starts mid-session.
        max_package_size:     Advisory threshold for log length.
    """
    if session_id is not None:
        session_id = _normalise_session_id(session_id)

    records = tuple(records)
    if not records:
        return ChainVerificationResult(accepted=True, warnings=("Offline log is empty.",))

    if session_id is None:
        try:
            session_id = str(decode_fiscal_number(records[0].fiscal_num).session_id)
        except MalformedFiscalNumberError:
            session_id = None

    rejections: list[Rejection] = []
    warnings: list[str] = []

    if expect_session_begin and records[0].kind is not DocumentKind.SESSION_BEGIN:
        rejections.append(Rejection(
            code=ChainRejectionCode.MISSING_SESSION_BEGIN,
            message="Offline log does not start with a SESSION_BEGIN document.",
            violated_rule=ChainViolatedRule.SESSION_FRAMING,
            offline_local_num=records[0].offline_local_num,
        ))

    last_financial_hash: Optional[str] = None
    previous_num: Optional[int] = None
    session_ended = False

    for index, record in enumerate(records):
        num = record.offline_local_num

        # ── Framing ───────────────────────────────────────────
        if record.kind is DocumentKind.SESSION_BEGIN and index > 0:
            rejections.append(Rejection(
                code=ChainRejectionCode.UNEXPECTED_SESSION_BEGIN,
                message=f"SESSION_BEGIN at position {index + 1}; it must come first.",
                violated_rule=ChainViolatedRule.SESSION_FRAMING,
                offline_local_num=num,
            ))
        if session_ended:
            rejections.append(Rejection(
                code=ChainRejectionCode.RECORD_AFTER_SESSION_END,
                message=f"{record.kind.value} recorded after SESSION_END.",
                violated_rule=ChainViolatedRule.SESSION_FRAMING,
                offline_local_num=num,
            ))
        if record.kind is DocumentKind.SESSION_END:
            session_ended = True

        # ── Numbering ─────────────────────────────────────────
        if previous_num is not None and num != previous_num + 1:
            rejections.append(Rejection(
                code=ChainRejectionCode.LOCAL_NUM_OUT_OF_SEQUENCE,
                message=f"Local number {num} follows {previous_num}; expected {previous_num + 1}.",
                violated_rule=ChainViolatedRule.GAPLESS_NUMBERING,
                offline_local_num=num,
            ))
        previous_num = num

        # ── Document integrity ────────────────────────────────
        computed = compute_document_hash(record.xml)
        if record.doc_hash != computed:
            rejections.append(Rejection(
                code=ChainRejectionCode.DOC_HASH_MISMATCH,
                message=(
                    f"Stored hash '{record.doc_hash}' != recomputed hash '{computed}'."
                ),
                violated_rule=ChainViolatedRule.DOCUMENT_INTEGRITY,
                offline_local_num=num,
            ))

        rejections.extend(_check_fiscal_number(record, session_id))

        # ── Hash chain ────────────────────────────────────────
        expected_prev = None if record.kind is DocumentKind.SESSION_BEGIN else last_financial_hash
        if record.prev_doc_hash != expected_prev:
            rejections.append(Rejection(
                code=ChainRejectionCode.PREV_HASH_MISMATCH,
                message=(
                    f"Previous hash '{record.prev_doc_hash}' does not match the "
                    f"preceding financial document '{expected_prev}'."
                ),
                violated_rule=ChainViolatedRule.HASH_CHAIN,
                offline_local_num=num,
            ))
        if record.is_financial:
            last_financial_hash = record.doc_hash

    if len(records) > max_package_size:
        warnings.append(
            f"Offline log holds {len(records)} documents; it will be sent "
            f"as several packages of at most {max_package_size}."
        )

    return ChainVerificationResult(
        accepted=not rejections,
        rejections=tuple(rejections),
        warnings=tuple(warnings),
    )
