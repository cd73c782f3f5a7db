"""
PRRO Offline — Chain Builder
==============================
Stateful orchestrator of one offline session's document chain.

State machine:
    NO_SESSION --begin_session--> SESSION_OPEN --end_session--> SESSION_CLOSED

Per financial document (record_document):
    1. Duration policy gate          (evaluate → can_continue)
    2. Allocate next local number    (allocate_local_number)
    3. Control number                (compute_control_number)
    4. Fiscal number                 (encode_fiscal_number)
    5. Splice chain metadata         (apply_offline_metadata)
    6. Hash final XML                (compute_document_hash)
    7. Append record, advance chain head

All chain state lives in one frozen ChainState that is replaced as a
whole at the end of a successful call. A failed call leaves the
previous state untouched: no partial records, no skipped numbers.

The builder is NOT thread-safe. Each call depends on the result of
the previous one (the hash chain); callers serialize access.

This builder does NOT:
- Retry on failure
- Auto-close a session that hit its duration limit
- Transmit, sign, or persist documents
- Parse or re-serialize XML
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Protocol, Union

from prro.config.offline import OfflineConfig, load_offline_config
from prro.documents.meta import DocumentMeta, IdProvider, Uuid4Provider, create_meta
from prro.documents.xml_builder import extract_element_value
from prro.offline.control_number import compute_control_number
from prro.offline.duration import can_continue, evaluate, warnings_for
from prro.offline.errors import (
    NoActiveSessionError,
    SessionAlreadyStartedError,
    SessionIdReusedError,
    SessionLimitExceededError,
)
from prro.offline.fiscal_number import encode_fiscal_number
from prro.offline.metadata import apply_offline_metadata, compute_document_hash
from prro.offline.models import (
    Amount,
    ControlNumberInput,
    DocumentKind,
    OfflineDocumentRecord,
    OfflineSession,
    SessionStats,
    allocate_local_number,
    to_amount,
)
from prro.time.clock import Clock, get_default_clock
from prro.time.temporal import document_date, document_time

logger = logging.getLogger("prro.offline")


# ══════════════════════════════════════════════════════════════
# STATE
# ══════════════════════════════════════════════════════════════

class ChainPhase(Enum):
    NO_SESSION = "NO_SESSION"
    SESSION_OPEN = "SESSION_OPEN"
    SESSION_CLOSED = "SESSION_CLOSED"


@dataclass(frozen=True)
class ChainState:
    """
    Everything the builder owns, as one immutable value.

    first_financial_pending: the next financial document is the first
    one since the session began (or since clear()), so it carries no
    previous-document hash.
    """

    phase: ChainPhase = ChainPhase.NO_SESSION
    session: Optional[OfflineSession] = None
    records: tuple[OfflineDocumentRecord, ...] = ()
    last_financial_hash: Optional[str] = None
    first_financial_pending: bool = True


# ══════════════════════════════════════════════════════════════
# COLLABORATOR
# ══════════════════════════════════════════════════════════════

class OfflineDocumentAssembler(Protocol):
    """Produces base XML for session begin/end markers."""

    def offline_begin(self, meta: DocumentMeta, *, revoke_last_online: bool = False) -> str:
        ...

    def offline_end(self, meta: DocumentMeta) -> str:
        ...


# ══════════════════════════════════════════════════════════════
# BUILDER
# ══════════════════════════════════════════════════════════════

class OfflineChainBuilder:
    """
    Builds the hash-linked document chain of one offline session.

    Args:
        session_id:            Server-issued offline session id.
        seed:                  Server-issued checksum salt.
        register_fiscal_num:   Server-assigned register number.
        local_register_num:    Local register number.
        assembler:             Base XML source for begin/end markers.
        clock:                 Time source (defaults to the default clock).
        id_provider:           UID source for begin/end markers.
        config:                Offline limits; defaults to Django settings.
        prior_monthly_minutes: Offline minutes used earlier this month.
    """

    def __init__(
        self,
        *,
        session_id: Union[str, int],
        seed: str,
        register_fiscal_num: str,
        local_register_num: str,
        assembler: OfflineDocumentAssembler,
        clock: Optional[Clock] = None,
        id_provider: Optional[IdProvider] = None,
        config: Optional[OfflineConfig] = None,
        prior_monthly_minutes: int = 0,
    ) -> None:
        if prior_monthly_minutes < 0:
            raise ValueError("prior_monthly_minutes must be >= 0.")
        self._session_id = str(session_id)
        self._seed = seed
        self._register_fiscal_num = str(register_fiscal_num)
        self._local_register_num = str(local_register_num)
        self._assembler = assembler
        self._clock = clock or get_default_clock()
        self._id_provider = id_provider or Uuid4Provider()
        self._config = config or load_offline_config()
        self._prior_monthly_minutes = prior_monthly_minutes
        self._used_session_ids: set[str] = set()
        self._state = ChainState()

    # ── Introspection ─────────────────────────────────────────

    @property
    def phase(self) -> ChainPhase:
        return self._state.phase

    @property
    def session(self) -> Optional[OfflineSession]:
        return self._state.session

    def get_documents(self) -> tuple[OfflineDocumentRecord, ...]:
        """Immutable snapshot of the log, in chain order."""
        return self._state.records

    def snapshot(self) -> ChainState:
        return self._state

    def restore(self, state: ChainState) -> None:
        """Reinstate a previously taken snapshot (tests, crash recovery)."""
        if not isinstance(state, ChainState):
            raise TypeError("restore() expects a ChainState.")
        self._state = state

    def session_stats(self) -> SessionStats:
        state = self._require_session("compute session stats")
        return self._evaluate(state, self._clock.now_utc())

    # ── Lifecycle ─────────────────────────────────────────────

    def begin_session(self, revoke_last_online: bool = False) -> OfflineDocumentRecord:
        """
        Open the offline session and record its SESSION_BEGIN marker.

        The duration policy is not consulted: no time has elapsed yet.
        """
        state = self._state
        if state.phase is not ChainPhase.NO_SESSION:
            raise SessionAlreadyStartedError(state.phase.value)

        now = self._clock.now_utc()
        session = OfflineSession(
            session_id=self._session_id,
            seed=self._seed,
            start_time=now,
        )
        session, local_num = allocate_local_number(session)
        meta = self._new_meta()
        base_xml = self._assembler.offline_begin(meta, revoke_last_online=revoke_last_online)

        record = self._link(
            session=session,
            kind=DocumentKind.SESSION_BEGIN,
            base_xml=base_xml,
            local_num=local_num,
            date=meta.date,
            time=meta.time,
            prev_doc_hash=None,
            total_amount=None,
            created_at=now,
            uid=meta.uid,
        )

        self._state = ChainState(
            phase=ChainPhase.SESSION_OPEN,
            session=session,
            records=(record,),
            last_financial_hash=None,
            first_financial_pending=True,
        )
        self._used_session_ids.add(session.session_id)
        logger.info(
            f"Offline session {session.session_id} opened "
            f"(fiscal {record.fiscal_num}, revoke_last_online={revoke_last_online})."
        )
        return record

    def record_document(
        self,
        kind: Union[DocumentKind, str],
        base_xml: str,
        total_amount: Optional[Amount] = None,
    ) -> OfflineDocumentRecord:
        """
        Chain one financial document (SALE, REFUND, Z_REPORT).

        Returns the appended record; its xml is the spliced document
        to transmit and its doc_hash is the new chain head.

        Raises:
            NoActiveSessionError:      no open session.
            SessionLimitExceededError: duration policy denies recording.
            ValueError:                non-financial kind or bad amount.
        """
        state = self._require_open("record document")
        kind = DocumentKind(kind)
        if not kind.is_financial:
            raise ValueError(
                f"record_document() accepts SALE, REFUND or Z_REPORT, got {kind.value}. "
                "Session markers are written by begin_session()/end_session()."
            )
        amount = to_amount(total_amount)

        now = self._clock.now_utc()
        stats = self._evaluate(state, now)
        for warning in warnings_for(stats, config=self._config):
            logger.warning(f"Offline session {stats.session_id}: {warning}")
        if not can_continue(stats):
            logger.warning(
                f"Offline session {stats.session_id} denied {kind.value}: "
                f"{stats.current_duration} min elapsed, "
                f"{stats.monthly_duration} min this month."
            )
            raise SessionLimitExceededError(stats)

        session, local_num = allocate_local_number(state.session)
        prev_doc_hash = None if state.first_financial_pending else state.last_financial_hash

        record = self._link(
            session=session,
            kind=kind,
            base_xml=base_xml,
            local_num=local_num,
            date=extract_element_value(base_xml, "ORDERDATE")
            or document_date(now, self._config.time_zone),
            time=extract_element_value(base_xml, "ORDERTIME")
            or document_time(now, self._config.time_zone),
            prev_doc_hash=prev_doc_hash,
            total_amount=amount,
            created_at=now,
            uid=extract_element_value(base_xml, "UID"),
        )

        self._state = replace(
            state,
            session=session,
            records=state.records + (record,),
            last_financial_hash=record.doc_hash,
            first_financial_pending=False,
        )
        logger.info(
            f"Offline {kind.value} recorded as {record.fiscal_num} "
            f"(hash {record.doc_hash[:12]})."
        )
        return record

    def end_session(self) -> OfflineDocumentRecord:
        """Record the SESSION_END marker and close the session."""
        state = self._require_open("end session")
        now = self._clock.now_utc()
        session, local_num = allocate_local_number(state.session)
        meta = self._new_meta()
        base_xml = self._assembler.offline_end(meta)

        record = self._link(
            session=session,
            kind=DocumentKind.SESSION_END,
            base_xml=base_xml,
            local_num=local_num,
            date=meta.date,
            time=meta.time,
            prev_doc_hash=state.last_financial_hash,
            total_amount=None,
            created_at=now,
            uid=meta.uid,
        )

        self._state = replace(
            state,
            phase=ChainPhase.SESSION_CLOSED,
            session=session,
            records=state.records + (record,),
        )
        logger.info(
            f"Offline session {session.session_id} closed after "
            f"{local_num} documents."
        )
        return record

    def clear(self) -> None:
        """
        Drop the collected log and restart hash chaining.

        Session identity, phase and local numbering are kept: numbers
        issued before the clear are never reused.
        """
        state = self._require_session("clear log")
        self._state = replace(
            state,
            records=(),
            last_financial_hash=None,
            first_financial_pending=True,
        )
        logger.info(
            f"Offline session {state.session.session_id}: cleared "
            f"{len(state.records)} documents from the log."
        )

    def reset(
        self,
        *,
        session_id: Union[str, int],
        seed: Optional[str] = None,
        prior_monthly_minutes: Optional[int] = None,
    ) -> None:
        """
        Return to NO_SESSION with a new server-issued session.

        Local numbering restarts at 1 per session, so a session id that
        already opened a session on this builder is refused.

        Raises:
            SessionIdReusedError: session_id was already used here.
        """
        session_id = str(session_id).strip()
        if session_id in self._used_session_ids:
            raise SessionIdReusedError(session_id, self._state.phase.value)
        if prior_monthly_minutes is not None and prior_monthly_minutes < 0:
            raise ValueError("prior_monthly_minutes must be >= 0.")
        self._session_id = session_id
        if seed is not None:
            self._seed = seed
        if prior_monthly_minutes is not None:
            self._prior_monthly_minutes = prior_monthly_minutes
        self._state = ChainState()

    # ── Internals ─────────────────────────────────────────────

    def _require_session(self, operation: str) -> ChainState:
        state = self._state
        if state.session is None:
            raise NoActiveSessionError(operation, state.phase.value)
        return state

    def _require_open(self, operation: str) -> ChainState:
        state = self._state
        if state.phase is not ChainPhase.SESSION_OPEN:
            raise NoActiveSessionError(operation, state.phase.value)
        return state

    def _evaluate(self, state: ChainState, now: datetime) -> SessionStats:
        return evaluate(
            state.session.start_time,
            self._prior_monthly_minutes,
            state.session.next_local_num - 1,
            now,
            session_id=state.session.session_id,
            config=self._config,
        )

    def _new_meta(self) -> DocumentMeta:
        return create_meta(
            clock=self._clock,
            id_provider=self._id_provider,
            config=self._config,
        )

    def _link(
        self,
        *,
        session: OfflineSession,
        kind: DocumentKind,
        base_xml: str,
        local_num: int,
        date: str,
        time: str,
        prev_doc_hash: Optional[str],
        total_amount: Optional[Decimal],
        created_at: datetime,
        uid: Optional[str],
    ) -> OfflineDocumentRecord:
        control_number = compute_control_number(
            ControlNumberInput(
                seed=session.seed,
                date=date,
                time=time,
                local_num=local_num,
                register_fiscal_num=self._register_fiscal_num,
                local_register_num=self._local_register_num,
                total_amount=total_amount,
                prev_doc_hash=prev_doc_hash,
            )
        )
        fiscal_num = encode_fiscal_number(session.session_id, local_num, control_number)
        xml = apply_offline_metadata(
            base_xml,
            fiscal_num=fiscal_num,
            prev_doc_hash=prev_doc_hash,
        )
        return OfflineDocumentRecord(
            kind=kind,
            xml=xml,
            offline_local_num=local_num,
            fiscal_num=fiscal_num,
            control_number=control_number,
            prev_doc_hash=prev_doc_hash,
            doc_hash=compute_document_hash(xml),
            created_at=created_at,
            total_amount=total_amount,
            uid=uid,
        )
