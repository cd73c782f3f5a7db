"""
PRRO Documents — Shift Document Assembler
===========================================
Binds shift identity, clock, id source and config to the pure
builders. One instance serves a whole shift, online or offline.
"""

from __future__ import annotations

from typing import Optional, Sequence

from prro.config.offline import DEFAULT_OFFLINE_CONFIG, OfflineConfig
from prro.documents.builders import (
    AssembledDocument,
    build_close_shift,
    build_offline_begin,
    build_offline_end,
    build_open_shift,
    build_receipt,
    build_refund,
    build_z_report,
)
from prro.documents.meta import DocumentMeta, IdProvider, create_meta
from prro.documents.models import Payment, ReceiptLine, ShiftData, ZReportTotals
from prro.time.clock import Clock


class ShiftDocumentAssembler:
    """Assembles base documents for one shift."""

    def __init__(
        self,
        shift: ShiftData,
        *,
        clock: Optional[Clock] = None,
        id_provider: Optional[IdProvider] = None,
        config: OfflineConfig = DEFAULT_OFFLINE_CONFIG,
    ) -> None:
        self._shift = shift
        self._clock = clock
        self._id_provider = id_provider
        self._config = config

    @property
    def shift(self) -> ShiftData:
        return self._shift

    def new_meta(self) -> DocumentMeta:
        return create_meta(
            clock=self._clock,
            id_provider=self._id_provider,
            config=self._config,
        )

    # ── Offline chain collaborator ────────────────────────────

    def offline_begin(self, meta: DocumentMeta, *, revoke_last_online: bool = False) -> str:
        return build_offline_begin(
            self._shift, meta, revoke_last_online=revoke_last_online
        ).xml

    def offline_end(self, meta: DocumentMeta) -> str:
        return build_offline_end(self._shift, meta).xml

    # ── Shift documents ───────────────────────────────────────

    def open_shift(self) -> AssembledDocument:
        return build_open_shift(self._shift, self.new_meta())

    def close_shift(self) -> AssembledDocument:
        return build_close_shift(self._shift, self.new_meta())

    def receipt(self, lines: Sequence[ReceiptLine], payment: Payment) -> AssembledDocument:
        return build_receipt(self._shift, self.new_meta(), lines, payment)

    def refund(
        self,
        lines: Sequence[ReceiptLine],
        payment: Payment,
        original_fiscal_num: str,
    ) -> AssembledDocument:
        return build_refund(
            self._shift, self.new_meta(), lines, payment, original_fiscal_num
        )

    def z_report(
        self,
        sales: ZReportTotals,
        refunds: Optional[ZReportTotals] = None,
    ) -> AssembledDocument:
        return build_z_report(self._shift, self.new_meta(), sales, refunds)
