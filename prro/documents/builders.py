"""
PRRO Documents — Base Document Builders
=========================================
Pure "assemble base document" functions shared by online and
offline modes. Offline chain fields are NOT added here; they are
applied afterwards by prro.offline.metadata.apply_offline_metadata.

Every head carries CASHREGISTERNUM, which is the offline splice anchor.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, NamedTuple, Optional, Sequence

from prro.documents.meta import DocumentMeta
from prro.documents.models import (
    PAYMENT_FORMS,
    DocSubtype,
    DocType,
    Payment,
    PaymentMethod,
    ReceiptLine,
    ShiftData,
    ZReportTotals,
)
from prro.documents.xml_builder import build_xml, format_amount


class AssembledDocument(NamedTuple):
    xml: str
    uid: str


def build_head(
    doc_type: DocType,
    shift: ShiftData,
    meta: DocumentMeta,
    *,
    doc_subtype: Optional[DocSubtype] = None,
    order_ret_num: Optional[str] = None,
    revoke_last_online: bool = False,
) -> dict[str, Any]:
    """Head fields in protocol order; None values are dropped on render."""
    return {
        "DOCTYPE": int(doc_type),
        "DOCSUBTYPE": int(doc_subtype) if doc_subtype is not None else None,
        "UID": meta.uid,
        "TIN": shift.tin,
        "IPN": shift.ipn or "",
        "ORGNM": shift.org_name,
        "POINTNM": shift.tax_objects_name,
        "POINTADDR": shift.address,
        "ORDERDATE": meta.date,
        "ORDERTIME": meta.time,
        "ORDERNUM": shift.order_num,
        "CASHDESKNUM": shift.num_local,
        "CASHREGISTERNUM": shift.num_fiscal,
        "ORDERRETNUM": order_ret_num,
        "CASHIER": shift.cashier,
        "VER": 1,
        "REVOKELASTONLINEDOC": "true" if revoke_last_online else None,
        "TESTING": 1 if meta.testing else None,
    }


def _check(shift: ShiftData, meta: DocumentMeta, doc_type: DocType, **head) -> AssembledDocument:
    xml = build_xml("CHECK", "CHECKHEAD", build_head(doc_type, shift, meta, **head))
    return AssembledDocument(xml, meta.uid)


def build_open_shift(shift: ShiftData, meta: DocumentMeta) -> AssembledDocument:
    return _check(shift, meta, DocType.OPEN_SHIFT)


def build_close_shift(shift: ShiftData, meta: DocumentMeta) -> AssembledDocument:
    return _check(shift, meta, DocType.CLOSE_SHIFT)


def build_offline_begin(
    shift: ShiftData,
    meta: DocumentMeta,
    *,
    revoke_last_online: bool = False,
) -> AssembledDocument:
    return _check(shift, meta, DocType.OFFLINE_BEGIN, revoke_last_online=revoke_last_online)


def build_offline_end(shift: ShiftData, meta: DocumentMeta) -> AssembledDocument:
    return _check(shift, meta, DocType.OFFLINE_END)


# ── Receipts ──────────────────────────────────────────────────

def _line_rows(lines: Sequence[ReceiptLine]) -> list[dict[str, Any]]:
    return [
        {
            "ROWNUM": index,
            "CODE": line.code,
            "NAME": line.name,
            "UNITNM": line.unit_name,
            "AMOUNT": line.amount,
            "PRICE": format_amount(line.price),
            "COST": format_amount(line.cost),
            "UKTZED": line.uktzed,
            "LETTERS": line.letters,
        }
        for index, line in enumerate(lines, start=1)
    ]


def _pay_row(payment: Payment, total: str, *, with_change: bool) -> dict[str, Any]:
    code, name = PAYMENT_FORMS[payment.method]
    row: dict[str, Any] = {
        "ROWNUM": 1,
        "PAYFORMCD": code,
        "PAYFORMNM": name,
        "SUM": total,
    }
    if with_change and payment.method == PaymentMethod.CASH and payment.provided is not None:
        row["PROVIDED"] = format_amount(payment.provided)
        row["REMAINS"] = format_amount(
            _decimal(payment.provided) - _decimal(payment.amount)
        )
    return row


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _receipt_total(lines: Sequence[ReceiptLine]) -> str:
    return format_amount(sum((_decimal(line.cost) for line in lines), _decimal(0)))


def build_receipt(
    shift: ShiftData,
    meta: DocumentMeta,
    lines: Sequence[ReceiptLine],
    payment: Payment,
) -> AssembledDocument:
    """Sale receipt. CHECKTOTAL is the sum of line costs."""
    if not lines:
        raise ValueError("A receipt needs at least one line.")
    total = _receipt_total(lines)
    xml = build_xml(
        "CHECK",
        "CHECKHEAD",
        build_head(DocType.RECEIPT, shift, meta),
        {
            "CHECKTOTAL": {"SUM": total},
            "CHECKPAY": [_pay_row(payment, format_amount(payment.amount), with_change=True)],
            "CHECKBODY": _line_rows(lines),
        },
    )
    return AssembledDocument(xml, meta.uid)


def build_refund(
    shift: ShiftData,
    meta: DocumentMeta,
    lines: Sequence[ReceiptLine],
    payment: Payment,
    original_fiscal_num: str,
) -> AssembledDocument:
    """Return receipt referencing the original sale's fiscal number."""
    if not lines:
        raise ValueError("A refund needs at least one line.")
    if not original_fiscal_num:
        raise ValueError("original_fiscal_num is required for a refund.")
    total = _receipt_total(lines)
    xml = build_xml(
        "CHECK",
        "CHECKHEAD",
        build_head(
            DocType.RECEIPT,
            shift,
            meta,
            doc_subtype=DocSubtype.RETURN,
            order_ret_num=original_fiscal_num,
        ),
        {
            "CHECKTOTAL": {"SUM": total},
            "CHECKPAY": [_pay_row(payment, total, with_change=False)],
            "CHECKBODY": _line_rows(lines),
        },
    )
    return AssembledDocument(xml, meta.uid)


# ── Z-report ──────────────────────────────────────────────────

def _pay_forms(totals: ZReportTotals) -> list[dict[str, Any]]:
    forms = []
    for rownum, (method, value) in enumerate(
        ((PaymentMethod.CASH, totals.cash_sum), (PaymentMethod.CARD, totals.card_sum)),
        start=1,
    ):
        if _decimal(value) > 0:
            code, name = PAYMENT_FORMS[method]
            forms.append({
                "ROWNUM": rownum,
                "PAYFORMCD": code,
                "PAYFORMNM": name,
                "SUM": format_amount(value),
            })
    return forms


def _z_section(totals: ZReportTotals) -> dict[str, Any]:
    return {
        "SUM": format_amount(totals.total_amount),
        "ORDERSCNT": totals.receipts_count,
        "PAYFORMS": _pay_forms(totals),
    }


def build_z_report(
    shift: ShiftData,
    meta: DocumentMeta,
    sales: ZReportTotals,
    refunds: Optional[ZReportTotals] = None,
) -> AssembledDocument:
    body: dict[str, Any] = {"ZREPREALIZ": _z_section(sales)}
    if refunds is not None and refunds.receipts_count > 0:
        body["ZREPRETURN"] = _z_section(refunds)
    xml = build_xml("ZREP", "ZREPHEAD", build_head(DocType.Z_REPORT, shift, meta), body)
    return AssembledDocument(xml, meta.uid)
