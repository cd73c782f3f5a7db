"""
PRRO Documents — Public API
=============================
Base document assembly (field map → tagged XML).
Offline chain metadata is applied separately by prro.offline.
"""

from prro.documents.assembler import ShiftDocumentAssembler
from prro.documents.builders import (
    AssembledDocument,
    build_close_shift,
    build_head,
    build_offline_begin,
    build_offline_end,
    build_open_shift,
    build_receipt,
    build_refund,
    build_z_report,
)
from prro.documents.meta import DocumentMeta, IdProvider, Uuid4Provider, create_meta
from prro.documents.models import (
    DocSubtype,
    DocType,
    Payment,
    PaymentMethod,
    ReceiptLine,
    ShiftData,
    ZReportTotals,
)
from prro.documents.xml_builder import build_xml, extract_element_value, format_amount

__all__ = [
    "ShiftDocumentAssembler",
    "AssembledDocument",
    "build_head",
    "build_open_shift",
    "build_close_shift",
    "build_offline_begin",
    "build_offline_end",
    "build_receipt",
    "build_refund",
    "build_z_report",
    "DocumentMeta",
    "IdProvider",
    "Uuid4Provider",
    "create_meta",
    "DocType",
    "DocSubtype",
    "Payment",
    "PaymentMethod",
    "ReceiptLine",
    "ShiftData",
    "ZReportTotals",
    "build_xml",
    "extract_element_value",
    "format_amount",
]
