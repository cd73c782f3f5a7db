"""
PRRO Documents — Input Models
===============================
Pass-through data for base document assembly. Nothing here computes
taxes or aggregates payment forms; callers supply final figures.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import IntEnum
from typing import Optional, Union

Number = Union[Decimal, int, float]


class DocType(IntEnum):
    RECEIPT = 0
    OPEN_SHIFT = 100
    CLOSE_SHIFT = 101
    OFFLINE_BEGIN = 102
    OFFLINE_END = 103
    Z_REPORT = 104


class DocSubtype(IntEnum):
    SALE = 0
    RETURN = 1
    CANCEL = 5


class PaymentMethod:
    CASH = "CASH"
    CARD = "CARD"


PAYMENT_FORMS = {
    PaymentMethod.CASH: (0, "ГОТІВКА"),
    PaymentMethod.CARD: (1, "КАРТКА"),
}


@dataclass(frozen=True)
class ShiftData:
    """
    Seller, point of sale and register identity for a working shift.

    Fields:
        tin: taxpayer number of the seller
        org_name: seller name
        tax_objects_name: point-of-sale name
        address: point-of-sale address
        order_num: local document number
        num_local: local register number
        num_fiscal: server-assigned register fiscal number
        cashier: cashier full name
        ipn: VAT payer number, optional
    """

    tin: str
    org_name: str
    tax_objects_name: str
    address: str
    order_num: int
    num_local: str
    num_fiscal: str
    cashier: str
    ipn: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.order_num:
            raise ValueError("order_num is required.")
        if not str(self.num_fiscal):
            raise ValueError("num_fiscal is required.")


@dataclass(frozen=True)
class ReceiptLine:
    """One goods/service line of a receipt."""

    code: str
    name: str
    unit_name: str
    amount: Number
    price: Number
    cost: Number
    uktzed: Optional[str] = None
    letters: Optional[str] = None


@dataclass(frozen=True)
class Payment:
    method: str
    amount: Number
    provided: Optional[Number] = None

    def __post_init__(self) -> None:
        if self.method not in PAYMENT_FORMS:
            raise ValueError(
                f"payment method must be one of {sorted(PAYMENT_FORMS)}, "
                f"got {self.method!r}."
            )


@dataclass(frozen=True)
class ZReportTotals:
    """Final per-shift figures for one Z-report section."""

    total_amount: Number
    receipts_count: int
    cash_sum: Number = 0
    card_sum: Number = 0
