"""
Tests for prro.documents — base document assembly.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from prro.config import OfflineConfig
from prro.documents import (
    DocType,
    DocumentMeta,
    Payment,
    PaymentMethod,
    ReceiptLine,
    ZReportTotals,
    build_receipt,
    build_refund,
    build_xml,
    build_z_report,
    create_meta,
    extract_element_value,
    format_amount,
)
from prro.time import FixedClock


META = DocumentMeta(
    uid="uid-1",
    date="10032025",
    time="110000",
    testing=False,
    timestamp=datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc),
)

LINES = [
    ReceiptLine("1", "Хліб", "шт", 2, Decimal("20.00"), Decimal("40.00")),
    ReceiptLine("2", "Молоко & масло", "шт", 1, Decimal("35.5"), Decimal("35.5")),
]


class TestFormatAmount:
    @pytest.mark.parametrize(
        "value, expected",
        [(Decimal("75.5"), "75.50"), (150, "150.00"), (0.125, "0.13"), ("1.005", "1.01")],
    )
    def test_two_decimals_half_up(self, value, expected):
        assert format_amount(value) == expected


class TestBuildXml:
    def test_layout(self):
        xml = build_xml("CHECK", "CHECKHEAD", {"A": 1, "B": None, "C": True})
        assert xml.startswith('<?xml version="1.0" encoding="windows-1251"?><CHECK ')
        assert "<CHECKHEAD><A>1</A><C>true</C></CHECKHEAD></CHECK>" in xml

    def test_rows(self):
        xml = build_xml("CHECK", "CHECKHEAD", {}, {"BODY": [{"ROWNUM": 1, "X": "a"}]})
        assert '<BODY><ROW ROWNUM="1"><X>a</X></ROW></BODY>' in xml

    def test_escaping_round_trip(self):
        xml = build_xml("CHECK", "CHECKHEAD", {"NAME": "A & <B>"})
        assert "A &amp; &lt;B&gt;" in xml
        assert extract_element_value(xml, "NAME") == "A & <B>"

    def test_extract_missing(self):
        assert extract_element_value("<A>1</A>", "B") is None


class TestReceipt:
    def test_sale_receipt(self, shift):
        doc = build_receipt(shift, META, LINES, Payment(PaymentMethod.CASH, Decimal("75.50"), Decimal("100")))
        assert doc.uid == "uid-1"
        assert "<DOCTYPE>0</DOCTYPE>" in doc.xml
        assert "<CASHREGISTERNUM>4000012345</CASHREGISTERNUM>" in doc.xml
        assert "<CHECKTOTAL><SUM>75.50</SUM></CHECKTOTAL>" in doc.xml
        assert "<PROVIDED>100.00</PROVIDED><REMAINS>24.50</REMAINS>" in doc.xml
        assert "<PAYFORMNM>ГОТІВКА</PAYFORMNM>" in doc.xml
        assert "Молоко &amp; масло" in doc.xml
        assert "<TESTING>" not in doc.xml

    def test_head_field_order(self, shift):
        xml = build_receipt(shift, META, LINES, Payment(PaymentMethod.CARD, Decimal("75.50"))).xml
        order = ["<DOCTYPE>", "<UID>", "<TIN>", "<ORDERDATE>", "<ORDERNUM>", "<CASHREGISTERNUM>", "<CASHIER>"]
        positions = [xml.index(tag) for tag in order]
        assert positions == sorted(positions)

    def test_empty_receipt_rejected(self, shift):
        with pytest.raises(ValueError):
            build_receipt(shift, META, [], Payment(PaymentMethod.CASH, 0))

    def test_unknown_payment_method(self):
        with pytest.raises(ValueError):
            Payment("BARTER", 1)


class TestRefund:
    def test_refund_references_original(self, shift):
        doc = build_refund(shift, META, LINES[:1], Payment(PaymentMethod.CARD, 40), "1234.2.77")
        assert "<DOCSUBTYPE>1</DOCSUBTYPE>" in doc.xml
        assert "<ORDERRETNUM>1234.2.77</ORDERRETNUM>" in doc.xml
        assert "<CHECKTOTAL><SUM>40.00</SUM></CHECKTOTAL>" in doc.xml

    def test_refund_requires_original(self, shift):
        with pytest.raises(ValueError):
            build_refund(shift, META, LINES, Payment(PaymentMethod.CARD, 1), "")


class TestZReport:
    def test_z_report_sections(self, shift):
        doc = build_z_report(
            shift,
            META,
            ZReportTotals(Decimal("225.50"), 2, cash_sum=Decimal("150"), card_sum=Decimal("75.5")),
            ZReportTotals(Decimal("5"), 1, cash_sum=Decimal("5")),
        )
        assert "<ZREPHEAD>" in doc.xml
        assert f"<DOCTYPE>{int(DocType.Z_REPORT)}</DOCTYPE>" in doc.xml
        assert "<CASHREGISTERNUM>" in doc.xml
        assert "<ZREPREALIZ><SUM>225.50</SUM><ORDERSCNT>2</ORDERSCNT>" in doc.xml
        assert "<ZREPRETURN><SUM>5.00</SUM>" in doc.xml

    def test_no_refund_section_without_refunds(self, shift):
        doc = build_z_report(shift, META, ZReportTotals(Decimal("1"), 1, cash_sum=1))
        assert "ZREPRETURN" not in doc.xml


class TestCreateMeta:
    def test_stamped_from_clock(self, id_provider):
        clock = FixedClock(datetime(2025, 7, 1, 21, 15, 0, tzinfo=timezone.utc))
        meta = create_meta(clock=clock, id_provider=id_provider, config=OfflineConfig(testing=True))
        assert meta.uid == "doc-0001"
        assert meta.date == "02072025"
        assert meta.time == "001500"
        assert meta.testing is True

    def test_testing_flag_in_head(self, shift, id_provider):
        clock = FixedClock(datetime(2025, 7, 1, tzinfo=timezone.utc))
        meta = create_meta(clock=clock, id_provider=id_provider, config=OfflineConfig(testing=True))
        xml = build_receipt(shift, meta, LINES, Payment(PaymentMethod.CARD, 1)).xml
        assert "<TESTING>1</TESTING>" in xml
