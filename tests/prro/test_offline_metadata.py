"""
Tests for prro.offline.metadata — chain field splice and document hash.
"""

import hashlib

import pytest

from prro.offline import (
    SpliceAnchorMissingError,
    apply_offline_metadata,
    compute_document_hash,
    verify_document_hash,
)


BASE = (
    "<CHECK><CHECKHEAD><ORDERNUM>1</ORDERNUM>"
    "<CASHREGISTERNUM>4000012345</CASHREGISTERNUM>"
    "<CASHIER>Іваненко</CASHIER></CHECKHEAD></CHECK>"
)


class TestSplice:
    def test_inserted_before_register_number(self):
        xml = apply_offline_metadata(BASE, fiscal_num="1234.2.55")
        assert (
            "<ORDERNUM>1</ORDERNUM>"
            "<ORDERTAXNUM>1234.2.55</ORDERTAXNUM><OFFLINE>true</OFFLINE>"
            "<CASHREGISTERNUM>4000012345</CASHREGISTERNUM>"
        ) in xml

    def test_prev_hash_included_when_given(self):
        prev = "ab" * 32
        xml = apply_offline_metadata(BASE, fiscal_num="1234.3.9", prev_doc_hash=prev)
        assert (
            f"<OFFLINE>true</OFFLINE><PREVDOCHASH>{prev}</PREVDOCHASH>"
            "<CASHREGISTERNUM>"
        ) in xml

    def test_prev_hash_absent_when_none(self):
        xml = apply_offline_metadata(BASE, fiscal_num="1234.2.55")
        assert "PREVDOCHASH" not in xml

    def test_rest_of_document_untouched(self):
        fields = "<ORDERTAXNUM>1234.2.55</ORDERTAXNUM><OFFLINE>true</OFFLINE>"
        xml = apply_offline_metadata(BASE, fiscal_num="1234.2.55")
        assert xml.replace(fields, "") == BASE

    def test_only_first_anchor_used(self):
        base = BASE.replace("</CHECK>", "<CASHREGISTERNUM>x</CASHREGISTERNUM></CHECK>")
        xml = apply_offline_metadata(base, fiscal_num="1.1.1")
        assert xml.count("<ORDERTAXNUM>") == 1
        assert xml.index("<ORDERTAXNUM>") < xml.index("<CASHREGISTERNUM>")

    def test_falls_back_to_z_report_head_end(self):
        base = "<ZREP><ZREPHEAD><ORDERNUM>3</ORDERNUM></ZREPHEAD></ZREP>"
        xml = apply_offline_metadata(base, fiscal_num="1234.9.77")
        assert xml.endswith(
            "<ORDERTAXNUM>1234.9.77</ORDERTAXNUM><OFFLINE>true</OFFLINE></ZREPHEAD></ZREP>"
        )

    def test_no_anchor_rejected(self):
        with pytest.raises(SpliceAnchorMissingError):
            apply_offline_metadata("<DOC><A>1</A></DOC>", fiscal_num="1.1.1")


class TestDocumentHash:
    def test_sha256_of_utf8(self):
        assert compute_document_hash(BASE) == hashlib.sha256(BASE.encode("utf-8")).hexdigest()

    def test_lowercase_hex(self):
        digest = compute_document_hash(BASE)
        assert len(digest) == 64
        assert digest == digest.lower()

    def test_single_byte_change_alters_hash(self):
        assert compute_document_hash(BASE) != compute_document_hash(BASE.replace("1", "2", 1))

    def test_verify(self):
        digest = compute_document_hash(BASE)
        assert verify_document_hash(BASE, digest)
        assert verify_document_hash(BASE, digest.upper())
        assert not verify_document_hash(BASE + " ", digest)
        assert not verify_document_hash(BASE, "short")
