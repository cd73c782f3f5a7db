"""
Tests for prro.offline_store — durable, append-only offline chain log.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from prro.documents import Payment, PaymentMethod, ReceiptLine
from prro.offline import DocumentKind
from prro.offline_store.models import EntryStatus, OfflineDocumentEntry
from prro.offline_store.persistence import (
    StoreRejectionCode,
    load_session_records,
    mark_transmitted,
    persist_record,
)
from prro.time import FixedClock, use_clock

pytestmark = pytest.mark.django_db(transaction=True)

TRANSMITTED_AT = datetime(2025, 3, 11, 8, 30, 0, tzinfo=timezone.utc)


def _sale_xml(assembler, amount: str) -> str:
    value = Decimal(amount)
    line = ReceiptLine("3003", "Сік", "шт", 1, value, value)
    return assembler.receipt([line], Payment(PaymentMethod.CASH, value)).xml


@pytest.fixture
def session_log(builder, assembler):
    builder.begin_session()
    builder.record_document(DocumentKind.SALE, _sale_xml(assembler, "150.00"), Decimal("150.00"))
    builder.record_document(DocumentKind.SALE, _sale_xml(assembler, "75.50"), Decimal("75.50"))
    builder.end_session()
    return builder.get_documents()


def test_lawful_persist_record_import_path_exists_and_callable() -> None:
    assert callable(persist_record)


class TestPersistRecord:
    def test_full_session_round_trips(self, session_log):
        for record in session_log:
            result = persist_record(record, session_id="1234")
            assert result.accepted, result.rejection
            assert result.entry_id

        assert load_session_records("1234") == session_log
        assert OfflineDocumentEntry.objects.filter(session_id="1234").count() == 4

    def test_first_entry_must_be_number_one(self, session_log):
        result = persist_record(session_log[1], session_id="1234")
        assert not result.accepted
        assert result.rejection.code == StoreRejectionCode.LOCAL_NUM_OUT_OF_SEQUENCE
        assert OfflineDocumentEntry.objects.count() == 0

    def test_out_of_order_append_rejected(self, session_log):
        assert persist_record(session_log[0], session_id="1234").accepted
        result = persist_record(session_log[2], session_id="1234")
        assert not result.accepted
        assert result.rejection.code == StoreRejectionCode.LOCAL_NUM_OUT_OF_SEQUENCE
        assert result.rejection.offline_local_num == 3

    def test_repeated_append_rejected(self, session_log):
        assert persist_record(session_log[0], session_id="1234").accepted
        result = persist_record(session_log[0], session_id="1234")
        assert not result.accepted
        assert OfflineDocumentEntry.objects.count() == 1

    def test_tampered_document_rejected(self, session_log):
        tampered = replace(session_log[0], xml=session_log[0].xml.replace("<VER>1</VER>", "<VER>2</VER>"))
        result = persist_record(tampered, session_id="1234")
        assert result.rejection.code == StoreRejectionCode.DOC_HASH_MISMATCH

    def test_broken_link_rejected(self, session_log):
        persist_record(session_log[0], session_id="1234")
        persist_record(session_log[1], session_id="1234")
        result = persist_record(replace(session_log[2], prev_doc_hash="0" * 64), session_id="1234")
        assert result.rejection.code == StoreRejectionCode.PREV_HASH_MISMATCH
        assert OfflineDocumentEntry.objects.count() == 2

    def test_sessions_are_independent(self, session_log):
        assert persist_record(session_log[0], session_id="1234").accepted
        assert persist_record(session_log[0], session_id="5678").accepted


class TestMarkTransmitted:
    def test_marks_pending_up_to_number(self, session_log):
        for record in session_log:
            persist_record(record, session_id="1234")

        with use_clock(FixedClock(TRANSMITTED_AT)):
            assert mark_transmitted("1234", 3) == 3

        pending = load_session_records("1234", pending_only=True)
        assert [record.offline_local_num for record in pending] == [4]
        transmitted = OfflineDocumentEntry.objects.filter(status=EntryStatus.TRANSMITTED)
        assert transmitted.count() == 3
        assert all(entry.transmitted_at == TRANSMITTED_AT for entry in transmitted)

    def test_rejects_non_positive_bound(self):
        with pytest.raises(ValueError):
            mark_transmitted("1234", 0)

    def test_cleared_builder_continues_after_transmission(self, builder, assembler):
        builder.begin_session()
        builder.record_document(DocumentKind.SALE, _sale_xml(assembler, "1.00"), 1)
        for record in builder.get_documents():
            assert persist_record(record, session_id="1234").accepted

        mark_transmitted("1234", 2)
        builder.clear()
        record = builder.record_document(DocumentKind.SALE, _sale_xml(assembler, "2.00"), 2)

        assert record.prev_doc_hash is None
        assert persist_record(record, session_id="1234").accepted

    def test_cleared_builder_without_transmission_rejected(self, builder, assembler):
        builder.begin_session()
        builder.record_document(DocumentKind.SALE, _sale_xml(assembler, "1.00"), 1)
        for record in builder.get_documents():
            persist_record(record, session_id="1234")

        builder.clear()
        record = builder.record_document(DocumentKind.SALE, _sale_xml(assembler, "2.00"), 2)

        result = persist_record(record, session_id="1234")
        assert result.rejection.code == StoreRejectionCode.PREV_HASH_MISMATCH


class TestEntryImmutability:
    def test_update_forbidden(self, session_log):
        persist_record(session_log[0], session_id="1234")
        entry = OfflineDocumentEntry.objects.get()
        with pytest.raises(PermissionError):
            entry.save()

    def test_delete_forbidden(self, session_log):
        persist_record(session_log[0], session_id="1234")
        entry = OfflineDocumentEntry.objects.get()
        with pytest.raises(PermissionError):
            entry.delete()
