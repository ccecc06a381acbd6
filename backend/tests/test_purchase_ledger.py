from datetime import datetime, timezone
from decimal import Decimal

import pytest

from backend.app.purchases import (
    InMemoryPurchaseLedger,
    InvalidStatusTransition,
    PurchaseStatus,
    PurchaseType,
)


@pytest.fixture
def ledger():
    fixed = datetime(2024, 3, 1, tzinfo=timezone.utc)
    return InMemoryPurchaseLedger(clock=lambda: fixed)


def test_record_starts_pending(ledger):
    record = ledger.record("user-1", "citizen", Decimal("4.99"))

    assert record.id.startswith("pur_")
    assert record.status == PurchaseStatus.PENDING
    assert record.purchase_type == PurchaseType.RANK
    assert ledger.get(record.id) == record


def test_records_are_never_merged(ledger):
    first = ledger.record("user-1", "citizen", Decimal("4.99"))
    second = ledger.record("user-1", "citizen", Decimal("4.99"))

    assert first.id != second.id
    assert len(ledger.list_for_user("user-1")) == 2


def test_list_for_user_is_newest_first(ledger):
    first = ledger.record("user-1", "citizen", Decimal("4.99"))
    second = ledger.record("user-1", "merchant", Decimal("4.99"), purchase_type=PurchaseType.UPGRADE)
    ledger.record("user-2", "duke", Decimal("34.99"))

    assert [item.id for item in ledger.list_for_user("user-1")] == [second.id, first.id]


def test_mark_status_moves_pending_to_terminal(ledger):
    record = ledger.record("user-1", "citizen", Decimal("4.99"))

    completed = ledger.mark_status(record.id, PurchaseStatus.COMPLETED)

    assert completed.status == PurchaseStatus.COMPLETED
    assert ledger.get(record.id).status == PurchaseStatus.COMPLETED


@pytest.mark.parametrize("terminal", [PurchaseStatus.COMPLETED, PurchaseStatus.FAILED])
def test_terminal_records_are_final(ledger, terminal):
    record = ledger.record("user-1", "citizen", Decimal("4.99"))
    ledger.mark_status(record.id, terminal)

    with pytest.raises(InvalidStatusTransition):
        ledger.mark_status(record.id, PurchaseStatus.FAILED)


def test_cannot_mark_back_to_pending(ledger):
    record = ledger.record("user-1", "citizen", Decimal("4.99"))

    with pytest.raises(InvalidStatusTransition):
        ledger.mark_status(record.id, PurchaseStatus.PENDING)


def test_mark_status_unknown_record(ledger):
    with pytest.raises(LookupError):
        ledger.mark_status("pur_missing", PurchaseStatus.COMPLETED)
