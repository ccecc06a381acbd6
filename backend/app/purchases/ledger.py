"""Purchase ledger abstractions and the in-memory implementation."""
from __future__ import annotations

import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Protocol
from uuid import uuid4

from .exceptions import InvalidStatusTransition
from .models import PurchaseRecord, PurchaseStatus, PurchaseType


class PurchaseLedger(Protocol):
    """Append-only record of purchase attempts."""

    def record(
        self,
        user_id: str,
        rank_name: str,
        price: Decimal,
        *,
        purchase_type: PurchaseType = PurchaseType.RANK,
    ) -> PurchaseRecord:
        ...

    def mark_status(self, record_id: str, status: PurchaseStatus) -> PurchaseRecord:
        ...

    def list_for_user(self, user_id: str) -> List[PurchaseRecord]:
        ...


def new_purchase_id() -> str:
    return f"pur_{uuid4().hex}"


def check_transition(record: PurchaseRecord, status: PurchaseStatus) -> None:
    """Reject transitions other than ``pending`` to a terminal status."""

    if record.status.is_terminal:
        raise InvalidStatusTransition(
            f"Purchase {record.id} is already {record.status.value}"
        )
    if not status.is_terminal:
        raise InvalidStatusTransition(f"Purchase {record.id} cannot move back to pending")


class InMemoryPurchaseLedger:
    """Ledger kept in process memory for tests and local development."""

    def __init__(self, *, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._records: Dict[str, PurchaseRecord] = {}
        self._sequence: Dict[str, int] = {}
        self._lock = threading.Lock()

    def record(
        self,
        user_id: str,
        rank_name: str,
        price: Decimal,
        *,
        purchase_type: PurchaseType = PurchaseType.RANK,
    ) -> PurchaseRecord:
        now = self._clock()
        record = PurchaseRecord(
            id=new_purchase_id(),
            user_id=user_id,
            rank_name=rank_name,
            price=price,
            status=PurchaseStatus.PENDING,
            purchase_type=purchase_type,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._sequence[record.id] = len(self._sequence)
            self._records[record.id] = record
        return record

    def mark_status(self, record_id: str, status: PurchaseStatus) -> PurchaseRecord:
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                raise LookupError(f"Unknown purchase {record_id}")
            check_transition(record, status)
            updated = record.model_copy(update={"status": status, "updated_at": self._clock()})
            self._records[record_id] = updated
        return updated

    def list_for_user(self, user_id: str) -> List[PurchaseRecord]:
        with self._lock:
            matching = [record for record in self._records.values() if record.user_id == user_id]
            return sorted(
                matching,
                key=lambda record: (record.created_at, self._sequence[record.id]),
                reverse=True,
            )

    def get(self, record_id: str) -> Optional[PurchaseRecord]:
        with self._lock:
            return self._records.get(record_id)


__all__ = ["InMemoryPurchaseLedger", "PurchaseLedger", "check_transition", "new_purchase_id"]
