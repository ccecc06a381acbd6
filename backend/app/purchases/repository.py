"""PostgreSQL persistence for the purchase ledger."""
from __future__ import annotations

from decimal import Decimal
from typing import List

from ..db import PostgresRepository
from .exceptions import InvalidStatusTransition
from .ledger import new_purchase_id
from .models import PurchaseRecord, PurchaseStatus, PurchaseType


def _row_to_purchase(row: dict) -> PurchaseRecord:
    return PurchaseRecord(
        id=row["id"],
        user_id=str(row["user_id"]),
        rank_name=row["rank_name"],
        price=Decimal(row["price"]),
        status=PurchaseStatus(row["status"]),
        purchase_type=PurchaseType(row.get("purchase_type") or PurchaseType.RANK.value),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresPurchaseLedger(PostgresRepository):
    """Ledger backed by the ``purchases`` table."""

    def record(
        self,
        user_id: str,
        rank_name: str,
        price: Decimal,
        *,
        purchase_type: PurchaseType = PurchaseType.RANK,
    ) -> PurchaseRecord:
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO purchases (id, user_id, rank_name, price, status, purchase_type)
                VALUES (%(id)s, %(user_id)s, %(rank_name)s, %(price)s, %(status)s, %(purchase_type)s)
                RETURNING *
                """,
                {
                    "id": new_purchase_id(),
                    "user_id": user_id,
                    "rank_name": rank_name,
                    "price": price,
                    "status": PurchaseStatus.PENDING.value,
                    "purchase_type": purchase_type.value,
                },
            )
            row = cursor.fetchone()
            if not row:
                raise RuntimeError("Failed to persist purchase")
            return _row_to_purchase(row)

    def mark_status(self, record_id: str, status: PurchaseStatus) -> PurchaseRecord:
        if not status.is_terminal:
            raise InvalidStatusTransition(f"Purchase {record_id} cannot move back to pending")

        with self._cursor() as cursor:
            cursor.execute(
                """
                UPDATE purchases
                SET status = %s, updated_at = NOW()
                WHERE id = %s AND status = %s
                RETURNING *
                """,
                (status.value, record_id, PurchaseStatus.PENDING.value),
            )
            row = cursor.fetchone()
            if row:
                return _row_to_purchase(row)

            cursor.execute("SELECT status FROM purchases WHERE id = %s", (record_id,))
            existing = cursor.fetchone()
            if existing is None:
                raise LookupError(f"Unknown purchase {record_id}")
            raise InvalidStatusTransition(f"Purchase {record_id} is already {existing['status']}")

    def list_for_user(self, user_id: str) -> List[PurchaseRecord]:
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT *
                FROM purchases
                WHERE user_id = %s
                ORDER BY created_at DESC, id DESC
                """,
                (user_id,),
            )
            rows = cursor.fetchall() or []
            return [_row_to_purchase(row) for row in rows]


__all__ = ["PostgresPurchaseLedger"]
