"""PostgreSQL persistence for granted rank entitlements."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from ..db import PostgresRepository
from .models import Entitlement

_ACTIVE_CLAUSE = "(expires_at IS NULL OR expires_at > NOW())"


def _row_to_entitlement(row: dict) -> Entitlement:
    return Entitlement(
        id=row.get("id"),
        user_id=str(row["user_id"]),
        rank_name=row["name"],
        description=row.get("description") or "",
        features=tuple(row.get("features") or ()),
        expires_at=row.get("expires_at"),
        granted_at=row["granted_at"],
    )


class PostgresEntitlementStore(PostgresRepository):
    """Entitlement store backed by the ``user_ranks`` table."""

    _UPSERT = """
        INSERT INTO user_ranks (user_id, name, description, features, expires_at)
        VALUES (%(user_id)s, %(name)s, %(description)s, %(features)s, %(expires_at)s)
        ON CONFLICT (user_id, name) DO UPDATE SET
            description = EXCLUDED.description,
            features = EXCLUDED.features,
            expires_at = EXCLUDED.expires_at,
            updated_at = NOW()
        RETURNING *
    """

    def grant(
        self,
        user_id: str,
        rank_name: str,
        features: Iterable[str],
        expires_at: Optional[datetime] = None,
        *,
        description: str = "",
    ) -> Entitlement:
        with self._cursor() as cursor:
            cursor.execute(
                self._UPSERT,
                {
                    "user_id": user_id,
                    "name": rank_name,
                    "description": description,
                    "features": list(features),
                    "expires_at": expires_at,
                },
            )
            row = cursor.fetchone()
            if not row:
                raise RuntimeError("Failed to persist entitlement")
            return _row_to_entitlement(row)

    def revoke(self, user_id: str, rank_name: str) -> None:
        with self._cursor() as cursor:
            cursor.execute(
                "DELETE FROM user_ranks WHERE user_id = %s AND name = %s",
                (user_id, rank_name),
            )

    def list_active(self, user_id: str) -> List[Entitlement]:
        with self._cursor() as cursor:
            cursor.execute(
                f"""
                SELECT *
                FROM user_ranks
                WHERE user_id = %s AND {_ACTIVE_CLAUSE}
                ORDER BY granted_at ASC, name ASC
                """,
                (user_id,),
            )
            rows = cursor.fetchall() or []
            return [_row_to_entitlement(row) for row in rows]

    def holds(self, user_id: str, rank_name: str) -> bool:
        with self._cursor() as cursor:
            cursor.execute(
                f"""
                SELECT 1 AS held
                FROM user_ranks
                WHERE user_id = %s AND name = %s AND {_ACTIVE_CLAUSE}
                LIMIT 1
                """,
                (user_id, rank_name),
            )
            return cursor.fetchone() is not None

    def replace(self, user_id: str, from_rank: str, entitlement: Entitlement) -> bool:
        # Delete and insert share one transaction; the DELETE row lock makes a
        # concurrent replace of the same rank wait and then match nothing.
        with self._cursor() as cursor:
            cursor.execute(
                f"""
                DELETE FROM user_ranks
                WHERE user_id = %s AND name = %s AND {_ACTIVE_CLAUSE}
                RETURNING id
                """,
                (user_id, from_rank),
            )
            if cursor.fetchone() is None:
                return False
            cursor.execute(
                self._UPSERT,
                {
                    "user_id": user_id,
                    "name": entitlement.rank_name,
                    "description": entitlement.description,
                    "features": list(entitlement.features),
                    "expires_at": entitlement.expires_at,
                },
            )
            if not cursor.fetchone():
                raise RuntimeError("Failed to persist upgraded entitlement")
            return True


__all__ = ["PostgresEntitlementStore"]
