"""PostgreSQL persistence for storefront users."""
from __future__ import annotations

from typing import Any, Dict, Optional

from psycopg2 import sql

from ..db import PostgresRepository
from .models import LoginIdentity, User

_UPDATABLE_COLUMNS = frozenset(
    {"minecraft_username", "email_notifications", "discord_notifications"}
)


def _row_to_user(row: dict) -> User:
    return User(
        id=str(row["id"]),
        discord_id=row["discord_id"],
        username=row["username"],
        email=row.get("email"),
        avatar=row.get("avatar"),
        minecraft_username=row.get("minecraft_username"),
        email_notifications=bool(row.get("email_notifications", True)),
        discord_notifications=bool(row.get("discord_notifications", True)),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresUserRepository(PostgresRepository):
    """User repository backed by the ``users`` table."""

    def upsert_from_identity(self, identity: LoginIdentity) -> User:
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO users (discord_id, username, email, avatar)
                VALUES (%(discord_id)s, %(username)s, %(email)s, %(avatar)s)
                ON CONFLICT (discord_id) DO UPDATE SET
                    username = EXCLUDED.username,
                    email = EXCLUDED.email,
                    avatar = EXCLUDED.avatar,
                    updated_at = NOW()
                RETURNING *
                """,
                identity.model_dump(),
            )
            row = cursor.fetchone()
            if not row:
                raise RuntimeError("Failed to persist user")
            return _row_to_user(row)

    def get_user(self, user_id: str) -> Optional[User]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM users WHERE id = %s LIMIT 1", (user_id,))
            row = cursor.fetchone()
            return _row_to_user(row) if row else None

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported user fields: {sorted(unknown)}")
        if not changes:
            return self.get_user(user_id)

        columns = sorted(changes)
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in columns
        )
        query = sql.SQL(
            "UPDATE users SET {assignments}, updated_at = NOW() WHERE id = %s RETURNING *"
        ).format(assignments=assignments)

        with self._cursor() as cursor:
            cursor.execute(query, [changes[column] for column in columns] + [user_id])
            row = cursor.fetchone()
            return _row_to_user(row) if row else None


__all__ = ["PostgresUserRepository"]
