"""Application wiring for the user service."""
from __future__ import annotations

from functools import lru_cache

from ..users import UserService
from ..users.repository import PostgresUserRepository


@lru_cache(maxsize=1)
def get_user_service() -> UserService:
    return UserService(PostgresUserRepository())


__all__ = ["get_user_service"]
