"""Service layer for user accounts and their storefront settings."""
from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from .models import LoginIdentity, User


class UserRepository(Protocol):
    """Persistence operations required by the user service."""

    def upsert_from_identity(self, identity: LoginIdentity) -> User:
        ...

    def get_user(self, user_id: str) -> Optional[User]:
        ...

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        ...


class UserService:
    """Creates accounts on first login and applies settings updates."""

    def __init__(self, repository: UserRepository) -> None:
        self._repository = repository

    def register_login(self, identity: LoginIdentity) -> User:
        """Create the user on first login, refreshing the profile afterwards."""

        return self._repository.upsert_from_identity(identity)

    def get_user(self, user_id: str) -> Optional[User]:
        return self._repository.get_user(user_id)

    def update_settings(
        self,
        user_id: str,
        *,
        minecraft_username: Optional[str],
        email_notifications: bool,
        discord_notifications: bool,
    ) -> User:
        username = minecraft_username.strip() if minecraft_username else None
        return self._update(
            user_id,
            {
                "minecraft_username": username or None,
                "email_notifications": email_notifications,
                "discord_notifications": discord_notifications,
            },
        )

    def link_minecraft(self, user_id: str, username: str) -> User:
        cleaned = (username or "").strip()
        if not cleaned:
            raise ValueError("Username is required")
        return self._update(user_id, {"minecraft_username": cleaned})

    def unlink_minecraft(self, user_id: str) -> User:
        return self._update(user_id, {"minecraft_username": None})

    def update_preferences(
        self,
        user_id: str,
        *,
        email_notifications: Optional[bool] = None,
        discord_notifications: Optional[bool] = None,
    ) -> User:
        changes: Dict[str, Any] = {}
        if email_notifications is not None:
            changes["email_notifications"] = email_notifications
        if discord_notifications is not None:
            changes["discord_notifications"] = discord_notifications
        if not changes:
            raise ValueError("No valid preferences provided")
        return self._update(user_id, changes)

    def _update(self, user_id: str, changes: Dict[str, Any]) -> User:
        updated = self._repository.update_user(user_id, changes)
        if updated is None:
            raise LookupError(f"User {user_id} not found")
        return updated


__all__ = ["UserRepository", "UserService"]
