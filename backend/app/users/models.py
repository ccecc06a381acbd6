"""Domain models for storefront users."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginIdentity(BaseModel):
    """Profile returned by the identity provider after a successful login."""

    discord_id: str
    username: str
    email: Optional[str] = None
    avatar: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class User(BaseModel):
    """A storefront account linked to an identity provider profile."""

    id: str
    discord_id: str
    username: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    minecraft_username: Optional[str] = None
    email_notifications: bool = True
    discord_notifications: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def avatar_url(self) -> Optional[str]:
        if not self.avatar:
            return None
        return f"https://cdn.discordapp.com/avatars/{self.discord_id}/{self.avatar}.png"
