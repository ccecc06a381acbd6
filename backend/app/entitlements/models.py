"""Domain models for granted rank entitlements."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Entitlement(BaseModel):
    """A rank currently granted to a user, independent of how it was obtained."""

    id: Optional[int] = None
    user_id: str
    rank_name: str = Field(alias="name")
    description: str = ""
    features: Tuple[str, ...] = Field(default_factory=tuple)
    expires_at: Optional[datetime] = None
    granted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("rank_name")
    @classmethod
    def _validate_rank_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("rank_name must not be empty")
        return value

    def is_active(self, now: datetime) -> bool:
        """Return ``True`` unless the entitlement has an expiry in the past."""

        return self.expires_at is None or self.expires_at > now
