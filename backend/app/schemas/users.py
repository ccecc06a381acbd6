"""API schemas for user profile and settings endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..users import User


class UserResponse(BaseModel):
    id: str
    discord_id: str = Field(alias="discordId")
    username: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    avatar_url: Optional[str] = Field(alias="avatarUrl", default=None)
    minecraft_username: Optional[str] = Field(alias="minecraftUsername", default=None)
    email_notifications: bool = Field(alias="emailNotifications")
    discord_notifications: bool = Field(alias="discordNotifications")
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            discord_id=user.discord_id,
            username=user.username,
            email=user.email,
            avatar=user.avatar,
            avatar_url=user.avatar_url,
            minecraft_username=user.minecraft_username,
            email_notifications=user.email_notifications,
            discord_notifications=user.discord_notifications,
            created_at=user.created_at,
        )


class UserSettingsRequest(BaseModel):
    minecraft_username: Optional[str] = Field(alias="minecraftUsername", default=None, max_length=16)
    email_notifications: bool = Field(alias="emailNotifications", default=True)
    discord_notifications: bool = Field(alias="discordNotifications", default=True)

    model_config = ConfigDict(populate_by_name=True)


class MinecraftLinkRequest(BaseModel):
    username: str = Field(default="", max_length=16)


class PreferencesUpdateRequest(BaseModel):
    email_notifications: Optional[bool] = Field(alias="emailNotifications", default=None)
    discord_notifications: Optional[bool] = Field(alias="discordNotifications", default=None)

    model_config = ConfigDict(populate_by_name=True)


class SuccessResponse(BaseModel):
    success: bool = True
