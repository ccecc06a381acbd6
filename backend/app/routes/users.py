"""Routes for the authenticated user's profile and settings."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..schemas.users import (
    MinecraftLinkRequest,
    PreferencesUpdateRequest,
    SuccessResponse,
    UserResponse,
    UserSettingsRequest,
)
from ..services.users import get_user_service
from .purchases import _get_current_user

logger = logging.getLogger("users")

router = APIRouter(prefix="/api/user", tags=["users"])


def _server_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


@router.get("", response_model=UserResponse)
def get_profile(
    *,
    current_user=Depends(_get_current_user),
) -> UserResponse:
    """Return the profile of the authenticated user."""

    return UserResponse.from_user(current_user)


@router.post("/settings", response_model=SuccessResponse)
def update_settings(
    payload: UserSettingsRequest,
    *,
    current_user=Depends(_get_current_user),
) -> SuccessResponse:
    service = get_user_service()
    try:
        service.update_settings(
            str(current_user.id),
            minecraft_username=payload.minecraft_username,
            email_notifications=payload.email_notifications,
            discord_notifications=payload.discord_notifications,
        )
    except Exception as exc:
        logger.exception("Error updating user settings user=%s", current_user.id)
        raise _server_error("Failed to update user settings") from exc
    return SuccessResponse(success=True)


@router.post("/minecraft", response_model=UserResponse)
def link_minecraft(
    payload: MinecraftLinkRequest,
    *,
    current_user=Depends(_get_current_user),
) -> UserResponse:
    """Link a Minecraft account name to the authenticated user."""

    service = get_user_service()
    try:
        user = service.link_minecraft(str(current_user.id), payload.username)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Error linking Minecraft account user=%s", current_user.id)
        raise _server_error("Failed to link Minecraft account") from exc
    return UserResponse.from_user(user)


@router.delete("/minecraft", response_model=UserResponse)
def unlink_minecraft(
    *,
    current_user=Depends(_get_current_user),
) -> UserResponse:
    service = get_user_service()
    try:
        user = service.unlink_minecraft(str(current_user.id))
    except Exception as exc:
        logger.exception("Error unlinking Minecraft account user=%s", current_user.id)
        raise _server_error("Failed to unlink Minecraft account") from exc
    return UserResponse.from_user(user)


@router.patch("/preferences", response_model=UserResponse)
def update_preferences(
    payload: PreferencesUpdateRequest,
    *,
    current_user=Depends(_get_current_user),
) -> UserResponse:
    service = get_user_service()
    try:
        user = service.update_preferences(
            str(current_user.id),
            email_notifications=payload.email_notifications,
            discord_notifications=payload.discord_notifications,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Error updating preferences user=%s", current_user.id)
        raise _server_error("Failed to update preferences") from exc
    return UserResponse.from_user(user)


__all__ = [
    "router",
    "get_profile",
    "link_minecraft",
    "unlink_minecraft",
    "update_preferences",
    "update_settings",
]
