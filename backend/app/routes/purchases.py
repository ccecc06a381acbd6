"""API routes exposing rank purchases, upgrades, and purchase history."""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, Callable, List, Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, status

from ..catalog import DEFAULT_CATALOG
from ..purchases import PurchaseError
from ..schemas.purchases import (
    CatalogResponse,
    EntitlementResponse,
    PurchaseRankRequest,
    PurchaseRecordResponse,
    PurchaseResponse,
    PurchaseUpgradeRequest,
)
from ..services.purchases import get_purchase_service

logger = logging.getLogger("purchases")


def _resolve_get_current_user() -> Callable[..., Any]:  # pragma: no cover
    try:
        from backend.main import get_current_user as resolved
    except ModuleNotFoundError as exc:
        if exc.name != "backend":
            raise
        from ...main import get_current_user as resolved  # type: ignore[no-redef]
    return resolved


@lru_cache(maxsize=1)
def _get_current_user_callable() -> Callable[..., Any]:
    return _resolve_get_current_user()


_SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session")


def _get_current_user(
    session_token: Optional[str] = Cookie(None, alias=_SESSION_COOKIE_NAME),
):
    resolved = _get_current_user_callable()
    return resolved(session_token=session_token)


router = APIRouter(prefix="/api", tags=["purchases"])


@router.get("/catalog", response_model=CatalogResponse)
def get_catalog() -> CatalogResponse:
    """Return every purchasable rank and upgrade edge."""

    return CatalogResponse.from_catalog(DEFAULT_CATALOG)


@router.post("/purchase/rank", response_model=PurchaseResponse)
def purchase_rank(
    payload: PurchaseRankRequest,
    *,
    current_user=Depends(_get_current_user),
) -> PurchaseResponse:
    service = get_purchase_service()
    try:
        service.purchase_rank(str(current_user.id), payload.rank_id, payload.price)
    except PurchaseError as exc:
        raise exc.to_http_exception() from exc
    return PurchaseResponse(success=True)


@router.post("/purchase/upgrade", response_model=PurchaseResponse)
def purchase_upgrade(
    payload: PurchaseUpgradeRequest,
    *,
    current_user=Depends(_get_current_user),
) -> PurchaseResponse:
    service = get_purchase_service()
    try:
        service.purchase_upgrade(str(current_user.id), payload.upgrade_id, payload.price)
    except PurchaseError as exc:
        raise exc.to_http_exception() from exc
    return PurchaseResponse(success=True)


@router.get("/user/ranks", response_model=List[EntitlementResponse])
def list_user_ranks(
    *,
    current_user=Depends(_get_current_user),
) -> List[EntitlementResponse]:
    service = get_purchase_service()
    try:
        entitlements = service.list_entitlements(str(current_user.id))
    except Exception as exc:
        logger.exception("Error fetching user ranks user=%s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch user ranks",
        ) from exc
    return [EntitlementResponse.from_entitlement(item) for item in entitlements]


@router.get("/purchases", response_model=List[PurchaseRecordResponse])
def list_purchases(
    *,
    current_user=Depends(_get_current_user),
) -> List[PurchaseRecordResponse]:
    service = get_purchase_service()
    try:
        records = service.purchase_history(str(current_user.id))
    except Exception as exc:
        logger.exception("Error fetching purchases user=%s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch purchases",
        ) from exc
    return [PurchaseRecordResponse.from_record(record) for record in records]


__all__ = [
    "router",
    "get_catalog",
    "list_purchases",
    "list_user_ranks",
    "purchase_rank",
    "purchase_upgrade",
]
