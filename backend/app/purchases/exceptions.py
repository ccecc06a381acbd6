"""Errors raised while validating and applying purchases."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, status


@dataclass
class PurchaseError(Exception):
    """Base class for purchase failures surfaced to API callers."""

    message: str
    detail: Optional[Mapping[str, Any]] = None
    code: str = field(default="purchase_error", init=False)
    status_code: int = field(default=status.HTTP_400_BAD_REQUEST, init=False)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @property
    def payload(self) -> Mapping[str, Any]:
        """Serialized representation suitable for JSON responses."""

        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.detail:
            body.update(self.detail)
        return body

    def to_http_exception(self) -> HTTPException:
        """Convert the domain error into a FastAPI HTTPException."""

        return HTTPException(status_code=self.status_code, detail=dict(self.payload))


@dataclass
class InvalidSelection(PurchaseError):
    """The requested catalog id does not exist."""

    code: str = field(default="invalid_selection", init=False)


@dataclass
class PriceMismatch(PurchaseError):
    """The client supplied price differs from the catalog price."""

    code: str = field(default="price_mismatch", init=False)


@dataclass
class MissingPrerequisite(PurchaseError):
    """The user does not hold the rank an upgrade starts from."""

    code: str = field(default="missing_prerequisite", init=False)


@dataclass
class PurchaseFailed(PurchaseError):
    """The store failed while applying a validated purchase."""

    code: str = field(default="purchase_failed", init=False)
    status_code: int = field(default=status.HTTP_500_INTERNAL_SERVER_ERROR, init=False)


class InvalidStatusTransition(ValueError):
    """Raised when a ledger record is moved out of a terminal status."""


__all__ = [
    "InvalidSelection",
    "InvalidStatusTransition",
    "MissingPrerequisite",
    "PriceMismatch",
    "PurchaseError",
    "PurchaseFailed",
]
