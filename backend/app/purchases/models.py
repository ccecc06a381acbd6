"""Domain models for the purchase ledger."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PurchaseStatus(str, Enum):
    """Lifecycle status for a purchase attempt."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not PurchaseStatus.PENDING


class PurchaseType(str, Enum):
    """Kind of catalog item a purchase was made for."""

    RANK = "rank"
    UPGRADE = "upgrade"


class PurchaseRecord(BaseModel):
    """A single purchase attempt recorded in the ledger."""

    id: str
    user_id: str
    rank_name: str
    price: Decimal = Field(ge=0)
    status: PurchaseStatus = PurchaseStatus.PENDING
    purchase_type: PurchaseType = PurchaseType.RANK
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PurchaseAuditEventType(str, Enum):
    """Audit event categories emitted by the purchase service."""

    PURCHASE_COMPLETED = "purchase_completed"
    UPGRADE_COMPLETED = "upgrade_completed"
    PURCHASE_FAILED = "purchase_failed"


class PurchaseAuditEvent(BaseModel):
    """Structured audit event describing a purchase outcome."""

    event_type: PurchaseAuditEventType
    user_id: str
    purchase_id: Optional[str] = None
    item_id: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(populate_by_name=True, frozen=True)
