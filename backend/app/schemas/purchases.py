"""API schemas for purchase and entitlement endpoints."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ..catalog import RankCatalog, RankDefinition, RankLadder, UpgradeEdge
from ..entitlements import Entitlement
from ..purchases import PurchaseRecord, PurchaseStatus, PurchaseType


class PurchaseRankRequest(BaseModel):
    rank_id: str = Field(alias="rankId", min_length=1)
    price: Decimal

    model_config = ConfigDict(populate_by_name=True)


class PurchaseUpgradeRequest(BaseModel):
    upgrade_id: str = Field(alias="upgradeId", min_length=1)
    price: Decimal

    model_config = ConfigDict(populate_by_name=True)


class PurchaseResponse(BaseModel):
    success: bool = True


class EntitlementResponse(BaseModel):
    id: Optional[int] = None
    name: str
    description: str = ""
    features: List[str] = Field(default_factory=list)
    expires_at: Optional[datetime] = None
    granted_at: datetime

    @classmethod
    def from_entitlement(cls, entitlement: Entitlement) -> "EntitlementResponse":
        return cls(
            id=entitlement.id,
            name=entitlement.rank_name,
            description=entitlement.description,
            features=list(entitlement.features),
            expires_at=entitlement.expires_at,
            granted_at=entitlement.granted_at,
        )


class PurchaseRecordResponse(BaseModel):
    id: str
    rank_name: str
    price: Decimal
    status: PurchaseStatus
    purchase_type: PurchaseType
    created_at: datetime

    @field_serializer("price")
    def _serialize_price(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_record(cls, record: PurchaseRecord) -> "PurchaseRecordResponse":
        return cls(
            id=record.id,
            rank_name=record.rank_name,
            price=record.price,
            status=record.status,
            purchase_type=record.purchase_type,
            created_at=record.created_at,
        )


class RankResponse(BaseModel):
    id: str
    name: str
    ladder: str
    price: Decimal
    description: str
    features: List[str]
    requires_rank: Optional[str] = Field(alias="requiresRank", default=None)

    model_config = ConfigDict(populate_by_name=True)

    @field_serializer("price")
    def _serialize_price(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_definition(cls, rank: RankDefinition) -> "RankResponse":
        return cls.model_validate(rank.to_dict())


class UpgradeResponse(BaseModel):
    id: str
    from_rank: str = Field(alias="from")
    to_rank: str = Field(alias="to")
    ladder: str
    price: Decimal
    description: str
    features: List[str]

    model_config = ConfigDict(populate_by_name=True)

    @field_serializer("price")
    def _serialize_price(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_edge(cls, edge: UpgradeEdge) -> "UpgradeResponse":
        return cls.model_validate(edge.to_dict())


class CatalogResponse(BaseModel):
    ranks: List[RankResponse]
    upgrades: List[UpgradeResponse]

    @classmethod
    def from_catalog(cls, catalog: RankCatalog) -> "CatalogResponse":
        return cls(
            ranks=[
                RankResponse.from_definition(rank)
                for ladder in RankLadder
                for rank in catalog.ranks_for_ladder(ladder)
            ],
            upgrades=[
                UpgradeResponse.from_edge(edge)
                for ladder in RankLadder
                for edge in catalog.upgrades_for_ladder(ladder)
            ],
        )
