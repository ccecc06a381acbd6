"""Domain models describing purchasable ranks and upgrade paths."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple


class RankLadder(str, Enum):
    """Independent progression tracks a rank can belong to."""

    SERVERWIDE = "serverwide"
    TOWNY = "towny"


@dataclass(frozen=True)
class RankDefinition:
    """Describes a purchasable rank tier."""

    rank_id: str
    display_name: str
    ladder: RankLadder
    price: Decimal
    description: str
    features: Tuple[str, ...] = ()
    requires_rank: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.rank_id,
            "name": self.display_name,
            "ladder": self.ladder.value,
            "price": self.price,
            "description": self.description,
            "features": list(self.features),
            "requiresRank": self.requires_rank,
        }


@dataclass(frozen=True)
class UpgradeEdge:
    """Describes a valid transition between two tiers of the same ladder."""

    upgrade_id: str
    from_rank: str
    to_rank: str
    ladder: RankLadder
    price: Decimal
    description: str
    features: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.upgrade_id,
            "from": self.from_rank,
            "to": self.to_rank,
            "ladder": self.ladder.value,
            "price": self.price,
            "description": self.description,
            "features": list(self.features),
        }
