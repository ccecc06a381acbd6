"""Static catalog of purchasable ranks and upgrade edges."""

from .catalog import (
    DEFAULT_CATALOG,
    SERVERWIDE_RANKS,
    TOWNY_RANKS,
    UPGRADE_EDGES,
    RankCatalog,
)
from .models import RankDefinition, RankLadder, UpgradeEdge

__all__ = [
    "DEFAULT_CATALOG",
    "SERVERWIDE_RANKS",
    "TOWNY_RANKS",
    "UPGRADE_EDGES",
    "RankCatalog",
    "RankDefinition",
    "RankLadder",
    "UpgradeEdge",
]
