"""Static catalog definitions for rank tiers and upgrade edges."""
from __future__ import annotations

from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from .models import RankDefinition, RankLadder, UpgradeEdge


class RankCatalog:
    """Read-only lookup of rank definitions and upgrade edges."""

    def __init__(self, ranks: Iterable[RankDefinition], upgrades: Iterable[UpgradeEdge]) -> None:
        rank_map = {rank.rank_id: rank for rank in ranks}
        upgrade_map = {upgrade.upgrade_id: upgrade for upgrade in upgrades}

        for rank in rank_map.values():
            if rank.requires_rank and rank.requires_rank not in rank_map:
                raise ValueError(f"Rank {rank.rank_id} requires unknown rank {rank.requires_rank}")
        for upgrade in upgrade_map.values():
            source = rank_map.get(upgrade.from_rank)
            target = rank_map.get(upgrade.to_rank)
            if source is None or target is None:
                raise ValueError(f"Upgrade {upgrade.upgrade_id} references an unknown rank")
            if not (source.ladder == target.ladder == upgrade.ladder):
                raise ValueError(f"Upgrade {upgrade.upgrade_id} crosses ladders")

        self._ranks: Mapping[str, RankDefinition] = MappingProxyType(rank_map)
        self._upgrades: Mapping[str, UpgradeEdge] = MappingProxyType(upgrade_map)

    @property
    def ranks(self) -> Mapping[str, RankDefinition]:
        return self._ranks

    @property
    def upgrades(self) -> Mapping[str, UpgradeEdge]:
        return self._upgrades

    def rank_config(self, rank_id: str) -> Optional[RankDefinition]:
        """Return the rank definition for ``rank_id`` or ``None`` when unknown."""

        return self._ranks.get(rank_id)

    def upgrade_config(self, upgrade_id: str) -> Optional[UpgradeEdge]:
        """Return the upgrade edge for ``upgrade_id`` or ``None`` when unknown."""

        return self._upgrades.get(upgrade_id)

    def ranks_for_ladder(self, ladder: RankLadder) -> List[RankDefinition]:
        return [rank for rank in self._ranks.values() if rank.ladder == ladder]

    def upgrades_for_ladder(self, ladder: RankLadder) -> List[UpgradeEdge]:
        return [upgrade for upgrade in self._upgrades.values() if upgrade.ladder == ladder]


_UPGRADE_PRICE = Decimal("4.99")

SERVERWIDE_RANKS = (
    RankDefinition(
        rank_id="shadow-enchanter",
        display_name="Shadow Enchanter",
        ladder=RankLadder.SERVERWIDE,
        price=Decimal("9.99"),
        description="A mystical rank with basic flying abilities",
        features=(
            "Access to /fly command",
            "3 /sethome locations",
            "Colored chat messages",
            "Special chat prefix",
        ),
    ),
    RankDefinition(
        rank_id="void-walker",
        display_name="Void Walker",
        ladder=RankLadder.SERVERWIDE,
        price=Decimal("19.99"),
        description="Master of the void with enhanced storage",
        features=(
            "All Shadow Enchanter features",
            "Access to /enderchest",
            "5 /sethome locations",
            "Custom join messages",
        ),
    ),
    RankDefinition(
        rank_id="ethereal-warden",
        display_name="Ethereal Warden",
        ladder=RankLadder.SERVERWIDE,
        price=Decimal("29.99"),
        description="Guardian of the realm with healing powers",
        features=(
            "All Void Walker features",
            "Access to /heal and /feed",
            "7 /sethome locations",
            "Particle effects",
        ),
    ),
    RankDefinition(
        rank_id="astral-guardian",
        display_name="Astral Guardian",
        ladder=RankLadder.SERVERWIDE,
        price=Decimal("39.99"),
        description="Supreme cosmic being with ultimate abilities",
        features=(
            "All Ethereal Warden features",
            "Access to /nick",
            "10 /sethome locations",
            "Custom particle trails",
        ),
    ),
)

TOWNY_RANKS = (
    RankDefinition(
        rank_id="citizen",
        display_name="Citizen",
        ladder=RankLadder.TOWNY,
        price=Decimal("4.99"),
        description="Basic towny privileges",
        features=("Create town", "Claim 5 town plots", "Set 1 town spawn"),
    ),
    RankDefinition(
        rank_id="merchant",
        display_name="Merchant",
        ladder=RankLadder.TOWNY,
        price=Decimal("9.99"),
        description="Enhanced trading capabilities",
        features=("All Citizen features", "2 shop plots", "10 town plots"),
    ),
    RankDefinition(
        rank_id="councilor",
        display_name="Councilor",
        ladder=RankLadder.TOWNY,
        price=Decimal("14.99"),
        description="Town management abilities",
        features=(
            "All Merchant features",
            "Create town laws",
            "15 town plots",
            "Custom town banner",
        ),
    ),
    RankDefinition(
        rank_id="mayor",
        display_name="Mayor",
        ladder=RankLadder.TOWNY,
        price=Decimal("19.99"),
        description="Full town control",
        features=(
            "All Councilor features",
            "Town tax benefits",
            "20 town plots",
            "Town teleport points",
        ),
    ),
    RankDefinition(
        rank_id="governor",
        display_name="Governor",
        ladder=RankLadder.TOWNY,
        price=Decimal("24.99"),
        description="Nation creation privileges",
        features=(
            "All Mayor features",
            "Multi-town management",
            "25 town plots",
            "Regional influence",
        ),
    ),
    RankDefinition(
        rank_id="noble",
        display_name="Noble",
        ladder=RankLadder.TOWNY,
        price=Decimal("29.99"),
        description="Advanced nation features",
        features=(
            "All Governor features",
            "Nation creation",
            "Nation particles",
            "Custom spawn",
        ),
    ),
    RankDefinition(
        rank_id="duke",
        display_name="Duke",
        ladder=RankLadder.TOWNY,
        price=Decimal("34.99"),
        description="Nation-wide abilities",
        features=(
            "All Noble features",
            "Extended nation borders",
            "Nation-wide effects",
            "Royal decrees",
        ),
    ),
    RankDefinition(
        rank_id="king",
        display_name="King",
        ladder=RankLadder.TOWNY,
        price=Decimal("39.99"),
        description="Supreme nation control",
        features=(
            "All Duke features",
            "Kingdom management",
            "Royal treasury",
            "Kingdom-wide buffs",
        ),
    ),
    RankDefinition(
        rank_id="divine-ruler",
        display_name="Divine Ruler",
        ladder=RankLadder.TOWNY,
        price=Decimal("44.99"),
        description="Ultimate towny authority",
        features=(
            "All King features",
            "Divine powers",
            "Custom events",
            "Ultimate authority",
        ),
    ),
)


def _upgrade(
    upgrade_id: str,
    from_rank: str,
    to_rank: str,
    ladder: RankLadder,
    display_name: str,
    *features: str,
) -> UpgradeEdge:
    return UpgradeEdge(
        upgrade_id=upgrade_id,
        from_rank=from_rank,
        to_rank=to_rank,
        ladder=ladder,
        price=_UPGRADE_PRICE,
        description=f"Upgrade to {display_name} rank",
        features=features,
    )


UPGRADE_EDGES = (
    _upgrade(
        "shadow-to-void", "shadow-enchanter", "void-walker", RankLadder.SERVERWIDE,
        "Void Walker", "Access to /enderchest", "+2 /sethome locations", "Custom join messages",
    ),
    _upgrade(
        "void-to-ethereal", "void-walker", "ethereal-warden", RankLadder.SERVERWIDE,
        "Ethereal Warden", "Access to /heal and /feed", "+2 /sethome locations", "Particle effects",
    ),
    _upgrade(
        "ethereal-to-astral", "ethereal-warden", "astral-guardian", RankLadder.SERVERWIDE,
        "Astral Guardian", "Access to /nick", "+3 /sethome locations", "Custom particle trails",
    ),
    _upgrade(
        "citizen-to-merchant", "citizen", "merchant", RankLadder.TOWNY,
        "Merchant", "2 shop plots", "+5 town plots", "Enhanced trading",
    ),
    _upgrade(
        "merchant-to-councilor", "merchant", "councilor", RankLadder.TOWNY,
        "Councilor", "Create town laws", "+5 town plots", "Custom town banner",
    ),
    _upgrade(
        "councilor-to-mayor", "councilor", "mayor", RankLadder.TOWNY,
        "Mayor", "Town tax benefits", "+5 town plots", "Town teleport points",
    ),
    _upgrade(
        "mayor-to-governor", "mayor", "governor", RankLadder.TOWNY,
        "Governor", "Multi-town management", "+5 town plots", "Regional influence",
    ),
    _upgrade(
        "governor-to-noble", "governor", "noble", RankLadder.TOWNY,
        "Noble", "Nation creation", "Nation particles", "Custom spawn",
    ),
    _upgrade(
        "noble-to-duke", "noble", "duke", RankLadder.TOWNY,
        "Duke", "Extended nation borders", "Nation-wide effects", "Royal decrees",
    ),
    _upgrade(
        "duke-to-king", "duke", "king", RankLadder.TOWNY,
        "King", "Kingdom management", "Royal treasury", "Kingdom-wide buffs",
    ),
    _upgrade(
        "king-to-divine", "king", "divine-ruler", RankLadder.TOWNY,
        "Divine Ruler", "Divine powers", "Custom events", "Ultimate authority",
    ),
)

DEFAULT_CATALOG = RankCatalog(SERVERWIDE_RANKS + TOWNY_RANKS, UPGRADE_EDGES)
