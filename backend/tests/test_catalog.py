from decimal import Decimal

import pytest

from backend.app.catalog import (
    DEFAULT_CATALOG,
    RankCatalog,
    RankDefinition,
    RankLadder,
    UpgradeEdge,
)


def test_rank_config_returns_definition():
    citizen = DEFAULT_CATALOG.rank_config("citizen")

    assert citizen is not None
    assert citizen.price == Decimal("4.99")
    assert citizen.ladder is RankLadder.TOWNY
    assert citizen.features == ("Create town", "Claim 5 town plots", "Set 1 town spawn")


def test_unknown_ids_return_none():
    assert DEFAULT_CATALOG.rank_config("emperor") is None
    assert DEFAULT_CATALOG.upgrade_config("citizen-to-emperor") is None


def test_every_upgrade_stays_within_its_ladder():
    for edge in DEFAULT_CATALOG.upgrades.values():
        source = DEFAULT_CATALOG.rank_config(edge.from_rank)
        target = DEFAULT_CATALOG.rank_config(edge.to_rank)
        assert source is not None and target is not None
        assert source.ladder == target.ladder == edge.ladder


def test_towny_upgrades_form_a_single_chain():
    edges = DEFAULT_CATALOG.upgrades_for_ladder(RankLadder.TOWNY)
    chain = {edge.from_rank: edge.to_rank for edge in edges}

    current = "citizen"
    visited = [current]
    while current in chain:
        current = chain[current]
        visited.append(current)

    assert visited == [rank.rank_id for rank in DEFAULT_CATALOG.ranks_for_ladder(RankLadder.TOWNY)]


def test_catalog_serializes_camel_case_keys():
    edge = DEFAULT_CATALOG.upgrade_config("citizen-to-merchant")

    assert edge is not None
    assert edge.to_dict()["from"] == "citizen"
    assert edge.to_dict()["to"] == "merchant"
    assert DEFAULT_CATALOG.rank_config("shadow-enchanter").to_dict()["requiresRank"] is None


def test_catalog_rejects_cross_ladder_upgrades():
    ranks = [
        RankDefinition("citizen", "Citizen", RankLadder.TOWNY, Decimal("4.99"), "Towny"),
        RankDefinition("void-walker", "Void Walker", RankLadder.SERVERWIDE, Decimal("19.99"), "Serverwide"),
    ]
    edge = UpgradeEdge(
        "citizen-to-void",
        "citizen",
        "void-walker",
        RankLadder.TOWNY,
        Decimal("4.99"),
        "Upgrade to Void Walker rank",
    )

    with pytest.raises(ValueError, match="crosses ladders"):
        RankCatalog(ranks, [edge])


def test_catalog_rejects_unknown_references():
    ranks = [RankDefinition("citizen", "Citizen", RankLadder.TOWNY, Decimal("4.99"), "Towny")]
    edge = UpgradeEdge(
        "citizen-to-merchant",
        "citizen",
        "merchant",
        RankLadder.TOWNY,
        Decimal("4.99"),
        "Upgrade to Merchant rank",
    )

    with pytest.raises(ValueError, match="unknown rank"):
        RankCatalog(ranks, [edge])


def test_catalog_mappings_are_read_only():
    with pytest.raises(TypeError):
        DEFAULT_CATALOG.ranks["citizen"] = None  # type: ignore[index]
