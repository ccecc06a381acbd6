from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from backend.app.catalog import DEFAULT_CATALOG
from backend.app.entitlements import InMemoryEntitlementStore
from backend.app.purchases import (
    InMemoryPurchaseLedger,
    PurchaseRecord,
    PurchaseService,
    PurchaseStatus,
    PurchaseType,
)
from backend.app.routes import purchases as purchases_routes
from backend.app.schemas.purchases import (
    CatalogResponse,
    PurchaseRankRequest,
    PurchaseResponse,
    PurchaseUpgradeRequest,
)


class _NullEventLogger:
    def log(self, event) -> None:
        pass


@pytest.fixture
def service(monkeypatch):
    purchase_service = PurchaseService(
        ledger=InMemoryPurchaseLedger(),
        entitlements=InMemoryEntitlementStore(),
        event_logger=_NullEventLogger(),
    )
    monkeypatch.setattr(purchases_routes, "get_purchase_service", lambda: purchase_service)
    return purchase_service


def test_request_schemas_accept_camel_case_json():
    rank_request = PurchaseRankRequest.model_validate({"rankId": "citizen", "price": 4.99})
    upgrade_request = PurchaseUpgradeRequest.model_validate(
        {"upgradeId": "citizen-to-merchant", "price": "4.99"}
    )

    assert rank_request.rank_id == "citizen"
    assert rank_request.price == Decimal("4.99")
    assert upgrade_request.upgrade_id == "citizen-to-merchant"


def test_purchase_rank_returns_success(service):
    user = SimpleNamespace(id=101)

    response = purchases_routes.purchase_rank(
        PurchaseRankRequest(rankId="citizen", price=Decimal("4.99")),
        current_user=user,
    )

    assert response == PurchaseResponse(success=True)
    assert service.entitlements.holds("101", "citizen")


def test_purchase_rank_with_wrong_price_is_bad_request(service):
    user = SimpleNamespace(id=101)

    with pytest.raises(HTTPException) as excinfo:
        purchases_routes.purchase_rank(
            PurchaseRankRequest(rankId="citizen", price=Decimal("1.00")),
            current_user=user,
        )

    assert excinfo.value.status_code == 400
    assert excinfo.value.detail["error"] == "price_mismatch"
    assert excinfo.value.detail["message"] == "Invalid price"
    assert service.purchase_history("101") == []


def test_purchase_rank_with_unknown_rank_is_bad_request(service):
    with pytest.raises(HTTPException) as excinfo:
        purchases_routes.purchase_rank(
            PurchaseRankRequest(rankId="emperor", price=Decimal("4.99")),
            current_user=SimpleNamespace(id=101),
        )

    assert excinfo.value.status_code == 400
    assert excinfo.value.detail["message"] == "Invalid rank selection"


def test_purchase_upgrade_without_prerequisite_is_bad_request(service):
    with pytest.raises(HTTPException) as excinfo:
        purchases_routes.purchase_upgrade(
            PurchaseUpgradeRequest(upgradeId="citizen-to-merchant", price=Decimal("4.99")),
            current_user=SimpleNamespace(id=101),
        )

    assert excinfo.value.status_code == 400
    assert excinfo.value.detail["message"] == "You do not have the required rank for this upgrade"
    assert excinfo.value.detail["requiredRank"] == "citizen"


def test_purchase_upgrade_swaps_rank(service):
    user = SimpleNamespace(id=101)
    purchases_routes.purchase_rank(
        PurchaseRankRequest(rankId="citizen", price=Decimal("4.99")), current_user=user
    )

    response = purchases_routes.purchase_upgrade(
        PurchaseUpgradeRequest(upgradeId="citizen-to-merchant", price=Decimal("4.99")),
        current_user=user,
    )

    assert response.success is True
    ranks = purchases_routes.list_user_ranks(current_user=user)
    assert [item.name for item in ranks] == ["merchant"]


def test_store_failure_maps_to_server_error(monkeypatch, service):
    def _broken_grant(*args, **kwargs):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(service.entitlements, "grant", _broken_grant)

    with pytest.raises(HTTPException) as excinfo:
        purchases_routes.purchase_rank(
            PurchaseRankRequest(rankId="citizen", price=Decimal("4.99")),
            current_user=SimpleNamespace(id=101),
        )

    assert excinfo.value.status_code == 500
    assert excinfo.value.detail["message"] == "Failed to process purchase"
    assert service.purchase_history("101")[0].status == PurchaseStatus.FAILED


def test_list_purchases_serializes_records(monkeypatch):
    created = datetime(2024, 5, 1, tzinfo=timezone.utc)
    record = PurchaseRecord(
        id="pur_1",
        user_id="202",
        rank_name="citizen",
        price=Decimal("4.99"),
        status=PurchaseStatus.COMPLETED,
        purchase_type=PurchaseType.RANK,
        created_at=created,
        updated_at=created,
    )
    fake_service = SimpleNamespace(purchase_history=lambda user_id: [record] if user_id == "202" else [])
    monkeypatch.setattr(purchases_routes, "get_purchase_service", lambda: fake_service)

    response = purchases_routes.list_purchases(current_user=SimpleNamespace(id=202))

    assert len(response) == 1
    body = response[0].model_dump(mode="json", by_alias=True)
    assert set(body) == {"id", "rank_name", "price", "status", "purchase_type", "created_at"}
    assert body["rank_name"] == "citizen"
    assert body["price"] == 4.99
    assert body["status"] == "completed"
    assert body["purchase_type"] == "rank"


def test_list_user_ranks_failure_returns_server_error(monkeypatch):
    def _broken(user_id):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(
        purchases_routes,
        "get_purchase_service",
        lambda: SimpleNamespace(list_entitlements=_broken),
    )

    with pytest.raises(HTTPException) as excinfo:
        purchases_routes.list_user_ranks(current_user=SimpleNamespace(id=303))

    assert excinfo.value.status_code == 500
    assert excinfo.value.detail == "Failed to fetch user ranks"


def test_list_purchases_failure_returns_server_error(monkeypatch):
    def _broken(user_id):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(
        purchases_routes,
        "get_purchase_service",
        lambda: SimpleNamespace(purchase_history=_broken),
    )

    with pytest.raises(HTTPException) as excinfo:
        purchases_routes.list_purchases(current_user=SimpleNamespace(id=303))

    assert excinfo.value.status_code == 500
    assert excinfo.value.detail == "Failed to fetch purchases"


def test_catalog_lists_every_rank_and_upgrade():
    response = purchases_routes.get_catalog()

    assert isinstance(response, CatalogResponse)
    assert {rank.id for rank in response.ranks} == set(DEFAULT_CATALOG.ranks)
    assert {edge.id for edge in response.upgrades} == set(DEFAULT_CATALOG.upgrades)

    body = response.model_dump(by_alias=True)
    citizen = next(rank for rank in body["ranks"] if rank["id"] == "citizen")
    assert citizen["price"] == 4.99
    assert citizen["ladder"] == "towny"
    edge = next(item for item in body["upgrades"] if item["id"] == "citizen-to-merchant")
    assert edge["from"] == "citizen"
    assert edge["to"] == "merchant"


def test_list_user_ranks_uses_stored_column_names(service):
    user = SimpleNamespace(id=101)
    purchases_routes.purchase_rank(
        PurchaseRankRequest(rankId="citizen", price=Decimal("4.99")), current_user=user
    )

    response = purchases_routes.list_user_ranks(current_user=user)

    body = response[0].model_dump(mode="json", by_alias=True)
    assert set(body) == {"id", "name", "description", "features", "expires_at", "granted_at"}
    assert isinstance(body["id"], int)
    assert body["name"] == "citizen"
    assert body["expires_at"] is None


def test_catalog_groups_entries_by_ladder():
    response = purchases_routes.get_catalog()

    ladders = [rank.ladder for rank in response.ranks]
    assert ladders == sorted(ladders, key=["serverwide", "towny"].index)
    assert response.ranks[0].id == "shadow-enchanter"
    assert response.upgrades[-1].id == "king-to-divine"
