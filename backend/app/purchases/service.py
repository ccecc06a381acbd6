"""Core service validating purchases and applying them to the stores."""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Iterator, List, Optional, Protocol, Union

from ..catalog import DEFAULT_CATALOG, RankCatalog, UpgradeEdge
from ..entitlements import Entitlement, EntitlementStore
from .exceptions import (
    InvalidSelection,
    MissingPrerequisite,
    PriceMismatch,
    PurchaseError,
    PurchaseFailed,
)
from .ledger import PurchaseLedger
from .models import (
    PurchaseAuditEvent,
    PurchaseAuditEventType,
    PurchaseRecord,
    PurchaseStatus,
    PurchaseType,
)

logger = logging.getLogger("purchases")

PriceInput = Union[Decimal, float, int, str]

_FAILED_MESSAGE = "Failed to process purchase"


class PurchaseEventLogger(Protocol):
    """Captures structured purchase audit events."""

    def log(self, event: PurchaseAuditEvent) -> None:
        ...


class UserLockTable:
    """Hands out one lock per user id, dropping it once nobody waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(user_id, threading.Lock())
            self._waiters[user_id] = self._waiters.get(user_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._waiters[user_id] -= 1
                if not self._waiters[user_id]:
                    del self._waiters[user_id]
                    del self._locks[user_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


def _normalize_price(value: PriceInput) -> Decimal:
    if isinstance(value, bool):
        raise PriceMismatch("Invalid price")
    if isinstance(value, Decimal):
        price = value
    else:
        try:
            price = Decimal(str(value))
        except InvalidOperation as exc:
            raise PriceMismatch("Invalid price") from exc
    if not price.is_finite():
        raise PriceMismatch("Invalid price")
    return price


@dataclass(slots=True)
class PurchaseService:
    """Validates rank purchases and upgrades and applies them as one unit of work."""

    ledger: PurchaseLedger
    entitlements: EntitlementStore
    event_logger: PurchaseEventLogger
    catalog: RankCatalog = DEFAULT_CATALOG
    _locks: UserLockTable = field(default_factory=UserLockTable, init=False, repr=False)

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def purchase_rank(self, user_id: str, rank_id: str, claimed_price: PriceInput) -> PurchaseRecord:
        """Buy ``rank_id`` for ``user_id`` and return the completed ledger record."""

        rank = self.catalog.rank_config(rank_id)
        if rank is None:
            raise InvalidSelection("Invalid rank selection", detail={"rankId": rank_id})

        price = _normalize_price(claimed_price)
        if price != rank.price:
            raise PriceMismatch("Invalid price", detail={"expectedPrice": str(rank.price)})

        with self._locks.hold(user_id):
            with self._store_errors(user_id, rank_id):
                if rank.requires_rank and not self.entitlements.holds(user_id, rank.requires_rank):
                    raise MissingPrerequisite(
                        "You do not have the required rank for this purchase",
                        detail={"requiredRank": rank.requires_rank},
                    )
                previous = self._active_entitlement(user_id, rank.rank_id)
                record = self.ledger.record(
                    user_id, rank.rank_id, rank.price, purchase_type=PurchaseType.RANK
                )

            def undo() -> None:
                if previous is None:
                    self.entitlements.revoke(user_id, rank.rank_id)
                else:
                    self._restore(user_id, previous)

            try:
                self.entitlements.grant(
                    user_id,
                    rank.rank_id,
                    rank.features,
                    None,
                    description=rank.description,
                )
                completed = self.ledger.mark_status(record.id, PurchaseStatus.COMPLETED)
            except Exception as exc:
                self._abort(record, rank_id, exc, undo)

        self.event_logger.log(
            PurchaseAuditEvent(
                event_type=PurchaseAuditEventType.PURCHASE_COMPLETED,
                user_id=user_id,
                purchase_id=completed.id,
                item_id=rank_id,
                metadata={"price": str(completed.price)},
            )
        )
        return completed

    def purchase_upgrade(
        self, user_id: str, upgrade_id: str, claimed_price: PriceInput
    ) -> PurchaseRecord:
        """Move ``user_id`` along an upgrade edge and return the completed ledger record."""

        edge = self.catalog.upgrade_config(upgrade_id)
        if edge is None:
            raise InvalidSelection("Invalid upgrade selection", detail={"upgradeId": upgrade_id})
        target = self.catalog.rank_config(edge.to_rank)
        if target is None:  # pragma: no cover - guarded by catalog validation
            raise InvalidSelection("Invalid upgrade selection", detail={"upgradeId": upgrade_id})

        with self._locks.hold(user_id):
            with self._store_errors(user_id, upgrade_id):
                held = {item.rank_name: item for item in self.entitlements.list_active(user_id)}

            source = held.get(edge.from_rank)
            if source is None:
                raise MissingPrerequisite(
                    "You do not have the required rank for this upgrade",
                    detail={"requiredRank": edge.from_rank},
                )

            price = _normalize_price(claimed_price)
            if price != edge.price:
                raise PriceMismatch("Invalid price", detail={"expectedPrice": str(edge.price)})

            previous_target = held.get(edge.to_rank)
            with self._store_errors(user_id, upgrade_id):
                record = self.ledger.record(
                    user_id, edge.to_rank, edge.price, purchase_type=PurchaseType.UPGRADE
                )

            def undo() -> None:
                self._undo_upgrade(user_id, edge, source, previous_target)

            upgraded = Entitlement(
                user_id=user_id,
                rank_name=target.rank_id,
                description=target.description,
                features=target.features,
                granted_at=self._now(),
            )
            try:
                swapped = self.entitlements.replace(user_id, edge.from_rank, upgraded)
            except Exception as exc:
                self._abort(record, upgrade_id, exc, undo)

            if not swapped:
                # Another request moved the user off the source rank first.
                self._mark_failed(record, upgrade_id)
                raise MissingPrerequisite(
                    "You do not have the required rank for this upgrade",
                    detail={"requiredRank": edge.from_rank},
                )

            try:
                completed = self.ledger.mark_status(record.id, PurchaseStatus.COMPLETED)
            except Exception as exc:
                self._abort(record, upgrade_id, exc, undo)

        self.event_logger.log(
            PurchaseAuditEvent(
                event_type=PurchaseAuditEventType.UPGRADE_COMPLETED,
                user_id=user_id,
                purchase_id=completed.id,
                item_id=upgrade_id,
                metadata={"from": edge.from_rank, "to": edge.to_rank, "price": str(completed.price)},
            )
        )
        return completed

    def list_entitlements(self, user_id: str) -> List[Entitlement]:
        return self.entitlements.list_active(user_id)

    def purchase_history(self, user_id: str) -> List[PurchaseRecord]:
        return self.ledger.list_for_user(user_id)

    @contextmanager
    def _store_errors(self, user_id: str, item_id: str) -> Iterator[None]:
        try:
            yield
        except PurchaseError:
            raise
        except Exception as exc:
            logger.exception("Store failure before purchase user=%s item=%s", user_id, item_id)
            self._log_failure(user_id, item_id, None, exc)
            raise PurchaseFailed(_FAILED_MESSAGE) from exc

    def _active_entitlement(self, user_id: str, rank_name: str) -> Optional[Entitlement]:
        for entitlement in self.entitlements.list_active(user_id):
            if entitlement.rank_name == rank_name:
                return entitlement
        return None

    def _restore(self, user_id: str, entitlement: Entitlement) -> None:
        self.entitlements.grant(
            user_id,
            entitlement.rank_name,
            entitlement.features,
            entitlement.expires_at,
            description=entitlement.description,
        )

    def _undo_upgrade(
        self,
        user_id: str,
        edge: UpgradeEdge,
        source: Entitlement,
        previous_target: Optional[Entitlement],
    ) -> None:
        if self.entitlements.holds(user_id, edge.from_rank):
            # The swap never happened.
            return
        if previous_target is not None:
            self._restore(user_id, source)
            self._restore(user_id, previous_target)
        elif not self.entitlements.replace(user_id, edge.to_rank, source):
            self._restore(user_id, source)

    def _abort(
        self,
        record: PurchaseRecord,
        item_id: str,
        error: Exception,
        undo: Callable[[], None],
    ) -> None:
        logger.error(
            "Purchase %s failed user=%s item=%s",
            record.id,
            record.user_id,
            item_id,
            exc_info=error,
        )
        try:
            undo()
        except Exception:
            logger.exception(
                "Rollback failed for purchase %s user=%s item=%s",
                record.id,
                record.user_id,
                item_id,
            )
        self._mark_failed(record, item_id)
        self._log_failure(record.user_id, item_id, record.id, error)
        raise PurchaseFailed(_FAILED_MESSAGE) from error

    def _mark_failed(self, record: PurchaseRecord, item_id: str) -> None:
        try:
            self.ledger.mark_status(record.id, PurchaseStatus.FAILED)
        except Exception:
            logger.exception(
                "Could not mark purchase %s as failed user=%s item=%s",
                record.id,
                record.user_id,
                item_id,
            )

    def _log_failure(
        self, user_id: str, item_id: str, purchase_id: str | None, error: Exception
    ) -> None:
        self.event_logger.log(
            PurchaseAuditEvent(
                event_type=PurchaseAuditEventType.PURCHASE_FAILED,
                user_id=user_id,
                purchase_id=purchase_id,
                item_id=item_id,
                metadata={"error": type(error).__name__},
            )
        )


__all__ = ["PurchaseEventLogger", "PurchaseService", "UserLockTable"]
