"""Application wiring for the purchase service."""
from __future__ import annotations

import logging
from functools import lru_cache

from ..entitlements.repository import PostgresEntitlementStore
from ..purchases import PurchaseAuditEvent, PurchaseAuditEventType, PurchaseEventLogger, PurchaseService
from ..purchases.repository import PostgresPurchaseLedger


logger = logging.getLogger("purchases")


class LoggingPurchaseEventLogger(PurchaseEventLogger):
    """Forwards purchase audit events to the application logger."""

    def log(self, event: PurchaseAuditEvent) -> None:
        level = logging.WARNING if event.event_type == PurchaseAuditEventType.PURCHASE_FAILED else logging.INFO
        logger.log(
            level,
            "Purchase event %s user=%s purchase=%s item=%s metadata=%s",
            event.event_type.value,
            event.user_id,
            event.purchase_id,
            event.item_id,
            event.metadata,
        )


@lru_cache(maxsize=1)
def get_purchase_service() -> PurchaseService:
    return PurchaseService(
        ledger=PostgresPurchaseLedger(),
        entitlements=PostgresEntitlementStore(),
        event_logger=LoggingPurchaseEventLogger(),
    )


__all__ = ["LoggingPurchaseEventLogger", "get_purchase_service"]
