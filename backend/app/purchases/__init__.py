"""Purchase domain package: ledger, errors, and the purchase service."""

from .exceptions import (
    InvalidSelection,
    InvalidStatusTransition,
    MissingPrerequisite,
    PriceMismatch,
    PurchaseError,
    PurchaseFailed,
)
from .ledger import InMemoryPurchaseLedger, PurchaseLedger
from .models import (
    PurchaseAuditEvent,
    PurchaseAuditEventType,
    PurchaseRecord,
    PurchaseStatus,
    PurchaseType,
)
from .service import PurchaseEventLogger, PurchaseService, UserLockTable

__all__ = [
    "InMemoryPurchaseLedger",
    "InvalidSelection",
    "InvalidStatusTransition",
    "MissingPrerequisite",
    "PriceMismatch",
    "PurchaseAuditEvent",
    "PurchaseAuditEventType",
    "PurchaseError",
    "PurchaseEventLogger",
    "PurchaseFailed",
    "PurchaseLedger",
    "PurchaseRecord",
    "PurchaseService",
    "PurchaseStatus",
    "PurchaseType",
    "UserLockTable",
]
