"""Entitlement models and stores."""

from .models import Entitlement
from .store import EntitlementStore, InMemoryEntitlementStore

__all__ = [
    "Entitlement",
    "EntitlementStore",
    "InMemoryEntitlementStore",
]
