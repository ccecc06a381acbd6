"""Entitlement store abstractions and the in-memory implementation."""
from __future__ import annotations

import itertools
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from .models import Entitlement


class EntitlementStore(Protocol):
    """Persistence operations for the ranks currently granted to users."""

    def grant(
        self,
        user_id: str,
        rank_name: str,
        features: Iterable[str],
        expires_at: Optional[datetime] = None,
        *,
        description: str = "",
    ) -> Entitlement:
        ...

    def revoke(self, user_id: str, rank_name: str) -> None:
        ...

    def list_active(self, user_id: str) -> List[Entitlement]:
        ...

    def holds(self, user_id: str, rank_name: str) -> bool:
        ...

    def replace(self, user_id: str, from_rank: str, entitlement: Entitlement) -> bool:
        """Atomically swap ``from_rank`` for ``entitlement``.

        Returns ``False`` without changing anything when ``from_rank`` is not
        actively held.
        """


def _sort_key(entitlement: Entitlement):
    return (entitlement.granted_at, entitlement.rank_name)


class InMemoryEntitlementStore:
    """Lock-protected store suitable for tests and local development."""

    def __init__(self, *, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._entries: Dict[str, Dict[str, Entitlement]] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    def grant(
        self,
        user_id: str,
        rank_name: str,
        features: Iterable[str],
        expires_at: Optional[datetime] = None,
        *,
        description: str = "",
    ) -> Entitlement:
        with self._lock:
            held = self._entries.setdefault(user_id, {})
            existing = held.get(rank_name)
            entitlement = Entitlement(
                id=existing.id if existing is not None else next(self._ids),
                user_id=user_id,
                rank_name=rank_name,
                description=description,
                features=tuple(features),
                expires_at=expires_at,
                granted_at=self._clock(),
            )
            held[rank_name] = entitlement
        return entitlement

    def revoke(self, user_id: str, rank_name: str) -> None:
        with self._lock:
            self._entries.get(user_id, {}).pop(rank_name, None)

    def list_active(self, user_id: str) -> List[Entitlement]:
        now = self._clock()
        with self._lock:
            held = list(self._entries.get(user_id, {}).values())
        return sorted((item for item in held if item.is_active(now)), key=_sort_key)

    def holds(self, user_id: str, rank_name: str) -> bool:
        now = self._clock()
        with self._lock:
            entitlement = self._entries.get(user_id, {}).get(rank_name)
        return entitlement is not None and entitlement.is_active(now)

    def replace(self, user_id: str, from_rank: str, entitlement: Entitlement) -> bool:
        now = self._clock()
        with self._lock:
            held = self._entries.get(user_id, {})
            current = held.get(from_rank)
            if current is None or not current.is_active(now):
                return False
            del held[from_rank]
            if entitlement.id is None:
                entitlement = entitlement.model_copy(update={"id": next(self._ids)})
            held[entitlement.rank_name] = entitlement
        return True

    def all_entries(self, user_id: str) -> List[Entitlement]:
        """Return every stored entitlement for ``user_id``, expired ones included."""

        with self._lock:
            return sorted(self._entries.get(user_id, {}).values(), key=_sort_key)


__all__ = ["EntitlementStore", "InMemoryEntitlementStore"]
