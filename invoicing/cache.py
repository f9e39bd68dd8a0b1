"""Read-through cache for single invoice lookups."""
from __future__ import annotations

import logging
import threading
import uuid
from typing import Optional, Protocol

from cachetools import LRUCache

from invoicing.db import schemas

logger = logging.getLogger(__name__)


class EntityCache(Protocol):
    def get(self, key: uuid.UUID) -> Optional[schemas.Invoice]: ...

    def set(self, key: uuid.UUID, invoice: schemas.Invoice) -> None: ...

    def invalidate(self, key: uuid.UUID) -> None: ...


class NullCache:
    """Cache that never stores anything."""

    def get(self, key: uuid.UUID) -> Optional[schemas.Invoice]:
        return None

    def set(self, key: uuid.UUID, invoice: schemas.Invoice) -> None:
        return None

    def invalidate(self, key: uuid.UUID) -> None:
        return None


class RuntimeCache:
    """In-process LRU cache of assembled invoices keyed by invoice key.

    Entries are copied on the way in and out so callers cannot mutate the
    cached snapshot.
    """

    def __init__(self, max_entries: Optional[int] = None):
        if max_entries is None:
            from invoicing.utils.settings import get_settings
            max_entries = get_settings().cache_max_entries
        self.max_entries = max(1, max_entries)
        self._entries: LRUCache = LRUCache(maxsize=self.max_entries)
        self._lock = threading.Lock()
        logger.debug(f"Initialized RuntimeCache with max_entries={self.max_entries}")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: uuid.UUID) -> bool:
        return key in self._entries

    def get(self, key: uuid.UUID) -> Optional[schemas.Invoice]:
        with self._lock:
            invoice = self._entries.get(key)
        if invoice is None:
            return None
        return invoice.model_copy(deep=True)

    def set(self, key: uuid.UUID, invoice: schemas.Invoice) -> None:
        snapshot = invoice.model_copy(deep=True)
        with self._lock:
            self._entries[key] = snapshot

    def invalidate(self, key: uuid.UUID) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
