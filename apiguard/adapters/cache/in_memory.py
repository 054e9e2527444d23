"""In-memory TTL store for cached GET responses.

Thread-safe, optionally bounded with LRU eviction, and driven by an
injectable clock so expiry can be tested deterministically.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable

from apiguard.adapters.cache.base import AbstractResponseStore, CacheEntry

logger = logging.getLogger(__name__)


class InMemoryTTLStore(AbstractResponseStore):
    """TTL store with optional LRU bound.

    Attributes:
        ttl_seconds: Time-to-live applied to every entry.
        max_entries: Maximum number of entries (None for unlimited).
    """

    def __init__(
        self,
        ttl_seconds: int = 30,
        max_entries: int | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1 or None")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryTTLStore(ttl_seconds={self.ttl_seconds}, max_entries={self.max_entries}, "
            f"size={len(self._store)}, hits={self._hits}, misses={self._misses})"
        )

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str, now: float | None = None) -> CacheEntry | None:
        if now is None:
            now = self._clock()

        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            if now >= entry.expires_at:
                self._store.pop(key, None)
                self._evictions += 1
                self._misses += 1
                return None

            self._hits += 1
            self._store.move_to_end(key)
            return entry

    def set(self, key: str, body: Any, now: float | None = None) -> CacheEntry:
        if now is None:
            now = self._clock()

        with self._lock:
            self._evict_expired_locked(now)
            entry = CacheEntry(response_body=body, expires_at=now + self.ttl_seconds)
            self._store[key] = entry
            self._store.move_to_end(key)
            self._evict_over_capacity_locked()
            return entry

    def clear(self) -> int:
        """Drop all entries. Counters are kept so stats survive invalidation."""
        with self._lock:
            dropped = len(self._store)
            self._store.clear()
            return dropped

    def stats(self) -> dict[str, int | float | None]:
        """Return lightweight store metrics without exposing cached bodies."""
        with self._lock:
            return {
                "ttl_seconds": self.ttl_seconds,
                "max_entries": self.max_entries,
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _evict_expired_locked(self, now: float) -> None:
        expired = [k for k, entry in self._store.items() if entry.expires_at <= now]
        for key in expired:
            del self._store[key]
        self._evictions += len(expired)

    def _evict_over_capacity_locked(self) -> None:
        if self.max_entries is None:
            return

        while len(self._store) > self.max_entries:
            # least recently used first
            key, _ = self._store.popitem(last=False)
            self._evictions += 1
            logger.debug("cache.evicted", extra={"cache_key": key[:64], "reason": "capacity"})
