"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Windows start at each key's first request, not on wall-clock boundaries.
- A lock guards read-modify-write so the limiter is also safe under threads.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from apiguard.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitConfig,
    RateLimitDecision,
)

logger = logging.getLogger(__name__)


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Count requests per key inside a window opened by the first request.

    Entries are never deleted by ``check`` itself. When ``sweep_interval`` is
    positive, every N-th check also purges entries whose window has ended so
    keys that stop sending requests do not accumulate forever.

    Important:
        Backward wall-clock jumps (e.g. NTP corrections) can extend a window.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        clock: Callable[[], float] = time.time,
        sweep_interval: int = 0,
    ) -> None:
        """Initialize the limiter.

        Args:
            config: Quota; defaults to 5 requests per 60 seconds.
            clock: Time source returning UNIX time in seconds.
            sweep_interval: Purge expired entries every N checks (0 disables).

        Raises:
            ValueError: If sweep_interval is negative.
        """
        if sweep_interval < 0:
            raise ValueError("sweep_interval must be >= 0")

        self.config = config or RateLimitConfig()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._checks_since_sweep = 0
        self._lock = threading.RLock()
        self._entries: dict[str, RateLimitEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get_entry(self, key: str) -> RateLimitEntry | None:
        """Return a copy of the stored entry for ``key`` (for inspection)."""
        with self._lock:
            entry = self._entries.get(key)
            return RateLimitEntry(entry.count, entry.reset_at) if entry else None

    def check(self, key: str, now: float | None = None) -> RateLimitDecision:
        """Count one request for ``key`` and return the decision.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        if now is None:
            now = self._clock()
        limit = self.config.max_requests

        with self._lock:
            self._maybe_sweep(now)

            entry = self._entries.get(key)
            if entry is None or entry.reset_at <= now:
                entry = RateLimitEntry(count=1, reset_at=now + self.config.window_seconds)
                self._entries[key] = entry
                return RateLimitDecision(
                    allowed=True,
                    limit=limit,
                    remaining=limit - 1,
                    reset_at=entry.reset_at,
                    retry_after_seconds=None,
                )

            entry.count += 1
            if entry.count > limit:
                return RateLimitDecision(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset_at=entry.reset_at,
                    retry_after_seconds=math.ceil(entry.reset_at - now),
                )

            return RateLimitDecision(
                allowed=True,
                limit=limit,
                remaining=limit - entry.count,
                reset_at=entry.reset_at,
                retry_after_seconds=None,
            )

    def sweep_expired(self, now: float | None = None) -> int:
        if now is None:
            now = self._clock()
        with self._lock:
            expired = [k for k, entry in self._entries.items() if entry.reset_at <= now]
            for key in expired:
                del self._entries[key]
            self._checks_since_sweep = 0

        if expired:
            logger.debug(
                "rate_limit.swept",
                extra={"removed": len(expired), "remaining_keys": len(self._entries)},
            )
        return len(expired)

    def _maybe_sweep(self, now: float) -> None:
        if not self._sweep_interval:
            return
        self._checks_since_sweep += 1
        if self._checks_since_sweep >= self._sweep_interval:
            self.sweep_expired(now)
