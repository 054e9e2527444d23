"""Response cache middleware for GET routes.

``cache_response`` serves fresh cached bodies without reaching the handler
and, on a miss, decorates the exchange's emitter so that a 2xx body is stored
under the literal request target. ``invalidate_cache`` clears everything and
is meant to sit in front of write handlers.

Keys are the literal target, so ``?a=1&b=2`` and ``?b=2&a=1`` are cached
separately.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from apiguard.adapters.cache.base import AbstractResponseStore
from apiguard.adapters.cache.in_memory import InMemoryTTLStore
from apiguard.core.chain import Exchange, NextFn, ResponseEmitter

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30


class CacheAction(str, enum.Enum):
    PASS_THROUGH = "pass_through"
    SERVE_CACHED = "serve_cached"
    CONTINUE = "continue"


@dataclass(frozen=True)
class CacheDecision:
    action: CacheAction
    body: Any = None


class _CapturingEmitter:
    """Emitter decorator storing successful bodies before delegating."""

    def __init__(
        self,
        inner: ResponseEmitter,
        on_success: Callable[[int, Any], None],
    ) -> None:
        self._inner = inner
        self._on_success = on_success

    def emit(self, status: int, body: Any) -> None:
        if 200 <= status < 300:
            self._on_success(status, body)
        self._inner.emit(status, body)


class ResponseCache:
    """Owns a response store and exposes the two cache middlewares.

    Args:
        ttl_seconds: Lifetime of each cached response.
        max_entries: Optional LRU bound for the default store.
        store: Explicit store; overrides ttl/max_entries when given.
        clock: Time source returning UNIX seconds.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        *,
        max_entries: int | None = None,
        store: AbstractResponseStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")

        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self.store = store or InMemoryTTLStore(ttl_seconds, max_entries, clock=clock)

    def intercept(self, method: str, target: str, now: float | None = None) -> CacheDecision:
        """Decide how a request should be treated by the cache."""

        if method.upper() != "GET":
            return CacheDecision(CacheAction.PASS_THROUGH)

        entry = self.store.get(target, now if now is not None else self._clock())
        if entry is not None:
            return CacheDecision(CacheAction.SERVE_CACHED, entry.response_body)
        return CacheDecision(CacheAction.CONTINUE)

    def invalidate_all(self) -> int:
        dropped = self.store.clear()
        logger.info("cache.invalidated", extra={"dropped": dropped})
        return dropped

    def stats(self) -> dict[str, int | float | None]:
        return self.store.stats()

    async def cache_response(self, exchange: Exchange, call_next: NextFn) -> None:
        """Middleware: serve from cache or capture the handler's 2xx body."""

        key = exchange.target
        decision = self.intercept(exchange.method, key)

        if decision.action is CacheAction.PASS_THROUGH:
            await call_next()
            return

        if decision.action is CacheAction.SERVE_CACHED:
            logger.debug("cache.hit", extra={"cache_key": key[:64]})
            exchange.set_header("X-Cache-Status", "HIT")
            exchange.emit(200, decision.body)
            return

        logger.debug("cache.miss", extra={"cache_key": key[:64]})
        exchange.set_header("X-Cache-Status", "MISS")

        def store_success(status: int, body: Any) -> None:
            self.store.set(key, body, self._clock())
            exchange.set_header("Cache-Control", f"public, max-age={self.ttl_seconds}")
            logger.debug(
                "cache.set",
                extra={"cache_key": key[:64], "status": status, "ttl_s": self.ttl_seconds},
            )

        exchange.wrap_emitter(lambda inner: _CapturingEmitter(inner, store_success))
        await call_next()

    async def invalidate_cache(self, exchange: Exchange, call_next: NextFn) -> None:
        """Middleware: drop every cached response, then continue."""

        self.invalidate_all()
        await call_next()
