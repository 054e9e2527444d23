"""Rate limiting middleware for the request chain.

Strategy:
- Fixed window per ``METHOD:path:client`` key, opened by the first request.
- Each ``rate_limiter(...)`` call owns its limiter state, so routes can carry
  different quotas (stricter on login, looser on reads) and tests can build
  isolated instances.
- Disabled globally when ``APP_RATE_LIMIT_ENABLED=false``.
"""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Callable

from apiguard.adapters.rate_limit.base import AbstractRateLimiter, RateLimitConfig
from apiguard.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from apiguard.core.chain import Exchange, Middleware, NextFn
from apiguard.core.config import settings
from apiguard.core.i18n import translate

logger = logging.getLogger(__name__)


def default_rate_limit_config() -> RateLimitConfig:
    """Build the default quota from settings (5 requests / 60 s unless overridden)."""

    return RateLimitConfig(
        max_requests=settings.app.rate_limit_requests,
        window_seconds=settings.app.rate_limit_window_seconds,
    )


def build_rate_limit_key(exchange: Exchange) -> str:
    """Build the limiter key for an exchange: method, path without query, client."""

    return f"{exchange.method}:{exchange.path}:{exchange.client}"


def _hash_limiter_key(key: str) -> str:
    """Hash the key for logging without exposing client addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def rate_limiter(
    config: RateLimitConfig | None = None,
    *,
    limiter: AbstractRateLimiter | None = None,
    clock: Callable[[], float] = time.time,
) -> Middleware:
    """Create a rate limiting middleware.

    Args:
        config: Quota for this middleware; settings defaults when omitted.
            Ignored when an explicit ``limiter`` is supplied.
        limiter: Pre-built limiter (e.g. shared between routes or in tests).
        clock: Time source used when building the default limiter.

    Returns:
        Middleware that sets ``X-RateLimit-*`` headers and answers 429 with
        ``Retry-After`` once the quota is exhausted.

    Raises:
        ValueError: If the configuration is invalid (raised here, at
            construction time, not on the first request).
    """

    if limiter is None:
        limiter = InMemoryFixedWindowRateLimiter(
            config or default_rate_limit_config(),
            clock=clock,
            sweep_interval=settings.app.rate_limit_sweep_interval,
        )

    async def rate_limit_middleware(exchange: Exchange, call_next: NextFn) -> None:
        if not settings.app.rate_limit_enabled:
            await call_next()
            return

        key = build_rate_limit_key(exchange)
        decision = limiter.check(key)

        exchange.set_header("X-RateLimit-Limit", decision.limit)

        if decision.allowed:
            exchange.set_header("X-RateLimit-Remaining", decision.remaining)
            logger.debug(
                "rate_limit.allowed",
                extra={
                    "key_hash": _hash_limiter_key(key),
                    "limit": decision.limit,
                    "remaining": decision.remaining,
                    "window_s": limiter.config.window_seconds,
                },
            )
            await call_next()
            return

        retry_after = decision.retry_after_seconds or 0
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "key_hash": _hash_limiter_key(key),
                "method": exchange.method,
                "path": exchange.path,
                "limit": decision.limit,
                "window_s": limiter.config.window_seconds,
                "retry_after_s": retry_after,
            },
        )

        exchange.set_header("Retry-After", retry_after)
        exchange.set_header("X-RateLimit-Remaining", 0)
        exchange.emit(
            429,
            {
                "error": translate(exchange.lang, "rate_limit_exceeded", retry_after),
                "timestamp": exchange.timestamp,
            },
        )

    rate_limit_middleware.limiter = limiter  # type: ignore[attr-defined]
    return rate_limit_middleware
