"""Rate limiter interfaces.

The HTTP layer depends on this abstraction, not on the concrete storage, so
a shared backend could replace the in-memory one without touching routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitConfig:
    """Quota applied by one limiter instance.

    Attributes:
        max_requests: Requests permitted per key per window.
        window_seconds: Window length, counted from the key's first request.

    Raises:
        ValueError: If either value is not a positive integer.
    """

    max_requests: int = 5
    window_seconds: int = 60

    def __post_init__(self) -> None:
        if isinstance(self.max_requests, bool) or not isinstance(self.max_requests, int):
            raise ValueError("max_requests must be an integer")
        if isinstance(self.window_seconds, bool) or not isinstance(self.window_seconds, int):
            raise ValueError("window_seconds must be an integer")
        if self.max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if self.window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Max requests per window.
        remaining: Requests left in the current window (0 when denied).
        reset_at: UNIX time (seconds) at which the window expires.
        retry_after_seconds: Whole seconds to wait when denied, else None.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    config: RateLimitConfig

    @abstractmethod
    def check(self, key: str, now: float | None = None) -> RateLimitDecision:
        """Count one request for ``key`` and decide whether it is allowed.

        Args:
            key: Composite identity (method, path, client).
            now: UNIX time in seconds; the limiter's clock when omitted.

        Returns:
            RateLimitDecision for this request.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep_expired(self, now: float | None = None) -> int:
        """Drop entries whose window has ended; return how many were removed."""
        raise NotImplementedError
