"""Rate limiting adapters.

A small abstraction layer: the middleware talks to AbstractRateLimiter, and
the in-memory implementation can later be swapped for a shared store.
"""

from apiguard.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitConfig,
    RateLimitDecision,
)
from apiguard.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitConfig",
    "RateLimitDecision",
]
