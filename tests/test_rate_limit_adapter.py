"""Unit tests for in-memory rate limiter adapter."""

from unittest.mock import Mock

import pytest

from apiguard.adapters.rate_limit.base import RateLimitConfig
from apiguard.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter


def _limiter(max_requests: int, window_seconds: int, **kwargs) -> tuple[InMemoryFixedWindowRateLimiter, Mock]:
    clock = Mock(return_value=1000.0)
    limiter = InMemoryFixedWindowRateLimiter(
        RateLimitConfig(max_requests=max_requests, window_seconds=window_seconds),
        clock=clock,
        **kwargs,
    )
    return limiter, clock


def test_remaining_decreases_up_to_limit_in_same_window() -> None:
    limiter, _ = _limiter(4, 60)

    remaining = [limiter.check("k").remaining for _ in range(4)]

    assert remaining == [3, 2, 1, 0]


def test_blocks_when_over_limit_with_retry_after() -> None:
    limiter, clock = _limiter(2, 60)

    assert limiter.check("k").allowed is True
    clock.return_value = 1010.5
    assert limiter.check("k").allowed is True

    blocked = limiter.check("k")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    # window opened at 1000.0, closes at 1060.0 -> 49.5 s left
    assert blocked.retry_after_seconds == 50
    assert blocked.reset_at == 1060.0


def test_denied_requests_keep_counting() -> None:
    limiter, _ = _limiter(1, 60)

    limiter.check("k")
    limiter.check("k")
    limiter.check("k")

    entry = limiter.get_entry("k")
    assert entry is not None
    assert entry.count == 3


def test_window_starts_at_first_request() -> None:
    limiter, clock = _limiter(1, 10)
    clock.return_value = 1005.0

    assert limiter.check("k").allowed is True
    clock.return_value = 1014.9
    assert limiter.check("k").allowed is False

    clock.return_value = 1015.0
    decision = limiter.check("k")
    assert decision.allowed is True
    assert decision.remaining == 0


def test_reset_ignores_previous_denials() -> None:
    limiter, clock = _limiter(3, 60)

    for _ in range(10):
        limiter.check("k")

    clock.return_value = 1060.0
    decision = limiter.check("k")
    assert decision.allowed is True
    assert decision.remaining == 2


def test_explicit_now_overrides_clock() -> None:
    limiter, _ = _limiter(1, 60)

    assert limiter.check("k", now=0.0).allowed is True
    assert limiter.check("k", now=59.0).allowed is False
    assert limiter.check("k", now=60.0).allowed is True


def test_isolated_by_key() -> None:
    limiter, _ = _limiter(1, 60)

    assert limiter.check("k1").allowed is True
    assert limiter.check("k1").allowed is False

    assert limiter.check("k2").allowed is True


def test_sweep_expired_removes_only_finished_windows() -> None:
    limiter, clock = _limiter(5, 10)
    limiter.check("old")
    clock.return_value = 1005.0
    limiter.check("fresh")

    clock.return_value = 1010.0
    assert limiter.sweep_expired() == 1
    assert limiter.get_entry("old") is None
    assert limiter.get_entry("fresh") is not None
    assert len(limiter) == 1


def test_periodic_sweep_runs_every_interval() -> None:
    limiter, clock = _limiter(5, 10, sweep_interval=3)
    limiter.check("a")
    limiter.check("b")

    clock.return_value = 2000.0
    # third check triggers the sweep before counting "c"
    limiter.check("c")

    assert limiter.get_entry("a") is None
    assert limiter.get_entry("b") is None
    assert limiter.get_entry("c") is not None


def test_default_config() -> None:
    limiter = InMemoryFixedWindowRateLimiter()

    assert limiter.config.max_requests == 5
    assert limiter.config.window_seconds == 60


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_requests": 0, "window_seconds": 60},
        {"max_requests": 1, "window_seconds": 0},
        {"max_requests": -3, "window_seconds": 60},
        {"max_requests": 2.5, "window_seconds": 60},
        {"max_requests": True, "window_seconds": 60},
    ],
)
def test_invalid_config(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        RateLimitConfig(**kwargs)


def test_invalid_arguments() -> None:
    with pytest.raises(ValueError):
        InMemoryFixedWindowRateLimiter(sweep_interval=-1)

    limiter = InMemoryFixedWindowRateLimiter()
    with pytest.raises(ValueError):
        limiter.check("")
