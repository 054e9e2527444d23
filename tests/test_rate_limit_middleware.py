"""Tests for the rate limiting chain middleware."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from apiguard.adapters.rate_limit.base import RateLimitConfig
from apiguard.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from apiguard.core.chain import run_chain
from apiguard.core.config import settings
from apiguard.core.rate_limit import build_rate_limit_key, rate_limiter


@pytest.fixture
def clock() -> Mock:
    return Mock(return_value=1000.0)


@pytest.mark.asyncio
async def test_three_allowed_then_denied_with_retry_after(make_exchange, json_handler, clock) -> None:
    middleware = rate_limiter(RateLimitConfig(max_requests=3, window_seconds=60), clock=clock)
    handler, calls = json_handler()

    remaining = []
    for _ in range(3):
        exchange = await run_chain([middleware], handler, make_exchange(client="1.2.3.4"))
        assert exchange.status == 200
        assert exchange.headers["X-RateLimit-Limit"] == "3"
        remaining.append(exchange.headers["X-RateLimit-Remaining"])

    assert remaining == ["2", "1", "0"]

    denied = await run_chain([middleware], handler, make_exchange(client="1.2.3.4"))

    assert denied.status == 429
    assert denied.headers["Retry-After"] == "60"
    assert denied.headers["X-RateLimit-Limit"] == "3"
    assert denied.headers["X-RateLimit-Remaining"] == "0"
    assert denied.body == {
        "error": "Límite de peticiones excedido, intente en 60 segundos",
        "timestamp": "2026-01-01T00:00:00+00:00",
    }
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_denial_message_is_localized(make_exchange, json_handler, clock) -> None:
    middleware = rate_limiter(RateLimitConfig(max_requests=1, window_seconds=30), clock=clock)
    handler, _ = json_handler()

    await run_chain([middleware], handler, make_exchange(lang="en"))
    clock.return_value = 1010.2
    denied = await run_chain([middleware], handler, make_exchange(lang="en"))

    assert denied.body["error"] == "Rate limit exceeded, try again in 20 seconds"
    assert denied.headers["Retry-After"] == "20"


@pytest.mark.asyncio
async def test_window_reset_allows_again(make_exchange, json_handler, clock) -> None:
    middleware = rate_limiter(RateLimitConfig(max_requests=2, window_seconds=60), clock=clock)
    handler, _ = json_handler()

    for _ in range(5):
        await run_chain([middleware], handler, make_exchange())

    clock.return_value = 1060.0
    exchange = await run_chain([middleware], handler, make_exchange())

    assert exchange.status == 200
    assert exchange.headers["X-RateLimit-Remaining"] == "1"


@pytest.mark.asyncio
async def test_key_covers_method_path_and_client_but_not_query(make_exchange, json_handler, clock) -> None:
    middleware = rate_limiter(RateLimitConfig(max_requests=1, window_seconds=60), clock=clock)
    handler, _ = json_handler()

    assert (await run_chain([middleware], handler, make_exchange(query_string="a=1"))).status == 200
    # same path, different query: same bucket
    assert (await run_chain([middleware], handler, make_exchange(query_string="a=2"))).status == 429

    assert (await run_chain([middleware], handler, make_exchange(method="POST"))).status == 200
    assert (await run_chain([middleware], handler, make_exchange(path="/api/productos"))).status == 200
    assert (await run_chain([middleware], handler, make_exchange(client="5.6.7.8"))).status == 200


def test_build_rate_limit_key(make_exchange) -> None:
    exchange = make_exchange(method="get", path="/api/usuarios", query_string="x=1", client="1.2.3.4")

    assert build_rate_limit_key(exchange) == "GET:/api/usuarios:1.2.3.4"


@pytest.mark.asyncio
async def test_each_factory_call_owns_its_state(make_exchange, json_handler, clock) -> None:
    config = RateLimitConfig(max_requests=1, window_seconds=60)
    first = rate_limiter(config, clock=clock)
    second = rate_limiter(config, clock=clock)
    handler, _ = json_handler()

    await run_chain([first], handler, make_exchange())

    assert (await run_chain([second], handler, make_exchange())).status == 200
    assert (await run_chain([first], handler, make_exchange())).status == 429


@pytest.mark.asyncio
async def test_explicit_limiter_is_used(make_exchange, json_handler) -> None:
    limiter = InMemoryFixedWindowRateLimiter(RateLimitConfig(max_requests=7, window_seconds=5))
    middleware = rate_limiter(limiter=limiter)
    handler, _ = json_handler()

    exchange = await run_chain([middleware], handler, make_exchange())

    assert exchange.headers["X-RateLimit-Limit"] == "7"
    assert limiter.get_entry("GET:/api/usuarios:1.2.3.4").count == 1


def test_defaults_come_from_settings() -> None:
    middleware = rate_limiter()

    assert middleware.limiter.config.max_requests == settings.app.rate_limit_requests
    assert middleware.limiter.config.window_seconds == settings.app.rate_limit_window_seconds


def test_invalid_config_fails_at_construction() -> None:
    with pytest.raises(ValueError):
        rate_limiter(RateLimitConfig(max_requests=0, window_seconds=60))


@pytest.mark.asyncio
async def test_disabled_rate_limit_passes_through(
    make_exchange, json_handler, clock, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings.app, "rate_limit_enabled", False)
    middleware = rate_limiter(RateLimitConfig(max_requests=1, window_seconds=60), clock=clock)
    handler, calls = json_handler()

    for _ in range(3):
        exchange = await run_chain([middleware], handler, make_exchange())
        assert exchange.status == 200
        assert "X-RateLimit-Limit" not in exchange.headers

    assert len(calls) == 3
