"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any apiguard import so settings never
pick up a developer's local .env file.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from apiguard.core.chain import Exchange


@pytest.fixture
def make_exchange():
    """Factory for chain exchanges with sensible request defaults."""

    def _make(
        method: str = "GET",
        path: str = "/api/usuarios",
        query_string: str = "",
        client: str = "1.2.3.4",
        lang: str = "es",
        headers: dict | None = None,
    ) -> Exchange:
        return Exchange(
            method=method,
            path=path,
            query_string=query_string,
            client=client,
            request_headers={k.lower(): v for k, v in (headers or {}).items()},
            lang=lang,
            timestamp="2026-01-01T00:00:00+00:00",
        )

    return _make


@pytest.fixture
def json_handler():
    """Factory for terminal handlers emitting a fixed status/body and recording calls."""

    def _make(status: int = 200, body: object = None):
        calls: list[Exchange] = []

        async def handler(exchange: Exchange) -> None:
            calls.append(exchange)
            exchange.emit(status, body if body is not None else {"ok": True})

        return handler, calls

    return _make
