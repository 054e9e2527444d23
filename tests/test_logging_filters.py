"""Tests for sensitive data filtering and JSON log output."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from apiguard.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


@pytest.fixture
def capture():
    """Logger wired to an in-memory JSON handler; yields (logger, stream)."""

    logger = logging.getLogger("test_apiguard_logging")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()
    clear_request_id()


def test_redacts_credentials(capture):
    logger, stream = capture

    logger.info(
        "auth_event",
        extra={"authorization": "Bearer mi-token-secreto", "password": "admin123", "path": "/auth/login"},
    )

    output = stream.getvalue()
    assert "mi-token-secreto" not in output
    assert "admin123" not in output
    assert "[REDACTED]" in output
    assert "/auth/login" in output


def test_redacts_nested_headers(capture):
    logger, stream = capture

    logger.info(
        "headers_event",
        extra={"headers": {"Authorization": "Bearer abc", "user-agent": "pytest"}},
    )

    record = json.loads(stream.getvalue())
    assert record["headers"]["Authorization"] == "[REDACTED]"
    assert record["headers"]["user-agent"] == "pytest"


def test_safe_fields_pass_through(capture):
    logger, stream = capture

    logger.info(
        "rate_limit.exceeded",
        extra={"key_hash": "abcd1234", "limit": 5, "retry_after_s": 42},
    )

    record = json.loads(stream.getvalue())
    assert record["message"] == "rate_limit.exceeded"
    assert record["level"] == "info"
    assert record["limit"] == 5
    assert record["retry_after_s"] == 42
    assert "[REDACTED]" not in stream.getvalue()


def test_request_id_from_context(capture):
    logger, stream = capture
    set_request_id("req-789")

    logger.info("cache.hit", extra={"cache_key": "/api/productos"})

    record = json.loads(stream.getvalue())
    assert record["request_id"] == "req-789"
    assert record["cache_key"] == "/api/productos"
