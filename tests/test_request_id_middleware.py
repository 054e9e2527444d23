from __future__ import annotations

from datetime import datetime

from fastapi.testclient import TestClient

from apiguard.core.app_factory import create_app


client = TestClient(create_app(configure_logs=False))


def test_preserves_incoming_request_id_header():
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing():
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID")
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_timestamp_is_stamped_on_request_state():
    resp = client.get("/")

    stamp = resp.json()["timestamp"]
    assert datetime.fromisoformat(stamp).tzinfo is not None
