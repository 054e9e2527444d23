"""Unit tests for the in-memory response store."""

import threading

import pytest

from apiguard.adapters.cache.in_memory import InMemoryTTLStore


class FakeClock:
    """Deterministic clock used to test expiration logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def test_set_and_get_updates_hit_miss_counters() -> None:
    store = InMemoryTTLStore(ttl_seconds=10)

    assert store.get("/missing") is None

    body = {"productos": [], "total": 0}
    store.set("/api/productos", body)

    entry = store.get("/api/productos")
    assert entry is not None
    assert entry.response_body == body

    stats = store.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_entry_is_valid_strictly_before_expiry() -> None:
    clock = FakeClock()
    store = InMemoryTTLStore(ttl_seconds=5, clock=clock)
    entry = store.set("/k", {"data": True})

    assert entry.expires_at == 1005.0

    clock.advance(4.5)
    assert store.get("/k") is not None

    clock.advance(0.5)
    assert store.get("/k") is None
    assert store.stats()["evictions"] == 1


def test_set_overwrites_and_refreshes_expiry() -> None:
    clock = FakeClock()
    store = InMemoryTTLStore(ttl_seconds=5, clock=clock)
    store.set("/k", {"v": 1})

    clock.advance(4)
    store.set("/k", {"v": 2})
    clock.advance(4)

    entry = store.get("/k")
    assert entry is not None
    assert entry.response_body == {"v": 2}


def test_lru_eviction_removes_least_recently_used() -> None:
    store = InMemoryTTLStore(ttl_seconds=100, max_entries=2)
    store.set("a", {"v": 1})
    store.set("b", {"v": 2})

    # Access "a" so that "b" becomes least recently used
    assert store.get("a") is not None

    store.set("c", {"v": 3})

    assert store.get("a") is not None
    assert store.get("c") is not None
    assert store.get("b") is None


def test_clear_drops_entries_and_reports_count() -> None:
    store = InMemoryTTLStore(ttl_seconds=10)
    store.set("a", {"v": 1})
    store.set("b", {"v": 2})

    assert store.clear() == 2
    assert len(store) == 0
    assert store.get("a") is None


@pytest.mark.parametrize("kwargs", [{"ttl_seconds": 0}, {"ttl_seconds": 5, "max_entries": 0}])
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryTTLStore(**kwargs)


def test_thread_safety_under_concurrent_sets() -> None:
    store = InMemoryTTLStore(ttl_seconds=30, max_entries=None)
    total_keys = 50

    def _writer(idx: int) -> None:
        store.set(f"/k-{idx}", {"v": idx})

    threads = [threading.Thread(target=_writer, args=(i,)) for i in range(total_keys)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.stats()["entries"] == total_keys
    assert store.get("/k-0").response_body == {"v": 0}
    assert store.get("/k-49").response_body == {"v": 49}
