"""
Tests for the in-memory standings cache.
"""
import pytest

from tourney_api import cache


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock(monkeypatch):
    now = {"t": 1_000_000.0}
    monkeypatch.setattr(cache.time, "time", lambda: now["t"])
    return now


def test_hit_then_expiry(clock):
    cache.set("k", "v", ttl_seconds=60)
    assert cache.get("k") == "v"

    clock["t"] += 61
    assert cache.get("k") is None


def test_zero_ttl_disables_caching(clock):
    cache.set("k", "v", ttl_seconds=0)
    assert cache.size() == 0


def test_expired_entries_swept_on_insert(clock):
    for i in range(200):
        cache.set(f"standings:{i}", i, ttl_seconds=60)
    assert cache.size() == 200

    clock["t"] += 3600
    cache.set("standings:new", "fresh", ttl_seconds=60)

    assert cache.size() == 1
    assert cache.get("standings:new") == "fresh"


def test_max_entries_evicts_oldest(clock):
    for i in range(5):
        cache.set(f"k{i}", i, ttl_seconds=60, max_entries=3)

    assert cache.size() == 3
    assert cache.get("k0") is None
    assert cache.get("k1") is None
    assert [cache.get(f"k{i}") for i in (2, 3, 4)] == [2, 3, 4]


def test_reinsert_refreshes_position(clock):
    for key in ("a", "b", "c"):
        cache.set(key, key, ttl_seconds=60, max_entries=3)
    cache.set("a", "a2", ttl_seconds=60, max_entries=3)
    cache.set("d", "d", ttl_seconds=60, max_entries=3)

    assert cache.get("b") is None
    assert cache.get("a") == "a2"
    assert cache.size() == 3


def test_make_key_is_order_insensitive():
    k1 = cache.make_key("standings", {"a": 1, "b": [1, 2]})
    k2 = cache.make_key("standings", {"b": [1, 2], "a": 1})
    assert k1 == k2
    assert k1.startswith("standings:")


def test_make_key_rejects_blank_namespace():
    with pytest.raises(ValueError):
        cache.make_key("  ", {})
