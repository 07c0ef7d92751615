"""Unit tests for the bounded TTL cache."""

import threading

import pytest

from paylite.payments.cache import CacheMarker, TTLCache


def test_set_then_get_returns_value(cache):
    cache.set("payment:1", {"id": "1"})
    assert cache.get("payment:1") == {"id": "1"}


def test_absent_marker_round_trips(cache):
    """Negative results are cached like any other value."""

    cache.set("payment:missing", CacheMarker.ABSENT)
    assert cache.get("payment:missing") is CacheMarker.ABSENT


def test_unknown_key_is_not_cached(cache):
    assert cache.get("nope") is CacheMarker.NOT_CACHED


def test_entry_expires_after_ttl(cache, clock):
    """Entries are readable until the TTL elapses, then dropped on read."""

    cache.set("k", "v")
    clock.advance(59)
    assert cache.get("k") == "v"
    clock.advance(1)
    assert cache.get("k") is CacheMarker.NOT_CACHED
    assert len(cache) == 0


def test_reads_do_not_extend_ttl(cache, clock):
    cache.set("k", "v")
    for _ in range(5):
        clock.advance(10)
        cache.get("k")
    clock.advance(10)
    assert cache.get("k") is CacheMarker.NOT_CACHED


def test_capacity_evicts_oldest_inserted(clock):
    """Reading an entry does not protect it from eviction."""

    cache = TTLCache(ttl_seconds=60, max_entries=3, clock=clock, name="test")
    for key in ("a", "b", "c"):
        cache.set(key, key)
    assert cache.get("a") == "a"

    cache.set("d", "d")

    assert len(cache) == 3
    assert cache.get("a") is CacheMarker.NOT_CACHED
    assert [cache.get(k) for k in ("b", "c", "d")] == ["b", "c", "d"]


def test_size_never_exceeds_capacity(clock):
    cache = TTLCache(ttl_seconds=60, max_entries=10, clock=clock, name="test")
    for i in range(25):
        cache.set(f"k{i}", i)
        assert len(cache) <= 10
    assert cache.get("k14") is CacheMarker.NOT_CACHED
    assert cache.get("k15") == 15


def test_reset_existing_key_replaces_without_eviction(clock):
    cache = TTLCache(ttl_seconds=60, max_entries=2, clock=clock, name="test")
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 3)

    assert cache.get("a") == 3
    assert cache.get("b") == 2

    # "b" is now the oldest insertion.
    cache.set("c", 4)
    assert cache.get("b") is CacheMarker.NOT_CACHED
    assert cache.get("a") == 3


def test_reset_restamps_ttl(cache, clock):
    cache.set("k", "old")
    clock.advance(50)
    cache.set("k", "new")
    clock.advance(50)
    assert cache.get("k") == "new"


def test_delete_and_clear(cache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.delete("a")
    cache.delete("never-set")
    assert cache.get("a") is CacheMarker.NOT_CACHED
    assert cache.get("b") == 2
    cache.clear()
    assert len(cache) == 0


@pytest.mark.parametrize("ttl, size", [(0, 10), (-1, 10), (60, 0)])
def test_invalid_configuration_rejected(ttl, size):
    with pytest.raises(ValueError):
        TTLCache(ttl_seconds=ttl, max_entries=size)


def test_concurrent_writers_respect_capacity():
    """Parallel sets never push the cache past its bound."""

    cache = TTLCache(ttl_seconds=60, max_entries=50, name="test")

    def writer(prefix: str) -> None:
        for i in range(500):
            cache.set(f"{prefix}:{i}", i)

    threads = [threading.Thread(target=writer, args=(f"t{n}",)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 50
