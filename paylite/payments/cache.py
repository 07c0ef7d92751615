"""Bounded in-process cache with per-entry TTL.

Entries expire lazily: an entry older than the TTL is dropped by the lookup
that finds it, there is no background sweeper. When full, the oldest-inserted
entry is evicted. Reads do not refresh an entry's position, so this is
insertion-order eviction rather than LRU.

The cache is best-effort and local to one process. Two API instances each hold
their own copy, so staleness across instances is bounded only by the TTL.
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from paylite.common.metrics import (
    cache_evictions_total,
    cache_expirations_total,
    cache_hits_total,
    cache_misses_total,
)


class CacheMarker(Enum):
    """Sentinels returned by `TTLCache.get` in place of a real value."""

    # The backing store confirmed there is no record for this key.
    ABSENT = "absent"
    # Nothing usable is cached; the caller must go to the store.
    NOT_CACHED = "not_cached"


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float


class TTLCache:
    """Thread-safe key/value map bounded by entry count and age."""

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
        name: str = "payments",
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.name = name
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        """Return the cached value, `CacheMarker.ABSENT`, or `CacheMarker.NOT_CACHED`."""

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                cache_misses_total.labels(cache=self.name).inc()
                return CacheMarker.NOT_CACHED
            if self._clock() - entry.stored_at >= self.ttl_seconds:
                del self._entries[key]
                cache_expirations_total.labels(cache=self.name).inc()
                cache_misses_total.labels(cache=self.name).inc()
                return CacheMarker.NOT_CACHED
            cache_hits_total.labels(cache=self.name).inc()
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store `value` under `key`, evicting the oldest entry when full."""

        with self._lock:
            # A re-set replaces the entry and moves it to the newest position.
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                oldest_key = next(iter(self._entries))
                del self._entries[oldest_key]
                cache_evictions_total.labels(cache=self.name).inc()
            self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
