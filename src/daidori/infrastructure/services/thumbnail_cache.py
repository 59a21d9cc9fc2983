"""L1: LRU in-memory thumbnail cache."""

from __future__ import annotations

import threading
from collections import OrderedDict

from daidori.config import MEMORY_CACHE_MAX_SIZE


class MemoryThumbnailCache:
    """L1: bounded LRU cache mapping cache keys to encoded thumbnail bytes.

    The ``OrderedDict`` doubles as the recency list (most recently used at
    the end), so promotion and eviction are O(1) and a key can never exist in
    one structure but not the other.  Every public method holds the lock only
    for its own duration; callers must never hold it across decode work.
    """

    def __init__(self, max_size: int = MEMORY_CACHE_MAX_SIZE):
        if max_size < 1:
            raise ValueError(f"Memory cache capacity must be at least 1, got {max_size}")
        self._cache: OrderedDict[str, bytes] = OrderedDict()
        self._max_size = max_size
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            data = self._cache.get(key)
            if data is None:
                return None
            self._cache.move_to_end(key)
            return data

    def insert(self, key: str, data: bytes) -> None:
        """Store *data* under *key* as the most recently used entry.

        Updating an existing key never evicts; a new key at capacity evicts
        exactly the least recently used entry first.
        """
        with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            elif len(self._cache) >= self._max_size:
                self._cache.popitem(last=False)  # evict oldest
            self._cache[key] = data

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def keys(self) -> list[str]:
        """Keys ordered from least to most recently used."""
        with self._lock:
            return list(self._cache)

    def __contains__(self, key: object) -> bool:
        # Membership checks do not count as a use.
        with self._lock:
            return key in self._cache

    @property
    def capacity(self) -> int:
        return self._max_size

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def memory_usage_bytes(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._cache.values())
