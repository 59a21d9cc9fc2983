"""Tests for MemoryThumbnailCache (L1 LRU cache)."""

from __future__ import annotations

import random
import threading

import pytest

from daidori.config import MEMORY_CACHE_MAX_SIZE
from daidori.infrastructure.services.thumbnail_cache import MemoryThumbnailCache


class TestMemoryThumbnailCache:
    def test_insert_and_get(self):
        cache = MemoryThumbnailCache(max_size=10)
        cache.insert("k1", b"data1")
        assert cache.get("k1") == b"data1"

    def test_get_miss(self):
        cache = MemoryThumbnailCache()
        assert cache.get("missing") is None

    def test_default_capacity(self):
        assert MemoryThumbnailCache().capacity == MEMORY_CACHE_MAX_SIZE == 20

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_rejects_non_positive_capacity(self, capacity):
        with pytest.raises(ValueError):
            MemoryThumbnailCache(max_size=capacity)

    def test_eviction_on_max_size(self):
        cache = MemoryThumbnailCache(max_size=2)
        cache.insert("A", b"a")
        cache.insert("B", b"b")
        cache.insert("C", b"c")  # should evict A
        assert cache.get("A") is None
        assert cache.get("B") == b"b"
        assert cache.get("C") == b"c"

    def test_get_refreshes_recency(self):
        cache = MemoryThumbnailCache(max_size=3)
        cache.insert("A", b"a")
        cache.insert("B", b"b")
        cache.insert("C", b"c")
        assert cache.get("A") == b"a"
        cache.insert("D", b"d")  # B is now least recently used
        assert "B" not in cache
        assert cache.keys() == ["C", "A", "D"]

    def test_update_existing_key_does_not_evict(self):
        cache = MemoryThumbnailCache(max_size=2)
        cache.insert("A", b"old")
        cache.insert("B", b"b")
        cache.insert("A", b"new")
        assert cache.size == 2
        assert cache.get("A") == b"new"
        assert cache.keys() == ["B", "A"]

    def test_contains_does_not_touch_recency(self):
        cache = MemoryThumbnailCache(max_size=2)
        cache.insert("A", b"a")
        cache.insert("B", b"b")
        assert "A" in cache
        cache.insert("C", b"c")
        assert "A" not in cache

    def test_invalidate(self):
        cache = MemoryThumbnailCache()
        cache.insert("k1", b"data")
        cache.invalidate("k1")
        assert cache.get("k1") is None

    def test_invalidate_missing_key(self):
        cache = MemoryThumbnailCache()
        cache.invalidate("nope")  # should not raise

    def test_clear(self):
        cache = MemoryThumbnailCache()
        cache.insert("a", b"1")
        cache.insert("b", b"2")
        cache.clear()
        assert cache.size == 0
        assert cache.get("a") is None

    def test_memory_usage_bytes(self):
        cache = MemoryThumbnailCache()
        cache.insert("k1", b"12345")
        cache.insert("k2", b"67")
        assert cache.memory_usage_bytes == 7

    def test_max_size_one(self):
        cache = MemoryThumbnailCache(max_size=1)
        cache.insert("k1", b"d1")
        cache.insert("k2", b"d2")
        assert cache.get("k1") is None
        assert cache.get("k2") == b"d2"
        assert cache.size == 1

    def test_size_never_exceeds_capacity(self):
        rng = random.Random(1234)
        cache = MemoryThumbnailCache(max_size=5)
        for _ in range(500):
            key = f"k{rng.randrange(12)}"
            if rng.random() < 0.6:
                cache.insert(key, key.encode())
            else:
                value = cache.get(key)
                assert value is None or value == key.encode()
            assert cache.size <= 5
            assert len(set(cache.keys())) == cache.size

    def test_concurrent_inserts_respect_capacity(self):
        cache = MemoryThumbnailCache(max_size=8)

        def worker(offset: int) -> None:
            for i in range(200):
                key = f"{offset}-{i % 16}"
                cache.insert(key, b"x")
                cache.get(key)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert cache.size == 8
        assert len(cache.keys()) == 8
