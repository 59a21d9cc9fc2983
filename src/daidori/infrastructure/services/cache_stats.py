"""Thumbnail request statistics.

Counts lookups per cache tier together with the outcome of generation
requests.  Thread-safe; a single collector is shared by the service and any
worker threads it dispatches.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

MEMORY_TIER = "memory"
DISK_TIER = "disk"


@dataclass(frozen=True)
class TierStats:
    """Immutable hit/miss counters for one cache tier."""

    hits: int = 0
    misses: int = 0

    @property
    def lookups(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Hit rate in [0.0, 1.0]; 0.0 before the first lookup."""
        if self.lookups == 0:
            return 0.0
        return self.hits / self.lookups


@dataclass(frozen=True)
class ThumbnailStats:
    """Snapshot of every counter kept by :class:`ThumbnailStatsCollector`."""

    memory: TierStats = field(default_factory=TierStats)
    disk: TierStats = field(default_factory=TierStats)
    generated: int = 0
    failed: int = 0

    @property
    def requests(self) -> int:
        return self.memory.lookups

    @property
    def hit_rate(self) -> float:
        """Share of requests answered by either cache tier."""
        if self.requests == 0:
            return 0.0
        return (self.memory.hits + self.disk.hits) / self.requests


class ThumbnailStatsCollector:
    """Thread-safe counters for the two-tier thumbnail cache.

    Usage::

        stats = ThumbnailStatsCollector()
        stats.record_lookup(MEMORY_TIER, hit=False)
        stats.record_lookup(DISK_TIER, hit=True)
        print(stats.snapshot().hit_rate)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits = {MEMORY_TIER: 0, DISK_TIER: 0}
        self._misses = {MEMORY_TIER: 0, DISK_TIER: 0}
        self._generated = 0
        self._failed = 0

    def record_lookup(self, tier: str, *, hit: bool) -> None:
        if tier not in self._hits:
            raise ValueError(f"Unknown cache tier: {tier}")
        with self._lock:
            if hit:
                self._hits[tier] += 1
            else:
                self._misses[tier] += 1

    def record_generated(self) -> None:
        with self._lock:
            self._generated += 1

    def record_failure(self) -> None:
        with self._lock:
            self._failed += 1

    def snapshot(self) -> ThumbnailStats:
        with self._lock:
            return ThumbnailStats(
                memory=TierStats(self._hits[MEMORY_TIER], self._misses[MEMORY_TIER]),
                disk=TierStats(self._hits[DISK_TIER], self._misses[DISK_TIER]),
                generated=self._generated,
                failed=self._failed,
            )

    def reset(self) -> None:
        with self._lock:
            for tier in self._hits:
                self._hits[tier] = 0
                self._misses[tier] = 0
            self._generated = 0
            self._failed = 0
