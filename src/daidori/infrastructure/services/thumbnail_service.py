"""Two-tier thumbnail service: L1 memory → L2 disk → generate."""

from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import NamedTuple, Protocol

from daidori.application.dtos import ThumbnailRequest, ThumbnailResult, ThumbnailStatus
from daidori.config import THUMBNAIL_WORKERS
from daidori.errors import DaidoriError
from daidori.infrastructure.services.cache_stats import (
    DISK_TIER,
    MEMORY_TIER,
    ThumbnailStatsCollector,
)
from daidori.infrastructure.services.disk_thumbnail_cache import DiskThumbnailCache
from daidori.infrastructure.services.thumbnail_cache import MemoryThumbnailCache
from daidori.infrastructure.services.thumbnail_renderer import ThumbnailRenderer
from daidori.utils.hashutils import derive_cache_key

LOGGER = logging.getLogger(__name__)


class ThumbnailGenerator(Protocol):
    """Protocol for thumbnail generators used on a full cache miss."""

    @property
    def renderer(self) -> ThumbnailRenderer: ...

    def generate(self, path: Path) -> bytes: ...


class _Pipeline(NamedTuple):
    generator: ThumbnailGenerator
    disk_cache: DiskThumbnailCache


class ThumbnailService:
    """Unified two-tier thumbnail cache entry point.

    ``generate`` runs a request to completion on the calling thread;
    ``submit`` dispatches the same work to the worker pool and hands back a
    :class:`~concurrent.futures.Future`.  Concurrent misses for one key are
    not coalesced: each performs the full decode and writes the same bytes.

    The generator and disk tier are swapped together by :meth:`reconfigure`.
    Each request reads them once, so its key, its rendered bytes and the file
    they land in always come from the same configuration.
    """

    def __init__(
        self,
        memory_cache: MemoryThumbnailCache,
        disk_cache: DiskThumbnailCache,
        generator: ThumbnailGenerator,
        executor: ThreadPoolExecutor | None = None,
        stats: ThumbnailStatsCollector | None = None,
        max_workers: int = THUMBNAIL_WORKERS,
    ):
        self._l1 = memory_cache
        self._pipeline = _Pipeline(generator, disk_cache)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="thumbnail",
        )
        self._stats = stats

    @property
    def generator(self) -> ThumbnailGenerator:
        return self._pipeline.generator

    @property
    def disk_cache(self) -> DiskThumbnailCache:
        return self._pipeline.disk_cache

    def reconfigure(
        self,
        generator: ThumbnailGenerator,
        disk_cache: DiskThumbnailCache | None = None,
    ) -> None:
        """Use *generator* (and optionally *disk_cache*) for subsequent requests.

        Requests already running finish with the pair they started with.
        """
        if disk_cache is None:
            disk_cache = self._pipeline.disk_cache
        self._pipeline = _Pipeline(generator, disk_cache)
        LOGGER.debug("Thumbnail service reconfigured: %s", _describe(generator.renderer))

    def shutdown(self, wait: bool = False) -> None:
        """Shut down the internal executor if it was created by this service.

        Callers that supply their own executor are responsible for its
        lifecycle; calling ``shutdown()`` on those instances is a no-op.
        """
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def make_request(self, source_path: str | os.PathLike[str], modified_time: int) -> ThumbnailRequest:
        return _make_request(self._pipeline.generator.renderer, source_path, modified_time)

    @staticmethod
    def _make_key(request: ThumbnailRequest) -> str:
        return derive_cache_key(
            request.source_path,
            request.modified_time,
            request.render_size,
            request.render_quality,
            request.render_format,
            request.render_resample,
        )

    def request_key(self, source_path: str | os.PathLike[str], modified_time: int) -> str:
        """Return the cache key a request for *source_path* would use."""
        return self._make_key(self.make_request(source_path, modified_time))

    def get_thumbnail(
        self,
        source_path: str | os.PathLike[str],
        modified_time: int,
    ) -> ThumbnailResult | None:
        """Synchronous lookup: L1 → L2. Returns *None* on miss."""
        pipeline = self._pipeline
        request = _make_request(pipeline.generator.renderer, source_path, modified_time)
        return self._lookup(request, self._make_key(request), pipeline.disk_cache)

    def generate(
        self,
        source_path: str | os.PathLike[str],
        modified_time: int,
    ) -> ThumbnailResult:
        """Return the thumbnail for *source_path*, generating it on a full miss.

        Decode, validation and unsupported-format errors leave both tiers
        untouched.  A failed disk write is raised as ``StorageError`` and the
        memory tier is not populated either.
        """
        generator, l2 = self._pipeline
        request = _make_request(generator.renderer, source_path, modified_time)
        key = self._make_key(request)

        cached = self._lookup(request, key, l2)
        if cached is not None:
            return cached

        try:
            data = generator.generate(request.source_path)
            cache_path = l2.write(key, data)  # backfill L2
        except DaidoriError:
            if self._stats:
                self._stats.record_failure()
            raise
        self._l1.insert(key, data)  # backfill L1
        if self._stats:
            self._stats.record_generated()
        LOGGER.debug("Generated thumbnail %s for %s", key, request.source_path)
        return ThumbnailResult(
            cache_key=key,
            cache_path=cache_path,
            data=data,
            status=ThumbnailStatus.GENERATED,
        )

    def submit(
        self,
        source_path: str | os.PathLike[str],
        modified_time: int,
    ) -> Future[ThumbnailResult]:
        """Asynchronous request: run :meth:`generate` on the worker pool.

        There is no cancellation of running work and no backpressure; callers
        bound the number of outstanding futures themselves.
        """
        return self._executor.submit(self._generate_logged, source_path, modified_time)

    def _generate_logged(
        self,
        source_path: str | os.PathLike[str],
        modified_time: int,
    ) -> ThumbnailResult:
        try:
            return self.generate(source_path, modified_time)
        except DaidoriError as exc:
            LOGGER.warning("Thumbnail generation failed for %s: %s", source_path, exc)
            raise
        except Exception:
            LOGGER.exception("Unexpected thumbnail failure for %s", source_path)
            raise

    def _lookup(
        self,
        request: ThumbnailRequest,
        key: str,
        l2: DiskThumbnailCache,
    ) -> ThumbnailResult | None:
        # L1: memory
        data = self._l1.get(key)
        if data is not None:
            if self._stats:
                self._stats.record_lookup(MEMORY_TIER, hit=True)
            return ThumbnailResult(
                cache_key=key,
                cache_path=l2.path_for(key),
                data=data,
                status=ThumbnailStatus.CACHED_MEMORY,
            )

        # L2: disk
        data = l2.try_read(key)
        if self._stats:
            self._stats.record_lookup(MEMORY_TIER, hit=False)
            self._stats.record_lookup(DISK_TIER, hit=data is not None)
        if data is None:
            return None
        self._l1.insert(key, data)  # backfill L1
        LOGGER.debug("Disk cache hit %s for %s", key, request.source_path)
        return ThumbnailResult(
            cache_key=key,
            cache_path=l2.path_for(key),
            data=data,
            status=ThumbnailStatus.CACHED_DISK,
        )


def _make_request(
    renderer: ThumbnailRenderer,
    source_path: str | os.PathLike[str],
    modified_time: int,
) -> ThumbnailRequest:
    return ThumbnailRequest(
        source_path=Path(source_path),
        modified_time=int(modified_time),
        render_size=renderer.size,
        render_quality=renderer.quality,
        render_format=renderer.format,
        render_resample=renderer.resample,
    )


def _describe(renderer: ThumbnailRenderer) -> str:
    return f"{renderer.size}px {renderer.format} q{renderer.quality} {renderer.resample}"
