"""Application-wide context that owns the thumbnail caches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:  # pragma: no cover - only for type checking
    from .infrastructure.services.cache_stats import ThumbnailStatsCollector
    from .infrastructure.services.disk_thumbnail_cache import DiskThumbnailCache
    from .infrastructure.services.thumbnail_cache import MemoryThumbnailCache
    from .infrastructure.services.thumbnail_renderer import ThumbnailRenderer
    from .infrastructure.services.thumbnail_service import ThumbnailService
    from .settings.manager import SettingsManager

LOGGER = logging.getLogger(__name__)

# Render settings picked up by a running context.  ``thumbnails.workers`` and
# the ``cache.*`` keys size long-lived objects and apply to the next context.
_LIVE_KEYS = frozenset(
    {"thumbnails.size", "thumbnails.quality", "thumbnails.format", "thumbnails.resample"}
)


def _create_settings_manager() -> "SettingsManager":
    from .settings.manager import SettingsManager

    manager = SettingsManager()
    manager.load()
    return manager


def _create_stats() -> "ThumbnailStatsCollector":
    from .infrastructure.services.cache_stats import ThumbnailStatsCollector

    return ThumbnailStatsCollector()


@dataclass
class ThumbnailContext:
    """Owns the caches and the thumbnail service for one process.

    The memory and disk tiers are plain objects held here rather than module
    globals, so tests and tools can build as many isolated contexts as they
    need.  Collaborators left as ``None`` are built from ``settings``.

    The context follows later ``settings.set`` calls on the render keys: the
    service switches to a renderer and disk tier built from the new values
    until :meth:`close` is called.
    """

    settings: "SettingsManager" = field(default_factory=_create_settings_manager)
    stats: "ThumbnailStatsCollector" = field(default_factory=_create_stats)
    cache_dir: Optional[Path] = None
    memory_cache: Optional["MemoryThumbnailCache"] = None
    disk_cache: Optional["DiskThumbnailCache"] = None
    service: "ThumbnailService" = field(init=False)
    _unsubscribe: Optional[Callable[[], None]] = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        from .infrastructure.services.disk_thumbnail_cache import DiskThumbnailCache
        from .infrastructure.services.thumbnail_cache import MemoryThumbnailCache
        from .infrastructure.services.thumbnail_generator import PillowThumbnailGenerator
        from .infrastructure.services.thumbnail_service import ThumbnailService

        renderer = self._build_renderer()
        if self.cache_dir is None:
            self.cache_dir = self.settings.cache_dir()
        if self.memory_cache is None:
            self.memory_cache = MemoryThumbnailCache(
                max_size=self.settings.get("cache.memory_entries")
            )
        if self.disk_cache is None:
            self.disk_cache = DiskThumbnailCache(self.cache_dir, extension=renderer.extension)
        self.service = ThumbnailService(
            memory_cache=self.memory_cache,
            disk_cache=self.disk_cache,
            generator=PillowThumbnailGenerator(renderer),
            stats=self.stats,
            max_workers=self.settings.get("thumbnails.workers"),
        )
        self._unsubscribe = self.settings.subscribe(self._on_setting_changed)

    def _build_renderer(self) -> "ThumbnailRenderer":
        from .infrastructure.services.thumbnail_renderer import ThumbnailRenderer

        return ThumbnailRenderer(
            size=self.settings.get("thumbnails.size"),
            quality=self.settings.get("thumbnails.quality"),
            fmt=self.settings.get("thumbnails.format"),
            resample=self.settings.get("thumbnails.resample"),
        )

    def _on_setting_changed(self, key: str, value: Any) -> None:
        if key != "thumbnails" and key not in _LIVE_KEYS:
            return
        from .infrastructure.services.disk_thumbnail_cache import DiskThumbnailCache
        from .infrastructure.services.thumbnail_generator import PillowThumbnailGenerator

        renderer = self._build_renderer()
        disk_cache = self.disk_cache
        if disk_cache is None or disk_cache.extension != renderer.extension:
            disk_cache = DiskThumbnailCache(self.cache_dir, extension=renderer.extension)
            self.disk_cache = disk_cache
        self.service.reconfigure(PillowThumbnailGenerator(renderer), disk_cache)
        LOGGER.info("Thumbnail settings changed (%s=%r)", key, value)

    def close(self, wait: bool = True) -> None:
        """Stop following settings and stop the worker pool owned by the service."""

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.service.shutdown(wait=wait)
