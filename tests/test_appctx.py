from __future__ import annotations

from pathlib import Path

from daidori.appctx import ThumbnailContext
from daidori.application.dtos import ThumbnailStatus
from daidori.infrastructure.services.thumbnail_cache import MemoryThumbnailCache
from daidori.settings.manager import SettingsManager


def _settings(tmp_path: Path) -> SettingsManager:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    return manager


def test_context_builds_tiers_from_settings(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    settings.set("thumbnails.format", "jpeg")
    settings.set("cache.memory_entries", 5)
    settings.set("cache.directory", tmp_path / "thumbs")

    context = ThumbnailContext(settings=settings)
    try:
        assert context.cache_dir == tmp_path / "thumbs"
        assert context.memory_cache is not None and context.memory_cache.capacity == 5
        assert context.disk_cache is not None and context.disk_cache.extension == "jpg"
    finally:
        context.close()


def test_contexts_are_isolated(tmp_path: Path, write_image) -> None:
    source = write_image("page.png")
    settings = _settings(tmp_path)
    first = ThumbnailContext(settings=settings, cache_dir=tmp_path / "a")
    second = ThumbnailContext(settings=settings, cache_dir=tmp_path / "b")
    try:
        result = first.service.generate(source, 1)
        assert result.status is ThumbnailStatus.GENERATED
        assert first.stats.snapshot().generated == 1
        assert second.service.get_thumbnail(source, 1) is None
        assert second.stats.snapshot().generated == 0
    finally:
        first.close()
        second.close()


def test_supplied_memory_cache_is_used(tmp_path: Path, write_image) -> None:
    source = write_image("page.png")
    memory = MemoryThumbnailCache(max_size=2)
    context = ThumbnailContext(settings=_settings(tmp_path), cache_dir=tmp_path / "thumbs", memory_cache=memory)
    try:
        result = context.service.generate(source, 1)
    finally:
        context.close()
    assert result.cache_key in memory


def test_resample_setting_is_part_of_the_cache_identity(tmp_path: Path, write_image) -> None:
    source = write_image("page.png", size=(200, 100))
    modified_time = int(source.stat().st_mtime)
    cache_dir = tmp_path / "thumbs"

    nearest_settings = SettingsManager(path=tmp_path / "nearest.json")
    nearest_settings.load()
    nearest_settings.set("thumbnails.resample", "nearest")
    lanczos_settings = SettingsManager(path=tmp_path / "lanczos.json")
    lanczos_settings.load()
    lanczos_settings.set("thumbnails.resample", "lanczos")

    first = ThumbnailContext(settings=nearest_settings, cache_dir=cache_dir)
    second = ThumbnailContext(settings=lanczos_settings, cache_dir=cache_dir)
    try:
        nearest = first.service.generate(source, modified_time)
        lanczos = second.service.generate(source, modified_time)
    finally:
        first.close()
        second.close()
    assert nearest.status is ThumbnailStatus.GENERATED
    assert lanczos.status is ThumbnailStatus.GENERATED
    assert lanczos.cache_key != nearest.cache_key
    assert len(list(cache_dir.iterdir())) == 2


def test_running_context_follows_render_settings(tmp_path: Path, write_image) -> None:
    source = write_image("page.png", size=(200, 100))
    settings = _settings(tmp_path)
    context = ThumbnailContext(settings=settings, cache_dir=tmp_path / "thumbs")
    try:
        first = context.service.generate(source, 1)
        settings.set("thumbnails.resample", "lanczos")
        second = context.service.generate(source, 1)
        settings.set("thumbnails.format", "jpeg")
        third = context.service.generate(source, 1)
    finally:
        context.close()
    assert first.status is ThumbnailStatus.GENERATED
    assert second.status is ThumbnailStatus.GENERATED
    assert second.cache_key != first.cache_key
    assert third.status is ThumbnailStatus.GENERATED
    assert third.cache_path.suffix == ".jpg"
    assert context.disk_cache is not None and context.disk_cache.extension == "jpg"
    assert context.service.generator.renderer.resample == "lanczos"


def test_unrelated_settings_leave_the_service_alone(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    context = ThumbnailContext(settings=settings, cache_dir=tmp_path / "thumbs")
    try:
        generator = context.service.generator
        settings.set("thumbnails.workers", 4)
        settings.set("cache.memory_entries", 5)
        assert context.service.generator is generator
    finally:
        context.close()


def test_closed_context_stops_following_settings(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    context = ThumbnailContext(settings=settings, cache_dir=tmp_path / "thumbs")
    generator = context.service.generator
    context.close()
    settings.set("thumbnails.size", 128)
    assert context.service.generator is generator
