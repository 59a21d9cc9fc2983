"""L2: Disk-based thumbnail cache with a flat ``{key}.{ext}`` layout."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from daidori.errors import StorageError

LOGGER = logging.getLogger(__name__)


class DiskThumbnailCache:
    """L2: persistent thumbnail store in which the filesystem is the index.

    Lookups open the expected file directly; there is no separate index and
    no directory listing at runtime.  Writes go through a temporary file and
    ``os.replace`` so concurrent writers of the same key never expose a
    partially written thumbnail.
    """

    def __init__(self, cache_dir: Path, extension: str = "png"):
        self._cache_dir = Path(cache_dir)
        self._extension = extension.lstrip(".").lower()
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            # The memory tier keeps working; the disk tier just always misses.
            LOGGER.warning("Failed to create thumbnail cache directory %s: %s", self._cache_dir, exc)
            self._available = False
        else:
            self._available = True

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @property
    def extension(self) -> str:
        return self._extension

    @property
    def available(self) -> bool:
        return self._available

    def path_for(self, key: str) -> Path:
        return self._cache_dir / f"{key}.{self._extension}"

    def try_read(self, key: str) -> bytes | None:
        """Return the cached bytes for *key*, or ``None`` on any miss.

        Reading without a prior ``exists()`` check avoids racing a concurrent
        delete.  Errors other than a missing file are logged, not raised.
        """
        if not self._available:
            return None
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            LOGGER.warning("Failed to read cached thumbnail %s: %s", path, exc)
            return None

    def write(self, key: str, data: bytes) -> Path:
        """Persist *data* for *key* and return the cache file path."""
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=self._cache_dir,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(data)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write thumbnail cache file {path}: {exc}") from exc
        return path

    def invalidate(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("Failed to remove cached thumbnail for %s: %s", key, exc)
