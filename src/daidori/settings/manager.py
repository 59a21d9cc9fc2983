"""Settings file management with validation and change notifications."""

from __future__ import annotations

import logging
import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any, Callable

from jsonschema import ValidationError

from ..config import APP_NAME, SETTINGS_FILE_NAME, THUMBNAIL_DIR_NAME
from ..errors import SettingsLoadError, SettingsValidationError
from ..utils.jsonio import read_json, write_json
from .schema import DEFAULT_SETTINGS, merge_with_defaults

_LOGGER = logging.getLogger(__name__)

SettingsListener = Callable[[str, Any], None]


def default_settings_path() -> Path:
    """Return the default settings.json location for the current platform."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / APP_NAME / SETTINGS_FILE_NAME
        return Path.home() / "AppData" / "Roaming" / APP_NAME / SETTINGS_FILE_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME / SETTINGS_FILE_NAME
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME / SETTINGS_FILE_NAME
    return Path.home() / ".config" / APP_NAME / SETTINGS_FILE_NAME


def default_cache_dir() -> Path:
    """Return the platform cache directory used for thumbnails."""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Local"
    elif sys.platform == "darwin":
        root = Path.home() / "Library" / "Caches"
    else:
        base = os.environ.get("XDG_CACHE_HOME")
        root = Path(base) if base else Path.home() / ".cache"
    return root / APP_NAME / THUMBNAIL_DIR_NAME


class SettingsManager:
    """Load, validate and persist user settings for the application."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)
        self._listeners: list[SettingsListener] = []

    @property
    def path(self) -> Path:
        return self._path or default_settings_path()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Load the settings JSON from disk, creating defaults if missing."""

        path = self.path
        self._path = path
        if path.exists():
            try:
                payload = read_json(path)
            except (OSError, ValueError) as exc:
                raise SettingsLoadError(f"Failed to read settings from {path}: {exc}") from exc
            if not isinstance(payload, dict):
                raise SettingsLoadError(f"Settings file {path} does not contain an object")
        else:
            payload = None
        try:
            self._data = merge_with_defaults(payload)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self._write()

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value for *key*, supporting dotted access for nested keys."""

        target: Any = self._data
        for part in key.split("."):
            if not isinstance(target, dict) or part not in target:
                return default
            target = target[part]
        return target

    def set(self, key: str, value: Any, *, persist: bool = True) -> None:
        """Update *key* with *value*; write the file unless *persist* is false."""

        if isinstance(value, Path):
            value = str(value)

        candidate = deepcopy(self._data)
        parts = key.split(".")
        target: dict[str, Any] = candidate
        for part in parts[:-1]:
            branch = target.get(part)
            if not isinstance(branch, dict):
                branch = {}
                target[part] = branch
            target = branch
        target[parts[-1]] = value
        try:
            self._data = merge_with_defaults(candidate)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        if persist:
            self._write()
        for listener in list(self._listeners):
            listener(key, value)

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Call *listener* with ``(key, value)`` after every successful :meth:`set`.

        Returns a callable that removes the subscription.
        """

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def cache_dir(self) -> Path:
        """Return the configured thumbnail cache directory."""

        configured = self.get("cache.directory")
        if configured:
            return Path(configured).expanduser()
        return default_cache_dir()

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------
    def _write(self) -> None:
        path = self.path
        self._path = path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            write_json(path, self._data)
        except OSError as exc:
            # Settings stay usable in memory for this session.
            _LOGGER.warning("Failed to save settings to %s: %s", path, exc)


__all__ = ["SettingsManager", "default_cache_dir", "default_settings_path"]
