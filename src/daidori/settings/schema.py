"""Schema helpers for the application settings file."""

from __future__ import annotations

from copy import deepcopy
import os
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    MEMORY_CACHE_MAX_SIZE,
    SUPPORTED_FORMATS,
    SUPPORTED_RESAMPLE,
    THUMBNAIL_FORMAT,
    THUMBNAIL_QUALITY,
    THUMBNAIL_RESAMPLE,
    THUMBNAIL_SIZE,
    THUMBNAIL_WORKERS,
)

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "daidori/settings.schema.json",
    "type": "object",
    "required": ["schema", "thumbnails", "cache"],
    "properties": {
        "schema": {"const": "daidori/settings@1"},
        "thumbnails": {
            "type": "object",
            "required": ["size", "quality", "format", "resample", "workers"],
            "properties": {
                "size": {"type": "integer", "minimum": 16, "maximum": 4096},
                "quality": {"type": "integer", "minimum": 1, "maximum": 100},
                "format": {"type": "string", "enum": list(SUPPORTED_FORMATS)},
                "resample": {"type": "string", "enum": list(SUPPORTED_RESAMPLE)},
                "workers": {"type": "integer", "minimum": 1, "maximum": 64},
            },
            "additionalProperties": False,
        },
        "cache": {
            "type": "object",
            "required": ["memory_entries", "directory"],
            "properties": {
                "memory_entries": {"type": "integer", "minimum": 1},
                "directory": {"type": ["string", "null"]},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "daidori/settings@1",
    "thumbnails": {
        "size": THUMBNAIL_SIZE,
        "quality": THUMBNAIL_QUALITY,
        "format": THUMBNAIL_FORMAT,
        "resample": THUMBNAIL_RESAMPLE,
        "workers": THUMBNAIL_WORKERS,
    },
    "cache": {
        "memory_entries": MEMORY_CACHE_MAX_SIZE,
        "directory": None,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)

_SECTIONS = ("thumbnails", "cache")


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _SECTIONS and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            merged[key] = value
        directory = merged["cache"].get("directory")
        if isinstance(directory, os.PathLike):
            merged["cache"]["directory"] = os.fspath(directory)
        elif directory == "":
            merged["cache"]["directory"] = None
    _validator.validate(merged)
    return merged


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults"]
