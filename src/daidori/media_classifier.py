"""File type classification helpers shared by the thumbnail pipeline."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

LAYERED_EXTENSIONS: frozenset[str] = frozenset({".psd"})

RASTER_EXTENSIONS: frozenset[str] = frozenset({
    ".jpg",
    ".jpeg",
    ".png",
    ".tif",
    ".tiff",
})

SUPPORTED_EXTENSIONS: frozenset[str] = LAYERED_EXTENSIONS | RASTER_EXTENSIONS

_FILE_TYPES: dict[str, str] = {
    ".jpg": "jpg",
    ".jpeg": "jpg",
    ".png": "png",
    ".psd": "psd",
    ".tif": "tif",
    ".tiff": "tif",
}


def normalise_suffix(path: str | os.PathLike[str]) -> str:
    """Return the lower-case suffix of *path*, including the leading dot."""

    return Path(path).suffix.lower()


def is_layered(path: str | os.PathLike[str]) -> bool:
    return normalise_suffix(path) in LAYERED_EXTENSIONS


def is_raster(path: str | os.PathLike[str]) -> bool:
    return normalise_suffix(path) in RASTER_EXTENSIONS


def get_file_type(path: str | os.PathLike[str]) -> Optional[str]:
    """Return the canonical file type (``jpg``, ``png``, ``psd``, ``tif``) or ``None``.

    Folder listings use this to tag entries; spellings such as ``.JPEG`` and
    ``.tiff`` collapse onto a single type.
    """

    return _FILE_TYPES.get(normalise_suffix(path))
