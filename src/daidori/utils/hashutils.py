"""Hashing utilities."""

from __future__ import annotations

import os
from pathlib import Path

import xxhash

from ..config import THUMBNAIL_FORMAT, THUMBNAIL_RESAMPLE


def derive_cache_key(
    source_path: str | os.PathLike[str],
    modified_time: int,
    render_size: int,
    render_quality: int,
    render_format: str = THUMBNAIL_FORMAT,
    render_resample: str = THUMBNAIL_RESAMPLE,
) -> str:
    """Return the XXH3 128-bit fingerprint identifying one rendition.

    The key covers the source path, its modification time and every render
    parameter, so an edited source or a configuration change never hits a
    stale entry.  XXH3 is not collision resistant against an adversary; the
    key space is only ever fed by local folder listings.
    """

    path = Path(source_path).as_posix()
    material = (
        f"{path}:{int(modified_time)}:{int(render_size)}:{int(render_quality)}"
        f":{render_format.lower()}:{render_resample.lower()}"
    )
    return xxhash.xxh3_128(material.encode("utf-8")).hexdigest()


__all__ = ["derive_cache_key"]
