"""Image helpers shared with the page export pipeline."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from ..config import BLANK_JPEG_QUALITY
from ..errors import DecodeError, ImageValidationError, SourceNotFoundError, StorageError
from ..infrastructure.services.thumbnail_renderer import encode_image
from ..io.psd import PsdHeader, read_psd_header
from ..media_classifier import is_layered
from .dimensions import validate_dimensions

_LOGGER = logging.getLogger(__name__)

_BLANK_FORMATS: dict[str, str] = {
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".png": "png",
    ".tif": "tiff",
    ".tiff": "tiff",
}


def get_image_dimensions(path: str | os.PathLike[str]) -> Tuple[int, int]:
    """Return the validated ``(width, height)`` of the image at *path*.

    PSD sizes come straight from the 26-byte file header and other formats
    from Pillow's lazy header parse, so no pixel data is decoded.
    """

    source = Path(path)
    try:
        if is_layered(source):
            with source.open("rb") as handle:
                header: PsdHeader | None = read_psd_header(handle.read(26))
            if header is None:
                raise DecodeError(f"Not a PSD file: {source}")
            width, height = header.width, header.height
        else:
            with Image.open(source) as img:
                width, height = img.size
    except FileNotFoundError as exc:
        raise SourceNotFoundError(f"File does not exist: {source}") from exc
    except Image.DecompressionBombError as exc:
        raise ImageValidationError(f"Image too large to inspect safely: {source}") from exc
    except UnidentifiedImageError as exc:
        raise DecodeError(f"Failed to identify image {source}: {exc}") from exc
    except OSError as exc:
        raise DecodeError(f"Failed to read {source}: {exc}") from exc

    validate_dimensions(width, height)
    return width, height


def create_blank_image(width: int, height: int, output_path: str | os.PathLike[str]) -> None:
    """Write a white page of *width* x *height* to *output_path*.

    The encoding follows the output extension (JPEG at quality 95, PNG or
    TIFF) and defaults to PNG for anything else.
    """

    validate_dimensions(width, height)
    destination = Path(output_path)
    fmt = _BLANK_FORMATS.get(destination.suffix.lower(), "png")
    quality = BLANK_JPEG_QUALITY if fmt == "jpeg" else None

    image = Image.new("RGB", (width, height), (255, 255, 255))
    data = encode_image(image, fmt, quality)
    try:
        destination.write_bytes(data)
    except OSError as exc:
        raise StorageError(f"Failed to write blank page {destination}: {exc}") from exc
    _LOGGER.debug("Created blank %dx%d %s page at %s", width, height, fmt, destination)


__all__ = ["create_blank_image", "get_image_dimensions"]
