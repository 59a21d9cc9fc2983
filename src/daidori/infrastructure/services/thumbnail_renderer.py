"""Resize decoded rasters into the thumbnail box and encode them."""

from __future__ import annotations

from io import BytesIO
import logging
from typing import Optional, Tuple

from PIL import Image

from daidori.config import (
    MAX_PIXEL_COUNT,
    SUPPORTED_FORMATS,
    THUMBNAIL_FORMAT,
    THUMBNAIL_HEIGHT_RATIO,
    THUMBNAIL_QUALITY,
    THUMBNAIL_RESAMPLE,
    THUMBNAIL_SIZE,
)
from daidori.errors import DecodeError, UnsupportedFormatError

LOGGER = logging.getLogger(__name__)

# Pillow warns above this many pixels and refuses twice as many.  Our own
# dimension check rejects anything past the warning line.
Image.MAX_IMAGE_PIXELS = MAX_PIXEL_COUNT

RESAMPLE_FILTERS: dict[str, Image.Resampling] = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}

_PIL_FORMATS: dict[str, str] = {
    "png": "PNG",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "webp": "WEBP",
    "tif": "TIFF",
    "tiff": "TIFF",
}

# Codecs that accept a ``quality`` keyword.
_LOSSY_FORMATS = frozenset({"JPEG", "WEBP"})


def fit_within(size: Tuple[int, int], box: Tuple[int, int]) -> Tuple[int, int]:
    """Return *size* scaled to the largest size fitting *box*, keeping aspect ratio.

    Small sources are scaled up as well as large ones down, so every
    thumbnail fills the grid cell the same way.  Neither side drops below one
    pixel, even for extreme panoramas.
    """

    width, height = size
    box_width, box_height = box
    scale = min(box_width / width, box_height / height)
    return (
        max(1, min(box_width, round(width * scale))),
        max(1, min(box_height, round(height * scale))),
    )


def encode_image(image: Image.Image, fmt: str, quality: Optional[int] = None) -> bytes:
    """Encode *image* as *fmt* (``png``, ``jpeg``, ``webp`` or ``tiff``)."""

    pil_format = _PIL_FORMATS.get(fmt.lower())
    if pil_format is None:
        raise UnsupportedFormatError(f"Unsupported output format: {fmt}")

    if pil_format == "JPEG":
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
    elif image.mode not in ("RGB", "RGBA", "L", "LA"):
        image = image.convert("RGBA" if "A" in image.getbands() else "RGB")

    params: dict[str, object] = {}
    if quality is not None and pil_format in _LOSSY_FORMATS:
        params["quality"] = quality

    buffer = BytesIO()
    try:
        image.save(buffer, format=pil_format, **params)
    except (OSError, ValueError) as exc:
        raise DecodeError(f"Failed to encode thumbnail as {fmt}: {exc}") from exc
    return buffer.getvalue()


class ThumbnailRenderer:
    """Fits a raster into the thumbnail bounding box and encodes it.

    Size, quality, format and resampling filter are all part of every cache
    key, so changing any of them produces new entries rather than stale ones.
    """

    def __init__(
        self,
        size: int = THUMBNAIL_SIZE,
        quality: int = THUMBNAIL_QUALITY,
        fmt: str = THUMBNAIL_FORMAT,
        resample: str = THUMBNAIL_RESAMPLE,
    ):
        if size <= 0:
            raise ValueError(f"Thumbnail size must be positive, got {size}")
        if not 1 <= quality <= 100:
            raise ValueError(f"Thumbnail quality must be within 1..100, got {quality}")
        fmt = fmt.lower()
        if fmt == "jpg":
            fmt = "jpeg"
        if fmt not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported thumbnail format: {fmt}")
        if resample not in RESAMPLE_FILTERS:
            raise ValueError(f"Unknown resampling filter: {resample}")
        self._size = size
        self._quality = quality
        self._format = fmt
        self._resample_name = resample
        self._resample = RESAMPLE_FILTERS[resample]

    @property
    def size(self) -> int:
        return self._size

    @property
    def quality(self) -> int:
        return self._quality

    @property
    def format(self) -> str:
        return self._format

    @property
    def resample(self) -> str:
        return self._resample_name

    @property
    def extension(self) -> str:
        """File extension used for cache entries in this format."""
        return "jpg" if self._format == "jpeg" else self._format

    @property
    def bounding_box(self) -> Tuple[int, int]:
        numerator, denominator = THUMBNAIL_HEIGHT_RATIO
        return self._size, self._size * numerator // denominator

    def render(self, image: Image.Image) -> bytes:
        """Return the encoded thumbnail for *image*."""

        target = fit_within(image.size, self.bounding_box)
        try:
            thumbnail = image.resize(target, self._resample)
        except (OSError, ValueError) as exc:
            raise DecodeError(f"Failed to resize image to {target}: {exc}") from exc
        LOGGER.debug("Rendered %sx%s thumbnail from %sx%s", *target, *image.size)
        return encode_image(thumbnail, self._format, self._quality)


__all__ = ["RESAMPLE_FILTERS", "ThumbnailRenderer", "encode_image", "fit_within"]
