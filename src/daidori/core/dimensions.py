"""Dimension checks applied before any pixel buffer is allocated."""

from __future__ import annotations

from ..config import MAX_IMAGE_DIMENSION, MAX_PIXEL_COUNT
from ..errors import ImageValidationError


def validate_dimensions(
    width: int,
    height: int,
    *,
    max_dimension: int = MAX_IMAGE_DIMENSION,
    max_pixels: int = MAX_PIXEL_COUNT,
) -> None:
    """Raise :class:`ImageValidationError` unless *width* x *height* is safe to decode.

    Callers run this against header-reported sizes so that a corrupt or
    hostile file cannot make the decoder allocate an unbounded buffer.
    """

    if width <= 0 or height <= 0:
        raise ImageValidationError(
            f"Invalid image size {width}x{height}: width and height must be positive"
        )
    if width > max_dimension or height > max_dimension:
        raise ImageValidationError(
            f"Image too large: {width}x{height} (maximum side {max_dimension})"
        )
    pixel_count = width * height
    if pixel_count > max_pixels:
        raise ImageValidationError(
            f"Too many pixels: {pixel_count} (maximum {max_pixels})"
        )


__all__ = ["validate_dimensions"]
