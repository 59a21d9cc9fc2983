"""Full-composite fallback decoder for layered PSD files."""

from __future__ import annotations

from io import BytesIO
import logging

from PIL import Image
from psd_tools import PSDImage

from daidori.core.dimensions import validate_dimensions
from daidori.errors import DecodeError
from daidori.io.psd import read_psd_header

LOGGER = logging.getLogger(__name__)


def composite_psd(data: bytes) -> Image.Image:
    """Flatten every layer of the PSD in *data* into a single RGBA image.

    The header dimensions are validated before ``psd-tools`` is asked to
    allocate the canvas.
    """

    header = read_psd_header(data)
    if header is None:
        raise DecodeError("Not a PSD file: missing 8BPS signature or truncated header")
    validate_dimensions(header.width, header.height)

    try:
        psd = PSDImage.open(BytesIO(data))
        composite = psd.composite()
    except Exception as exc:
        # psd-tools raises a wide range of errors (struct, ValueError, KeyError,
        # NotImplementedError for exotic compression) on damaged input.
        raise DecodeError(f"Failed to composite PSD: {exc}") from exc

    if composite is None:
        raise DecodeError("PSD composite produced no image")

    LOGGER.debug(
        "Composited PSD %dx%d (depth=%d, mode=%d)",
        header.width,
        header.height,
        header.depth,
        header.color_mode,
    )
    if composite.mode != "RGBA":
        composite = composite.convert("RGBA")
    return composite


__all__ = ["composite_psd"]
