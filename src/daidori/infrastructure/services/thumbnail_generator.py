from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Optional
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from daidori.core.dimensions import validate_dimensions
from daidori.errors import (
    DecodeError,
    ImageValidationError,
    SourceNotFoundError,
    UnsupportedFormatError,
)
from daidori.infrastructure.services.psd_compositor import composite_psd
from daidori.infrastructure.services.thumbnail_renderer import ThumbnailRenderer
from daidori.io.psd import extract_embedded_preview
from daidori.media_classifier import is_layered, is_raster, normalise_suffix

LOGGER = logging.getLogger(__name__)


class PillowThumbnailGenerator:
    """
    Generates thumbnail bytes for a single source file.

    PSD files use their embedded JPEG preview when it is at least as large as
    the render size and fall back to a full composite otherwise.  JPEG, PNG
    and TIFF files are decoded directly with Pillow.
    """

    def __init__(self, renderer: ThumbnailRenderer):
        self._renderer = renderer

    @property
    def renderer(self) -> ThumbnailRenderer:
        return self._renderer

    def generate(self, path: Path) -> bytes:
        """Decode, validate and render *path*.

        Raises :class:`SourceNotFoundError`, :class:`UnsupportedFormatError`,
        :class:`DecodeError` or :class:`ImageValidationError`.
        """
        if is_layered(path):
            image = self._decode_layered(path)
        elif is_raster(path):
            image = self._decode_raster(path)
        else:
            raise UnsupportedFormatError(
                f"Unsupported file format: {normalise_suffix(path) or '(no extension)'}"
            )

        # Composite and embedded previews were checked before decode; this
        # re-check keeps every path under the same limits.
        validate_dimensions(image.width, image.height)
        return self._renderer.render(image)

    # ------------------------------------------------------------------
    # Decode paths
    # ------------------------------------------------------------------
    def _decode_layered(self, path: Path) -> Image.Image:
        data = _read_source(path)

        preview = extract_embedded_preview(data)
        if preview is not None:
            if preview.largest_dimension >= self._renderer.size:
                image = self._decode_embedded(preview.payload, path)
                if image is not None and max(image.size) >= self._renderer.size:
                    LOGGER.debug("Using embedded preview for %s", path)
                    return image
            else:
                LOGGER.debug(
                    "Embedded preview of %s is %dx%d, below %d; compositing",
                    path,
                    preview.width,
                    preview.height,
                    self._renderer.size,
                )

        return composite_psd(data)

    def _decode_embedded(self, payload: bytes, path: Path) -> Optional[Image.Image]:
        try:
            with Image.open(BytesIO(payload), formats=["JPEG"]) as img:
                validate_dimensions(img.width, img.height)
                img.load()
                return img.convert("RGB")
        except (ImageValidationError, Image.DecompressionBombError, OSError, ValueError) as e:
            LOGGER.warning(f"Embedded preview of {path} is unreadable, compositing instead: {e}")
            return None

    def _decode_raster(self, path: Path) -> Image.Image:
        try:
            with Image.open(path) as img:
                # ``Image.open`` only parses the header, so the size check
                # happens before any pixel data is decoded.
                validate_dimensions(img.width, img.height)
                img.load()
                img = ImageOps.exif_transpose(img) or img
                if img.mode not in ("RGB", "RGBA"):
                    img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
                return img.copy()
        except FileNotFoundError as e:
            raise SourceNotFoundError(f"File does not exist: {path}") from e
        except Image.DecompressionBombError as e:
            raise ImageValidationError(f"Image too large to decode safely: {path}: {e}") from e
        except UnidentifiedImageError as e:
            raise DecodeError(f"Failed to decode {path}: {e}") from e
        except (OSError, ValueError) as e:
            raise DecodeError(f"Failed to read image {path}: {e}") from e


def _read_source(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as e:
        raise SourceNotFoundError(f"File does not exist: {path}") from e
    except OSError as e:
        raise DecodeError(f"Failed to read {path}: {e}") from e


__all__ = ["PillowThumbnailGenerator"]
