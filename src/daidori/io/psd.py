"""Lightweight readers for Photoshop (PSD) containers.

Only the parts needed to build thumbnails are parsed here: the fixed file
header and the image resource section that may hold a pre-rendered JPEG
preview.  Full layer composition is left to ``psd-tools``.

PSD files routinely arrive truncated or damaged, so every structural read
goes through :class:`_Cursor`, which reports missing data as ``None`` instead
of raising.  The scanner never reads past the end of the buffer.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import struct
from typing import Optional

_LOGGER = logging.getLogger(__name__)

PSD_SIGNATURE = b"8BPS"
RESOURCE_SIGNATURE = b"8BIM"

# version(2) + reserved(6) + channels(2) + height(4) + width(4) + depth(2) + mode(2)
HEADER_REMAINDER_SIZE = 22

# 1036 is written by Photoshop 5.0 and later, 1033 by 4.0.
THUMBNAIL_RESOURCE_IDS = frozenset({1036, 1033})
THUMBNAIL_HEADER_SIZE = 28
THUMBNAIL_FORMAT_JPEG = 1

_HEADER = struct.Struct(">4sH6xHIIHH")
_THUMBNAIL_HEADER = struct.Struct(">IIIIIIHH")


@dataclass(frozen=True)
class PsdHeader:
    """Fields of the 26-byte PSD file header."""

    version: int
    channels: int
    height: int
    width: int
    depth: int
    color_mode: int


@dataclass(frozen=True)
class EmbeddedPreview:
    """A JPEG preview stored in a thumbnail image resource."""

    resource_id: int
    format: int
    width: int
    height: int
    payload: bytes

    @property
    def largest_dimension(self) -> int:
        return max(self.width, self.height)


class _Cursor:
    """Bounds-checked big-endian reader over an in-memory buffer."""

    __slots__ = ("_data", "position")

    def __init__(self, data: bytes, position: int = 0) -> None:
        self._data = data
        self.position = position

    @property
    def remaining(self) -> int:
        return len(self._data) - self.position

    def read(self, size: int) -> Optional[bytes]:
        if size < 0 or size > self.remaining:
            return None
        start = self.position
        self.position += size
        return self._data[start:self.position]

    def skip(self, size: int) -> bool:
        if size < 0 or size > self.remaining:
            return False
        self.position += size
        return True

    def u8(self) -> Optional[int]:
        chunk = self.read(1)
        return None if chunk is None else chunk[0]

    def u16(self) -> Optional[int]:
        chunk = self.read(2)
        return None if chunk is None else int.from_bytes(chunk, "big")

    def u32(self) -> Optional[int]:
        chunk = self.read(4)
        return None if chunk is None else int.from_bytes(chunk, "big")


def read_psd_header(data: bytes) -> Optional[PsdHeader]:
    """Return the :class:`PsdHeader` of *data*, or ``None`` if it is not a PSD."""

    if len(data) < _HEADER.size:
        return None
    signature, version, channels, height, width, depth, mode = _HEADER.unpack_from(data)
    if signature != PSD_SIGNATURE:
        return None
    return PsdHeader(
        version=version,
        channels=channels,
        height=height,
        width=width,
        depth=depth,
        color_mode=mode,
    )


def extract_embedded_preview(data: bytes) -> Optional[EmbeddedPreview]:
    """Return the embedded JPEG preview of a PSD container, if one is usable.

    ``None`` is the normal answer for files without a preview, for previews in
    an unsupported encoding and for any structurally broken input.
    """

    cursor = _Cursor(data)
    if cursor.read(4) != PSD_SIGNATURE:
        return None
    if not cursor.skip(HEADER_REMAINDER_SIZE):
        return None

    color_mode_length = cursor.u32()
    if color_mode_length is None or not cursor.skip(color_mode_length):
        return None

    resources_length = cursor.u32()
    if resources_length is None:
        return None
    resources_end = cursor.position + resources_length

    while cursor.position < resources_end and cursor.remaining > 0:
        iteration_start = cursor.position

        if cursor.read(4) != RESOURCE_SIGNATURE:
            break
        resource_id = cursor.u16()
        if resource_id is None:
            return None

        name_length = cursor.u8()
        if name_length is None:
            return None
        # The Pascal name, length byte included, is padded to an even size.
        padded_name = name_length if name_length % 2 else name_length + 1
        if not cursor.skip(padded_name):
            return None

        payload_size = cursor.u32()
        if payload_size is None:
            return None

        if resource_id in THUMBNAIL_RESOURCE_IDS:
            header = cursor.read(THUMBNAIL_HEADER_SIZE)
            if header is None:
                return None
            fmt, width, height, _widthbytes, _total, _compressed, _bpp, _planes = (
                _THUMBNAIL_HEADER.unpack(header)
            )
            if fmt == THUMBNAIL_FORMAT_JPEG:
                if payload_size < THUMBNAIL_HEADER_SIZE:
                    return None
                jpeg_size = payload_size - THUMBNAIL_HEADER_SIZE
                if jpeg_size == 0:
                    return None
                payload = cursor.read(jpeg_size)
                if payload is None:
                    return None
                _LOGGER.debug(
                    "Found embedded preview in resource %d (%dx%d, %d bytes)",
                    resource_id,
                    width,
                    height,
                    jpeg_size,
                )
                return EmbeddedPreview(
                    resource_id=resource_id,
                    format=fmt,
                    width=width,
                    height=height,
                    payload=payload,
                )
            # Raw previews are ignored; rewind so the skip below covers the
            # whole record.
            cursor.position -= THUMBNAIL_HEADER_SIZE

        padded_size = payload_size + (payload_size % 2)
        if not cursor.skip(padded_size):
            break

        if cursor.position <= iteration_start:
            return None

    return None


__all__ = [
    "EmbeddedPreview",
    "PSD_SIGNATURE",
    "PsdHeader",
    "RESOURCE_SIGNATURE",
    "THUMBNAIL_RESOURCE_IDS",
    "extract_embedded_preview",
    "read_psd_header",
]
