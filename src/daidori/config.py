"""Default configuration values for daidori."""

from __future__ import annotations

from typing import Final

# ``APP_NAME`` namespaces every per-user directory the application creates
# (thumbnail cache, settings) so that several tools can share a cache root.
APP_NAME: Final[str] = "daidori-manager"
THUMBNAIL_DIR_NAME: Final[str] = "thumbnails"
SETTINGS_FILE_NAME: Final[str] = "settings.json"

# Thumbnails are rendered at twice the 240px grid cell so they stay crisp on
# high-DPI displays.  The bounding box is 1.4 times taller than it is wide,
# close enough to a printed page that most spreads are not letterboxed.
THUMBNAIL_SIZE: Final[int] = 480
THUMBNAIL_HEIGHT_RATIO: Final[tuple[int, int]] = (14, 10)
THUMBNAIL_FORMAT: Final[str] = "png"
THUMBNAIL_QUALITY: Final[int] = 90
THUMBNAIL_RESAMPLE: Final[str] = "bilinear"
THUMBNAIL_WORKERS: Final[int] = 2

SUPPORTED_FORMATS: Final[tuple[str, ...]] = ("png", "jpeg", "webp")
SUPPORTED_RESAMPLE: Final[tuple[str, ...]] = ("nearest", "bilinear", "bicubic", "lanczos")

# Upper bounds enforced before any pixel buffer is allocated.
MAX_IMAGE_DIMENSION: Final[int] = 65535
MAX_PIXEL_COUNT: Final[int] = 100_000_000

# Thumbnails are a few hundred KiB each; twenty keeps the working set small.
MEMORY_CACHE_MAX_SIZE: Final[int] = 20

# Export helpers
BLANK_JPEG_QUALITY: Final[int] = 95
DEFAULT_PAGE_SIZE: Final[tuple[int, int]] = (1654, 2339)  # A5 at 350 dpi
