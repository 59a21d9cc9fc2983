from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ThumbnailStatus(str, Enum):
    CACHED_MEMORY = "cached-memory"
    CACHED_DISK = "cached-disk"
    GENERATED = "generated"


@dataclass(frozen=True)
class ThumbnailRequest:
    source_path: Path
    modified_time: int
    render_size: int
    render_quality: int
    render_format: str
    render_resample: str


@dataclass(frozen=True)
class ThumbnailResult:
    cache_key: str
    cache_path: Path
    data: bytes
    status: ThumbnailStatus

    @property
    def is_cached(self) -> bool:
        return self.status is not ThumbnailStatus.GENERATED

    @property
    def public_status(self) -> str:
        """Status as reported to the UI: ``cached`` or ``generated``."""
        return "cached" if self.is_cached else "generated"
