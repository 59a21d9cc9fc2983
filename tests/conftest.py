import sys
from pathlib import Path
from typing import Callable, Tuple

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from imaging import RED, Color, build_psd, build_psd_with_preview  # noqa: E402


@pytest.fixture()
def psd_factory() -> Callable[..., bytes]:
    return build_psd


@pytest.fixture()
def psd_with_preview() -> Callable[..., bytes]:
    return build_psd_with_preview


@pytest.fixture()
def write_image(tmp_path: Path) -> Callable[..., Path]:
    """Save a solid-colour image under *tmp_path* and return its path."""

    def _write(name: str, size: Tuple[int, int] = (120, 90), color: Color = RED, mode: str = "RGB") -> Path:
        path = tmp_path / name
        if mode == "RGBA":
            fill = color + (255,)
        elif mode == "L":
            fill = color[0]
        else:
            fill = color
        Image.new(mode, size, fill).save(path)
        return path

    return _write


@pytest.fixture()
def write_psd(tmp_path: Path) -> Callable[..., Path]:
    """Write PSD bytes under *tmp_path* and return the file path."""

    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write
