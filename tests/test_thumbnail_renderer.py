"""Tests for the thumbnail resize and encode step."""

from __future__ import annotations

from io import BytesIO

import pytest
from PIL import Image

from daidori.config import MAX_PIXEL_COUNT
from daidori.errors import UnsupportedFormatError
from daidori.infrastructure.services.thumbnail_renderer import (
    ThumbnailRenderer,
    encode_image,
    fit_within,
)


class TestFitWithin:
    @pytest.mark.parametrize(
        "size, expected",
        [
            ((1000, 500), (480, 240)),
            ((500, 2000), (168, 672)),
            ((100, 100), (480, 480)),
            ((1654, 2339), (475, 672)),
            ((100000, 1), (480, 1)),
            ((1, 100000), (1, 672)),
        ],
    )
    def test_fits_default_box(self, size, expected):
        assert fit_within(size, (480, 672)) == expected

    def test_result_never_exceeds_box(self):
        for width in (1, 7, 480, 481, 3000):
            for height in (1, 9, 672, 673, 5000):
                w, h = fit_within((width, height), (480, 672))
                assert 1 <= w <= 480
                assert 1 <= h <= 672


class TestThumbnailRenderer:
    def test_defaults(self):
        renderer = ThumbnailRenderer()
        assert renderer.size == 480
        assert renderer.bounding_box == (480, 672)
        assert renderer.format == "png"
        assert renderer.extension == "png"
        assert renderer.resample == "bilinear"

    def test_resample_name(self):
        assert ThumbnailRenderer(resample="lanczos").resample == "lanczos"

    def test_jpg_alias(self):
        renderer = ThumbnailRenderer(fmt="JPG")
        assert renderer.format == "jpeg"
        assert renderer.extension == "jpg"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"size": 0},
            {"quality": 0},
            {"quality": 101},
            {"fmt": "gif"},
            {"resample": "cubic-spline"},
        ],
    )
    def test_rejects_invalid_settings(self, kwargs):
        with pytest.raises(ValueError):
            ThumbnailRenderer(**kwargs)

    def test_render_png(self):
        renderer = ThumbnailRenderer(size=64)
        data = renderer.render(Image.new("RGB", (200, 100), (10, 20, 30)))
        with Image.open(BytesIO(data)) as img:
            assert img.format == "PNG"
            assert img.size == (64, 32)

    def test_render_keeps_alpha_in_png(self):
        renderer = ThumbnailRenderer(size=32)
        data = renderer.render(Image.new("RGBA", (64, 64), (255, 0, 0, 0)))
        with Image.open(BytesIO(data)) as img:
            assert img.mode == "RGBA"

    def test_render_jpeg_from_rgba(self):
        renderer = ThumbnailRenderer(size=64, quality=80, fmt="jpeg")
        data = renderer.render(Image.new("RGBA", (128, 128), (0, 255, 0, 255)))
        assert data[:2] == b"\xff\xd8"
        with Image.open(BytesIO(data)) as img:
            assert img.size == (64, 64)

    def test_render_is_deterministic(self):
        renderer = ThumbnailRenderer(size=48)
        image = Image.new("RGB", (300, 200), (200, 100, 50))
        assert renderer.render(image) == renderer.render(image)


class TestEncodeImage:
    def test_unknown_format(self):
        with pytest.raises(UnsupportedFormatError):
            encode_image(Image.new("RGB", (4, 4)), "bmp")

    def test_tiff(self):
        data = encode_image(Image.new("RGB", (4, 4), (255, 255, 255)), "tiff")
        with Image.open(BytesIO(data)) as img:
            assert img.format == "TIFF"


def test_pillow_pixel_limit_matches_dimension_check():
    assert Image.MAX_IMAGE_PIXELS == MAX_PIXEL_COUNT
