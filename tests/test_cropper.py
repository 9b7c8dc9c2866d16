"""
Test Suite for Margin Crop
==========================

Run with: pytest tests/test_cropper.py -v
"""

import math

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from vehicle_intake.quality import (
    RawImage,
    CropBounds,
    clamp_margin_ratio,
    crop_image,
    resolve_margin_ratio,
)


@pytest.fixture
def gradient_image():
    """200x100 image whose pixel values encode their position."""
    yy, xx = np.indices((100, 200))
    return RawImage(((yy + xx) % 256).astype(np.uint8))


class TestCropImage:
    """Tests for crop_image."""

    def test_symmetric_crop(self, gradient_image):
        result = crop_image(gradient_image, 0.1)
        assert result.applied is True
        assert result.bounds == CropBounds(x=20, y=10, width=160, height=80)
        assert result.image.dimensions == (160, 80)
        np.testing.assert_array_equal(result.image.pixels, gradient_image.pixels[10:90, 20:180])

    def test_zero_margin_not_applied(self, gradient_image):
        result = crop_image(gradient_image, 0.0)
        assert result.applied is False
        assert result.image is gradient_image
        assert result.bounds == CropBounds(x=0, y=0, width=200, height=100)

    def test_margin_clamped_to_quarter(self, gradient_image):
        result = crop_image(gradient_image, 0.9)
        assert result.bounds == CropBounds(x=50, y=25, width=100, height=50)

    def test_negative_margin_clamped_to_zero(self, gradient_image):
        result = crop_image(gradient_image, -0.3)
        assert result.applied is False
        assert result.image is gradient_image

    def test_rounds_half_up(self):
        image = RawImage(np.zeros((10, 10), dtype=np.uint8))
        result = crop_image(image, 0.25)
        assert result.bounds == CropBounds(x=3, y=3, width=4, height=4)

    def test_degenerate_geometry_falls_back(self):
        """A crop that would leave nothing returns the full image."""
        image = RawImage(np.zeros((2, 2), dtype=np.uint8))
        result = crop_image(image, 0.25)
        assert result.applied is False
        assert result.image is image
        assert result.bounds == CropBounds(x=0, y=0, width=2, height=2)

    def test_zero_pixel_margins_not_applied(self):
        """Margins that round to zero leave the frame intact."""
        image = RawImage(np.zeros((1, 1), dtype=np.uint8))
        result = crop_image(image, 0.25)
        assert result.applied is False
        assert result.bounds == CropBounds(x=0, y=0, width=1, height=1)

    def test_single_pixel_result(self):
        image = RawImage(np.zeros((3, 3), dtype=np.uint8))
        result = crop_image(image, 0.25)
        assert result.applied is True
        assert result.bounds == CropBounds(x=1, y=1, width=1, height=1)

    def test_bounds_within_source(self, gradient_image):
        for ratio in (0.0, 0.01, 0.1, 0.12, 0.2, 0.25, 0.5):
            bounds = crop_image(gradient_image, ratio).bounds
            assert bounds.x >= 0 and bounds.y >= 0
            assert bounds.x + bounds.width <= gradient_image.width
            assert bounds.y + bounds.height <= gradient_image.height

    def test_bounds_to_dict(self):
        assert CropBounds(1, 2, 3, 4).to_dict() == {'x': 1, 'y': 2, 'width': 3, 'height': 4}


class TestMarginRatio:
    """Tests for margin ratio clamping and defaults."""

    @pytest.mark.parametrize("ratio", [-10.0, -0.01, 0.0, 0.1, 0.25, 0.2500001, 1.0, 1e9])
    def test_clamped_range(self, ratio):
        assert 0.0 <= clamp_margin_ratio(ratio) <= 0.25

    def test_none_uses_default(self):
        assert resolve_margin_ratio(None, 0.12) == 0.12

    def test_nan_uses_default(self):
        assert resolve_margin_ratio(math.nan, 0.10) == 0.10

    def test_explicit_value_kept(self):
        assert resolve_margin_ratio(0.15, 0.12) == 0.15

    def test_explicit_value_clamped(self):
        assert resolve_margin_ratio(0.4, 0.12) == 0.25
        assert resolve_margin_ratio(-0.4, 0.12) == 0.0

    def test_default_clamped(self):
        assert resolve_margin_ratio(None, 0.9) == 0.25
