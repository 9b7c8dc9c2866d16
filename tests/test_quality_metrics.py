"""
Test Suite for Capture Metrics & Framing
========================================

Covers:
- RawImage buffer validation and immutability
- Sampled brightness / contrast / sharpness
- Center-vs-edge framing score and band geometry

Run with: pytest tests/test_quality_metrics.py -v
"""

import tracemalloc

import pytest
import numpy as np
import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from vehicle_intake.quality import (
    RawImage,
    QualityMetrics,
    compute_metrics,
    compute_region_stats,
    sampling_stride,
)


# =============================================================================
# TEST FIXTURES
# =============================================================================

def _checkerboard(height: int, width: int, low: int = 0, high: int = 255) -> np.ndarray:
    yy, xx = np.indices((height, width))
    return np.where((yy + xx) % 2 == 0, low, high).astype(np.uint8)


@pytest.fixture
def uniform_image():
    """Flat mid-gray BGR image."""
    return RawImage(np.full((60, 80, 3), 100, dtype=np.uint8))


@pytest.fixture
def striped_image():
    """Gray image with alternating 0/255 columns."""
    pixels = np.zeros((10, 10), dtype=np.uint8)
    pixels[:, 1::2] = 255
    return RawImage(pixels)


@pytest.fixture
def random_image():
    rng = np.random.default_rng(1234)
    return RawImage(rng.integers(0, 256, (240, 320, 3), dtype=np.uint8))


# =============================================================================
# RAW IMAGE TESTS
# =============================================================================

class TestRawImage:
    """Tests for RawImage buffer wrapper."""

    def test_dimensions(self, uniform_image):
        assert uniform_image.width == 80
        assert uniform_image.height == 60
        assert uniform_image.dimensions == (80, 60)

    def test_pixels_read_only(self, uniform_image):
        with pytest.raises(ValueError):
            uniform_image.pixels[0, 0, 0] = 1

    def test_source_array_not_shared(self):
        """Mutating the caller's array does not change the image."""
        source = np.zeros((4, 4), dtype=np.uint8)
        image = RawImage(source)
        source[0, 0] = 255
        assert image.pixels[0, 0] == 0

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            RawImage(np.array([], dtype=np.uint8))

    def test_none_raises(self):
        with pytest.raises(ValueError):
            RawImage(None)

    def test_unsupported_channels_raise(self):
        with pytest.raises(ValueError):
            RawImage(np.zeros((4, 4, 2), dtype=np.uint8))

    def test_invalid_channel_order_raises(self):
        with pytest.raises(ValueError):
            RawImage(np.zeros((4, 4, 3), dtype=np.uint8), channel_order='HSV')

    @pytest.mark.parametrize("value, dtype", [
        (-5, np.int16),
        (-5.0, np.float32),
        (0.5, np.float64),
        (1000, np.uint16),
    ])
    def test_non_uint8_raises(self, value, dtype):
        """Only 8-bit unsigned buffers are accepted."""
        with pytest.raises(ValueError):
            RawImage(np.full((4, 4, 3), value, dtype=dtype))

    def test_luminance_step_samples(self):
        pixels = np.arange(36, dtype=np.uint8).reshape(6, 6)
        lum = RawImage(pixels).luminance(step=3)
        assert lum.shape == (2, 2)
        np.testing.assert_allclose(lum, pixels[::3, ::3].astype(np.float64))

    def test_luminance_weights_bgr(self):
        """Pure red in BGR order carries the red weight only."""
        pixels = np.zeros((2, 2, 3), dtype=np.uint8)
        pixels[..., 2] = 255
        lum = RawImage(pixels, channel_order='BGR').luminance()
        np.testing.assert_allclose(lum, 0.2126 * 255)

    def test_luminance_weights_rgb(self):
        pixels = np.zeros((2, 2, 3), dtype=np.uint8)
        pixels[..., 2] = 255
        lum = RawImage(pixels, channel_order='RGB').luminance()
        np.testing.assert_allclose(lum, 0.0722 * 255)

    def test_alpha_ignored(self):
        pixels = np.full((2, 2, 4), 80, dtype=np.uint8)
        pixels[..., 3] = 0
        np.testing.assert_allclose(RawImage(pixels).luminance(), 80.0)


# =============================================================================
# METRICS TESTS
# =============================================================================

class TestSamplingStride:
    """Tests for the sampling stride."""

    def test_small_image_full_resolution(self):
        assert sampling_stride(100, 100) == 1

    def test_large_image_strided(self):
        assert sampling_stride(4000, 3000) == 10

    def test_custom_budget(self):
        assert sampling_stride(1000, 1000, sample_budget=10000) == 10

    def test_invalid_budget_raises(self):
        with pytest.raises(ValueError):
            sampling_stride(100, 100, sample_budget=0)


class TestComputeMetrics:
    """Tests for compute_metrics."""

    def test_uniform_image(self, uniform_image):
        metrics = compute_metrics(uniform_image)
        assert metrics.brightness == pytest.approx(100.0)
        assert metrics.contrast == pytest.approx(0.0, abs=1e-3)
        assert metrics.sharpness == 0.0

    def test_striped_image(self, striped_image):
        """Half of the gradient pairs differ by 255, the other half by 0."""
        metrics = compute_metrics(striped_image)
        assert metrics.brightness == pytest.approx(127.5)
        assert metrics.contrast == pytest.approx(127.5)
        assert metrics.sharpness == pytest.approx(127.5)

    def test_single_pixel(self):
        metrics = compute_metrics(RawImage(np.full((1, 1, 3), 42, dtype=np.uint8)))
        assert metrics.brightness == pytest.approx(42.0)
        assert metrics.contrast == pytest.approx(0.0, abs=1e-3)
        assert metrics.sharpness == 0.0

    def test_stride_skips_fine_detail(self):
        """Detail finer than the stride is invisible to the sampler."""
        pixels = np.zeros((100, 100), dtype=np.uint8)
        pixels[:, 1::2] = 255
        metrics = compute_metrics(RawImage(pixels), sample_budget=2500)
        assert metrics.brightness == pytest.approx(0.0)
        assert metrics.sharpness == 0.0

    def test_memory_bounded_by_sample_budget(self):
        """A 12 MP frame is sampled before conversion, not converted whole."""
        image = RawImage(np.full((3000, 4000, 3), 90, dtype=np.uint8))

        tracemalloc.start()
        try:
            metrics = compute_metrics(image, sample_budget=120000)
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()

        # 120,000 samples x 3 channels x 8 bytes is under 3 MB; the full
        # frame as float64 would be 288 MB
        assert peak < 16 * 1024 * 1024
        assert metrics.brightness == pytest.approx(90.0)

    def test_non_negative(self, random_image):
        metrics = compute_metrics(random_image)
        assert metrics.brightness >= 0
        assert metrics.contrast >= 0
        assert metrics.sharpness >= 0

    def test_deterministic(self, random_image):
        assert compute_metrics(random_image) == compute_metrics(random_image)

    def test_to_dict(self, uniform_image):
        data = compute_metrics(uniform_image).to_dict()
        assert set(data) == {'brightness', 'contrast', 'sharpness'}

    def test_metrics_type(self, uniform_image):
        assert isinstance(compute_metrics(uniform_image), QualityMetrics)


# =============================================================================
# FRAMING TESTS
# =============================================================================

class TestComputeRegionStats:
    """Tests for compute_region_stats."""

    def test_uniform_image_scores_zero(self, uniform_image):
        stats = compute_region_stats(uniform_image)
        assert stats.center_contrast == pytest.approx(0.0, abs=1e-3)
        assert stats.edge_contrast == pytest.approx(0.0, abs=1e-3)
        assert stats.framing_score == pytest.approx(0.0, abs=1e-3)

    def test_centered_subject_positive(self):
        pixels = np.zeros((100, 100), dtype=np.uint8)
        pixels[25:75, 25:75] = _checkerboard(50, 50)
        stats = compute_region_stats(RawImage(pixels))
        assert stats.center_contrast == pytest.approx(127.5)
        assert stats.edge_contrast == pytest.approx(0.0)
        assert stats.framing_score == pytest.approx(127.5)

    def test_busy_border_negative(self):
        pixels = _checkerboard(100, 100)
        pixels[20:80, 20:80] = 128
        stats = compute_region_stats(RawImage(pixels))
        assert stats.center_contrast == pytest.approx(0.0, abs=1e-3)
        assert stats.framing_score < 0

    def test_corners_counted_by_top_band_only(self):
        """A detail in the top-left corner feeds the top band, not the left band."""
        pixels = np.zeros((100, 100), dtype=np.uint8)
        pixels[0:18, 0:18] = _checkerboard(18, 18)
        image = RawImage(pixels)

        top_contrast = float(np.std(image.luminance()[0:18, :]))
        stats = compute_region_stats(image)

        assert stats.edge_contrast == pytest.approx(top_contrast / 4)

    def test_framing_score_is_difference(self, random_image):
        stats = compute_region_stats(random_image)
        assert stats.framing_score == pytest.approx(stats.center_contrast - stats.edge_contrast)

    def test_tiny_image(self):
        """Regions that round to nothing contribute zero contrast."""
        stats = compute_region_stats(RawImage(np.full((1, 1), 7, dtype=np.uint8)))
        assert stats.framing_score == pytest.approx(0.0, abs=1e-3)
