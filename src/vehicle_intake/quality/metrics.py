"""
Capture Quality Metrics
=======================

Brightness, contrast and sharpness of a capture, computed on a strided
sample of the luminance plane so the cost is bounded by the sample budget
rather than the sensor resolution.

    stride     = max(1, floor(sqrt(W * H / sample_budget)))
    brightness = mean(lum)
    contrast   = sqrt(max(0, E[lum^2] - E[lum]^2))
    sharpness  = mean |lum(x, y) - lum(x + stride, y)|, |lum(x, y) - lum(x, y + stride)|

Sharpness is a directional-gradient proxy, not an edge operator.
"""

import math
import numpy as np
from dataclasses import dataclass, asdict
from typing import Dict
import logging

from .image import RawImage

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_BUDGET = 120000


@dataclass(frozen=True)
class QualityMetrics:
    """Exposure and focus metrics of a capture (all non-negative)."""
    brightness: float
    contrast: float
    sharpness: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def sampling_stride(width: int, height: int, sample_budget: int = DEFAULT_SAMPLE_BUDGET) -> int:
    """Pixel stride that keeps the sample count near the budget."""
    if sample_budget <= 0:
        raise ValueError(f"sample_budget must be positive, got {sample_budget}")
    return max(1, int(math.floor(math.sqrt((width * height) / sample_budget))))


def compute_metrics(image: RawImage, sample_budget: int = DEFAULT_SAMPLE_BUDGET) -> QualityMetrics:
    """
    Compute brightness, contrast and sharpness of an image.

    Args:
        image: Capture to measure (the post-crop image in the gate)
        sample_budget: Target number of sampled pixels

    Returns:
        QualityMetrics
    """
    step = sampling_stride(image.width, image.height, sample_budget)
    sampled = image.luminance(step)

    brightness = float(sampled.mean())
    variance = float(np.square(sampled).mean()) - brightness * brightness
    contrast = math.sqrt(variance) if variance > 0 else 0.0

    # Neighbours at stride distance are exactly the adjacent samples
    horizontal = np.abs(np.diff(sampled, axis=1))
    vertical = np.abs(np.diff(sampled, axis=0))
    gradient_samples = horizontal.size + vertical.size
    if gradient_samples:
        sharpness = float(horizontal.sum() + vertical.sum()) / gradient_samples
    else:
        sharpness = 0.0

    metrics = QualityMetrics(brightness=brightness, contrast=contrast, sharpness=sharpness)
    logger.debug(
        f"Metrics on {image.width}x{image.height} (stride={step}, samples={sampled.size}): "
        f"brightness={brightness:.1f}, contrast={contrast:.1f}, sharpness={sharpness:.1f}"
    )
    return metrics
