"""
Framing Analysis
================

Center-vs-edge contrast of the full (uncropped) frame. A subject that sits
inside the framing guide (VIN plate, odometer cluster) puts more local
contrast in the middle of the frame than around it.

Geometry (ratios of width/height):
    center: x, y in [0.25, 0.75]
    top:    x in [0, 1],       y in [0, 0.18]
    bottom: x in [0, 1],       y in [0.82, 1]
    left:   x in [0, 0.18],    y in [0.18, 0.82]
    right:  x in [0.82, 1],    y in [0.18, 0.82]

Corners belong to the top/bottom bands only. Band bounds use floor for the
start and ceil for the end, so thin images may yield overlapping bands.
"""

import math
import numpy as np
from dataclasses import dataclass, asdict
from typing import Dict, Tuple
import logging

from .image import RawImage

logger = logging.getLogger(__name__)

CENTER_START = 0.25
CENTER_END = 0.75
EDGE_BAND = 0.18


@dataclass(frozen=True)
class RegionStats:
    """Center/edge contrast of a frame."""
    center_contrast: float
    edge_contrast: float
    framing_score: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _region_stats(
    lum: np.ndarray,
    x0_ratio: float,
    x1_ratio: float,
    y0_ratio: float,
    y1_ratio: float,
) -> Tuple[float, float]:
    """Exact brightness and contrast of a rectangular region of the luminance plane."""
    height, width = lum.shape
    x0 = max(0, int(math.floor(width * x0_ratio)))
    x1 = min(width, int(math.ceil(width * x1_ratio)))
    y0 = max(0, int(math.floor(height * y0_ratio)))
    y1 = min(height, int(math.ceil(height * y1_ratio)))

    region = lum[y0:y1, x0:x1]
    if region.size == 0:
        return 0.0, 0.0

    brightness = float(region.mean())
    variance = float(np.square(region).mean()) - brightness * brightness
    return brightness, (math.sqrt(variance) if variance > 0 else 0.0)


def compute_region_stats(image: RawImage) -> RegionStats:
    """
    Compute the framing score of a capture.

    Must be run on the original frame, before any crop.

    Args:
        image: Uncropped capture

    Returns:
        RegionStats with framing_score = center_contrast - edge_contrast
    """
    lum = image.luminance()

    _, center_contrast = _region_stats(lum, CENTER_START, CENTER_END, CENTER_START, CENTER_END)

    bands = (
        _region_stats(lum, 0, 1, 0, EDGE_BAND),                                # top
        _region_stats(lum, 0, 1, 1 - EDGE_BAND, 1),                            # bottom
        _region_stats(lum, 0, EDGE_BAND, EDGE_BAND, 1 - EDGE_BAND),            # left
        _region_stats(lum, 1 - EDGE_BAND, 1, EDGE_BAND, 1 - EDGE_BAND),        # right
    )
    edge_contrast = sum(contrast for _, contrast in bands) / len(bands)

    stats = RegionStats(
        center_contrast=center_contrast,
        edge_contrast=edge_contrast,
        framing_score=center_contrast - edge_contrast,
    )
    logger.debug(
        f"Framing on {image.width}x{image.height}: center={center_contrast:.1f}, "
        f"edge={edge_contrast:.1f}, score={stats.framing_score:.1f}"
    )
    return stats
