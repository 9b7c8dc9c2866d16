"""
Symmetric margin crop applied to a capture before upload.
"""

import math
from dataclasses import dataclass, asdict
from typing import Dict, Optional
import logging

from .image import RawImage

logger = logging.getLogger(__name__)

MIN_MARGIN_RATIO = 0.0
MAX_MARGIN_RATIO = 0.25


@dataclass(frozen=True)
class CropBounds:
    """Crop rectangle in source image coordinates."""
    x: int
    y: int
    width: int
    height: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class CropResult:
    """Outcome of a crop attempt."""
    image: RawImage
    bounds: CropBounds
    applied: bool


def clamp_margin_ratio(margin_ratio: float) -> float:
    """Clamp a margin ratio to [0, 0.25]. NaN clamps to 0."""
    value = float(margin_ratio)
    if math.isnan(value):
        return MIN_MARGIN_RATIO
    return min(max(value, MIN_MARGIN_RATIO), MAX_MARGIN_RATIO)


def resolve_margin_ratio(margin_ratio: Optional[float], default: float) -> float:
    """
    Effective margin ratio for a capture.

    None and NaN fall back to the target default; everything else,
    the default included, is clamped to [0, 0.25].
    """
    if margin_ratio is None or math.isnan(margin_ratio):
        return clamp_margin_ratio(default)
    effective = clamp_margin_ratio(margin_ratio)
    if effective != margin_ratio:
        logger.debug(f"Margin ratio {margin_ratio} clamped to {effective}")
    return effective


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _uncropped(image: RawImage) -> CropResult:
    return CropResult(
        image=image,
        bounds=CropBounds(x=0, y=0, width=image.width, height=image.height),
        applied=False,
    )


def crop_image(image: RawImage, margin_ratio: float) -> CropResult:
    """
    Remove a symmetric margin from every side of the image.

    marginX = round(width * ratio) and marginY = round(height * ratio) are
    taken from each side. Degenerate geometry (non-positive result) returns
    the original image with applied=False.

    Args:
        image: Source capture
        margin_ratio: Fraction of each dimension removed per side (clamped)

    Returns:
        CropResult
    """
    margin_ratio = clamp_margin_ratio(margin_ratio)
    if margin_ratio <= 0:
        return _uncropped(image)

    margin_x = _round_half_up(image.width * margin_ratio)
    margin_y = _round_half_up(image.height * margin_ratio)
    crop_width = image.width - margin_x * 2
    crop_height = image.height - margin_y * 2

    if crop_width <= 0 or crop_height <= 0:
        logger.debug(
            f"Degenerate crop {crop_width}x{crop_height} for {image.width}x{image.height}, "
            f"keeping original"
        )
        return _uncropped(image)

    bounds = CropBounds(x=margin_x, y=margin_y, width=crop_width, height=crop_height)
    return CropResult(
        image=image.region(margin_x, margin_y, crop_width, crop_height),
        bounds=bounds,
        applied=margin_x > 0 or margin_y > 0,
    )
