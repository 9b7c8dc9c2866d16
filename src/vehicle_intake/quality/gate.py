"""
Capture Quality Gate
====================

Turns capture metrics into an accept/retake verdict with human-readable
issues. Thresholds live in an immutable per-target table that callers may
replace wholesale.

Issue order:
    1. "Image too dark" / "Image overexposed" (mutually exclusive)
    2. "Low contrast"
    3. "Image appears blurry"
    4. Target-specific framing message

Note: the odometer brightness floor (55) is higher than the VIN floor (45)
even though odometer displays are the more glare-prone subject. Kept as
calibrated; pending product-owner confirmation.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Union

from ..exceptions import ConfigurationError
from .metrics import QualityMetrics


class CaptureTarget(str, Enum):
    """What the capture is supposed to show."""
    VIN = 'vin'
    ODOMETER = 'odometer'


def parse_target(value: Union[str, CaptureTarget]) -> CaptureTarget:
    """
    Coerce a string or enum to a CaptureTarget.

    Raises:
        ConfigurationError: If the target is unknown
    """
    if isinstance(value, CaptureTarget):
        return value
    try:
        return CaptureTarget(str(value).lower())
    except ValueError:
        valid = [t.value for t in CaptureTarget]
        raise ConfigurationError(
            f"Invalid capture target: '{value}'. Valid targets: {valid}"
        )


ISSUE_TOO_DARK = 'Image too dark'
ISSUE_OVEREXPOSED = 'Image overexposed'
ISSUE_LOW_CONTRAST = 'Low contrast'
ISSUE_BLURRY = 'Image appears blurry'


@dataclass(frozen=True)
class TargetThresholds:
    """Acceptance thresholds for one capture target."""
    brightness_min: float
    brightness_max: float
    contrast_min: float
    sharpness_min: float
    framing_score_min: float
    framing_issue: str


DEFAULT_THRESHOLDS: Mapping[CaptureTarget, TargetThresholds] = MappingProxyType({
    CaptureTarget.VIN: TargetThresholds(
        brightness_min=45,
        brightness_max=215,
        contrast_min=22,
        sharpness_min=13,
        framing_score_min=6,
        framing_issue='VIN not centered in framing guide',
    ),
    CaptureTarget.ODOMETER: TargetThresholds(
        brightness_min=55,
        brightness_max=205,
        contrast_min=26,
        sharpness_min=15,
        framing_score_min=5,
        framing_issue='Odometer cluster not centered',
    ),
})


@dataclass(frozen=True)
class QualityVerdict:
    """Gate decision for a capture."""
    issues: List[str] = field(default_factory=list)

    @property
    def should_retake(self) -> bool:
        return len(self.issues) > 0


def evaluate(
    target: Union[str, CaptureTarget],
    metrics: QualityMetrics,
    framing_score: float,
    thresholds: Mapping[CaptureTarget, TargetThresholds] = DEFAULT_THRESHOLDS,
) -> QualityVerdict:
    """
    Judge a capture against the thresholds of its target.

    Args:
        target: Capture target
        metrics: Metrics of the processed (post-crop) image
        framing_score: Framing score of the original (pre-crop) image
        thresholds: Per-target threshold table

    Returns:
        QualityVerdict listing every failed check

    Raises:
        ConfigurationError: If the table has no entry for the target
    """
    target = parse_target(target)
    try:
        limits = thresholds[target]
    except KeyError:
        raise ConfigurationError(f"No thresholds configured for target '{target.value}'")

    issues: List[str] = []

    if metrics.brightness < limits.brightness_min:
        issues.append(ISSUE_TOO_DARK)
    elif metrics.brightness > limits.brightness_max:
        issues.append(ISSUE_OVEREXPOSED)

    if metrics.contrast < limits.contrast_min:
        issues.append(ISSUE_LOW_CONTRAST)

    if metrics.sharpness < limits.sharpness_min:
        issues.append(ISSUE_BLURRY)

    if framing_score < limits.framing_score_min:
        issues.append(limits.framing_issue)

    return QualityVerdict(issues=issues)
