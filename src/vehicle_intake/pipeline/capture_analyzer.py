"""
Capture Analyzer - Quality Gate Orchestration
=============================================

Composes crop, metrics, framing analysis and the quality gate into a
single stateless call:

    original ──► crop ──► processed ──► compute_metrics ──┐
        │                                                 ├──► evaluate ──► AnalysisResult
        └──────────────► compute_region_stats ────────────┘

Framing is judged on the original frame (full context); exposure and focus
on the processed frame (what is actually uploaded). assess_capture() takes
both images explicitly so the two cannot be swapped by accident.

Usage:
    from vehicle_intake.pipeline import CaptureAnalyzer, AnalyzeOptions

    analyzer = CaptureAnalyzer()
    result = analyzer.analyze(load_image('vin.jpg'), AnalyzeOptions(target='vin'))
    if result.should_retake:
        print(result.issues)
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import logging

from ..config import QualityConfig, get_config
from ..quality.cropper import CropBounds, crop_image, resolve_margin_ratio
from ..quality.gate import (
    DEFAULT_THRESHOLDS,
    CaptureTarget,
    TargetThresholds,
    evaluate,
    parse_target,
)
from ..quality.image import ImageEncoding, RawImage, encode_image, parse_encoding
from ..quality.metrics import DEFAULT_SAMPLE_BUDGET, QualityMetrics, compute_metrics
from ..quality.regions import RegionStats, compute_region_stats

logger = logging.getLogger(__name__)


@contextmanager
def _timer():
    """Context manager for timing operations."""
    start = time.perf_counter()
    elapsed = {'ms': 0.0}
    try:
        yield elapsed
    finally:
        elapsed['ms'] = (time.perf_counter() - start) * 1000


@dataclass
class AnalyzeOptions:
    """
    Per-capture analysis options.

    Attributes:
        target: 'vin' or 'odometer'
        margin_ratio: Crop margin per side; None uses the target default,
            anything else is clamped to [0, 0.25]
        preferred_encoding: Output encoding; None keeps the source format
            (JPEG when unknown)
    """
    target: Union[str, CaptureTarget]
    margin_ratio: Optional[float] = None
    preferred_encoding: Optional[Union[str, ImageEncoding]] = None

    def __post_init__(self):
        self.target = parse_target(self.target)
        if self.preferred_encoding is not None:
            self.preferred_encoding = parse_encoding(self.preferred_encoding)


@dataclass
class CaptureAssessment:
    """Metrics, framing and verdict for an (original, processed) image pair."""
    metrics: QualityMetrics
    region_stats: RegionStats
    issues: List[str] = field(default_factory=list)

    @property
    def should_retake(self) -> bool:
        return len(self.issues) > 0


@dataclass
class AnalysisResult:
    """Structured outcome of a capture analysis."""
    processed_image: RawImage
    original_image: RawImage
    target: CaptureTarget
    margin_ratio: float
    encoding: ImageEncoding
    metrics: QualityMetrics
    region_stats: RegionStats
    crop_bounds: CropBounds
    crop_applied: bool
    issues: List[str] = field(default_factory=list)
    processing_time_ms: float = 0.0

    @property
    def should_retake(self) -> bool:
        return len(self.issues) > 0

    @property
    def original_dimensions(self) -> Tuple[int, int]:
        return self.original_image.dimensions

    @property
    def processed_dimensions(self) -> Tuple[int, int]:
        return self.processed_image.dimensions

    def encode_processed(self, jpeg_quality: int = 95) -> bytes:
        """Encode the processed image with the resolved encoding."""
        return encode_image(self.processed_image, self.encoding, jpeg_quality=jpeg_quality)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (pixel data excluded)."""
        original_w, original_h = self.original_dimensions
        processed_w, processed_h = self.processed_dimensions
        return {
            'target': self.target.value,
            'margin_ratio': self.margin_ratio,
            'encoding': self.encoding.value,
            'brightness': self.metrics.brightness,
            'contrast': self.metrics.contrast,
            'sharpness': self.metrics.sharpness,
            'center_contrast': self.region_stats.center_contrast,
            'edge_contrast': self.region_stats.edge_contrast,
            'framing_score': self.region_stats.framing_score,
            'crop_applied': self.crop_applied,
            'crop_bounds': self.crop_bounds.to_dict(),
            'original_dimensions': {'width': original_w, 'height': original_h},
            'processed_dimensions': {'width': processed_w, 'height': processed_h},
            'should_retake': self.should_retake,
            'issues': list(self.issues),
            'processing_time_ms': self.processing_time_ms,
        }


def assess_capture(
    original_image: RawImage,
    processed_image: RawImage,
    target: Union[str, CaptureTarget],
    thresholds: Mapping[CaptureTarget, TargetThresholds] = DEFAULT_THRESHOLDS,
    sample_budget: int = DEFAULT_SAMPLE_BUDGET,
) -> CaptureAssessment:
    """
    Judge a capture from its original and processed frames.

    Args:
        original_image: Uncropped frame (framing score)
        processed_image: Cropped frame (exposure and focus metrics)
        target: Capture target
        thresholds: Per-target threshold table
        sample_budget: Metrics sample budget

    Returns:
        CaptureAssessment
    """
    region_stats = compute_region_stats(original_image)
    metrics = compute_metrics(processed_image, sample_budget=sample_budget)
    verdict = evaluate(target, metrics, region_stats.framing_score, thresholds)
    return CaptureAssessment(metrics=metrics, region_stats=region_stats, issues=verdict.issues)


class CaptureAnalyzer:
    """
    Stateless capture quality analyzer.

    Holds only immutable configuration; safe to share across threads.

    Example:
        analyzer = CaptureAnalyzer()
        result = analyzer.analyze(image, AnalyzeOptions(target='odometer'))
        print(result.should_retake, result.issues)
    """

    def __init__(
        self,
        thresholds: Optional[Mapping[CaptureTarget, TargetThresholds]] = None,
        quality_config: Optional[QualityConfig] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            thresholds: Per-target threshold table (defaults if None)
            quality_config: Sample budget, margin defaults and JPEG quality
                (global configuration if None)
        """
        config = quality_config or get_config().quality
        self.thresholds = thresholds if thresholds is not None else DEFAULT_THRESHOLDS
        self.sample_budget = config.sample_budget
        self.jpeg_quality = config.jpeg_quality
        self._margin_defaults = dict(config.margin_defaults())

        logger.debug(
            f"CaptureAnalyzer initialized with sample_budget={self.sample_budget}, "
            f"margins={self._margin_defaults}"
        )

    def default_margin(self, target: Union[str, CaptureTarget]) -> float:
        """Default crop margin of a target."""
        return self._margin_defaults[parse_target(target).value]

    def analyze(self, image: RawImage, options: AnalyzeOptions) -> AnalysisResult:
        """
        Analyze a capture and decide whether it must be retaken.

        Args:
            image: Decoded, orientation-normalized capture
            options: Target, margin and encoding options

        Returns:
            AnalysisResult
        """
        with _timer() as elapsed:
            target = options.target
            margin_ratio = resolve_margin_ratio(options.margin_ratio, self.default_margin(target))
            crop = crop_image(image, margin_ratio)

            assessment = assess_capture(
                original_image=image,
                processed_image=crop.image,
                target=target,
                thresholds=self.thresholds,
                sample_budget=self.sample_budget,
            )

            encoding = options.preferred_encoding or image.source_format or ImageEncoding.JPEG

        result = AnalysisResult(
            processed_image=crop.image,
            original_image=image,
            target=target,
            margin_ratio=margin_ratio,
            encoding=encoding,
            metrics=assessment.metrics,
            region_stats=assessment.region_stats,
            crop_bounds=crop.bounds,
            crop_applied=crop.applied,
            issues=assessment.issues,
            processing_time_ms=elapsed['ms'],
        )

        if result.should_retake:
            logger.info(f"{target.value} capture flagged for retake: {', '.join(result.issues)}")
        else:
            logger.debug(f"{target.value} capture accepted in {elapsed['ms']:.1f} ms")

        return result


def analyze_capture(
    image: RawImage,
    target: Union[str, CaptureTarget],
    margin_ratio: Optional[float] = None,
    preferred_encoding: Optional[Union[str, ImageEncoding]] = None,
) -> AnalysisResult:
    """
    Quick analysis with default thresholds and global configuration.

    Args:
        image: Decoded capture
        target: 'vin' or 'odometer'
        margin_ratio: Optional crop margin override
        preferred_encoding: Optional output encoding

    Returns:
        AnalysisResult
    """
    options = AnalyzeOptions(
        target=target,
        margin_ratio=margin_ratio,
        preferred_encoding=preferred_encoding,
    )
    return CaptureAnalyzer().analyze(image, options)
