"""
Capture Quality Module
======================

Deterministic pixel-buffer analysis deciding whether a capture is good
enough to keep.

Components:
    image:    RawImage buffer plus decode/encode helpers
    metrics:  brightness / contrast / sharpness on a bounded sample
    regions:  center-vs-edge framing score on the full frame
    cropper:  symmetric margin crop
    gate:     per-target thresholds -> retake verdict
"""

from .image import (
    RawImage,
    ImageEncoding,
    load_image,
    encode_image,
    mime_type,
    parse_encoding,
    processed_filename,
)
from .metrics import (
    QualityMetrics,
    DEFAULT_SAMPLE_BUDGET,
    compute_metrics,
    sampling_stride,
)
from .regions import (
    RegionStats,
    compute_region_stats,
)
from .cropper import (
    CropBounds,
    CropResult,
    clamp_margin_ratio,
    crop_image,
    resolve_margin_ratio,
)
from .gate import (
    CaptureTarget,
    TargetThresholds,
    QualityVerdict,
    DEFAULT_THRESHOLDS,
    evaluate,
    parse_target,
)

__all__ = [
    # Image
    'RawImage',
    'ImageEncoding',
    'load_image',
    'encode_image',
    'mime_type',
    'parse_encoding',
    'processed_filename',
    # Metrics
    'QualityMetrics',
    'DEFAULT_SAMPLE_BUDGET',
    'compute_metrics',
    'sampling_stride',
    # Regions
    'RegionStats',
    'compute_region_stats',
    # Cropper
    'CropBounds',
    'CropResult',
    'clamp_margin_ratio',
    'crop_image',
    'resolve_margin_ratio',
    # Gate
    'CaptureTarget',
    'TargetThresholds',
    'QualityVerdict',
    'DEFAULT_THRESHOLDS',
    'evaluate',
    'parse_target',
]
