"""
Vehicle Intake
==============

Evidence gate for vehicle intake: decides whether a just-taken photo is good
enough to keep and whether recognized text holds a valid VIN, before any
network call is made.

Package Structure:
    vehicle_intake/
    ├── core/           # VIN normalization, validation, candidate search
    ├── quality/        # Pixel metrics, framing, crop, quality gate
    ├── pipeline/       # Capture analysis orchestration
    ├── config.py       # Settings with environment overrides
    └── cli.py          # Command line interface

Quick Start:
    # Capture quality
    from vehicle_intake import CaptureAnalyzer, AnalyzeOptions, load_image

    result = CaptureAnalyzer().analyze(load_image("vin.jpg"), AnalyzeOptions(target="vin"))
    print(result.should_retake, result.issues)

    # Identifier
    from vehicle_intake import normalize_vin, is_valid_vin
    is_valid_vin(normalize_vin("VIN:  1HGCM82633A004352"))

Version: 1.0.0
"""

__version__ = "1.0.0"

# Core exports (lightweight, always available)
from .core import (
    VINConstants,
    VIN_LENGTH,
    VIN_VALID_CHARS,
    VINValidationResult,
    normalize_vin,
    format_vin,
    validate_vin,
    is_valid_vin,
    calculate_check_digit,
    find_vin_candidates,
    select_best_vin,
)
from .exceptions import IntakeError, ImageLoadError, ConfigurationError

__all__ = [
    "__version__",
    # Core
    "VINConstants",
    "VIN_LENGTH",
    "VIN_VALID_CHARS",
    "VINValidationResult",
    "normalize_vin",
    "format_vin",
    "validate_vin",
    "is_valid_vin",
    "calculate_check_digit",
    "find_vin_candidates",
    "select_best_vin",
    # Errors
    "IntakeError",
    "ImageLoadError",
    "ConfigurationError",
    # Lazy (numpy / OpenCV)
    "CaptureAnalyzer",
    "AnalyzeOptions",
    "AnalysisResult",
    "analyze_capture",
    "load_image",
]


_LAZY_PIPELINE = {"CaptureAnalyzer", "AnalyzeOptions", "AnalysisResult", "analyze_capture"}


# Lazy imports for image analysis (heavier dependencies)
def __getattr__(name: str):
    """Lazy import for image analysis modules."""
    if name in _LAZY_PIPELINE:
        from . import pipeline
        return getattr(pipeline, name)
    elif name == "load_image":
        from .quality.image import load_image
        return load_image
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
