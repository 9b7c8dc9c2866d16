"""
Vehicle Intake Core Module
==========================

VIN normalization and validation.
Single Source of Truth for all identifier-related functionality.
"""

from .vin_utils import (
    # Constants
    VINConstants,
    VIN_LENGTH,
    VIN_VALID_CHARS,
    VIN_INVALID_CHARS,
    # Normalization
    normalize_vin,
    format_vin,
    # Validation
    VINValidationResult,
    validate_vin,
    is_valid_vin,
    has_ocr_artifacts,
    # Checksum
    calculate_check_digit,
    # Candidate search
    find_vin_candidates,
    select_best_vin,
)

__all__ = [
    # Constants
    "VINConstants",
    "VIN_LENGTH",
    "VIN_VALID_CHARS",
    "VIN_INVALID_CHARS",
    # Normalization
    "normalize_vin",
    "format_vin",
    # Validation
    "VINValidationResult",
    "validate_vin",
    "is_valid_vin",
    "has_ocr_artifacts",
    # Checksum
    "calculate_check_digit",
    # Candidate search
    "find_vin_candidates",
    "select_best_vin",
]
