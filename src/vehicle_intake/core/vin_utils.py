"""
VIN Utilities - Single Source of Truth
======================================

Normalization and validation of Vehicle Identification Numbers read from
recognized text. Every function here is pure and never raises: malformed
input normalizes to an empty string and validates as False.

Pipeline:
    raw OCR text -> normalize_vin() -> is_valid_vin()

Examples:
    >>> normalize_vin("VIN:  WDD2040082R088866")
    'WDD2040082R088866'
    >>> is_valid_vin("1HGCM82633A004352")
    True
"""

import re
from typing import Optional, Dict, List, Tuple, FrozenSet
from dataclasses import dataclass


# =============================================================================
# VIN CONSTANTS
# =============================================================================

class VINConstants:
    """Immutable VIN specification constants per ISO 3779."""

    LENGTH: int = 17

    # Valid characters (I, O, Q excluded to avoid confusion with 1, 0)
    VALID_CHARS: FrozenSet[str] = frozenset("0123456789ABCDEFGHJKLMNPRSTUVWXYZ")
    INVALID_CHARS: FrozenSet[str] = frozenset("IOQ")

    # 0-based index of the check digit (position 9)
    CHECK_DIGIT_INDEX: int = 8

    # Checksum weights by position, check digit itself weighted 0
    CHECKSUM_WEIGHTS: Tuple[int, ...] = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)

    # Character to value mapping for checksum (ISO 3779)
    CHAR_VALUES: Dict[str, int] = {
        'A': 1, 'B': 2, 'C': 3, 'D': 4, 'E': 5, 'F': 6, 'G': 7, 'H': 8,
        'J': 1, 'K': 2, 'L': 3, 'M': 4, 'N': 5, 'P': 7, 'R': 9,
        'S': 2, 'T': 3, 'U': 4, 'V': 5, 'W': 6, 'X': 7, 'Y': 8, 'Z': 9,
        '0': 0, '1': 1, '2': 2, '3': 3, '4': 4, '5': 5, '6': 6, '7': 7, '8': 8, '9': 9
    }

    # Leading characters of South-African assembled vehicles
    TOLERANT_PREFIXES: FrozenSet[str] = frozenset("ABV")

    # Expected check digit -> characters OCR commonly reads in its place.
    # O and I misreads (for 0 and 1) are removed by normalization, which
    # leaves a 16-character VIN, so they have no entry.
    CHECK_DIGIT_CONFUSABLES: Dict[str, Tuple[str, ...]] = {
        '1': ('L',),
        '5': ('S',),
        '8': ('B',),
    }


VIN_LENGTH = VINConstants.LENGTH
VIN_VALID_CHARS = VINConstants.VALID_CHARS
VIN_INVALID_CHARS = VINConstants.INVALID_CHARS


# =============================================================================
# NORMALIZATION
# =============================================================================

# Pre-compiled regex patterns for performance
_LABEL_MARKERS = r'(?:\bVIN\b|\bV/N\b|\bVN\b|\bCHASSIS\b|\bCHAS\b|\bNO\b)'

# Column-formatted output: label, optional separator, then a wide gap
_LABEL_PATTERN_STRICT = re.compile(_LABEL_MARKERS + r'\s*[:\-#]?\s{2,}([A-Z0-9]{5,})')
_LABEL_PATTERN_LOOSE = re.compile(_LABEL_MARKERS + r'\s*[:\-#]?\s*([A-Z0-9]{5,})')

# Label plus separator must span at least this many characters
_MIN_LABEL_SPAN = 3

_NON_ALNUM = re.compile(r'[^A-Z0-9]')
_ILLEGAL_LETTERS = re.compile(r'[IOQ]')
_VIN_FORMAT = re.compile(r'[A-HJ-NPR-Z0-9]{17}', re.IGNORECASE)


def normalize_vin(raw_text: Optional[str]) -> str:
    """
    Extract and clean a VIN candidate from arbitrary recognized text.

    Strategy:
    1. Label-anchored extraction ("VIN:  XXXXX") with a wide gap
    2. Looser label match, accepted only when the label span is >= 3 chars
    3. Otherwise the whole input is the candidate

    The candidate is then uppercased, stripped to [A-Z0-9], stripped of
    I/O/Q and truncated to 17 characters.

    Args:
        raw_text: Raw OCR output (None and non-strings are tolerated)

    Returns:
        Normalized VIN string, possibly empty
    """
    if raw_text is None:
        raw_text = ''
    elif not isinstance(raw_text, str):
        raw_text = str(raw_text)

    text = raw_text.upper()

    spaced = _LABEL_PATTERN_STRICT.search(text)
    if spaced:
        text = spaced.group(1)
    else:
        loose = _LABEL_PATTERN_LOOSE.search(text)
        if loose and len(loose.group(0)) - len(loose.group(1)) >= _MIN_LABEL_SPAN:
            text = loose.group(1)

    text = _NON_ALNUM.sub('', text)
    text = _ILLEGAL_LETTERS.sub('', text)

    return text[:VIN_LENGTH]


def format_vin(value: Optional[str]) -> str:
    """Display form of a VIN (identical to its normalized form)."""
    return normalize_vin(value)


# =============================================================================
# OCR ARTIFACT DETECTION
# =============================================================================

# Patterns that practically never occur in a genuine VIN
_OCR_GARBAGE_PATTERNS: List[re.Pattern] = [
    re.compile(r'[IL1]{3,}'),       # Vertical-stroke runs
    re.compile(r'[O0]{4,}'),        # Round-glyph runs
    re.compile(r'^[0-9]{17}$'),     # Digits only
    re.compile(r'^[A-Z]{17}$'),     # Letters only
    re.compile(r'(.)\1{5,}'),       # Same character 6+ times
]


def has_ocr_artifacts(vin: str) -> bool:
    """Check whether a normalized VIN contains scan-noise patterns."""
    return any(pattern.search(vin) for pattern in _OCR_GARBAGE_PATTERNS)


# =============================================================================
# CHECKSUM
# =============================================================================

def calculate_check_digit(vin: str) -> Optional[str]:
    """
    Calculate the expected check digit for a VIN.

    The check digit (position 9) is calculated by:
    1. Assigning numeric values to each character
    2. Multiplying by position weights
    3. Summing and taking mod 11
    4. Result 10 becomes 'X'

    Args:
        vin: 17-character VIN (check digit position will be ignored)

    Returns:
        Expected check digit ('0'-'9' or 'X'), or None if the VIN is not
        17 valid characters
    """
    if not isinstance(vin, str) or len(vin) != VIN_LENGTH:
        return None

    vin = vin.upper()

    total = 0
    for i, char in enumerate(vin):
        if i == VINConstants.CHECK_DIGIT_INDEX:
            continue
        value = VINConstants.CHAR_VALUES.get(char)
        if value is None:
            return None
        total += value * VINConstants.CHECKSUM_WEIGHTS[i]

    remainder = total % 11
    return 'X' if remainder == 10 else str(remainder)


def _check_digit_tolerated(vin: str, expected: str) -> bool:
    """
    Accept a known OCR confusion at the check-digit position.

    Only applies to VINs that plausibly denote South-African assembly
    (leading A, B or V) and only to the check-digit character.
    """
    if vin[:1] not in VINConstants.TOLERANT_PREFIXES:
        return False
    alternatives = VINConstants.CHECK_DIGIT_CONFUSABLES.get(expected, ())
    return vin[VINConstants.CHECK_DIGIT_INDEX] in alternatives


# =============================================================================
# VIN VALIDATION
# =============================================================================

@dataclass
class VINValidationResult:
    """Result of VIN validation."""
    vin: str
    is_valid_length: bool
    has_valid_chars: bool
    has_ocr_artifacts: bool
    expected_check_digit: Optional[str]
    checksum_valid: bool
    tolerance_applied: bool
    is_fully_valid: bool

    def to_dict(self) -> Dict:
        return {
            'vin': self.vin,
            'is_valid_length': self.is_valid_length,
            'has_valid_chars': self.has_valid_chars,
            'has_ocr_artifacts': self.has_ocr_artifacts,
            'expected_check_digit': self.expected_check_digit,
            'checksum_valid': self.checksum_valid,
            'tolerance_applied': self.tolerance_applied,
            'is_fully_valid': self.is_fully_valid,
        }


def validate_vin(vin: Optional[str]) -> VINValidationResult:
    """
    Comprehensive VIN validation.

    Checks, in order (each one short-circuits the rest):
    1. Length after normalization (must be 17)
    2. Character set (no I, O, Q)
    3. OCR artifact patterns
    4. Check digit at position 9, with the regional confusable tolerance

    Args:
        vin: VIN or raw text to validate

    Returns:
        VINValidationResult with all validation details
    """
    normalized = normalize_vin(vin)

    is_valid_length = len(normalized) == VIN_LENGTH
    has_valid_chars = is_valid_length and _VIN_FORMAT.fullmatch(normalized) is not None
    artifacts = has_valid_chars and has_ocr_artifacts(normalized)

    expected = None
    checksum_valid = False
    tolerance_applied = False

    if has_valid_chars and not artifacts:
        expected = calculate_check_digit(normalized)
        if expected is not None:
            checksum_valid = normalized[VINConstants.CHECK_DIGIT_INDEX] == expected
            if not checksum_valid:
                tolerance_applied = _check_digit_tolerated(normalized, expected)

    return VINValidationResult(
        vin=normalized,
        is_valid_length=is_valid_length,
        has_valid_chars=has_valid_chars,
        has_ocr_artifacts=artifacts,
        expected_check_digit=expected,
        checksum_valid=checksum_valid,
        tolerance_applied=tolerance_applied,
        is_fully_valid=checksum_valid or tolerance_applied,
    )


def is_valid_vin(vin: Optional[str]) -> bool:
    """
    Check whether text normalizes to a valid VIN.

    Args:
        vin: VIN or raw text

    Returns:
        True if the normalized VIN passes format, artifact and checksum checks
    """
    return validate_vin(vin).is_fully_valid


# =============================================================================
# CANDIDATE SEARCH
# =============================================================================

# 11-25 alphanumerics, each optionally followed by a space or dash (OCR noise)
_CHUNKY_PATTERN = re.compile(r'(?:[A-Z0-9][ -]?){11,25}')
_VIN_WORD = re.compile(r'\bVIN\b')
_LINE_BREAK = re.compile(r'\r?\n')

_MIN_CANDIDATE_LENGTH = 11


def find_vin_candidates(text: Optional[str]) -> List[str]:
    """
    Find normalized VIN candidates in a block of recognized text.

    Lines mentioning "VIN" are scanned a second time on their own, so a
    labelled value is found even when it is glued to neighbouring text.

    Args:
        text: Full OCR output, possibly multi-line

    Returns:
        Distinct candidates of length >= 11, exact-17 first, then longest first
    """
    if not text or not isinstance(text, str):
        return []

    upper = text.upper()
    labelled_lines = [line for line in _LINE_BREAK.split(upper) if _VIN_WORD.search(line)]

    raw_hits = _CHUNKY_PATTERN.findall(upper)
    for line in labelled_lines:
        raw_hits.extend(_CHUNKY_PATTERN.findall(line))

    candidates: List[str] = []
    for hit in raw_hits:
        normalized = normalize_vin(hit)
        if len(normalized) >= _MIN_CANDIDATE_LENGTH and normalized not in candidates:
            candidates.append(normalized)

    return sorted(candidates, key=lambda c: (len(c) != VIN_LENGTH, -len(c)))


def select_best_vin(text: Optional[str]) -> Optional[str]:
    """
    Pick the most plausible VIN from recognized text.

    Returns:
        First candidate that validates, else the top-ranked candidate,
        else None when nothing VIN-like was found
    """
    candidates = find_vin_candidates(text)
    for candidate in candidates:
        if is_valid_vin(candidate):
            return candidate
    return candidates[0] if candidates else None
