"""
Vehicle Intake Exceptions
=========================

Exception hierarchy shared by the capture and identifier pipelines.
"""


class IntakeError(Exception):
    """Base exception for intake errors."""
    pass


class ImageLoadError(IntakeError):
    """Raised when a capture cannot be decoded or encoded."""
    pass


class ConfigurationError(IntakeError):
    """Raised when the analyzer is misconfigured."""
    pass
