"""
Vehicle Intake Pipeline - Capture Analysis
==========================================

Stateless orchestration of the capture quality gate.
"""

from .capture_analyzer import (
    AnalyzeOptions,
    AnalysisResult,
    CaptureAssessment,
    CaptureAnalyzer,
    analyze_capture,
    assess_capture,
)

__all__ = [
    "AnalyzeOptions",
    "AnalysisResult",
    "CaptureAssessment",
    "CaptureAnalyzer",
    "analyze_capture",
    "assess_capture",
]
