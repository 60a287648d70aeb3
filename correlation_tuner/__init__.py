"""
correlation_tuner - Monophonic pitch detection by complex-exponential correlation
"""

from .correlation import correlate, squared_magnitudes
from .decision import DEFAULT_CONFIDENCE_THRESHOLD, decide
from .errors import InvalidConfiguration
from .frequency_table import CHROMATIC_NAMES, build_candidate_table
from .note_types import (
    NO_DETECTION,
    Analysis,
    Candidate,
    CandidateTable,
    Detected,
    DetectionOutcome,
    NoDetection,
    SampleWindow,
    Tuning,
)

__version__ = "0.1.0"
__all__ = [
    "build_candidate_table",
    "correlate",
    "squared_magnitudes",
    "decide",
    "Candidate",
    "CandidateTable",
    "SampleWindow",
    "Detected",
    "NoDetection",
    "NO_DETECTION",
    "DetectionOutcome",
    "Analysis",
    "Tuning",
    "InvalidConfiguration",
    "CHROMATIC_NAMES",
    "DEFAULT_CONFIDENCE_THRESHOLD",
]
