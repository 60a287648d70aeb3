"""Formatting and note-change tracking for reporting detections to a user."""

import math
from typing import Optional

from .decision import DEFAULT_CONFIDENCE_THRESHOLD
from .logger import get_logger
from .note_types import Candidate, DetectionOutcome

logger = get_logger(__name__)

# Confidence above the threshold that maps to 100%
CONFIDENCE_SPAN = 90.0


def format_frequency(frequency: float) -> str:
    """'Frequency: 440.00 Hertz'"""
    return f"Frequency: {frequency:.2f} Hertz"


def format_announcement(candidate: Candidate) -> str:
    """Sentence announcing a detected candidate, e.g. 'Detected A at 440.00 Hertz'."""
    return f"Detected {candidate.name} at {candidate.frequency:.2f} Hertz"


def confidence_percent(
    confidence: float,
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    span: float = CONFIDENCE_SPAN,
) -> int:
    """Map a peak-to-average confidence onto 0-100 for display.

    The threshold maps to 0% and ``threshold + span`` and above to 100%.
    Halves round up.
    """
    percent = math.floor((confidence - threshold) / span * 100 + 0.5)
    return max(0, min(100, percent))


def format_confidence(confidence: float, threshold: float = DEFAULT_CONFIDENCE_THRESHOLD) -> str:
    return f"Confidence: {confidence_percent(confidence, threshold)}%"


class NoteChangeTracker:
    """Decides whether a detection is new enough to be announced.

    A detection is new when its candidate name differs from the last
    announced one, or when the name is the same but the frequency moved by
    more than ``min_frequency_change`` Hz. Windows without a detection leave
    the last note in place, so a note that fades and returns is not repeated.
    """

    def __init__(self, min_frequency_change: float = 0.5):
        self._min_frequency_change = min_frequency_change
        self._last: Optional[Candidate] = None

    @property
    def last_candidate(self) -> Optional[Candidate]:
        return self._last

    def update(self, outcome: DetectionOutcome) -> bool:
        """Record an outcome.

        Returns:
            True if the outcome is a detection that should be announced
        """
        if not outcome.detected:
            return False

        candidate = outcome.candidate
        last = self._last
        changed = (
            last is None
            or candidate.name != last.name
            or abs(candidate.frequency - last.frequency) > self._min_frequency_change
        )
        if changed:
            logger.debug(f"Note changed to {candidate.name}")
            self._last = candidate
        return changed

    def reset(self) -> None:
        self._last = None
