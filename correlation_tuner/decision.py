"""Confidence-gated selection of the best matching candidate."""

from __future__ import annotations

import numpy as np

from .correlation import squared_magnitudes
from .logger import get_logger
from .note_types import NO_DETECTION, CandidateTable, Detected, DetectionOutcome

logger = get_logger(__name__)

# The peak has to be an order of magnitude above the mean. Empirical; tunable.
DEFAULT_CONFIDENCE_THRESHOLD = 10.0


def decide(
    correlation: np.ndarray,
    table: CandidateTable,
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
) -> DetectionOutcome:
    """Pick the strongest candidate if it stands out enough from the rest.

    Confidence is the ratio of the largest squared magnitude to the mean
    squared magnitude over all candidates. The ratio does not depend on input
    gain or window length, so one threshold works across input levels.

    Args:
        correlation: (real, imaginary) pairs, index-aligned with ``table``
        table: The candidate table the correlation was computed against
        confidence_threshold: Confidence must be strictly above this

    Returns:
        Detected for the winning candidate, or NO_DETECTION

    Raises:
        ValueError: If the correlation and table lengths differ
    """
    magnitudes = squared_magnitudes(correlation)
    if len(magnitudes) == 0:
        return NO_DETECTION

    if len(magnitudes) != len(table):
        raise ValueError(
            f"Correlation has {len(magnitudes)} entries but the table has {len(table)}"
        )

    # argmax returns the first occurrence, so ties go to the earliest index
    max_index = int(np.argmax(magnitudes))
    max_magnitude = float(magnitudes[max_index])
    average = float(np.mean(magnitudes))

    if average == 0 or not np.isfinite(average) or not np.isfinite(max_magnitude):
        return NO_DETECTION

    confidence = max_magnitude / average
    if confidence > confidence_threshold:
        candidate = table[max_index]
        logger.debug(f"Detected {candidate.name} (confidence {confidence:.1f})")
        return Detected(candidate=candidate, confidence=confidence, index=max_index)

    return NO_DETECTION
