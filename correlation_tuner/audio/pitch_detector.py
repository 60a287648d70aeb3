"""Pitch detection over complete sample windows."""

from __future__ import annotations
from typing import Optional

from ..correlation import correlate
from ..decision import DEFAULT_CONFIDENCE_THRESHOLD, decide
from ..errors import InvalidConfiguration
from ..frequency_table import (
    DEFAULT_BASE_FREQUENCY,
    DEFAULT_MICRO_STEP,
    DEFAULT_SEMITONE_COUNT,
    build_candidate_table,
)
from ..logger import get_logger
from ..note_types import Analysis, CandidateTable, DetectionOutcome, SampleWindow
from ..core.interfaces import IPitchDetector

logger = get_logger(__name__)


class PitchDetector(IPitchDetector):
    """Runs correlation and the confidence decision for one window at a time.

    The candidate table is built once here and only read afterwards, so a
    single detector can be shared by any number of threads.
    """

    def __init__(
        self,
        base_frequency_hz: float = DEFAULT_BASE_FREQUENCY,
        semitone_count: int = DEFAULT_SEMITONE_COUNT,
        micro_step: float = DEFAULT_MICRO_STEP,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        table: Optional[CandidateTable] = None,
    ) -> None:
        """Initialize the PitchDetector.

        Args:
            base_frequency_hz: Frequency of the lowest note in the table
            semitone_count: Number of semitones in the table
            micro_step: Offset of the flat/sharp variants, in octaves
            confidence_threshold: Peak-to-average ratio a detection must exceed
            table: Prebuilt candidate table; the table parameters are ignored if given

        Raises:
            InvalidConfiguration: If the table cannot be built or the threshold is negative
        """
        if confidence_threshold < 0:
            raise InvalidConfiguration(
                f"confidence_threshold must not be negative, got {confidence_threshold}"
            )

        self._table = table if table is not None else build_candidate_table(
            base_frequency_hz, semitone_count, micro_step
        )
        self._confidence_threshold = float(confidence_threshold)

        logger.info(
            f"Pitch detector initialized: candidates={len(self._table)}, "
            f"threshold={self._confidence_threshold}"
        )

    @property
    def table(self) -> CandidateTable:
        """The candidate table shared by every analysis."""
        return self._table

    @property
    def confidence_threshold(self) -> float:
        return self._confidence_threshold

    def analyze(self, window: SampleWindow) -> Analysis:
        """Correlate a window against the table and decide on a note.

        Args:
            window: Mono samples with their sample rate

        Returns:
            Analysis with the outcome and the raw correlation
        """
        correlation = correlate(window, self._table)
        outcome = decide(correlation, self._table, self._confidence_threshold)
        return Analysis(outcome=outcome, correlation=correlation, timestamp=window.timestamp)

    def process_window(self, window: SampleWindow) -> DetectionOutcome:
        """Analyse a window and return only its detection outcome."""
        return self.analyze(window).outcome
