"""Candidate frequency table for the correlation detector.

The table holds every equal-tempered note in the configured range, each with
a slightly flat and a slightly sharp neighbour, so the detector can report
"a bit flat" or "a bit sharp" instead of only the nearest note.
"""

import math
import numbers
from typing import List

from .errors import InvalidConfiguration
from .logger import get_logger
from .note_types import Candidate, CandidateTable, Tuning

logger = get_logger(__name__)

# Chromatic scale, starting at C
CHROMATIC_NAMES: List[str] = [
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
]

SEMITONES_PER_OCTAVE = 12

DEFAULT_BASE_FREQUENCY = 65.41  # C2, two octaves below middle C
DEFAULT_SEMITONE_COUNT = 30  # Two and a half octaves
DEFAULT_MICRO_STEP = 1 / 48  # A quarter of a semitone, in octaves
DEFAULT_BASE_OCTAVE = 2

# Half a semitone: past this a variant is closer to the neighbouring note
MAX_MICRO_STEP = 1 / 24

FLAT_SUFFIX = " (a bit flat)"
SHARP_SUFFIX = " (a bit sharp)"


def note_frequency(base_frequency: float, semitone: int) -> float:
    """Equal-tempered frequency ``semitone`` steps above ``base_frequency``."""
    return base_frequency * 2 ** (semitone / SEMITONES_PER_OCTAVE)


def build_candidate_table(
    base_frequency: float = DEFAULT_BASE_FREQUENCY,
    semitone_count: int = DEFAULT_SEMITONE_COUNT,
    micro_step: float = DEFAULT_MICRO_STEP,
    base_octave: int = DEFAULT_BASE_OCTAVE,
) -> CandidateTable:
    """Build the ordered candidate table.

    For every semitone three candidates are emitted, in this order: flat
    (``2 ** -micro_step`` below the note), exact, and sharp
    (``2 ** micro_step`` above it).

    Args:
        base_frequency: Frequency in Hz of the first note, named 'C'
        semitone_count: Number of successive semitones to generate
        micro_step: Offset of the flat/sharp variants, in octaves
        base_octave: Scientific pitch octave of the first note

    Returns:
        CandidateTable with ``semitone_count * 3`` entries

    Raises:
        InvalidConfiguration: If any parameter is non-positive or out of range
    """
    if (
        not isinstance(base_frequency, numbers.Real)
        or not math.isfinite(base_frequency)
        or base_frequency <= 0
    ):
        raise InvalidConfiguration(
            f"base_frequency must be a positive number of Hz, got {base_frequency!r}"
        )
    if (
        isinstance(semitone_count, bool)
        or not isinstance(semitone_count, numbers.Integral)
        or semitone_count <= 0
    ):
        raise InvalidConfiguration(
            f"semitone_count must be a positive integer, got {semitone_count!r}"
        )
    if (
        not isinstance(micro_step, numbers.Real)
        or not 0 < micro_step < MAX_MICRO_STEP
    ):
        raise InvalidConfiguration(
            f"micro_step must be between 0 and {MAX_MICRO_STEP:.4f} octaves, got {micro_step!r}"
        )

    flat_ratio = 2 ** -micro_step
    sharp_ratio = 2 ** micro_step

    candidates: List[Candidate] = []
    for i in range(semitone_count):
        frequency = note_frequency(base_frequency, i)
        name = CHROMATIC_NAMES[i % SEMITONES_PER_OCTAVE]
        octave = base_octave + i // SEMITONES_PER_OCTAVE

        candidates.append(
            Candidate(
                frequency * flat_ratio, name + FLAT_SUFFIX, name, i, octave, Tuning.FLAT
            )
        )
        candidates.append(Candidate(frequency, name, name, i, octave, Tuning.IN_TUNE))
        candidates.append(
            Candidate(
                frequency * sharp_ratio, name + SHARP_SUFFIX, name, i, octave, Tuning.SHARP
            )
        )

    if not candidates:
        raise InvalidConfiguration("Candidate table would be empty")

    table = CandidateTable(candidates)
    logger.info(
        f"Built candidate table: {len(table)} candidates, "
        f"{table.frequencies.min():.2f}-{table.frequencies.max():.2f} Hz"
    )
    return table
