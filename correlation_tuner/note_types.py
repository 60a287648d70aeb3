"""Type definitions for the Correlation Tuner project."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterable, Iterator, Tuple, TypeAlias, Union

import numpy as np

from .errors import InvalidConfiguration


class Tuning(Enum):
    """Where a candidate sits relative to its equal-tempered note."""

    FLAT = "flat"
    IN_TUNE = "in tune"
    SHARP = "sharp"


@dataclass(frozen=True)
class Candidate:
    """One test frequency the detector correlates incoming audio against."""

    frequency: float  # Frequency in Hz
    name: str  # Display label (e.g., 'C', 'C (a bit flat)')
    note: str = ""  # Bare chromatic note name (e.g., 'C#')
    semitone: int = 0  # Semitone index the candidate was generated from
    octave: int | None = None  # Scientific pitch octave, if known
    tuning: Tuning = Tuning.IN_TUNE

    def __post_init__(self):
        if not math.isfinite(self.frequency) or self.frequency <= 0:
            raise InvalidConfiguration(
                f"Candidate frequency must be positive, got {self.frequency}"
            )

    @property
    def scientific_name(self) -> str:
        """Note name with octave (e.g., 'C2'), or the bare note if the octave is unknown."""
        note = self.note or self.name
        return f"{note}{self.octave}" if self.octave is not None else note

    def __str__(self):
        return f"{self.name} ({self.frequency:.2f} Hz)"


class CandidateTable(Sequence):
    """Immutable, ordered bank of candidates shared by every analysis cycle.

    The frequencies are also kept as a write-protected float64 array so the
    correlation engine can use them without rebuilding anything per window.
    """

    def __init__(self, candidates: Iterable[Candidate]):
        self._candidates: Tuple[Candidate, ...] = tuple(candidates)
        frequencies = np.array(
            [c.frequency for c in self._candidates], dtype=np.float64
        )
        frequencies.setflags(write=False)
        self._frequencies = frequencies

    @property
    def frequencies(self) -> np.ndarray:
        """Candidate frequencies in Hz, index-aligned with the table."""
        return self._frequencies

    def __getitem__(self, index):
        return self._candidates[index]

    def __len__(self) -> int:
        return len(self._candidates)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._candidates)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CandidateTable):
            return NotImplemented
        return self._candidates == other._candidates

    def __hash__(self) -> int:
        return hash(self._candidates)

    def __repr__(self) -> str:
        if not self._candidates:
            return "CandidateTable([])"
        return (
            f"CandidateTable({len(self)} candidates, "
            f"{self._frequencies.min():.2f}-{self._frequencies.max():.2f} Hz)"
        )


@dataclass(frozen=True, eq=False)
class SampleWindow:
    """A block of mono PCM samples analysed as one unit."""

    samples: np.ndarray
    sample_rate: int  # Hz
    timestamp: float = 0.0  # Seconds, as reported by the audio input

    def __post_init__(self):
        if isinstance(self.sample_rate, bool) or int(self.sample_rate) != self.sample_rate:
            raise ValueError(f"Sample rate must be an integer, got {self.sample_rate!r}")
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")
        samples = np.asarray(self.samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError(f"Samples must be one-dimensional, got shape {samples.shape}")
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        """Window length in seconds."""
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True)
class NoDetection:
    """No candidate stood far enough above the others."""

    detected: ClassVar[bool] = False


@dataclass(frozen=True)
class Detected:
    """The candidate that won a cycle, with its peak-to-average ratio."""

    candidate: Candidate
    confidence: float  # max squared magnitude / mean squared magnitude
    index: int  # Position of the candidate in its table

    detected: ClassVar[bool] = True


DetectionOutcome: TypeAlias = Union[Detected, NoDetection]

NO_DETECTION = NoDetection()


@dataclass(frozen=True, eq=False)
class Analysis:
    """Everything the pitch detector produced for one window."""

    outcome: DetectionOutcome
    correlation: np.ndarray = field(repr=False)  # shape (candidates, 2)
    timestamp: float = 0.0
