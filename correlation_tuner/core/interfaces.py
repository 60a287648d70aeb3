"""Defines the core interfaces for the Correlation Tuner application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable

import numpy as np

from ..note_types import Analysis, DetectionOutcome, SampleWindow


class IAudioInput(ABC):
    """Interface for audio input handlers."""

    @abstractmethod
    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        """Start capturing audio, passing each block and its timestamp to the callback."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing audio."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if audio is running."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the delivered audio, in Hz."""
        pass


class ISampleWindowFeed(ABC):
    """Interface for turning captured audio blocks into sample windows.

    Implementations are called from the capture path and must never block.
    """

    @abstractmethod
    def push(self, block: np.ndarray, timestamp: float) -> None:
        """Accept one block of captured samples."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Drop any buffered audio."""
        pass


class IPitchDetector(ABC):
    """Interface for pitch detection over complete sample windows."""

    @abstractmethod
    def analyze(self, window: SampleWindow) -> Analysis:
        """Analyse one window and return the outcome with diagnostics."""
        pass

    @abstractmethod
    def process_window(self, window: SampleWindow) -> DetectionOutcome:
        """Analyse one window and return only the outcome."""
        pass


class INoteDetectionService(ABC):
    """Interface for the main note detection service."""

    @abstractmethod
    def start(self, callback: Callable[[Analysis, float], None]) -> bool:
        """Start the note detection service."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the note detection service."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the service is running."""
        pass
