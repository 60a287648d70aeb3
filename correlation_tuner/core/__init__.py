"""Core components for the Correlation Tuner application."""

# Import interfaces for easier access
from .interfaces import (
    IAudioInput,
    INoteDetectionService,
    IPitchDetector,
    ISampleWindowFeed,
)

__all__ = ["IAudioInput", "INoteDetectionService", "IPitchDetector", "ISampleWindowFeed"]
