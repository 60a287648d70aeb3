"""Audio plumbing around the pitch detector.

``audio_input`` is not imported here: sounddevice needs the PortAudio
library at import time, and file input or offline analysis do not.
"""

from .pitch_detector import PitchDetector
from .windowing import SampleWindowFeed
from .detection_service import NoteDetectionService

__all__ = ["PitchDetector", "SampleWindowFeed", "NoteDetectionService"]
