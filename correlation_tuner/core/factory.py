"""Factory for creating Correlation Tuner components."""

from typing import Optional, Dict, Type

from ..logger import get_logger
from ..audio.pitch_detector import PitchDetector
from ..audio.detection_service import NoteDetectionService
from .config import ConfigManager, DetectorSettings, WindowingSettings
from .interfaces import IPitchDetector, IAudioInput, INoteDetectionService

logger = get_logger(__name__)


# Keyword arguments accepted by SoundDeviceInput
AUDIO_INPUT_OPTIONS = ("device_id", "sample_rate", "frames_per_buffer", "channels")


def _sound_device_input_class() -> Type[IAudioInput]:
    # Imported on demand: loading sounddevice requires the PortAudio library
    from ..audio.audio_input import SoundDeviceInput

    return SoundDeviceInput


class ComponentFactory:
    """Factory for creating Correlation Tuner components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        # Register default component implementations
        self.pitch_detector_classes: Dict[str, Type[IPitchDetector]] = {
            "default": PitchDetector,
        }

        self.note_detection_service_classes: Dict[str, Type[INoteDetectionService]] = {
            "default": NoteDetectionService,
        }

    def create_pitch_detector(
        self, implementation: str = "default", **kwargs
    ) -> IPitchDetector:
        """Create a pitch detector.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Overrides for the "detector" configuration section

        Returns:
            Pitch detector instance

        Raises:
            ValueError: If the implementation is not registered
            InvalidConfiguration: If the merged configuration is invalid
        """
        if implementation not in self.pitch_detector_classes:
            raise ValueError(f"Unknown pitch detector implementation: {implementation}")

        config = self.config_manager.get_config("detector")
        config.update({k: v for k, v in kwargs.items() if v is not None})
        settings = DetectorSettings.from_config(config)

        cls = self.pitch_detector_classes[implementation]
        instance = cls(**settings.to_dict())

        logger.info(f"Created pitch detector: {implementation}")
        return instance

    def create_audio_input(self, **kwargs) -> IAudioInput:
        """Create a sound device audio input.

        Args:
            **kwargs: Overrides for the "audio_input" configuration section

        Returns:
            Audio input instance
        """
        config = self.config_manager.get_config("audio_input")
        config.update({k: v for k, v in kwargs.items() if v is not None})
        unknown = sorted(set(config) - set(AUDIO_INPUT_OPTIONS))
        if unknown:
            logger.warning(f"Ignoring unknown audio_input options: {', '.join(unknown)}")
        config = {k: v for k, v in config.items() if k in AUDIO_INPUT_OPTIONS}

        instance = _sound_device_input_class()(**config)

        logger.info("Created audio input: sounddevice")
        return instance

    def create_note_detection_service(
        self, implementation: str = "default", **kwargs
    ) -> INoteDetectionService:
        """Create a note detection service.

        Args:
            implementation: Name of the implementation to use
            **kwargs: audio_input, detector, or "windowing" configuration overrides

        Returns:
            Note detection service instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.note_detection_service_classes:
            raise ValueError(
                f"Unknown note detection service implementation: {implementation}"
            )

        audio_input = kwargs.pop("audio_input", None) or self.create_audio_input()
        detector = kwargs.pop("detector", None) or self.create_pitch_detector()

        windowing = self.config_manager.get_config("windowing")
        windowing.update({k: v for k, v in kwargs.items() if v is not None})
        settings = WindowingSettings.from_config(windowing)

        cls = self.note_detection_service_classes[implementation]
        instance = cls(audio_input=audio_input, detector=detector, **settings.to_dict())

        logger.info(f"Created note detection service: {implementation}")
        return instance
