"""Configuration management for Correlation Tuner components."""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
import json
import os
from pathlib import Path

from ..decision import DEFAULT_CONFIDENCE_THRESHOLD
from ..errors import InvalidConfiguration
from ..frequency_table import (
    DEFAULT_BASE_FREQUENCY,
    DEFAULT_MICRO_STEP,
    DEFAULT_SEMITONE_COUNT,
)
from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_DIR = os.path.join("~", ".config", "correlation_tuner")


@dataclass(frozen=True)
class DetectorSettings:
    """Validated settings for building a pitch detector."""

    base_frequency_hz: float = DEFAULT_BASE_FREQUENCY
    semitone_count: int = DEFAULT_SEMITONE_COUNT
    micro_step: float = DEFAULT_MICRO_STEP
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "DetectorSettings":
        """Build settings from a configuration section, ignoring unknown keys.

        Args:
            config: The "detector" configuration section

        Returns:
            DetectorSettings

        Raises:
            InvalidConfiguration: If a value has the wrong type or is out of range
        """
        defaults = cls()
        try:
            settings = cls(
                base_frequency_hz=float(
                    config.get("base_frequency_hz", defaults.base_frequency_hz)
                ),
                semitone_count=_as_int(
                    config.get("semitone_count", defaults.semitone_count)
                ),
                micro_step=float(config.get("micro_step", defaults.micro_step)),
                confidence_threshold=float(
                    config.get("confidence_threshold", defaults.confidence_threshold)
                ),
            )
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"Invalid detector configuration: {e}") from e

        if settings.base_frequency_hz <= 0:
            raise InvalidConfiguration(
                f"base_frequency_hz must be positive, got {settings.base_frequency_hz}"
            )
        if settings.semitone_count <= 0:
            raise InvalidConfiguration(
                f"semitone_count must be positive, got {settings.semitone_count}"
            )
        if settings.confidence_threshold < 0:
            raise InvalidConfiguration(
                f"confidence_threshold must not be negative, got {settings.confidence_threshold}"
            )
        return settings

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WindowingSettings:
    """Validated settings for the audio windowing feed."""

    window_duration_ms: float = 100.0
    process_interval_ms: float = 250.0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "WindowingSettings":
        """Build settings from the "windowing" configuration section.

        Raises:
            InvalidConfiguration: If a duration is not a positive number
        """
        defaults = cls()
        try:
            settings = cls(
                window_duration_ms=float(
                    config.get("window_duration_ms", defaults.window_duration_ms)
                ),
                process_interval_ms=float(
                    config.get("process_interval_ms", defaults.process_interval_ms)
                ),
            )
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration(f"Invalid windowing configuration: {e}") from e

        if settings.window_duration_ms <= 0:
            raise InvalidConfiguration(
                f"window_duration_ms must be positive, got {settings.window_duration_ms}"
            )
        if settings.process_interval_ms < 0:
            raise InvalidConfiguration(
                f"process_interval_ms must not be negative, got {settings.process_interval_ms}"
            )
        return settings

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _as_int(value: Any) -> int:
    """Convert a JSON number to int, rejecting fractional values."""
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got {value!r}")
    as_float = float(value)
    if not as_float.is_integer():
        raise ValueError(f"expected an integer, got {value!r}")
    return int(as_float)


class ConfigManager:
    """Configuration manager for Correlation Tuner components."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory to store configuration files, or None to use default
        """
        if config_dir is None:
            # Use ~/.config/correlation_tuner by default
            config_dir = os.path.expanduser(DEFAULT_CONFIG_DIR)

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Default configurations
        self.default_configs = {
            "detector": DetectorSettings().to_dict(),
            "windowing": WindowingSettings().to_dict(),
            "audio_input": {
                "sample_rate": 48000,
                "frames_per_buffer": 1024,
                "channels": 1,
            },
        }

        # Load existing configurations or create default ones
        self.configs = {}
        for config_name, default_config in self.default_configs.items():
            self.configs[config_name] = self.load_config(config_name, default_config)

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Load configuration from file or create default.

        Args:
            name: Configuration name
            default_config: Default configuration to use if file doesn't exist

        Returns:
            Configuration dictionary
        """
        config_file = self.config_dir / f"{name}.json"

        if config_file.exists():
            try:
                with open(config_file, "r") as f:
                    config = json.load(f)
                if not isinstance(config, dict):
                    raise ValueError("top-level value is not an object")
                logger.info(f"Loaded configuration from {config_file}")

                # Ensure all default keys are present
                for key, value in default_config.items():
                    if key not in config:
                        config[key] = value

                return config
            except (OSError, ValueError) as e:
                logger.error(f"Error loading configuration from {config_file}: {e}")
                return default_config.copy()
        else:
            # Create default configuration
            config = default_config.copy()
            self.save_config(name, config)
            return config

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Save configuration to file.

        Args:
            name: Configuration name
            config: Configuration dictionary

        Returns:
            True if saved successfully, False otherwise
        """
        config_file = self.config_dir / f"{name}.json"

        try:
            with open(config_file, "w") as f:
                json.dump(config, f, indent=2)
            logger.info(f"Saved configuration to {config_file}")
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Error saving configuration to {config_file}: {e}")
            return False

    def get_config(self, name: str) -> Dict[str, Any]:
        """Get configuration by name.

        Args:
            name: Configuration name

        Returns:
            Configuration dictionary
        """
        return self.configs.get(name, {}).copy()

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Update configuration and save to file.

        Args:
            name: Configuration name
            updates: Dictionary of updates to apply

        Returns:
            True if updated and saved successfully, False otherwise
        """
        if name not in self.configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name].update(updates)
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        """Reset configuration to default.

        Args:
            name: Configuration name

        Returns:
            True if reset successfully, False otherwise
        """
        if name not in self.default_configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = self.default_configs[name].copy()
        return self.save_config(name, self.configs[name])

    def detector_settings(self) -> DetectorSettings:
        """Validated detector settings from the current configuration."""
        return DetectorSettings.from_config(self.get_config("detector"))

    def windowing_settings(self) -> WindowingSettings:
        """Validated windowing settings from the current configuration."""
        return WindowingSettings.from_config(self.get_config("windowing"))
