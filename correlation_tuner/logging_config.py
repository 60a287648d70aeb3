"""Centralized logging configuration for Correlation Tuner.

This module provides a consistent way to configure logging across the application.
"""

import logging
import sys
from typing import Optional

# Log levels for different modules
MODULE_LOG_LEVELS = {
    # Core pipeline
    "correlation_tuner": logging.INFO,
    "correlation_tuner.frequency_table": logging.INFO,
    "correlation_tuner.correlation": logging.INFO,
    "correlation_tuner.decision": logging.INFO,
    "correlation_tuner.core": logging.INFO,
    # Audio plumbing
    "correlation_tuner.audio": logging.INFO,
    "correlation_tuner.audio.windowing": logging.INFO,  # Set to DEBUG to trace window hand-off
    "correlation_tuner.audio.detection_service": logging.INFO,
    # Front ends
    "correlation_tuner.presentation": logging.WARNING,
    "correlation_tuner.cli": logging.INFO,
    "correlation_tuner.logger": logging.WARNING,  # Logger module itself should be quiet
    # Libraries/third-party
    "soundfile": logging.ERROR,
    "sounddevice": logging.ERROR,
    # Root logger
    "": logging.ERROR,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Shared console handler
_console_handler: Optional[logging.StreamHandler] = None


def setup_logging(level: Optional[str] = None) -> None:
    """Set up logging configuration for the application.

    Args:
        level: If provided, override all 'correlation_tuner' log levels with this level (e.g., "DEBUG").
    """
    global _console_handler

    # Create a single, shared console handler if it doesn't exist
    if _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stdout)
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        # sys.stdout may have been replaced since the handler was created
        _console_handler.setStream(sys.stdout)

    # Determine log levels
    log_levels = MODULE_LOG_LEVELS.copy()
    if level:
        numeric_level = logging.getLevelName(level.upper())
        if isinstance(numeric_level, int):
            for module_name in log_levels:
                if module_name.startswith("correlation_tuner"):
                    log_levels[module_name] = numeric_level
        else:
            logging.getLogger(__name__).error(f"Invalid log level: {level}")

    # Apply module-specific levels
    for module_name, module_level in log_levels.items():
        logging.getLogger(module_name).setLevel(module_level)

    # Only the package root gets the handler; child loggers propagate up to it
    package_logger = logging.getLogger("correlation_tuner")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
    package_logger.addHandler(_console_handler)
    package_logger.propagate = False

    package_logger.info("Logging configuration complete")
