"""Centralized lazy-loading logger access for Correlation Tuner."""
import logging
from typing import Dict

# Module-level cache for loggers
_logger_cache: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """
    Get a lazily initialized logger with the given name.

    Levels and handlers are applied by ``logging_config.setup_logging``;
    until then records propagate to the root logger as usual.

    Args:
        name: The full module name (e.g., 'correlation_tuner.correlation')

    Returns:
        A logger instance
    """
    if name not in _logger_cache:
        _logger_cache[name] = logging.getLogger(name)
    return _logger_cache[name]
