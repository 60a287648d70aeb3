"""Command-line interface for Correlation Tuner."""

from .main import main

__all__ = ["main"]
