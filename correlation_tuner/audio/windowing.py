"""Accumulates captured audio blocks into fixed-duration sample windows."""

from __future__ import annotations
from typing import Callable, Optional

import numpy as np

from ..logger import get_logger
from ..note_types import SampleWindow
from ..core.interfaces import ISampleWindowFeed

logger = get_logger(__name__)

DEFAULT_WINDOW_DURATION_MS = 100.0
DEFAULT_PROCESS_INTERVAL_MS = 250.0


class SampleWindowFeed(ISampleWindowFeed):
    """Turns capture callbacks into sample windows at a bounded rate.

    Only the most recent ``window_duration_ms`` of audio is kept. A window is
    handed to ``on_window`` once a full window is buffered and at least
    ``process_interval_ms`` has passed (by block timestamps) since the last
    one; the buffer is then cleared. ``push`` runs on the capture path: it
    copies samples and calls the sink, nothing else.

    ``reset`` must not race with ``push``; call it while capture is stopped.
    """

    def __init__(
        self,
        sample_rate: int,
        on_window: Callable[[SampleWindow], None],
        window_duration_ms: float = DEFAULT_WINDOW_DURATION_MS,
        process_interval_ms: float = DEFAULT_PROCESS_INTERVAL_MS,
    ) -> None:
        """Initialize the feed.

        Args:
            sample_rate: Sample rate of the incoming blocks in Hz
            on_window: Sink called with each completed window
            window_duration_ms: Length of each window in milliseconds
            process_interval_ms: Minimum time between two windows in milliseconds
        """
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")
        if window_duration_ms <= 0:
            raise ValueError(f"Window duration must be positive, got {window_duration_ms}")

        self._sample_rate = int(sample_rate)
        self._on_window = on_window
        self._window_size = max(1, int(round(sample_rate * window_duration_ms / 1000.0)))
        self._interval = max(0.0, process_interval_ms) / 1000.0

        self._buffer = np.zeros(0, dtype=np.float64)
        self._last_emit: Optional[float] = None
        self.windows_emitted = 0

    @property
    def window_size(self) -> int:
        """Number of samples in each emitted window."""
        return self._window_size

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def push(self, block: np.ndarray, timestamp: float) -> None:
        """Append a captured block and emit a window if one is due.

        Args:
            block: Samples, either 1-D or (frames x channels); only the first channel is used
            timestamp: Capture time of the block in seconds
        """
        block = np.asarray(block)
        if block.ndim > 1:
            block = block[:, 0]
        if block.size == 0:
            return

        self._buffer = np.concatenate(
            (self._buffer, block.astype(np.float64, copy=False))
        )[-self._window_size :]

        if len(self._buffer) < self._window_size:
            return
        if self._last_emit is not None and timestamp - self._last_emit < self._interval:
            return

        window = SampleWindow(self._buffer.copy(), self._sample_rate, timestamp)
        self._buffer = np.zeros(0, dtype=np.float64)
        self._last_emit = timestamp
        self.windows_emitted += 1
        self._on_window(window)

    def reset(self) -> None:
        """Drop buffered audio and restart the emission clock."""
        self._buffer = np.zeros(0, dtype=np.float64)
        self._last_emit = None
