"""Audio input from WAV (or any libsndfile-readable) files."""

from __future__ import annotations
import threading
import time
from typing import Callable, Iterator, Optional

import numpy as np
import soundfile as sf

from ..logger import get_logger
from ..note_types import SampleWindow
from ..core.interfaces import IAudioInput

logger = get_logger(__name__)


class WavFileAudioInput(IAudioInput):
    """Streams a sound file block by block, as if it were being captured.

    Timestamps passed to the callback are media time (seconds into the file),
    so windowing behaves the same whether or not playback is paced.
    """

    def __init__(
        self,
        file_path: str,
        chunk_size: int = 1024,
        loop: bool = False,
        gain: float = 1.0,
        realtime: bool = True,
    ) -> None:
        """Initialize the file input.

        Args:
            file_path: Path of the sound file
            chunk_size: Frames delivered per callback
            loop: Restart from the beginning at end of file
            gain: Factor applied to every sample
            realtime: Sleep between blocks to simulate real-time capture
        """
        self._file_path = file_path
        self._chunk_size = chunk_size
        self._loop = loop
        self._gain = gain
        self._realtime = realtime
        self._callback: Optional[Callable[[np.ndarray, float], None]] = None
        self._running = False
        self._thread: Optional[threading.Thread] = None

        with sf.SoundFile(self._file_path) as f:
            self._sample_rate = f.samplerate
            self._channels = f.channels

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._channels

    def is_running(self) -> bool:
        """Returns True while the file is being streamed."""
        return self._running

    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        if self._running:
            return True

        self._callback = callback
        self._running = True
        self._thread = threading.Thread(
            target=self._stream_data, name="wav-input", daemon=True
        )
        self._thread.start()
        logger.info(f"Streaming {self._file_path} at {self._sample_rate} Hz")
        return True

    def stop(self) -> None:
        self._running = False
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the file to finish streaming."""
        if self._thread:
            self._thread.join(timeout)

    def _stream_data(self) -> None:
        frames_read = 0
        try:
            with sf.SoundFile(self._file_path) as f:
                while self._running:
                    data = f.read(self._chunk_size, dtype="float32", always_2d=True)
                    if len(data) == 0:
                        if self._loop:
                            f.seek(0)
                            continue
                        break

                    block = data[:, 0]
                    if self._gain != 1.0:
                        block = block * self._gain

                    timestamp = frames_read / self._sample_rate
                    frames_read += len(block)
                    if self._callback:
                        self._callback(block, timestamp)

                    # Simulate real-time playback speed
                    if self._realtime:
                        time.sleep(len(block) / self._sample_rate)
        except (OSError, sf.LibsndfileError) as e:
            logger.error(f"Error streaming {self._file_path}: {e}")
        finally:
            self._running = False
            logger.info(f"Finished streaming {self._file_path}")


def read_windows(
    file_path: str,
    window_duration_ms: float = 100.0,
    hop_ms: float = 250.0,
    gain: float = 1.0,
) -> Iterator[SampleWindow]:
    """Cut a sound file into sample windows for offline analysis.

    Args:
        file_path: Path of the sound file
        window_duration_ms: Length of each window in milliseconds
        hop_ms: Distance between window starts in milliseconds
        gain: Factor applied to every sample

    Yields:
        SampleWindow objects of the first channel, timestamped by their start
        time. A trailing partial window is yielded as long as it is not empty.
    """
    if window_duration_ms <= 0 or hop_ms <= 0:
        raise ValueError("Window duration and hop must be positive")

    data, sample_rate = sf.read(file_path, dtype="float64", always_2d=True)
    samples = data[:, 0] * gain

    window_size = max(1, int(round(sample_rate * window_duration_ms / 1000.0)))
    hop_size = max(1, int(round(sample_rate * hop_ms / 1000.0)))

    logger.info(
        f"Reading {file_path}: {len(samples)} samples at {sample_rate} Hz, "
        f"window={window_size} hop={hop_size}"
    )

    for start in range(0, len(samples), hop_size):
        chunk = samples[start : start + window_size]
        if len(chunk) == 0:
            break
        yield SampleWindow(chunk, sample_rate, start / sample_rate)
