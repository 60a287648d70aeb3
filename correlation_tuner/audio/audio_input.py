"""Microphone capture through sounddevice."""

from __future__ import annotations
import time
from typing import Optional, Dict, Any, List, Callable, ClassVar

import numpy as np
import sounddevice as sd

from ..logger import get_logger
from ..core.interfaces import IAudioInput

logger = get_logger(__name__)

# Common supported sample rates to fall back on
COMMON_SAMPLE_RATES: List[int] = [48000, 44100, 22050, 16000, 8000]


def list_input_devices() -> List[Dict[str, Any]]:
    """List the audio devices that can record.

    Returns:
        One dict per input device with its id, name, channel count and default rate
    """
    devices = []
    for device_id, device in enumerate(sd.query_devices()):
        if device["max_input_channels"] > 0:
            devices.append(
                {
                    "id": device_id,
                    "name": device["name"],
                    "max_input_channels": device["max_input_channels"],
                    "default_samplerate": device["default_samplerate"],
                }
            )
    return devices


def default_input_device() -> Optional[int]:
    """Id of the system default input device, or None if there is none."""
    device = sd.default.device[0]
    return None if device is None or device < 0 else int(device)


class SoundDeviceInput(IAudioInput):
    """Audio input handler using the sounddevice library.

    The stream callback runs on PortAudio's real-time thread. It only copies
    the first channel and hands it on; all analysis happens elsewhere.
    """

    SAMPLE_RATE: ClassVar[int] = 48000  # Hz
    FRAMES_PER_BUFFER: ClassVar[int] = 1024
    CHANNELS: ClassVar[int] = 1  # Mono audio

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frames_per_buffer: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Initialize the audio input handler.

        Args:
            device_id: Audio input device ID, or None for the system default
            sample_rate: Preferred sample rate in Hz, or None for default (48000)
            frames_per_buffer: Block size in frames, or None for default (1024)
            channels: Number of audio channels to open, or None for default (1)
        """
        self._device_id = device_id
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._frames_per_buffer = frames_per_buffer or self.FRAMES_PER_BUFFER
        self._channels = channels or self.CHANNELS

        self._stream: Optional[sd.InputStream] = None
        self._callback: Optional[Callable[[np.ndarray, float], None]] = None
        self._running = False

    @property
    def sample_rate(self) -> int:
        """Sample rate of the open stream (or the requested one before start)."""
        return self._sample_rate

    def is_running(self) -> bool:
        """Check if audio input is running.

        Returns:
            True if audio input is running, False otherwise
        """
        return self._running

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info,
        status: sd.CallbackFlags,
    ) -> None:
        """Callback for processing audio data from the input stream.

        Args:
            indata: The input audio data as a numpy array (frames x channels)
            _frames: Number of frames in the buffer
            _time_info: Timing information from PortAudio
            status: Status flags indicating whether input overflow occurred

        Note:
            This is called from a separate audio thread, so it must be fast
            and avoid any blocking operations to prevent audio glitches.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        if self._callback:
            # sounddevice reuses indata after the callback returns
            audio_data = indata[:, 0].copy() if indata.ndim > 1 else indata.copy()
            self._callback(audio_data, time.monotonic())

    def _sample_rates_to_try(self) -> List[int]:
        rates = [rate for rate in COMMON_SAMPLE_RATES if rate != self._sample_rate]
        return [self._sample_rate] + rates

    def start(self, callback: Callable[[np.ndarray, float], None]) -> bool:
        """Start capturing audio and pass it to the callback.

        Tries the requested sample rate first, then the common ones.

        Args:
            callback: Function to call with each mono block and its timestamp

        Returns:
            True if started successfully, False otherwise
        """
        if self._running:
            logger.warning("Audio input already running")
            return True

        self._callback = callback

        for rate in self._sample_rates_to_try():
            try:
                logger.info(f"Trying to start audio input with sample rate: {rate} Hz")
                self._stream = sd.InputStream(
                    device=self._device_id,
                    samplerate=rate,
                    blocksize=self._frames_per_buffer,
                    channels=self._channels,
                    dtype="float32",
                    callback=self._audio_callback,
                )
                self._stream.start()
                self._sample_rate = rate
                self._running = True
                logger.info(f"Audio input started with sample rate {rate} Hz")
                return True
            except sd.PortAudioError as e:
                logger.warning(
                    f"Failed to start audio input with sample rate {rate} Hz: {e}"
                )
                self._close_stream()

        logger.error("Could not start audio input with any sample rate")
        return False

    def _close_stream(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.close()
        except sd.PortAudioError as e:
            logger.warning(f"Error closing audio stream: {e}")
        self._stream = None

    def stop(self) -> None:
        """Stop capturing audio."""
        if not self._running:
            return

        try:
            if self._stream:
                self._stream.stop()
        except sd.PortAudioError as e:
            logger.error(f"Error stopping audio input: {e}")
        finally:
            self._close_stream()
            self._running = False
            logger.info("Audio input stopped")
