"""Note detection service that integrates audio input and pitch detection."""

from __future__ import annotations
import queue
import threading
import time
from typing import Optional, Callable

from ..logger import get_logger
from ..note_types import Analysis, SampleWindow
from .pitch_detector import PitchDetector
from .windowing import (
    DEFAULT_PROCESS_INTERVAL_MS,
    DEFAULT_WINDOW_DURATION_MS,
    SampleWindowFeed,
)
from ..core.events import DetectionEvents
from ..core.interfaces import IAudioInput, INoteDetectionService, IPitchDetector

logger = get_logger(__name__)

# How often the idle worker checks whether it should stop
_WORKER_POLL_SECONDS = 0.1


class NoteDetectionService(INoteDetectionService):
    """Service that integrates audio input and pitch detection.

    Capture and analysis run in separate threads. The audio callback only
    feeds blocks into a SampleWindowFeed; completed windows cross to the
    analysis worker through a queue holding at most one window. If the worker
    is still busy when the next window is ready, that window is dropped, so
    capture never waits on correlation. The worker analyses one window at a
    time, to completion.
    """

    def __init__(
        self,
        audio_input: IAudioInput,
        detector: Optional[IPitchDetector] = None,
        window_duration_ms: float = DEFAULT_WINDOW_DURATION_MS,
        process_interval_ms: float = DEFAULT_PROCESS_INTERVAL_MS,
    ) -> None:
        """Initialize the note detection service.

        Args:
            audio_input: Source of captured audio blocks
            detector: Pitch detector, or None to create a default one
            window_duration_ms: Length of each analysed window in milliseconds
            process_interval_ms: Minimum time between analysed windows in milliseconds
        """
        self._audio_input = audio_input
        self._detector = detector or PitchDetector()
        self._window_duration_ms = window_duration_ms
        self._process_interval_ms = process_interval_ms

        self.events = DetectionEvents()
        self._windows: "queue.Queue[SampleWindow]" = queue.Queue(maxsize=1)
        self._feed: Optional[SampleWindowFeed] = None
        self._worker: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        self._callback: Optional[Callable[[Analysis, float], None]] = None
        self._running = False
        self._start_time = 0.0

        self.windows_analyzed = 0
        self.dropped_windows = 0

    @property
    def detector(self) -> IPitchDetector:
        return self._detector

    def start(self, callback: Optional[Callable[[Analysis, float], None]] = None) -> bool:
        """Start note detection.

        Args:
            callback: Function called with every analysis and the seconds since start

        Returns:
            True if the audio input started, False otherwise
        """
        if self._running:
            logger.warning("Note detection already running")
            return True

        self._callback = callback
        self._stop_event.clear()
        self._drain_queue()

        self._worker = threading.Thread(
            target=self._analysis_loop, name="pitch-analysis", daemon=True
        )
        self._worker.start()
        self._running = True
        self._start_time = time.monotonic()

        if not self._audio_input.start(self._on_audio):
            logger.error("Failed to start audio input")
            self.stop()
            return False

        logger.info(
            f"Note detection started: {self._audio_input.sample_rate} Hz, "
            f"window={self._window_duration_ms}ms, interval={self._process_interval_ms}ms"
        )
        return True

    def stop(self) -> None:
        """Stop note detection and wait for the worker to finish its window."""
        if not self._running:
            return

        self._audio_input.stop()
        self._stop_event.set()
        if self._worker and self._worker is not threading.current_thread():
            self._worker.join()
        self._worker = None
        self._feed = None
        self._running = False
        logger.info(
            f"Note detection stopped: analyzed={self.windows_analyzed}, "
            f"dropped={self.dropped_windows}"
        )

    def is_running(self) -> bool:
        """Check if note detection is running.

        Returns:
            True if note detection is running, False otherwise
        """
        return self._running

    def _on_audio(self, block, timestamp: float) -> None:
        """Capture-side callback: buffer the block, never analyse here."""
        if self._feed is None:
            # The input may settle on a different rate than requested, so the
            # feed is created from the first delivered block.
            self._feed = SampleWindowFeed(
                self._audio_input.sample_rate,
                self._enqueue_window,
                window_duration_ms=self._window_duration_ms,
                process_interval_ms=self._process_interval_ms,
            )
        self._feed.push(block, timestamp)

    def _enqueue_window(self, window: SampleWindow) -> None:
        try:
            self._windows.put_nowait(window)
        except queue.Full:
            self.dropped_windows += 1
            logger.debug(f"Analysis busy, dropped window at {window.timestamp:.3f}s")

    def _drain_queue(self) -> None:
        while True:
            try:
                self._windows.get_nowait()
            except queue.Empty:
                return

    def _analysis_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                window = self._windows.get(timeout=_WORKER_POLL_SECONDS)
            except queue.Empty:
                continue
            self._analyze(window)

    def _analyze(self, window: SampleWindow) -> None:
        try:
            analysis = self._detector.analyze(window)
        except Exception as e:
            logger.error(f"Error analysing window at {window.timestamp:.3f}s: {e}", exc_info=True)
            self.events.emit_error(e)
            return

        self.windows_analyzed += 1
        elapsed = time.monotonic() - self._start_time
        outcome = analysis.outcome
        if outcome.detected:
            logger.debug(
                f"[{elapsed:.2f}s] {outcome.candidate.name} "
                f"({outcome.candidate.frequency:.1f}Hz, conf: {outcome.confidence:.1f})"
            )

        self.events.emit_analysis(analysis, elapsed)
        if self._callback:
            try:
                self._callback(analysis, elapsed)
            except Exception as e:
                logger.error(f"Error in detection callback: {e}", exc_info=True)
