"""Event system for Correlation Tuner components."""

from typing import Dict, List, Callable, Any
from enum import Enum, auto

from ..logger import get_logger

logger = get_logger(__name__)


class DetectionEventType(Enum):
    """Event types for note detection."""

    NOTE_DETECTED = auto()
    NO_DETECTION = auto()
    ERROR = auto()


class EventEmitter:
    """Event emitter for Correlation Tuner components."""

    def __init__(self):
        """Initialize the event emitter."""
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Event type to listen for
            callback: Function to call when the event occurs
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []

        if callback not in self._listeners[event_type]:
            self._listeners[event_type].append(callback)
            logger.debug(f"Added listener for event {event_type}")

    def off(self, event_type: Any, callback: Callable) -> None:
        """Remove a previously registered callback.

        Args:
            event_type: Event type the callback was registered for
            callback: The callback to remove
        """
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)
            logger.debug(f"Removed listener for event {event_type}")

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Emit an event.

        A failing listener is logged and does not prevent the others from
        being called.

        Args:
            event_type: Event type to emit
            *args: Positional arguments to pass to listeners
            **kwargs: Keyword arguments to pass to listeners
        """
        if event_type not in self._listeners:
            return

        for callback in list(self._listeners[event_type]):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_type}: {e}", exc_info=True)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners = {}
        logger.debug("Cleared all event listeners")


class DetectionEvents:
    """Event emitter specifically for note detection events."""

    def __init__(self):
        """Initialize the note detection events."""
        self._emitter = EventEmitter()

    def on_note_detected(self, callback: Callable) -> None:
        """Register a callback for windows where a note was detected.

        Args:
            callback: Function called with (analysis, elapsed_seconds)
        """
        self._emitter.on(DetectionEventType.NOTE_DETECTED, callback)

    def on_no_detection(self, callback: Callable) -> None:
        """Register a callback for windows where nothing stood out.

        Args:
            callback: Function called with (analysis, elapsed_seconds)
        """
        self._emitter.on(DetectionEventType.NO_DETECTION, callback)

    def on_error(self, callback: Callable) -> None:
        """Register a callback for analysis failures.

        Args:
            callback: Function called with the exception
        """
        self._emitter.on(DetectionEventType.ERROR, callback)

    def emit_analysis(self, analysis, elapsed: float) -> None:
        """Emit the event matching an analysis outcome.

        Args:
            analysis: The analysis of one window
            elapsed: Seconds since the service started
        """
        if analysis.outcome.detected:
            self._emitter.emit(DetectionEventType.NOTE_DETECTED, analysis, elapsed)
        else:
            self._emitter.emit(DetectionEventType.NO_DETECTION, analysis, elapsed)

    def emit_error(self, error: Exception) -> None:
        """Emit an error event.

        Args:
            error: The exception raised while analysing a window
        """
        self._emitter.emit(DetectionEventType.ERROR, error)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._emitter.clear()
