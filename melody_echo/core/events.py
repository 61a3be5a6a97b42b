"""Publish/subscribe plumbing between the polling thread and its listeners."""

from typing import Any, Callable, Dict, List
from enum import Enum, auto

from ..logger import get_logger
from ..note_types import FeedbackEvent

logger = get_logger(__name__)


class MatchEventType(Enum):
    """What a poll can report."""

    FEEDBACK = auto()
    READ_ERROR = auto()


class EventEmitter:
    """Synchronous event dispatch keyed by event type.

    Listeners run on the emitting thread, in registration order. A listener
    that raises is logged and skipped so the rest still hear the event.
    """

    def __init__(self):
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        """Subscribe callback to event_type; registering twice is a no-op."""
        listeners = self._listeners.setdefault(event_type, [])
        if callback in listeners:
            return
        listeners.append(callback)
        logger.debug(f"Listener added for {event_type}")

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Call every listener of event_type with the given arguments."""
        # Iterate over a snapshot; clear() may run on another thread meanwhile
        for callback in list(self._listeners.get(event_type, ())):
            try:
                callback(*args, **kwargs)
            except Exception:
                logger.exception(f"Listener for {event_type} failed")

    def clear(self) -> None:
        """Drop every listener."""
        self._listeners = {}
        logger.debug("All listeners removed")


class MatchEvents:
    """Typed wrapper over :class:`EventEmitter` for the matching loop."""

    def __init__(self):
        self._emitter = EventEmitter()

    def on_feedback(self, callback: Callable[[FeedbackEvent], None]) -> None:
        """Called once per processed sample."""
        self._emitter.on(MatchEventType.FEEDBACK, callback)

    def on_read_error(self, callback: Callable[[Exception], None]) -> None:
        """Called when a pitch read fails and its tick is skipped."""
        self._emitter.on(MatchEventType.READ_ERROR, callback)

    def emit_feedback(self, event: FeedbackEvent) -> None:
        self._emitter.emit(MatchEventType.FEEDBACK, event)

    def emit_read_error(self, error: Exception) -> None:
        self._emitter.emit(MatchEventType.READ_ERROR, error)

    def clear(self) -> None:
        self._emitter.clear()
