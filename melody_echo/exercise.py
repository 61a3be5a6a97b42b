"""The ear-training exercise: connect, listen, sing it back."""

import queue
import time
from typing import Callable, Optional, Sequence

from .controls import ControlState, project_controls
from .core.config import DEFAULT_SEQUENCE
from .core.errors import MicrophoneError, PlaybackError
from .core.interfaces import IPitchSampler, ISynthesizer, ITicker
from .logger import get_logger
from .note_types import (
    FeedbackEvent,
    FeedbackKind,
    FeedbackTone,
    MatchPhase,
    StatusMessage,
)
from .note_utils import to_display_label
from .polling import POLL_INTERVAL, PitchPoller
from .sequence_matcher import SequenceMatcher

# Get logger for this module
logger = get_logger(__name__)

NO_PITCH = "no pitch"


def feedback_message(event: FeedbackEvent) -> str:
    """Render a feedback event as the status line text."""
    if event.kind is FeedbackKind.WAITING:
        return f"Target: {event.expected}. Waiting for your voice..."
    if event.kind is FeedbackKind.CORRECT:
        return f"Correct. Next: {event.next_expected}"
    if event.kind is FeedbackKind.COMPLETE:
        return "Sequence complete! Excellent work!"
    return f"Target: {event.expected}. Detected: {event.detected or NO_PITCH}. Try again."


class EarTrainingExercise:
    """Owns one melody and everything needed to practise it.

    All public methods are meant to be called from the UI thread. Feedback
    produced on the polling thread is queued and applied by
    :meth:`process_events`, which :meth:`update` calls once per frame.
    """

    def __init__(
        self,
        sequence: Optional[Sequence[str]] = None,
        sampler: Optional[IPitchSampler] = None,
        synthesizer: Optional[ISynthesizer] = None,
        ticker: Optional[ITicker] = None,
        poll_interval: float = POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        matcher: Optional[SequenceMatcher] = None,
    ) -> None:
        """Initialize the exercise.

        Args:
            sequence: Notation keys to practise (e.g. ['C/4', 'D/4']), or None for the default melody
            sampler: Pitch source; acquired by connect_microphone()
            synthesizer: Playback engine, or None to disable playback
            ticker: Timer driving the pitch polls, or None for a background thread
            poll_interval: Seconds between pitch polls
            clock: Monotonic clock used to time playback
            matcher: Optional, a SequenceMatcher for dependency injection/testing
        """
        self.sequence = tuple(sequence if sequence is not None else DEFAULT_SEQUENCE)
        if not self.sequence:
            raise ValueError("An exercise needs at least one note")

        self._sampler = sampler
        self._synthesizer = synthesizer
        self._ticker = ticker
        self._poll_interval = poll_interval
        self._clock = clock
        self.matcher = matcher or SequenceMatcher()

        self.poller: Optional[PitchPoller] = None
        self.event_queue: "queue.Queue[FeedbackEvent]" = queue.Queue()
        self.status = StatusMessage("Connect the microphone to begin.")
        self.last_event: Optional[FeedbackEvent] = None

        self.mic_ready = False
        self.connecting = False
        self._playback_until: Optional[float] = None

        logger.debug("Exercise initialized with %d notes", len(self.sequence))

    # State projections

    @property
    def phase(self) -> MatchPhase:
        return self.matcher.phase

    @property
    def position(self) -> int:
        return self.matcher.position

    @property
    def playback_active(self) -> bool:
        return self._playback_until is not None

    @property
    def controls(self) -> ControlState:
        return project_controls(
            mic_ready=self.mic_ready,
            phase=self.phase,
            playback_active=self.playback_active,
            connecting=self.connecting,
        )

    @property
    def display_sequence(self) -> list:
        return [to_display_label(note) for note in self.sequence]

    # Actions

    def connect_microphone(self) -> bool:
        """Acquire the pitch sampler. Safe to call again after a failure."""
        if self.mic_ready:
            return True

        if self._sampler is None:
            self._set_status("No audio input is configured.", FeedbackTone.INCORRECT)
            return False

        self.connecting = True
        self._set_status("Loading pitch detector...")
        try:
            self._sampler.open()
        except MicrophoneError as e:
            logger.error(f"Error accessing the microphone: {e}")
            self._set_status(
                f"Could not access the microphone ({e}). "
                "Check the device and permissions, then try again.",
                FeedbackTone.INCORRECT,
            )
            return False
        finally:
            self.connecting = False

        self.poller = PitchPoller(
            self._sampler,
            self.matcher,
            ticker=self._ticker,
            interval=self._poll_interval,
        )
        self.poller.events.on_feedback(self.event_queue.put)
        self.mic_ready = True
        self._set_status("Microphone connected. Ready to start.")
        logger.info("Microphone connected")
        return True

    def play_sequence(self) -> bool:
        """Play the melody once. Not available while matching."""
        if not self.controls.play_enabled:
            logger.warning("Playback requested while unavailable")
            return False

        if self._synthesizer is None:
            self._set_status("Playback is not available.", FeedbackTone.INCORRECT)
            return False

        try:
            duration = self._synthesizer.play(self.sequence)
        except PlaybackError as e:
            logger.error(f"Error starting playback: {e}")
            self._set_status(f"Could not play the sequence ({e}).", FeedbackTone.INCORRECT)
            return False

        self._playback_until = self._clock() + duration
        self._set_status("Playing sequence...")
        logger.info("Playing %d notes (%.2fs)", len(self.sequence), duration)
        return True

    def start_matching(self) -> bool:
        """Start (or restart) listening from the first note."""
        if self.poller is None:
            self._set_status("Connect the microphone first.", FeedbackTone.INCORRECT)
            return False

        if self.playback_active:
            logger.warning("Cannot start matching during playback")
            return False

        self._discard_pending_events()
        self.last_event = None
        self.poller.start(self.sequence)
        self._set_status(
            f"Start singing! First note: {to_display_label(self.sequence[0])}"
        )
        return True

    def stop_matching(self) -> None:
        """Stop listening; the position is kept until the next start."""
        if self.poller is None:
            return
        self.poller.stop()
        self._discard_pending_events()
        self._set_status("Matching stopped.")

    def shutdown(self) -> None:
        """Stop everything and release the audio devices."""
        if self.poller is not None:
            self.poller.stop()
            self.poller.events.clear()
        if self._synthesizer is not None:
            self._synthesizer.stop()
        if self._sampler is not None and self._sampler.is_open():
            self._sampler.close()
        self.mic_ready = False
        self._playback_until = None
        logger.info("Exercise shut down")

    # Main loop pump

    def update(self) -> None:
        """Advance time-based state and apply queued feedback."""
        if self._playback_until is not None and self._clock() >= self._playback_until:
            self._playback_until = None
            self._set_status("Ready to start matching. Sing the sequence!")
        self.process_events()

    def process_events(self) -> None:
        """Apply feedback events from the queue. Should be called from the main loop."""
        while True:
            try:
                event = self.event_queue.get_nowait()
            except queue.Empty:
                break
            self._handle_feedback(event)

    def _handle_feedback(self, event: FeedbackEvent) -> None:
        self.last_event = event
        self._set_status(feedback_message(event), event.tone)
        if event.kind is FeedbackKind.COMPLETE:
            logger.info("Sequence completed")

    def _discard_pending_events(self) -> None:
        while True:
            try:
                self.event_queue.get_nowait()
            except queue.Empty:
                break

    def _set_status(self, text: str, tone: FeedbackTone = FeedbackTone.NEUTRAL) -> None:
        self.status = StatusMessage(text, tone)
        logger.debug("Status: %s", text)
