"""Fixed-cadence polling of a pitch sampler into a sequence matcher."""

from __future__ import annotations
import threading
from typing import Callable, Optional, Sequence

from .core.errors import PitchReadError
from .core.events import MatchEvents
from .core.interfaces import IPitchSampler, ITicker
from .logger import get_logger
from .note_types import FeedbackEvent, FeedbackKind, MatchPhase, MatchSession
from .sequence_matcher import SequenceMatcher

logger = get_logger(__name__)

POLL_INTERVAL = 0.2  # seconds between pitch reads


class ThreadedTicker(ITicker):
    """Calls a callback from a background thread at a fixed interval.

    Calls are strictly sequential: the next interval only starts counting
    once the previous callback has returned.
    """

    def __init__(self, name: str = "melody-echo-ticker") -> None:
        self._name = name
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def start(self, callback: Callable[[], None], interval: float) -> None:
        if self.is_running():
            self.stop()

        # Each run gets its own event so a stopped loop can never be revived
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run,
            args=(callback, interval, stop_event),
            name=self._name,
            daemon=True,
        )
        self._thread.start()
        logger.debug(f"Ticker started with {interval:.3f}s interval")

    def _run(
        self, callback: Callable[[], None], interval: float, stop_event: threading.Event
    ) -> None:
        while not stop_event.wait(interval):
            try:
                callback()
            except Exception:
                logger.exception("Error in ticker callback")

    def stop(self) -> None:
        self._stop_event.set()
        thread, self._thread = self._thread, None
        # The callback may stop its own ticker; never join the current thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    def is_running(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()


class PitchPoller:
    """Drives a :class:`SequenceMatcher` from an :class:`IPitchSampler`.

    Owns the polling lifecycle: ``start`` cancels any previous loop before
    starting a new one, ``stop`` halts polling and discards any read that
    is still outstanding, and reaching the end of the sequence stops the
    loop on its own.
    """

    def __init__(
        self,
        sampler: IPitchSampler,
        matcher: Optional[SequenceMatcher] = None,
        ticker: Optional[ITicker] = None,
        interval: float = POLL_INTERVAL,
        events: Optional[MatchEvents] = None,
    ) -> None:
        self._sampler = sampler
        self.matcher = matcher or SequenceMatcher()
        self._ticker = ticker or ThreadedTicker()
        self._interval = interval
        self.events = events or MatchEvents()

        # Bumped on every start/stop; reads from an older generation are dropped
        self._generation = 0
        self._read_in_flight = False
        # Held while the session is swapped and while a sample is applied
        self._lock = threading.Lock()

    def is_running(self) -> bool:
        return self._ticker.is_running()

    def start(self, target_sequence: Sequence[str]) -> MatchSession:
        """Reset matching to the first note and start polling."""
        # Invalidate any outstanding read before waiting on the old loop
        with self._lock:
            self._generation += 1
            session = self.matcher.start(target_sequence)
        self._ticker.stop()
        self._read_in_flight = False
        self._ticker.start(self.poll_once, self._interval)
        return session

    def stop(self) -> None:
        """Stop polling and return the matcher to idle."""
        with self._lock:
            self._generation += 1
            self.matcher.stop()
        self._ticker.stop()

    def poll_once(self) -> Optional[FeedbackEvent]:
        """Read one sample and feed it to the matcher.

        Returns:
            The feedback event produced, or None when the tick was skipped
        """
        if self._read_in_flight:
            logger.debug("Previous pitch read still outstanding, skipping tick")
            return None

        if self.matcher.phase is not MatchPhase.AWAITING:
            return None

        generation = self._generation
        self._read_in_flight = True
        try:
            sample = self._sampler.read_pitch()
        except PitchReadError as e:
            logger.warning(f"Pitch read failed, skipping tick: {e}")
            self.events.emit_read_error(e)
            return None
        finally:
            if generation == self._generation:
                self._read_in_flight = False

        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding pitch read from a stopped session")
                return None
            event = self.matcher.on_sample(sample)

        if event is None:
            return None

        self.events.emit_feedback(event)
        if event.kind is FeedbackKind.COMPLETE:
            self._ticker.stop()
        return event
