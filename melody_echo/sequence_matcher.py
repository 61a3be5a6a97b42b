"""Stepwise matching of sung pitches against a target melody."""

from typing import Callable, Optional, Sequence

from .logger import get_logger
from .note_matcher import NoteMatcher
from .note_types import FeedbackEvent, FeedbackKind, MatchPhase, MatchSession
from .note_utils import frequency_to_note, to_display_label

logger = get_logger(__name__)

Classifier = Callable[[Optional[float]], Optional[str]]


class SequenceMatcher:
    """Walks through a target sequence one sample at a time.

    The matcher owns a single :class:`MatchSession`. It never looks at a
    clock: whoever feeds it samples decides the cadence.
    """

    def __init__(
        self,
        classifier: Classifier = frequency_to_note,
        note_matcher: Optional[NoteMatcher] = None,
    ) -> None:
        self._classify = classifier
        self._note_matcher = note_matcher or NoteMatcher()
        self.session = MatchSession(target=())

    @property
    def phase(self) -> MatchPhase:
        return self.session.phase

    @property
    def position(self) -> int:
        return self.session.position

    def start(self, target_sequence: Sequence[str]) -> MatchSession:
        """Begin a fresh session at the first note of target_sequence.

        Raises:
            ValueError: If the sequence is empty
        """
        target = tuple(target_sequence)
        if not target:
            raise ValueError("Target sequence must contain at least one note")

        self.session = MatchSession(target=target, position=0, phase=MatchPhase.AWAITING)
        logger.info(
            "Matching started: %d notes, first note %s",
            len(target),
            to_display_label(target[0]),
        )
        return self.session

    def stop(self) -> None:
        """Return to idle, keeping the target so a later start can reuse it."""
        if self.session.phase is not MatchPhase.IDLE:
            logger.info("Matching stopped at position %d", self.session.position)
        self.session.phase = MatchPhase.IDLE

    def on_sample(self, sample: Optional[float]) -> Optional[FeedbackEvent]:
        """Apply one frequency sample to the session.

        Args:
            sample: Frequency in Hz, or None (or 0) for silence

        Returns:
            The feedback event for this sample, or None if no session is
            awaiting notes.
        """
        session = self.session
        if session.phase is not MatchPhase.AWAITING:
            return None

        target_note = session.target[session.position]
        expected = to_display_label(target_note)

        if not sample:
            logger.debug("Silence while waiting for %s", expected)
            return FeedbackEvent(
                kind=FeedbackKind.WAITING,
                expected=expected,
                position=session.position,
            )

        detected = self._classify(sample)
        if detected is not None and self._note_matcher.match(target_note, detected):
            session.position += 1
            if session.position == session.length:
                session.phase = MatchPhase.COMPLETED
                logger.info("Sequence complete after %d notes", session.length)
                return FeedbackEvent(
                    kind=FeedbackKind.COMPLETE,
                    expected=expected,
                    position=session.position,
                    detected=detected,
                    frequency=sample,
                )

            next_expected = to_display_label(session.target[session.position])
            logger.info(
                "Correct note %s (%.1f Hz), next: %s", detected, sample, next_expected
            )
            return FeedbackEvent(
                kind=FeedbackKind.CORRECT,
                expected=expected,
                position=session.position,
                detected=detected,
                frequency=sample,
                next_expected=next_expected,
            )

        logger.debug(
            "Expected %s, detected %s (%.1f Hz)", expected, detected or "no pitch", sample
        )
        return FeedbackEvent(
            kind=FeedbackKind.INCORRECT,
            expected=expected,
            position=session.position,
            detected=detected,
            frequency=sample,
        )
