"""Type definitions for the Melody Echo project."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple


class MatchPhase(Enum):
    """Lifecycle phase of a matching session."""

    IDLE = auto()
    AWAITING = auto()
    COMPLETED = auto()


class FeedbackKind(Enum):
    """What a single processed sample meant for the session."""

    WAITING = auto()  # silence, still expecting the same note
    CORRECT = auto()  # expected note sung, position advanced
    INCORRECT = auto()  # something else (or an unpitched sound) was heard
    COMPLETE = auto()  # last note sung, sequence finished


class FeedbackTone(Enum):
    """Visual state of the status line."""

    NEUTRAL = auto()
    CORRECT = auto()
    INCORRECT = auto()


@dataclass
class MatchSession:
    """Mutable state of one pass through a target sequence."""

    target: Tuple[str, ...]  # Notation labels, e.g. ('C/4', 'D/4')
    position: int = 0  # Index of the note currently expected
    phase: MatchPhase = MatchPhase.IDLE

    @property
    def length(self) -> int:
        return len(self.target)


@dataclass(frozen=True)
class FeedbackEvent:
    """Result of matching a single sample against the session."""

    kind: FeedbackKind
    expected: str  # Display label of the note that was expected (e.g. 'C4')
    position: int  # Session position after the sample was applied
    detected: Optional[str] = None  # Classifier label, None for silence or no pitch
    frequency: Optional[float] = None  # Raw sample in Hz
    next_expected: Optional[str] = None  # Display label of the following note, if any

    @property
    def tone(self) -> FeedbackTone:
        if self.kind in (FeedbackKind.CORRECT, FeedbackKind.COMPLETE):
            return FeedbackTone.CORRECT
        if self.kind is FeedbackKind.INCORRECT:
            return FeedbackTone.INCORRECT
        return FeedbackTone.NEUTRAL


@dataclass(frozen=True)
class StatusMessage:
    """The single textual feedback channel shown to the user."""

    text: str
    tone: FeedbackTone = FeedbackTone.NEUTRAL
