"""Terminal front end: prints feedback lines and big banners for each note."""

import time
from typing import Callable, Optional

import click
import pyfiglet

from ..exercise import EarTrainingExercise
from ..logger import get_logger
from ..note_types import FeedbackTone, MatchPhase

logger = get_logger(__name__)

TONE_STYLES = {
    FeedbackTone.NEUTRAL: {},
    FeedbackTone.CORRECT: {"fg": "green", "bold": True},
    FeedbackTone.INCORRECT: {"fg": "red"},
}


class ConsoleUI:
    """Runs an exercise start to finish without a window."""

    def __init__(
        self,
        play_first: bool = True,
        timeout: Optional[float] = None,
        frame_delay: float = 0.05,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        source_finished: Callable[[], bool] = lambda: False,
    ):
        self.play_first = play_first
        self.timeout = timeout
        self.frame_delay = frame_delay
        self._sleep = sleep
        self._clock = clock
        self._source_finished = source_finished
        self._last_status = None
        self._last_banner = None

    def show_status(self, exercise: EarTrainingExercise) -> None:
        """Echo the status line when it changes."""
        status = exercise.status
        if status == self._last_status:
            return
        self._last_status = status
        click.echo(click.style(status.text, **TONE_STYLES[status.tone]))

    def show_target(self, exercise: EarTrainingExercise) -> None:
        """Print a banner for the note being listened for, once per note."""
        if exercise.phase is not MatchPhase.AWAITING:
            return
        label = exercise.display_sequence[exercise.position]
        key = (exercise.position, label)
        if key == self._last_banner:
            return
        self._last_banner = key
        click.echo(pyfiglet.figlet_format(label))

    def _pump_until(self, exercise: EarTrainingExercise, done: Callable[[], bool]) -> bool:
        deadline = None if self.timeout is None else self._clock() + self.timeout
        while not done():
            if deadline is not None and self._clock() >= deadline:
                return False
            exercise.update()
            self.show_status(exercise)
            self.show_target(exercise)
            self._sleep(self.frame_delay)
        exercise.update()
        self.show_status(exercise)
        return True

    def run(self, exercise: EarTrainingExercise) -> bool:
        """Connect, optionally play, then listen until the melody is sung.

        Returns:
            True if the whole sequence was matched
        """
        click.echo(f"Melody: {' '.join(exercise.display_sequence)}")
        try:
            if not exercise.connect_microphone():
                self.show_status(exercise)
                return False
            self.show_status(exercise)

            if self.play_first and exercise.play_sequence():
                self._pump_until(exercise, lambda: not exercise.playback_active)

            if not exercise.start_matching():
                self.show_status(exercise)
                return False

            self._pump_until(
                exercise,
                lambda: exercise.phase is not MatchPhase.AWAITING
                or self._source_finished(),
            )
            return exercise.phase is MatchPhase.COMPLETED
        except KeyboardInterrupt:
            click.echo("\nInterrupted.")
            return False
        finally:
            exercise.shutdown()
