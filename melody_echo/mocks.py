"""Stand-ins for hardware-bound components, used by tests and dry runs."""

from typing import Callable, Iterable, List, Optional, Sequence, Union

from .core.errors import MicrophoneError, PitchReadError
from .core.interfaces import IPitchSampler, ISynthesizer, ITicker

# A scripted reading: a frequency, None for silence, or an exception to raise
Reading = Union[float, None, Exception]


class ScriptedPitchSampler(IPitchSampler):
    """A sampler that replays a fixed list of readings, then reports silence."""

    def __init__(self, readings: Iterable[Reading] = (), fail_open: bool = False):
        self._readings: List[Reading] = list(readings)
        self._fail_open = fail_open
        self._open = False
        self.read_count = 0

    def feed(self, *readings: Reading) -> None:
        self._readings.extend(readings)

    def open(self) -> None:
        if self._fail_open:
            raise MicrophoneError("Microphone permission denied")
        self._open = True

    def read_pitch(self) -> Optional[float]:
        if not self._open:
            raise PitchReadError("Sampler is not open")
        self.read_count += 1
        if not self._readings:
            return None
        reading = self._readings.pop(0)
        if isinstance(reading, Exception):
            raise reading
        return reading

    def close(self) -> None:
        self._open = False

    def is_open(self) -> bool:
        return self._open


class ManualTicker(ITicker):
    """A ticker that only fires when told to."""

    def __init__(self):
        self.callback: Optional[Callable[[], None]] = None
        self.interval: Optional[float] = None
        self.start_count = 0
        self._running = False

    def start(self, callback: Callable[[], None], interval: float) -> None:
        self.callback = callback
        self.interval = interval
        self.start_count += 1
        self._running = True

    def stop(self) -> None:
        self._running = False

    def is_running(self) -> bool:
        return self._running

    def tick(self, count: int = 1) -> None:
        for _ in range(count):
            if self._running and self.callback is not None:
                self.callback()


class RecordingSynthesizer(ISynthesizer):
    """A synthesizer that records what it was asked to play."""

    def __init__(self, note_duration: float = 0.4, note_gap: float = 0.1, error=None):
        self.note_duration = note_duration
        self.note_gap = note_gap
        self.played: List[List[str]] = []
        self.stopped = 0
        self._error = error

    def play(self, sequence: Sequence[str]) -> float:
        if self._error is not None:
            raise self._error
        self.played.append(list(sequence))
        return len(sequence) * (self.note_duration + self.note_gap)

    def stop(self) -> None:
        self.stopped += 1
