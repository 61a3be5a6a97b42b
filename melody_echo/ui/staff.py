"""Treble staff geometry, independent of any drawing backend."""

from dataclasses import dataclass
from typing import List, Sequence

from ..note_utils import split_note

LETTERS = "CDEFGAB"

# E4 sits on the bottom line of a treble staff
BOTTOM_LINE_STEP = LETTERS.index("E") + 7 * 4

STAFF_LINES = 5
TOP_LINE_STEP = 2 * (STAFF_LINES - 1)


def staff_step(note: str) -> int:
    """Diatonic steps above the bottom staff line (0 = E4, 1 = F4, -2 = C4)."""
    pitch_class, octave = split_note(note)
    return LETTERS.index(pitch_class[0]) + 7 * octave - BOTTOM_LINE_STEP


def ledger_steps(step: int) -> List[int]:
    """Steps that need a ledger line for a note drawn at step."""
    if step <= -2:
        return list(range(-2, step - 1, -2))
    if step >= TOP_LINE_STEP + 2:
        return list(range(TOP_LINE_STEP + 2, step + 1, 2))
    return []


def has_sharp(note: str) -> bool:
    return "#" in note


def time_signature(sequence: Sequence[str]) -> str:
    """One quarter-note beat per note, as the melody is written in quarters."""
    return f"{len(sequence)}/4"


@dataclass(frozen=True)
class StaffLayout:
    """Pixel placement of a staff and the notes on it."""

    x: int = 10
    y: int = 40  # y of the top line
    width: int = 580
    line_spacing: int = 12
    header_width: int = 80  # room for clef and time signature

    @property
    def bottom_y(self) -> float:
        return self.y + self.line_spacing * (STAFF_LINES - 1)

    def line_ys(self) -> List[float]:
        return [self.y + i * self.line_spacing for i in range(STAFF_LINES)]

    def step_y(self, step: int) -> float:
        return self.bottom_y - step * self.line_spacing / 2

    def note_x(self, index: int, count: int) -> float:
        usable = self.width - self.header_width
        slot = usable / max(count, 1)
        return self.x + self.header_width + slot * (index + 0.5)
