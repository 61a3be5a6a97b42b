"""Utility functions for working with musical notes and frequencies."""

import math
from typing import Optional, Tuple

import numpy as np

from .logger import get_logger

# Get logger for this module
logger = get_logger(__name__)

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Frequency of C0; semitone indices count upward from here
REFERENCE_FREQUENCY = 16.35

# Anything below this is treated as noise rather than a note
NOISE_FLOOR_HZ = 10.0

# Standard concert pitch used for synthesis
A4_FREQUENCY = 440.0
A4_SEMITONES_FROM_C0 = 57


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, with .5 ties rounded away from zero.

    Python's built-in round() uses banker's rounding, which would send
    2.5 to 2; this sends it to 3 (and -2.5 to -3).
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def semitones_from_reference(frequency: float) -> float:
    """Return the (fractional) number of semitones between C0 and frequency."""
    return float(12 * np.log2(frequency / REFERENCE_FREQUENCY))


def frequency_to_note(frequency: Optional[float]) -> Optional[str]:
    """Classify a frequency into a sharp-free note label.

    Args:
        frequency: Frequency in Hz, or None when there is no reading

    Returns:
        A label such as 'C4', or None when the input is below the noise
        floor (or is not a usable number).

    Note:
        Sharps are stripped from the result, so a C#4 is reported as 'C4'.
        Naturals are never changed, so the collapse only goes downward.
    """
    if frequency is None or not np.isfinite(frequency):
        return None

    if frequency < NOISE_FLOOR_HZ:
        logger.debug(f"Frequency {frequency} below noise floor")
        return None

    # Snap away float noise so exact half-semitone boundaries round up
    semitones = round(semitones_from_reference(frequency), 9)
    note_index = round_half_away_from_zero(semitones)
    note_name = NOTE_NAMES[note_index % 12]
    octave = note_index // 12

    return f"{strip_sharp(note_name)}{octave}"


# The classifier contract name
classify = frequency_to_note


def strip_sharp(note: str) -> str:
    """Remove the sharp marker from a note name ('C#4' -> 'C4')."""
    return note.replace("#", "")


def to_display_label(note: str) -> str:
    """Convert a staff notation key into a plain label ('C/4' -> 'C4')."""
    return note.replace("/", "")


def split_note(note: str) -> Tuple[str, int]:
    """Split a label into its pitch class and octave.

    Accepts both notation keys ('F#/4') and plain labels ('F#4').

    Raises:
        ValueError: If the label cannot be parsed
    """
    label = to_display_label(note).strip()
    pitch_class = label.rstrip("-0123456789")
    octave_part = label[len(pitch_class):]
    pitch_class = pitch_class[:1].upper() + pitch_class[1:]
    if pitch_class not in NOTE_NAMES or not octave_part:
        raise ValueError(f"Invalid note: {note!r}")
    return pitch_class, int(octave_part)


def note_to_frequency(note: str) -> float:
    """Return the equal-tempered frequency (A4 = 440 Hz) of a note label."""
    pitch_class, octave = split_note(note)
    semitones = NOTE_NAMES.index(pitch_class) + 12 * octave
    return A4_FREQUENCY * 2.0 ** ((semitones - A4_SEMITONES_FROM_C0) / 12.0)
