"""Waveform rendering for melody playback."""

from typing import Sequence

import numpy as np

from .note_utils import note_to_frequency

NOTE_DURATION = 0.4  # seconds each note sounds
NOTE_GAP = 0.1  # seconds of silence after each note


def sequence_duration(
    note_count: int, note_duration: float = NOTE_DURATION, note_gap: float = NOTE_GAP
) -> float:
    """Total playback time of a sequence, including the gap after the last note."""
    return note_count * (note_duration + note_gap)


def render_tone(
    frequency: float,
    duration: float,
    sample_rate: int,
    volume: float = 0.3,
    attack: float = 0.005,
    release: float = 0.05,
) -> np.ndarray:
    """Render one triangle-wave tone with a linear attack/release envelope."""
    n_samples = int(round(duration * sample_rate))
    t = np.arange(n_samples, dtype=np.float64) / sample_rate

    phase = t * frequency
    wave = 2.0 * np.abs(2.0 * (phase - np.floor(phase + 0.5))) - 1.0

    envelope = np.ones(n_samples)
    attack_len = min(int(attack * sample_rate), n_samples)
    release_len = min(int(release * sample_rate), n_samples - attack_len)
    if attack_len > 0:
        envelope[:attack_len] = np.linspace(0.0, 1.0, attack_len, endpoint=False)
    if release_len > 0:
        envelope[n_samples - release_len:] = np.linspace(1.0, 0.0, release_len)

    return (volume * wave * envelope).astype(np.float32)


def render_sequence(
    sequence: Sequence[str],
    sample_rate: int,
    note_duration: float = NOTE_DURATION,
    note_gap: float = NOTE_GAP,
    volume: float = 0.3,
    attack: float = 0.005,
    release: float = 0.05,
) -> np.ndarray:
    """Render a melody as consecutive tones separated by short silences.

    Args:
        sequence: Note labels, in notation ('C/4') or plain ('C4') form
        sample_rate: Output sample rate in Hz

    Returns:
        Mono float32 samples lasting sequence_duration(len(sequence)) seconds
    """
    gap = np.zeros(int(round(note_gap * sample_rate)), dtype=np.float32)
    parts = []
    for note in sequence:
        parts.append(
            render_tone(
                note_to_frequency(note),
                note_duration,
                sample_rate,
                volume=volume,
                attack=attack,
                release=release,
            )
        )
        parts.append(gap)

    if not parts:
        return np.zeros(0, dtype=np.float32)
    return np.concatenate(parts)
