"""Melody playback through the default output device."""

from __future__ import annotations
from typing import Optional, Sequence

import sounddevice as sd

from ..core.errors import PlaybackError
from ..core.interfaces import ISynthesizer
from ..logger import get_logger
from ..synthesis import NOTE_DURATION, NOTE_GAP, render_sequence, sequence_duration

logger = get_logger(__name__)


class ToneSynthesizer(ISynthesizer):
    """Renders the melody with numpy and plays it with sounddevice."""

    def __init__(
        self,
        sample_rate: int = 44100,
        volume: float = 0.3,
        attack: float = 0.005,
        release: float = 0.05,
        note_duration: float = NOTE_DURATION,
        note_gap: float = NOTE_GAP,
        device_id: Optional[int] = None,
    ) -> None:
        self._sample_rate = sample_rate
        self._volume = volume
        self._attack = attack
        self._release = release
        self._note_duration = note_duration
        self._note_gap = note_gap
        self._device_id = device_id

    def _ensure_output(self) -> None:
        """Confirm the output device accepts our settings before scheduling notes."""
        try:
            sd.check_output_settings(
                device=self._device_id, channels=1, samplerate=self._sample_rate
            )
        except (sd.PortAudioError, ValueError) as e:
            raise PlaybackError(str(e)) from e

    def play(self, sequence: Sequence[str]) -> float:
        self._ensure_output()

        audio = render_sequence(
            sequence,
            self._sample_rate,
            note_duration=self._note_duration,
            note_gap=self._note_gap,
            volume=self._volume,
            attack=self._attack,
            release=self._release,
        )
        try:
            sd.play(audio, self._sample_rate, device=self._device_id)
        except sd.PortAudioError as e:
            raise PlaybackError(str(e)) from e

        duration = sequence_duration(len(sequence), self._note_duration, self._note_gap)
        logger.info(f"Playback started: {len(sequence)} notes, {duration:.2f}s")
        return duration

    def stop(self) -> None:
        sd.stop()
