"""Fundamental frequency estimation on audio frames."""

from __future__ import annotations
from typing import ClassVar, Optional, Tuple

import aubio
import numpy as np

from ..logger import get_logger

logger = get_logger(__name__)


class PitchTracker:
    """Thin wrapper around an aubio pitch detector.

    Feed it hop-sized frames; each call returns the frequency estimate for
    the frame together with aubio's confidence. Quiet or unconfident
    frames come back as no reading.
    """

    MIN_FREQUENCY: ClassVar[float] = 50.0  # Hz - below this is not a singing voice
    MAX_FREQUENCY: ClassVar[float] = 2200.0  # Hz

    def __init__(
        self,
        sample_rate: int = 44100,
        hop_size: int = 512,
        win_size: int = 2048,
        method: str = "yin",
        tolerance: float = 0.8,
        min_confidence: float = 0.5,
        silence_db: float = -40.0,
    ) -> None:
        """Initialize the tracker.

        Args:
            sample_rate: Audio sample rate in Hz
            hop_size: Frame length handed to process()
            win_size: Analysis window, typically a few hops
            method: aubio pitch method ('yin', 'yinfft', 'mcomb', ...)
            tolerance: aubio pitch detection tolerance (0.0 to 1.0)
            min_confidence: Minimum confidence to report a frequency
            silence_db: Frames quieter than this level are treated as silence
        """
        self._sample_rate = sample_rate
        self._hop_size = hop_size
        self._min_confidence = min_confidence

        self._pitch_detector = aubio.pitch(method, win_size, hop_size, sample_rate)
        self._pitch_detector.set_unit("Hz")
        self._pitch_detector.set_tolerance(tolerance)
        self._pitch_detector.set_silence(silence_db)

        logger.info(
            f"Pitch tracker initialized: method={method}, sample_rate={sample_rate}, "
            f"win_size={win_size}, hop_size={hop_size}"
        )

    def process(self, frame: np.ndarray) -> Tuple[Optional[float], float]:
        """Estimate the pitch of one frame.

        Args:
            frame: Mono samples; resized to the hop size if needed

        Returns:
            (frequency in Hz or None, confidence)
        """
        frame = np.asarray(frame, dtype=np.float32).reshape(-1)

        # aubio requires exactly hop_size samples
        if len(frame) > self._hop_size:
            frame = frame[: self._hop_size]
        elif len(frame) < self._hop_size:
            padding = np.zeros(self._hop_size - len(frame), dtype=np.float32)
            frame = np.concatenate((frame, padding))

        pitch = float(self._pitch_detector(frame)[0])
        confidence = float(self._pitch_detector.get_confidence())

        if (
            confidence < self._min_confidence
            or pitch < self.MIN_FREQUENCY
            or pitch > self.MAX_FREQUENCY
        ):
            return None, confidence

        logger.debug(f"Frame pitch {pitch:.1f}Hz (confidence {confidence:.2f})")
        return pitch, confidence
