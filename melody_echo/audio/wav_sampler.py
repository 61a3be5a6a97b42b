"""Pitch sampling from a recorded WAV file, streamed in real time."""

from __future__ import annotations
import threading
import time
from typing import Optional

import soundfile as sf

from ..core.errors import MicrophoneError, PitchReadError
from ..core.interfaces import IPitchSampler
from ..logger import get_logger
from .pitch_tracker import PitchTracker

logger = get_logger(__name__)


class WavFilePitchSampler(IPitchSampler):
    """Plays a WAV file through the pitch tracker as if it were a microphone.

    A background thread reads hop-sized chunks at playback speed so a
    recorded take can drive the exercise headlessly. Once the file ends
    (and loop is off) every read reports silence.
    """

    def __init__(
        self,
        file_path: str,
        hop_size: int = 512,
        win_size: int = 2048,
        method: str = "yin",
        tolerance: float = 0.8,
        min_confidence: float = 0.5,
        silence_db: float = -40.0,
        loop: bool = False,
        gain: float = 1.0,
        realtime: bool = True,
    ) -> None:
        self._file_path = file_path
        self._hop_size = hop_size
        self._tracker_params = {
            "win_size": win_size,
            "method": method,
            "tolerance": tolerance,
            "min_confidence": min_confidence,
            "silence_db": silence_db,
        }
        self._loop = loop
        self._gain = gain
        self._realtime = realtime

        self._tracker: Optional[PitchTracker] = None
        self._thread: Optional[threading.Thread] = None
        self._is_running = False
        self._latest: Optional[float] = None
        self._sample_rate = 0

    @property
    def finished(self) -> bool:
        """True once the file has been fully streamed."""
        return self._tracker is not None and not self._is_running

    def open(self) -> None:
        if self._is_running:
            return

        try:
            info = sf.info(self._file_path)
        except (RuntimeError, OSError) as e:
            raise MicrophoneError(f"Cannot open {self._file_path}: {e}") from e

        self._sample_rate = info.samplerate
        self._tracker = PitchTracker(
            sample_rate=self._sample_rate,
            hop_size=self._hop_size,
            **self._tracker_params,
        )
        self._latest = None
        self._is_running = True
        self._thread = threading.Thread(
            target=self._stream_data, name="wav-pitch-sampler", daemon=True
        )
        self._thread.start()
        logger.info(f"Streaming {self._file_path} at {self._sample_rate}Hz")

    def _stream_data(self) -> None:
        try:
            while self._is_running:
                with sf.SoundFile(self._file_path) as f:
                    while self._is_running:
                        data = f.read(self._hop_size, dtype="float32", always_2d=True)
                        if len(data) == 0:
                            break

                        mono = data[:, 0]
                        if self._gain != 1.0:
                            mono = mono * self._gain

                        self._latest, _confidence = self._tracker.process(mono)

                        # Simulate real-time playback speed
                        if self._realtime:
                            time.sleep(self._hop_size / self._sample_rate)

                if not self._loop:
                    break
        except (RuntimeError, OSError) as e:
            logger.error(f"Error streaming WAV file: {e}")
        finally:
            self._is_running = False
            self._latest = None

    def read_pitch(self) -> Optional[float]:
        if self._tracker is None:
            raise PitchReadError("WAV sampler has not been opened")
        return self._latest

    def close(self) -> None:
        self._is_running = False
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        self._tracker = None

    def is_open(self) -> bool:
        return self._tracker is not None
