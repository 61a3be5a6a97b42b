"""Live microphone pitch sampling."""

from __future__ import annotations
import time
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import sounddevice as sd

from ..core.errors import MicrophoneError, PitchReadError
from ..core.interfaces import IPitchSampler
from ..logger import get_logger
from .pitch_tracker import PitchTracker

logger = get_logger(__name__)


def list_input_devices() -> List[Tuple[int, Dict[str, Any]]]:
    """Return (device_id, device_info) for every device with input channels."""
    devices = sd.query_devices()
    return [
        (device_id, device)
        for device_id, device in enumerate(devices)
        if device["max_input_channels"] > 0
    ]


class MicrophonePitchSampler(IPitchSampler):
    """Keeps the latest pitch estimate from a live input stream.

    The sounddevice callback runs the tracker on every block and stores the
    newest reading; read_pitch() just hands that reading out, so a poll
    never blocks on audio.
    """

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: int = 44100,
        hop_size: int = 512,
        win_size: int = 2048,
        method: str = "yin",
        tolerance: float = 0.8,
        min_confidence: float = 0.5,
        silence_db: float = -40.0,
        max_age: float = 0.5,
    ) -> None:
        """Initialize the sampler. No audio device is touched until open().

        Args:
            device_id: Audio input device ID, or None for the system default
            sample_rate: Sample rate in Hz
            hop_size: Block size of the input stream and tracker hop
            win_size: Tracker analysis window
            method: aubio pitch method
            tolerance: aubio pitch tolerance
            min_confidence: Minimum tracker confidence to report a pitch
            silence_db: Level below which a block is silence
            max_age: Readings older than this (seconds) count as no reading
        """
        self._device_id = device_id
        self._sample_rate = sample_rate
        self._hop_size = hop_size
        self._tracker_params = {
            "win_size": win_size,
            "method": method,
            "tolerance": tolerance,
            "min_confidence": min_confidence,
            "silence_db": silence_db,
        }
        self._max_age = max_age

        self._stream: Optional[sd.InputStream] = None
        self._tracker: Optional[PitchTracker] = None
        # (frequency or None, monotonic timestamp), replaced atomically
        self._latest: Tuple[Optional[float], float] = (None, 0.0)

    def open(self) -> None:
        if self._stream is not None:
            return

        try:
            sd.check_input_settings(
                device=self._device_id, channels=1, samplerate=self._sample_rate
            )
            self._tracker = PitchTracker(
                sample_rate=self._sample_rate,
                hop_size=self._hop_size,
                **self._tracker_params,
            )
            stream = sd.InputStream(
                device=self._device_id,
                channels=1,
                samplerate=self._sample_rate,
                blocksize=self._hop_size,
                dtype="float32",
                callback=self._audio_callback,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as e:
            self._tracker = None
            raise MicrophoneError(str(e)) from e

        self._stream = stream
        logger.info(
            f"Microphone opened: device={self._device_id}, rate={self._sample_rate}Hz"
        )

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info,
        status: sd.CallbackFlags,
    ) -> None:
        """Runs on the audio thread; keep it short."""
        if status:
            logger.warning(f"Audio callback status: {status}")

        if self._tracker is None:
            return

        audio_data = indata[:, 0] if indata.ndim > 1 else indata
        frequency, _confidence = self._tracker.process(audio_data)
        self._latest = (frequency, time.monotonic())

    def read_pitch(self) -> Optional[float]:
        stream = self._stream
        if stream is None or not stream.active:
            raise PitchReadError("Input stream is not active")

        frequency, timestamp = self._latest
        if frequency is None or time.monotonic() - timestamp > self._max_age:
            return None
        return frequency

    def close(self) -> None:
        if self._stream is None:
            return

        try:
            self._stream.stop()
            self._stream.close()
            logger.info("Microphone closed")
        except sd.PortAudioError as e:
            logger.error(f"Error closing input stream: {e}")
        finally:
            self._stream = None
            self._tracker = None
            self._latest = (None, 0.0)

    def is_open(self) -> bool:
        return self._stream is not None
