"""Defines the core interfaces for the Melody Echo application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence


class IPitchSampler(ABC):
    """Interface for pull-style pitch sources."""

    @abstractmethod
    def open(self) -> None:
        """Acquire the underlying audio input.

        Raises:
            MicrophoneError: If the input cannot be acquired
        """
        pass

    @abstractmethod
    def read_pitch(self) -> Optional[float]:
        """Return the current fundamental frequency in Hz, or None for no reading.

        Raises:
            PitchReadError: If this particular read failed
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying audio input."""
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """Check if the input is currently acquired."""
        pass


class ISynthesizer(ABC):
    """Interface for melody playback."""

    @abstractmethod
    def play(self, sequence: Sequence[str]) -> float:
        """Start playing the sequence and return its duration in seconds.

        Raises:
            PlaybackError: If the output device cannot be used
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop any playback in progress."""
        pass


class ITicker(ABC):
    """Interface for a fixed-interval timer."""

    @abstractmethod
    def start(self, callback: Callable[[], None], interval: float) -> None:
        """Call callback every interval seconds until stopped."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop calling the callback."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the ticker is active."""
        pass
