"""Core components for the Melody Echo application."""

# Import interfaces for easier access
from .interfaces import IPitchSampler, ISynthesizer, ITicker
from .errors import MelodyEchoError, MicrophoneError, PlaybackError, PitchReadError

__all__ = [
    "IPitchSampler",
    "ISynthesizer",
    "ITicker",
    "MelodyEchoError",
    "MicrophoneError",
    "PlaybackError",
    "PitchReadError",
]
