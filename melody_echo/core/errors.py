"""Exceptions raised by Melody Echo components."""


class MelodyEchoError(Exception):
    """Base exception for the application."""


class MicrophoneError(MelodyEchoError):
    """The audio input could not be acquired (no device, permission, bad settings)."""


class PlaybackError(MelodyEchoError):
    """The audio output could not be used for playback."""


class PitchReadError(MelodyEchoError):
    """A single pitch query failed; the next one may succeed."""
