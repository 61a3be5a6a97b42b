"""Button availability derived from the exercise state."""

from dataclasses import dataclass

from .note_types import MatchPhase


@dataclass(frozen=True)
class ControlState:
    """Which of the three user actions can be triggered right now."""

    connect_enabled: bool
    play_enabled: bool
    match_enabled: bool


def project_controls(
    mic_ready: bool,
    phase: MatchPhase,
    playback_active: bool,
    connecting: bool = False,
) -> ControlState:
    """Project the exercise state onto the action buttons.

    Playing and matching both need a connected microphone and exclude each
    other; connecting is only offered until it has succeeded.
    """
    busy = playback_active or phase is MatchPhase.AWAITING
    return ControlState(
        connect_enabled=not mic_ready and not connecting,
        play_enabled=mic_ready and not busy,
        match_enabled=mic_ready and not busy,
    )
