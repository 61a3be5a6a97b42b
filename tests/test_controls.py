import pytest

from melody_echo.controls import ControlState, project_controls
from melody_echo.note_types import MatchPhase


@pytest.mark.parametrize(
    "mic_ready, phase, playback_active, connecting, expected",
    [
        (False, MatchPhase.IDLE, False, False, ControlState(True, False, False)),
        (False, MatchPhase.IDLE, False, True, ControlState(False, False, False)),
        (True, MatchPhase.IDLE, False, False, ControlState(False, True, True)),
        (True, MatchPhase.IDLE, True, False, ControlState(False, False, False)),
        (True, MatchPhase.AWAITING, False, False, ControlState(False, False, False)),
        (True, MatchPhase.COMPLETED, False, False, ControlState(False, True, True)),
        (True, MatchPhase.COMPLETED, True, False, ControlState(False, False, False)),
    ],
)
def test_projection(mic_ready, phase, playback_active, connecting, expected):
    assert project_controls(mic_ready, phase, playback_active, connecting) == expected


def test_play_and_match_are_never_split():
    for mic_ready in (False, True):
        for phase in MatchPhase:
            for playback_active in (False, True):
                state = project_controls(mic_ready, phase, playback_active)
                assert state.play_enabled == state.match_enabled
                if state.play_enabled:
                    assert not state.connect_enabled
