"""Device-independent commands accepted by a teleprompter session."""

from enum import Enum

from . import config
from .engine import PlaybackEngine


class Command(Enum):
    TOGGLE_PLAY = "toggle_play"
    PACE_UP = "pace_up"
    PACE_DOWN = "pace_down"
    STEP_BACK = "step_back"
    STEP_FORWARD = "step_forward"
    RESET = "reset"
    CLOSE = "close"
    # Host-only commands, never seen by the engine
    TOGGLE_FULLSCREEN = "toggle_fullscreen"
    CYCLE_HIGHLIGHT = "cycle_highlight"
    QUIT = "quit"


def apply_command(engine: PlaybackEngine, command: Command) -> bool:
    """
    Run an engine command.

    Args:
        engine: Engine of the current session
        command: Command to run

    Returns:
        bool: False if the command belongs to the host (close, quit, display)
    """
    if command is Command.TOGGLE_PLAY:
        engine.toggle()
    elif command is Command.PACE_UP:
        engine.on_pace_change(engine.wpm + config.PACE_STEP)
    elif command is Command.PACE_DOWN:
        engine.on_pace_change(engine.wpm - config.PACE_STEP)
    elif command is Command.STEP_BACK:
        engine.step_backward()
    elif command is Command.STEP_FORWARD:
        engine.step_forward()
    elif command is Command.RESET:
        engine.reset()
    else:
        return False
    return True
