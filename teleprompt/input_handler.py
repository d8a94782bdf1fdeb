"""Terminal input decoding and keyboard shortcuts for the Teleprompt reader."""

import codecs
import json
import logging
import os
import re
from dataclasses import dataclass

from .commands import Command

# Default keyboard shortcuts
DEFAULT_KEYBOARD_SHORTCUTS = {
    "playback": {
        "toggle_play": "space",
        "reset": "r",
        "step_back": "left",
        "step_forward": "right"
    },
    "pace": {
        "pace_up": "up",
        "pace_down": "down"
    },
    "display": {
        "toggle_fullscreen": "f",
        "cycle_highlight": "w"
    },
    "application": {
        "close": "escape",
        "quit": "q"
    }
}

# Global variable to store loaded keyboard shortcuts
KEYBOARD_SHORTCUTS = DEFAULT_KEYBOARD_SHORTCUTS

ESC = "\x1b"

_KEY_NAMES = {
    " ": "space",
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
}

_ARROW_KEYS = {"A": "up", "B": "down", "C": "right", "D": "left"}

_CSI_SEQUENCE = re.compile(r"\x1b\[(<?)([0-9;]*)([A-Za-z~])")
_CSI_INCOMPLETE = re.compile(r"\x1b\[<?[0-9;]*\Z")

WHEEL_UP = -1
WHEEL_DOWN = 1


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class MouseClick:
    x: int  # 1-based terminal column
    y: int  # 1-based terminal row


@dataclass(frozen=True)
class MouseWheel:
    direction: int


def _build_key_map(shortcuts):
    key_map = {}
    for section in shortcuts.values():
        for command_name, keys in section.items():
            try:
                command = Command(command_name)
            except ValueError:
                logging.warning(f"Unknown command '{command_name}' in keyboard shortcuts")
                continue
            if isinstance(keys, str):
                keys = [keys]
            for key in keys:
                key_map[key] = command
    return key_map


_KEY_TO_COMMAND = _build_key_map(DEFAULT_KEYBOARD_SHORTCUTS)


def resolve_keyboard_shortcuts_file(keys_arg):
    """Resolve the keyboard shortcuts file path from a preset name or a path."""
    if os.path.isfile(keys_arg):
        return keys_arg

    preset_file = os.path.join(os.path.dirname(__file__), f'keys_{keys_arg}.json')
    if os.path.isfile(preset_file):
        return preset_file

    return os.path.join(os.path.dirname(__file__), 'keys_default.json')


def load_keyboard_shortcuts(file_path=None):
    """Load keyboard shortcuts from a JSON file or use defaults.

    If file_path is None, the bundled keys_default.json is used.
    """
    global KEYBOARD_SHORTCUTS, _KEY_TO_COMMAND

    if not file_path:
        file_path = os.path.join(os.path.dirname(__file__), 'keys_default.json')

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            shortcuts = json.load(f)
        key_map = _build_key_map(shortcuts)
    except (OSError, ValueError, AttributeError, TypeError) as e:
        logging.error(f"Failed to load keyboard shortcuts from {file_path}: {e}")
        shortcuts = DEFAULT_KEYBOARD_SHORTCUTS
        key_map = _build_key_map(shortcuts)

    KEYBOARD_SHORTCUTS = shortcuts
    _KEY_TO_COMMAND = key_map


def command_for_key(key):
    """Map a key name to its command, or None if the key is unbound."""
    return _KEY_TO_COMMAND.get(key)


def keys_for_command(command):
    """All keys bound to a command, in shortcut file order."""
    return [key for key, bound in _KEY_TO_COMMAND.items() if bound is command]


class InputDecoder:
    """
    Turns raw terminal input into key and mouse events.

    Understands plain characters, arrow key sequences (CSI and SS3 forms) and
    SGR mouse reports. An escape sequence split across two reads is kept
    until the rest arrives; a lone ESC at the end of a read is the escape key and ESC followed by a
    plain key is that key with alt held.
    """

    def __init__(self):
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed_bytes(self, data: bytes):
        return self.feed(self._decoder.decode(data))

    def feed(self, data: str):
        buf = self._buffer + data
        self._buffer = ""
        events = []
        i = 0
        while i < len(buf):
            ch = buf[i]
            if ch != ESC:
                events.append(KeyPress(_KEY_NAMES.get(ch, ch)))
                i += 1
                continue

            if i + 1 == len(buf):
                events.append(KeyPress("escape"))
                i += 1
                continue

            if buf[i + 1] == "[":
                match = _CSI_SEQUENCE.match(buf, i)
                if match is None:
                    if _CSI_INCOMPLETE.match(buf, i):
                        self._buffer = buf[i:]
                        break
                    # Unknown sequence: drop the introducer
                    i += 2
                    continue
                event = self._decode_csi(*match.groups())
                if event is not None:
                    events.append(event)
                i = match.end()
            elif buf[i + 1] == "O":
                if i + 2 == len(buf):
                    self._buffer = buf[i:]
                    break
                key = _ARROW_KEYS.get(buf[i + 2])
                if key:
                    events.append(KeyPress(key))
                i += 3
            elif buf[i + 1] == ESC:
                events.append(KeyPress("escape"))
                i += 1
            else:
                # Meta: ESC prefixes the key it modifies
                events.append(KeyPress(f"alt+{_KEY_NAMES.get(buf[i + 1], buf[i + 1])}"))
                i += 2
        return events

    @staticmethod
    def _decode_csi(mouse_marker, params, final):
        if mouse_marker:
            if final not in "Mm":
                return None
            try:
                button, x, y = (int(part) for part in params.split(";")[:3])
            except ValueError:
                return None
            if final == "m":
                return None
            if button == 0:
                return MouseClick(x, y)
            if button == 64:
                return MouseWheel(WHEEL_UP)
            if button == 65:
                return MouseWheel(WHEEL_DOWN)
            return None
        if final in _ARROW_KEYS:
            return KeyPress(_ARROW_KEYS[final])
        return None


def process_input(prompter):
    """Read pending bytes from stdin and post the resulting commands."""
    try:
        data = os.read(prompter.input_fd, 1024)
    except (BlockingIOError, InterruptedError):
        return
    if not data:
        return

    for event in prompter.input_decoder.feed_bytes(data):
        if isinstance(event, KeyPress):
            cmd = command_for_key(event.key)
            if cmd:
                prompter.post_command(cmd)
        elif isinstance(event, MouseClick):
            prompter.post_command(('click', (event.x, event.y)))
        elif isinstance(event, MouseWheel):
            prompter.post_command(('wheel', event.direction))
