import os
import sys
from collections import namedtuple
from typing import List, Optional, Sequence, Tuple

from rich.cells import cell_len, set_cell_size
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from . import config, input_handler
from .commands import Command
from .progress import WordState
from .tokenizer import Token

# ================================
# CENTRALIZED UI CONFIGURATION
# ================================

class UIIcons:
    """Central place to configure all UI icons and separators."""

    # Status icons
    PLAYING = "▶"
    PAUSED = "⏸"

    # Separators
    SEPARATOR = "⸱"

    # Progress bar
    PROGRESS_FILLED = "▓"
    PROGRESS_EMPTY = "░"

    # Pace slider
    SLIDER_FILLED = "━"
    SLIDER_KNOB = "●"
    SLIDER_EMPTY = "─"

    LINE_SEPARATOR_LONG = "───"
    LINE_SEPARATOR_SHORT = "─"

class UIColors:
    """Central place to configure all UI colors and styles."""

    # Status colors
    PLAYING_STATUS = "green"
    PAUSED_STATUS = "yellow"

    # Controls
    CONTROL_KEYS = "white"
    CONTROL_LABELS = "bright_blue"
    SEPARATORS = "bright_blue"
    PACE_SLIDER = "magenta"
    PACE_TEXT = "bold white"

    # Panel and UI structure
    PANEL_BORDER = "bright_blue"
    PANEL_TITLE = "bold blue"

    # Text content colors
    WORD_AFTER = "white"                # Words not read yet
    WORD_BEFORE = "grey50"              # Words already read
    WORD_CURRENT = "bold magenta"       # Current word
    WORD_CURRENT_STANDOUT = "black on bright_magenta"  # Standout mode current word

ICONS = UIIcons()
COLORS = UIColors()

# Keys shown in the status line, in display order
_HINTS = [
    (Command.TOGGLE_PLAY, "play"),
    (Command.PACE_UP, None),
    (Command.PACE_DOWN, "pace"),
    (Command.STEP_BACK, None),
    (Command.STEP_FORWARD, "step"),
    (Command.RESET, "reset"),
    (Command.TOGGLE_FULLSCREEN, "full"),
    (Command.CLOSE, "close"),
]

_KEY_DISPLAY = {
    "space": "␣",
    "left": "←",
    "right": "→",
    "up": "↑",
    "down": "↓",
    "escape": "esc",
    "enter": "⏎",
}

PACE_LABEL = "Pace "

TextArea = namedtuple("TextArea", ["left", "top", "width", "height"])

# One screen line: (column, token_index) for every word on the line
LayoutLine = List[Tuple[int, int]]


def get_terminal_size():
    """Get terminal size."""
    try:
        columns, rows = os.get_terminal_size()
        return max(columns, 40), max(rows, 10)
    except OSError:
        return 80, 24


def get_text_area(fullscreen, width, height):
    """
    Screen area used by the text, as 0-based cell offsets.

    In the panel layout the text sits inside a border with (1, 4) padding and
    the status line takes the last row; fullscreen uses the whole terminal.
    """
    if fullscreen:
        return TextArea(0, 0, width, height)
    return TextArea(5, 2, max(20, width - 10), max(1, height - 5))


def format_key_for_display(key):
    """Short label for a key name."""
    if key in _KEY_DISPLAY:
        return _KEY_DISPLAY[key]
    if isinstance(key, str) and len(key) == 1 and ord(key) < 32:
        return f"^{chr(ord(key) + 96)}"
    return key


def _whitespace_width(text):
    return cell_len(text.replace("\t", "    "))


def layout_tokens(tokens: Sequence[Token], width: int) -> Tuple[List[LayoutLine], List[int]]:
    """
    Word-wrap a token sequence into screen lines.

    Newlines in whitespace tokens start new lines, so paragraph breaks and
    blank lines survive. Words wider than the line are placed on a line of
    their own and cropped when drawn.

    Args:
        tokens: Tokens of the session
        width: Available width in cells

    Returns:
        tuple: (lines, token_lines) where each line lists (column, token_index)
        for its words and token_lines maps every token index to its line
    """
    lines: List[LayoutLine] = [[]]
    token_lines = [0] * len(tokens)
    col = 0
    for index, token in enumerate(tokens):
        if token.is_word:
            word_width = cell_len(token.text)
            if col > 0 and col + word_width > width:
                lines.append([])
                col = 0
            lines[-1].append((col, index))
            token_lines[index] = len(lines) - 1
            col += word_width
            continue

        token_lines[index] = len(lines) - 1
        breaks = token.text.count("\n")
        if breaks:
            lines.extend([] for _ in range(breaks))
            col = 0
        elif col > 0:
            col += _whitespace_width(token.text)
            if col >= width:
                lines.append([])
                col = 0
    return lines, token_lines


def update_document_layout(prompter):
    """Update the document layout based on terminal size."""
    width, height = get_terminal_size()
    area = get_text_area(prompter.fullscreen, width, height)
    prompter.document_lines, prompter.token_lines = layout_tokens(prompter.engine.tokens, area.width)
    prompter.layout_width = area.width
    clamp_scroll(prompter)


def _max_scroll(prompter):
    width, height = get_terminal_size()
    area = get_text_area(prompter.fullscreen, width, height)
    return max(0, len(prompter.document_lines) - area.height)


def clamp_scroll(prompter):
    prompter.scroll_offset = max(0, min(prompter.scroll_offset, _max_scroll(prompter)))


def follow_position(prompter):
    """Scroll so the line of the current word sits in the middle of the text area."""
    position = prompter.engine.position
    if position is None:
        prompter.scroll_offset = 0
        return
    if position >= len(prompter.token_lines):
        return
    width, height = get_terminal_size()
    area = get_text_area(prompter.fullscreen, width, height)
    prompter.scroll_offset = prompter.token_lines[position] - area.height // 2
    clamp_scroll(prompter)


def scroll_by(prompter, lines):
    """Manual scroll; word-following resumes on the next position change."""
    prompter.follow_enabled = False
    prompter.scroll_offset += lines
    clamp_scroll(prompter)


def token_at_click(prompter, click_x, click_y) -> Optional[int]:
    """
    Find the word token under a mouse click.

    Args:
        click_x: 1-based terminal column
        click_y: 1-based terminal row

    Returns:
        The token index of the clicked word, or None for whitespace, empty
        space, or a click outside the text area
    """
    width, height = get_terminal_size()
    area = get_text_area(prompter.fullscreen, width, height)
    row = click_y - 1 - area.top
    col = click_x - 1 - area.left
    if not (0 <= row < area.height and 0 <= col < area.width):
        return None
    line_index = int(prompter.scroll_offset) + row
    if line_index >= len(prompter.document_lines):
        return None
    tokens = prompter.engine.tokens
    for column, token_index in prompter.document_lines[line_index]:
        if column <= col < column + cell_len(tokens[token_index].text):
            return token_index
    return None


def _status_text(prompter):
    icon = ICONS.PLAYING if prompter.engine.is_playing else ICONS.PAUSED
    status = "PLAYING" if prompter.engine.is_playing else "PAUSED"
    return f" {icon} {status:<7} "


def pace_slider_start(prompter):
    """0-based column where the pace slider starts in the status line."""
    return cell_len(_status_text(prompter)) + cell_len(PACE_LABEL)


def pace_at_click(prompter, click_x, click_y) -> Optional[int]:
    """
    Pace selected by a click on the pace slider.

    Returns:
        int: Absolute words-per-minute value under the cursor, or None if the
        click is not on the slider
    """
    if prompter.fullscreen:
        return None
    width, height = get_terminal_size()
    if click_y != height:
        return None
    start = pace_slider_start(prompter)
    slider_width = config.PACE_SLIDER_WIDTH
    col = click_x - 1
    if not start <= col < start + slider_width:
        return None
    pace = prompter.engine.pace
    fraction = (col - start) / (slider_width - 1)
    return round(pace.min_wpm + fraction * (pace.max_wpm - pace.min_wpm))


def format_pace_slider(pace, width=config.PACE_SLIDER_WIDTH):
    knob = round(pace.fraction() * (width - 1))
    return ICONS.SLIDER_FILLED * knob + ICONS.SLIDER_KNOB + ICONS.SLIDER_EMPTY * (width - knob - 1)


def format_progress_bar(progress_percent, width=10):
    filled_blocks = int((progress_percent / 100) * width)
    return ICONS.PROGRESS_FILLED * filled_blocks + ICONS.PROGRESS_EMPTY * (width - filled_blocks)


def get_status_line(prompter, width) -> Text:
    """Status, pace slider and key hints shown under the panel."""
    engine = prompter.engine
    playing_color = COLORS.PLAYING_STATUS if engine.is_playing else COLORS.PAUSED_STATUS

    line = Text(no_wrap=True, overflow="crop")
    line.append(_status_text(prompter), style=playing_color)
    line.append(PACE_LABEL, style=COLORS.CONTROL_LABELS)
    line.append(format_pace_slider(engine.pace), style=COLORS.PACE_SLIDER)
    line.append(f" {engine.wpm:>3} wpm ", style=COLORS.PACE_TEXT)
    line.append(ICONS.LINE_SEPARATOR_LONG, style=COLORS.SEPARATORS)

    hints = []
    hint_keys = []
    for command, label in _HINTS:
        keys = input_handler.keys_for_command(command)
        if keys:
            hint_keys.append(format_key_for_display(keys[0]))
        if label is not None:
            if hint_keys:
                hints.append(("".join(hint_keys), label))
            hint_keys = []

    for i, (keys, label) in enumerate(hints):
        if i > 0:
            line.append(f" {ICONS.SEPARATOR}", style=COLORS.SEPARATORS)
        line.append(f" {keys}", style=COLORS.CONTROL_KEYS)
        line.append(f" {label}", style=COLORS.CONTROL_LABELS)

    line.truncate(width, pad=True)
    return line


def _word_style(prompter, state):
    if state is WordState.CURRENT and prompter.highlight_mode > 0:
        return COLORS.WORD_CURRENT_STANDOUT if prompter.highlight_mode == 2 else COLORS.WORD_CURRENT
    if state is WordState.BEFORE:
        return COLORS.WORD_BEFORE
    return COLORS.WORD_AFTER


def render_line(prompter, line: LayoutLine, states) -> Text:
    """Build the styled text of one layout line."""
    text = Text(no_wrap=True, overflow="crop")
    tokens = prompter.engine.tokens
    col = 0
    for column, token_index in line:
        if column > col:
            text.append(" " * (column - col))
        word = tokens[token_index].text
        text.append(word, style=_word_style(prompter, states[token_index]))
        col = column + cell_len(word)
    return text


def get_visible_content(prompter):
    """Get the visible content to display."""
    width, height = get_terminal_size()
    area = get_text_area(prompter.fullscreen, width, height)
    states = prompter.engine.token_states()

    start_line = int(prompter.scroll_offset)
    end_line = min(len(prompter.document_lines), start_line + area.height)

    visible_lines = []
    for i in range(start_line, end_line):
        visible_lines.append(render_line(prompter, prompter.document_lines[i], states))
    while len(visible_lines) < area.height:
        visible_lines.append(Text(""))
    return visible_lines


def _get_title(prompter, width):
    progress_percent = prompter.engine.progress()
    percentage_text = f"{int(progress_percent)}% {format_progress_bar(progress_percent)}"

    # Title, two spaces and the percentage fill width - 6 cells
    available_width = width - cell_len(percentage_text) - 8
    if cell_len(prompter.title) > available_width:
        title_text = f"{set_cell_size(prompter.title, max(0, available_width - 3))}..."
    else:
        title_text = prompter.title

    used_space = cell_len(title_text) + cell_len(percentage_text) + 2
    remaining_space = width - used_space - 6
    connecting_line = ICONS.LINE_SEPARATOR_SHORT * max(0, remaining_space)
    return f"{title_text} {connecting_line} {percentage_text}"


def display_ui(prompter):
    """Repaint the whole screen."""
    width, height = get_terminal_size()
    visible_lines = get_visible_content(prompter)

    content = Text(no_wrap=True, overflow="crop")
    for i, line in enumerate(visible_lines):
        content.append_text(line)
        if i < len(visible_lines) - 1:
            content.append("\n")

    temp_console = Console(width=width, height=height, force_terminal=True)

    if prompter.fullscreen:
        with temp_console.capture() as capture:
            temp_console.print(content, end='', overflow='crop')
    else:
        panel = Panel(
            content,
            title=Text(_get_title(prompter, width), style=COLORS.PANEL_TITLE),
            border_style=COLORS.PANEL_BORDER,
            padding=(1, 4),
            title_align="center",
            width=width,
            height=height - 1,
            expand=False,
        )
        with temp_console.capture() as capture:
            temp_console.print(panel, overflow='crop')
            temp_console.print(get_status_line(prompter, width), end='', overflow='crop')

    output = capture.get()
    output_lines = output.split('\n')
    if len(output_lines) > height:
        output = '\n'.join(output_lines[:height])

    sys.stdout.write('\033[?25l\033[H\033[2J')
    sys.stdout.write(output)
    sys.stdout.flush()
