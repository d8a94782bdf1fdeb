#!/usr/bin/env python3
"""
Test script for the Teleprompt session host and its screen layout.
"""

import asyncio
import io
import os
import sys
import unittest
from unittest.mock import patch

from rich.cells import cell_len

# Add the project root to the path so we can import teleprompt modules
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from teleprompt import input_handler, ui
from teleprompt.commands import Command
from teleprompt.input_handler import WHEEL_DOWN, WHEEL_UP
from teleprompt.scheduler import SimulatedScheduler
from teleprompt.teleprompter import Teleprompter
from teleprompt.tokenizer import tokenize


class PrompterTestCase(unittest.TestCase):

    content = "Hello world"

    def setUp(self):
        patcher = patch('teleprompt.ui.get_terminal_size', return_value=(80, 24))
        patcher.start()
        self.addCleanup(patcher.stop)
        input_handler.load_keyboard_shortcuts()
        self.scheduler = SimulatedScheduler()
        self.prompter = Teleprompter(self.content, title="Test card", scheduler=self.scheduler)
        self.engine = self.prompter.engine
        self.addCleanup(self.engine.close)


class TestLayout(unittest.TestCase):
    """Test cases for word wrapping."""

    def test_text_area(self):
        self.assertEqual(ui.get_text_area(False, 80, 24), (5, 2, 70, 19))
        self.assertEqual(ui.get_text_area(True, 80, 24), (0, 0, 80, 24))

    def test_wraps_at_width(self):
        lines, token_lines = ui.layout_tokens(tokenize("aa bb cc"), 5)
        self.assertEqual(lines, [[(0, 0), (3, 2)], [(0, 4)]])
        self.assertEqual(token_lines[4], 1)

    def test_newlines_start_lines(self):
        lines, token_lines = ui.layout_tokens(tokenize("one\n\ntwo three"), 40)
        self.assertEqual(lines, [[(0, 0)], [], [(0, 2), (4, 4)]])
        self.assertEqual(token_lines[2], 2)

    def test_long_word_gets_own_line(self):
        lines, _ = ui.layout_tokens(tokenize("a supercalifragilistic b"), 10)
        self.assertEqual(lines, [[(0, 0)], [(0, 2)], [(0, 4)]])

    def test_progress_bar(self):
        self.assertEqual(ui.format_progress_bar(50, width=4), "▓▓░░")
        self.assertEqual(ui.format_progress_bar(0, width=3), "░░░")


class TestClicks(PrompterTestCase):
    """Test cases for mapping mouse clicks to words and pace."""

    def test_click_on_words(self):
        # Text starts at row 3, column 6 (1-based) inside the panel
        self.assertEqual(ui.token_at_click(self.prompter, 6, 3), 0)
        self.assertEqual(ui.token_at_click(self.prompter, 10, 3), 0)
        self.assertEqual(ui.token_at_click(self.prompter, 12, 3), 2)

    def test_click_on_space_or_outside(self):
        self.assertIsNone(ui.token_at_click(self.prompter, 11, 3))
        self.assertIsNone(ui.token_at_click(self.prompter, 40, 3))
        self.assertIsNone(ui.token_at_click(self.prompter, 6, 4))
        self.assertIsNone(ui.token_at_click(self.prompter, 1, 1))

    def test_click_in_fullscreen(self):
        self.prompter.handle_command(Command.TOGGLE_FULLSCREEN)
        self.assertEqual(ui.token_at_click(self.prompter, 1, 1), 0)
        self.assertEqual(ui.token_at_click(self.prompter, 7, 1), 2)

    def test_pace_slider(self):
        start = ui.pace_slider_start(self.prompter)
        self.assertEqual(ui.pace_at_click(self.prompter, start + 1, 24), 30)
        self.assertEqual(ui.pace_at_click(self.prompter, start + 20, 24), 300)
        self.assertIsNone(ui.pace_at_click(self.prompter, start, 24))
        self.assertIsNone(ui.pace_at_click(self.prompter, start + 21, 24))
        self.assertIsNone(ui.pace_at_click(self.prompter, start + 1, 23))

    def test_no_pace_slider_in_fullscreen(self):
        self.prompter.handle_command(Command.TOGGLE_FULLSCREEN)
        start = ui.pace_slider_start(self.prompter)
        self.assertIsNone(ui.pace_at_click(self.prompter, start + 1, 24))


class TestHandleCommand(PrompterTestCase):
    """Test cases for commands posted to a session."""

    def test_toggle_play(self):
        self.prompter.handle_command(Command.TOGGLE_PLAY)
        self.assertTrue(self.engine.is_playing)
        self.assertEqual(len(self.scheduler.active()), 1)
        self.scheduler.advance(500)
        self.assertEqual(self.engine.position, 2)

    def test_click_jumps_and_pauses(self):
        self.prompter.handle_command(Command.TOGGLE_PLAY)
        self.prompter.handle_command(('click', (12, 3)))
        self.assertEqual(self.engine.position, 2)
        self.assertFalse(self.engine.is_playing)
        self.assertEqual(self.scheduler.active(), [])

    def test_click_on_slider_sets_pace(self):
        start = ui.pace_slider_start(self.prompter)
        self.prompter.handle_command(('click', (start + 20, 24)))
        self.assertEqual(self.engine.wpm, 300)

    def test_pace_and_jump(self):
        self.prompter.handle_command(('pace', 200))
        self.assertEqual(self.engine.wpm, 200)
        self.prompter.handle_command(('jump', 2))
        self.assertEqual(self.engine.position, 2)
        self.prompter.handle_command(('jump', 1))
        self.assertEqual(self.engine.position, 2)

    def test_pace_keys(self):
        self.prompter.handle_command(Command.PACE_UP)
        self.assertEqual(self.engine.wpm, 130)
        self.prompter.handle_command(Command.PACE_DOWN)
        self.assertEqual(self.engine.wpm, 120)

    def test_close_leaves_fullscreen_first(self):
        self.prompter.handle_command(Command.TOGGLE_FULLSCREEN)
        self.assertTrue(self.prompter.fullscreen)
        self.prompter.handle_command(Command.CLOSE)
        self.assertFalse(self.prompter.fullscreen)
        self.assertTrue(self.prompter.running)
        self.prompter.handle_command(Command.CLOSE)
        self.assertFalse(self.prompter.running)
        self.assertFalse(self.prompter.quit_requested)

    def test_quit(self):
        self.prompter.handle_command(Command.QUIT)
        self.assertFalse(self.prompter.running)
        self.assertTrue(self.prompter.quit_requested)

    def test_cycle_highlight(self):
        self.assertEqual(self.prompter.highlight_mode, 1)
        self.prompter.handle_command(Command.CYCLE_HIGHLIGHT)
        self.assertEqual(self.prompter.highlight_mode, 2)
        self.prompter.handle_command(Command.CYCLE_HIGHLIGHT)
        self.assertEqual(self.prompter.highlight_mode, 0)

    def test_engine_change_requests_render(self):
        self.prompter.render_needed = False
        self.prompter.follow_enabled = False
        self.engine.start()
        self.assertTrue(self.prompter.render_needed)
        self.assertTrue(self.prompter.follow_enabled)

    def test_click_resolves_to_jump_and_pace(self):
        with patch.object(self.prompter, 'handle_command', wraps=self.prompter.handle_command) as handle:
            handle(('click', (12, 3)))
            start = ui.pace_slider_start(self.prompter)
            handle(('click', (start + 1, 24)))
        posted = [c.args[0] for c in handle.call_args_list]
        self.assertIn(('jump', 2), posted)
        self.assertIn(('pace', 30), posted)
        self.assertEqual(self.engine.wpm, 30)

    def test_click_on_empty_space_changes_nothing(self):
        with patch.object(self.prompter, 'handle_command', wraps=self.prompter.handle_command) as handle:
            handle(('click', (40, 10)))
        self.assertEqual(handle.call_count, 1)
        self.assertIsNone(self.engine.position)


class TestScrolling(PrompterTestCase):
    """Test cases for keeping the current word in view."""

    content = "\n".join(f"w{i}" for i in range(100))

    def test_follows_current_word(self):
        # Word 50 is token 100, on line 50; the text area is 19 lines tall
        self.prompter.handle_command(('jump', 100))
        self.assertEqual(self.prompter.scroll_offset, 50 - 19 // 2)

    def test_follow_clamped_at_end(self):
        self.prompter.handle_command(('jump', 198))
        self.assertEqual(self.prompter.scroll_offset, 100 - 19)

    def test_reset_scrolls_to_top(self):
        self.prompter.handle_command(('jump', 100))
        self.prompter.handle_command(Command.RESET)
        self.assertEqual(self.prompter.scroll_offset, 0)

    def test_wheel_scrolls_and_stops_following(self):
        self.prompter.handle_command(('wheel', WHEEL_DOWN))
        self.assertEqual(self.prompter.scroll_offset, 3)
        self.assertFalse(self.prompter.follow_enabled)
        self.prompter.handle_command(('wheel', WHEEL_UP))
        self.prompter.handle_command(('wheel', WHEEL_UP))
        self.assertEqual(self.prompter.scroll_offset, 0)

    def test_word_move_resumes_following(self):
        self.prompter.handle_command(('wheel', WHEEL_DOWN))
        self.prompter.handle_command(('jump', 100))
        self.assertTrue(self.prompter.follow_enabled)
        self.assertEqual(self.prompter.scroll_offset, 41)


class TestRendering(PrompterTestCase):
    """Test cases for drawing the session."""

    def test_status_line(self):
        line = ui.get_status_line(self.prompter, 120).plain
        self.assertIn("PAUSED", line)
        self.assertIn("120 wpm", line)
        self.assertIn("play", line)
        self.assertEqual(cell_len(line), 120)

    def test_visible_content(self):
        lines = ui.get_visible_content(self.prompter)
        self.assertEqual(len(lines), 19)
        self.assertEqual(lines[0].plain, "Hello world")

    def test_current_word_style(self):
        self.engine.start()
        line = ui.render_line(self.prompter, self.prompter.document_lines[0], self.engine.token_states())
        styles = {line.plain[span.start:span.end]: str(span.style) for span in line.spans}
        self.assertEqual(styles["Hello"], ui.COLORS.WORD_CURRENT)
        self.assertEqual(styles["world"], ui.COLORS.WORD_AFTER)

    def test_display_ui_writes_screen(self):
        with patch('sys.stdout', new_callable=io.StringIO) as stdout:
            ui.display_ui(self.prompter)
        output = stdout.getvalue()
        self.assertIn("Hello", output)
        self.assertIn("Test card", output)

    def test_title_fits_width(self):
        title = ui._get_title(self.prompter, 80)
        self.assertTrue(title.startswith("Test card "))
        self.assertEqual(cell_len(title), 74)

    def test_wide_title_truncated_by_cells(self):
        self.prompter.title = "日本語のテキスト" * 10
        title = ui._get_title(self.prompter, 80)
        self.assertIn("...", title)
        self.assertEqual(cell_len(title), 74)


class TestRun(unittest.TestCase):
    """Test cases for the session loop."""

    @patch('teleprompt.ui.display_ui')
    @patch('sys.stdout', new_callable=io.StringIO)
    @patch('sys.stdin')
    def test_quit_ends_run(self, mock_stdin, mock_stdout, mock_display):
        mock_stdin.isatty.return_value = False

        async def run():
            prompter = Teleprompter("Hello world")
            prompter.post_command(Command.TOGGLE_PLAY)
            prompter.post_command(Command.QUIT)
            quit_requested = await prompter.run()
            return prompter, quit_requested

        prompter, quit_requested = asyncio.run(run())
        self.assertTrue(quit_requested)
        self.assertFalse(prompter.engine.is_playing)
        self.assertEqual(prompter.scheduler.active(), [])

    @patch('teleprompt.ui.display_ui')
    @patch('sys.stdout', new_callable=io.StringIO)
    @patch('sys.stdin')
    def test_close_ends_run(self, mock_stdin, mock_stdout, mock_display):
        mock_stdin.isatty.return_value = False

        async def run():
            prompter = Teleprompter("Hello world")
            prompter.post_command(Command.CLOSE)
            return await prompter.run()

        self.assertFalse(asyncio.run(run()))

    @patch('teleprompt.ui.display_ui')
    @patch('sys.stdout', new_callable=io.StringIO)
    @patch('sys.stdin')
    def test_teardown_cancels_session_timers(self, mock_stdin, mock_stdout, mock_display):
        mock_stdin.isatty.return_value = False
        scheduler = SimulatedScheduler()

        async def run():
            prompter = Teleprompter("Hello world", scheduler=scheduler)
            prompter.engine.start()
            other = scheduler.schedule(100, lambda: None)
            prompter.post_command(Command.CLOSE)
            await prompter.run()
            return prompter, other

        prompter, other = asyncio.run(run())
        self.assertTrue(other.cancelled)
        self.assertEqual(scheduler.active(), [])
        self.assertNotIn(prompter._on_engine_change, prompter.engine._listeners)


if __name__ == "__main__":
    unittest.main()
