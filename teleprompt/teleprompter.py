import asyncio
import logging
import signal
import sys

from rich.console import Console

from . import config, input_handler, ui
from .commands import Command, apply_command
from .engine import PlaybackEngine
from .scheduler import AsyncioScheduler


class Teleprompter:
    """
    Terminal host for one playback session.

    Every input (keys, clicks, slider, resize) is posted to a single asyncio
    queue and handled in order by run(), so the engine only ever sees one
    mutation at a time. The engine tells the host when its state changes;
    the host scrolls the current word into view and repaints.
    """

    def __init__(self, content, title="Teleprompt", wpm=config.DEFAULT_WPM, scheduler=None):
        self.console = Console()
        self.loop = None
        self.title = title
        self.scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self.engine = PlaybackEngine(content, self.scheduler, wpm=wpm)
        self.engine.add_listener(self._on_engine_change)

        self._initialize_state()
        self._initialize_ui_state()
        ui.update_document_layout(self)

    def _initialize_state(self):
        """Initialize basic session state."""
        self.running = True
        self.quit_requested = False
        self.command_queue = asyncio.Queue()
        self.ui_update_task = None
        self.input_fd = None
        self.input_decoder = input_handler.InputDecoder()

    def _initialize_ui_state(self):
        """Initialize UI and interaction state."""
        self.ui_update_interval = config.UI_UPDATE_INTERVAL
        self.fullscreen = config.UI_COMPLEXITY_MODE == 0
        self.highlight_mode = config.WORD_HIGHLIGHT_MODE
        self.scroll_offset = 0
        self.follow_enabled = True
        self.document_lines = []
        self.token_lines = []
        self.layout_width = 0
        self.render_needed = True

    def _on_engine_change(self, engine: PlaybackEngine):
        self.follow_enabled = True
        ui.follow_position(self)
        self.render_needed = True

    def post_command(self, cmd):
        self.command_queue.put_nowait(cmd)

    def _post_command_sync(self, cmd):
        if self.loop and self.loop.is_running():
            self.loop.call_soon_threadsafe(self.post_command, cmd)

    def handle_command(self, cmd):
        """Apply one queued command to the session."""
        if isinstance(cmd, tuple):
            command_name, data = cmd
            if command_name == 'click':
                pace = ui.pace_at_click(self, *data)
                if pace is not None:
                    self.handle_command(('pace', pace))
                    return
                token_index = ui.token_at_click(self, *data)
                if token_index is not None:
                    self.handle_command(('jump', token_index))
                    return
            elif command_name == 'pace':
                self.engine.on_pace_change(data)
            elif command_name == 'jump':
                self.engine.jump_to(data)
            elif command_name == 'wheel':
                ui.scroll_by(self, data * 3)
            self.render_needed = True
            return

        if cmd == '_resize':
            ui.update_document_layout(self)
            if self.follow_enabled:
                ui.follow_position(self)
        elif cmd is Command.QUIT:
            self.quit_requested = True
            self.running = False
        elif cmd is Command.CLOSE:
            if self.fullscreen:
                self._set_fullscreen(False)
            else:
                self.running = False
        elif cmd is Command.TOGGLE_FULLSCREEN:
            self._set_fullscreen(not self.fullscreen)
        elif cmd is Command.CYCLE_HIGHLIGHT:
            # 0=off, 1=normal, 2=standout
            self.highlight_mode = (self.highlight_mode + 1) % 3
        else:
            apply_command(self.engine, cmd)
        self.render_needed = True

    def _set_fullscreen(self, enabled):
        self.fullscreen = enabled
        ui.update_document_layout(self)
        ui.follow_position(self)

    def _handle_resize(self, signum, frame):
        self._post_command_sync('_resize')

    def _handle_exit_signal(self, signum, frame):
        self._post_command_sync(Command.QUIT)

    async def _ui_update_loop(self):
        while self.running:
            try:
                if self.render_needed:
                    self.render_needed = False
                    ui.display_ui(self)
                await asyncio.sleep(self.ui_update_interval)
            except asyncio.CancelledError:
                break

    async def run(self):
        """
        Run the session until it is closed.

        Returns:
            bool: True if the user asked to quit the application rather than
            just close this session
        """
        self.loop = asyncio.get_running_loop()
        logging.info(f"Session started: {self.title} ({self.engine.word_index.total()} words)")

        with self.engine:
            try:
                if sys.stdin.isatty():
                    self.input_fd = sys.stdin.fileno()
                    self.loop.add_reader(self.input_fd, input_handler.process_input, self)

                signal.signal(signal.SIGWINCH, self._handle_resize)
                signal.signal(signal.SIGINT, self._handle_exit_signal)
                signal.signal(signal.SIGTERM, self._handle_exit_signal)

                self.ui_update_task = asyncio.create_task(self._ui_update_loop())

                while self.running:
                    cmd = await self.command_queue.get()
                    self.handle_command(cmd)
            finally:
                await self._shutdown()

        return self.quit_requested

    async def _shutdown(self):
        self.running = False
        self.engine.remove_listener(self._on_engine_change)
        self.engine.close()
        self.scheduler.cancel_all()
        signal.signal(signal.SIGWINCH, signal.SIG_DFL)
        signal.signal(signal.SIGINT, signal.default_int_handler)
        signal.signal(signal.SIGTERM, signal.SIG_DFL)

        if self.input_fd is not None:
            self.loop.remove_reader(self.input_fd)
            self.input_fd = None

        if self.ui_update_task and not self.ui_update_task.done():
            self.ui_update_task.cancel()
            try:
                await asyncio.wait_for(self.ui_update_task, timeout=1.0)
            except (asyncio.CancelledError, asyncio.TimeoutError):
                pass

        logging.info(f"Session closed: {self.title}")
        sys.stdout.write('\033[2J\033[H')
        sys.stdout.flush()
