"""Playback state machine for the Teleprompt reader."""

import logging
from enum import Enum
from typing import Callable, List, Optional

from . import config
from .pace import PaceController
from .progress import calculate_progress, classify_tokens
from .scheduler import SchedulerBase
from .tokenizer import tokenize
from .word_index import NONE, WordIndex


class PlayState(Enum):
    PAUSED = "paused"
    PLAYING = "playing"


class PlaybackEngine:
    """
    Paces one piece of content word by word.

    The engine owns the token sequence, the word index, the current position,
    the play state, the pace and the single repeating timer of one session.
    Every transition that pauses, jumps or reschedules cancels the pending
    timer first so that no stale tick can fire afterwards. Invalid commands
    (navigation past either end, jumps onto whitespace, anything on empty
    content) are silent no-ops.

    Listeners registered with add_listener() are called with the engine after
    each state change; the engine knows nothing about how it is displayed.
    """

    def __init__(self, content: str, scheduler: SchedulerBase,
                 pace: Optional[PaceController] = None, wpm: int = config.DEFAULT_WPM):
        self.content = content
        self.tokens = tokenize(content)
        self.word_index = WordIndex(self.tokens)
        self.pace = pace if pace is not None else PaceController(wpm)
        self.scheduler = scheduler
        self.position: Optional[int] = NONE
        self.play_state = PlayState.PAUSED
        self._timer = None
        self._listeners: List[Callable[["PlaybackEngine"], None]] = []
        logging.debug(f"Session created with {len(self.tokens)} tokens, {self.word_index.total()} words")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def is_playing(self) -> bool:
        return self.play_state is PlayState.PLAYING

    @property
    def wpm(self) -> int:
        return self.pace.wpm

    def add_listener(self, callback: Callable[["PlaybackEngine"], None]):
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[["PlaybackEngine"], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    def _cancel_timer(self):
        if self._timer is not None:
            self.scheduler.cancel(self._timer)
            self._timer = None

    def _schedule_timer(self):
        self._cancel_timer()
        self._timer = self.scheduler.schedule(self.pace.interval_ms(), self.on_tick)

    def start(self):
        """Start or resume playback from the current word (the first word if not started)."""
        if self.word_index.total() == 0:
            return
        if self.position is NONE:
            self.position = self.word_index.first()
        self.play_state = PlayState.PLAYING
        self._schedule_timer()
        logging.debug(f"Playing from token {self.position} at {self.pace.wpm} wpm")
        self._notify()

    def pause(self):
        was_playing = self.is_playing
        self._cancel_timer()
        self.play_state = PlayState.PAUSED
        if was_playing:
            logging.debug(f"Paused at token {self.position}")
            self._notify()

    def toggle(self):
        if self.is_playing:
            self.pause()
        else:
            self.start()

    def on_tick(self):
        """Advance to the next word; pause at the end of the content."""
        if not self.is_playing:
            return
        if self.position == self.word_index.last():
            self.pause()
            return
        self.position = self.word_index.next(self.position)
        self._notify()

    def reset(self):
        changed = self.is_playing or self.position is not NONE
        self._cancel_timer()
        self.position = NONE
        self.play_state = PlayState.PAUSED
        if changed:
            logging.debug("Playback reset")
            self._notify()

    def jump_to(self, token_index: int):
        """Make a word current and stop autoplay. Ignored for non-word tokens."""
        if self.word_index.position_of(token_index) < 0:
            return
        self._cancel_timer()
        self.position = token_index
        self.play_state = PlayState.PAUSED
        self._notify()

    def step_forward(self):
        self._step(self.word_index.next)

    def step_backward(self):
        self._step(self.word_index.previous)

    def _step(self, neighbour):
        if self.position is NONE:
            return
        target = neighbour(self.position)
        if target is NONE:
            return
        self.position = target
        self._notify()

    def on_pace_change(self, new_wpm: int):
        """
        Change the pace. While playing, the timer is restarted at the new
        interval, so the wait for the next word starts over. A value that
        clamps to the current pace changes nothing.
        """
        old_wpm = self.pace.wpm
        if self.pace.set_pace(new_wpm) == old_wpm:
            return
        if self.is_playing:
            self._schedule_timer()
        logging.debug(f"Pace changed from {old_wpm} to {self.pace.wpm} wpm")
        self._notify()

    def close(self):
        """End the session: cancel any pending timer and drop listeners."""
        self._cancel_timer()
        self.play_state = PlayState.PAUSED
        self._listeners.clear()

    def progress(self) -> float:
        return calculate_progress(self.word_index, self.position)

    def token_states(self):
        return classify_tokens(self.tokens, self.word_index, self.position)

    def current_word(self) -> Optional[str]:
        if self.position is NONE:
            return None
        return self.tokens[self.position].text
