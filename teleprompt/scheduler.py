"""Repeating timer capability used by the playback engine."""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional


class TimerHandle:
    """A repeating timer created by a scheduler."""

    def __init__(self, delay_ms: int, callback: Callable[[], None]):
        self.delay_ms = delay_ms
        self.callback = callback
        self.cancelled = False

    def __repr__(self):
        state = "cancelled" if self.cancelled else "active"
        return f"<TimerHandle every {self.delay_ms}ms {state}>"


class SchedulerBase(ABC):
    """
    Abstract base class for timer schedulers.

    A scheduler creates repeating timers: the callback fires every delay_ms
    milliseconds until the timer is cancelled. The engine owns at most one
    timer at a time and cancels it before any state transition that would
    make a pending tick stale.
    """

    def __init__(self):
        self._active: List[TimerHandle] = []

    @abstractmethod
    def _arm(self, handle: TimerHandle):
        """Start counting down towards the handle's first fire."""
        pass

    @abstractmethod
    def _disarm(self, handle: TimerHandle):
        """Stop the pending countdown of the handle."""
        pass

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """
        Create a repeating timer.

        Args:
            delay_ms: Milliseconds between fires
            callback: Called with no arguments on every fire

        Returns:
            TimerHandle: Handle to pass to cancel()
        """
        handle = TimerHandle(delay_ms, callback)
        self._active.append(handle)
        self._arm(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]):
        """Cancel a timer. Cancelling twice or cancelling None is a no-op."""
        if handle is None or handle.cancelled:
            return
        handle.cancelled = True
        self._disarm(handle)
        if handle in self._active:
            self._active.remove(handle)

    def cancel_all(self):
        for handle in list(self._active):
            self.cancel(handle)

    def active(self) -> List[TimerHandle]:
        """Timers that have not been cancelled, oldest first."""
        return list(self._active)


class AsyncioScheduler(SchedulerBase):
    """
    Scheduler backed by the asyncio event loop.

    Each fire re-arms the timer with loop.call_later before running the
    callback, so a callback that cancels its own timer leaves nothing behind.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        super().__init__()
        self._loop = loop
        self._pending = {}

    def _get_loop(self):
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _arm(self, handle):
        loop = self._get_loop()
        self._pending[id(handle)] = loop.call_later(handle.delay_ms / 1000, self._fire, handle)

    def _disarm(self, handle):
        pending = self._pending.pop(id(handle), None)
        if pending:
            pending.cancel()

    def _fire(self, handle):
        self._pending.pop(id(handle), None)
        if handle.cancelled:
            return
        self._arm(handle)
        handle.callback()


class SimulatedScheduler(SchedulerBase):
    """
    Scheduler driven by a virtual millisecond clock.

    Nothing fires until advance() is called, which makes playback timing
    fully deterministic in tests.
    """

    def __init__(self):
        super().__init__()
        self.now_ms = 0
        self._queue = []
        self._due = {}
        self._order = itertools.count()

    def _arm(self, handle):
        due = self.now_ms + handle.delay_ms
        self._due[id(handle)] = due
        heapq.heappush(self._queue, (due, next(self._order), handle))

    def _disarm(self, handle):
        self._due.pop(id(handle), None)

    def due_in(self, handle: TimerHandle) -> Optional[int]:
        """Milliseconds until the handle next fires, or None if cancelled."""
        due = self._due.get(id(handle))
        return None if due is None else due - self.now_ms

    def advance(self, ms: int) -> int:
        """
        Move the clock forward, firing every timer that comes due.

        Args:
            ms: Milliseconds to advance

        Returns:
            int: Number of callbacks fired
        """
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled or self._due.get(id(handle)) != due:
                continue
            self.now_ms = due
            self._arm(handle)
            handle.callback()
            fired += 1
        self.now_ms = target
        return fired
