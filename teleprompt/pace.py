"""Reading pace (words per minute) for the Teleprompt reader."""

import math

from . import config


class PaceController:
    """
    Holds the target reading speed and derives the word interval from it.

    Out-of-range values are clamped to [MIN_WPM, MAX_WPM], never rejected.
    """

    def __init__(self, wpm: int = config.DEFAULT_WPM,
                 min_wpm: int = config.MIN_WPM, max_wpm: int = config.MAX_WPM):
        self.min_wpm = min_wpm
        self.max_wpm = max_wpm
        self._wpm = self._clamp(wpm)

    @property
    def wpm(self) -> int:
        return self._wpm

    def _clamp(self, value) -> int:
        return max(self.min_wpm, min(self.max_wpm, int(value)))

    def set_pace(self, value) -> int:
        """Set the pace, clamped to the allowed range, and return it."""
        self._wpm = self._clamp(value)
        return self._wpm

    def increase(self, step: int = config.PACE_STEP) -> int:
        return self.set_pace(self._wpm + step)

    def decrease(self, step: int = config.PACE_STEP) -> int:
        return self.set_pace(self._wpm - step)

    def interval_ms(self) -> int:
        """Milliseconds each word stays current; halves round up."""
        return math.floor(60000 / self._wpm + 0.5)

    def fraction(self) -> float:
        """Position of the current pace within the allowed range, 0.0 to 1.0."""
        span = self.max_wpm - self.min_wpm
        if span <= 0:
            return 1.0
        return (self._wpm - self.min_wpm) / span
