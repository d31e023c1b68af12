"""
Millisecond clocks for the affect visibility window.

The engine only asks "what time is it" when an emotion changes or a
window is checked; it never sleeps.  ManualClock lets tests and the
simulate command advance time together with synchronous ticks.
"""

import time
from typing import Callable

from .config import TICK_SECONDS

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Wall-clock default: monotonic time in milliseconds."""
    return time.monotonic() * 1000.0


class ManualClock:
    """Clock advanced explicitly by the caller."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self.now_ms = float(start_ms)

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> float:
        if ms < 0:
            raise ValueError("ManualClock cannot run backwards")
        self.now_ms += ms
        return self.now_ms

    def advance_ticks(self, ticks: int = 1) -> float:
        """Advance by whole tick periods (1 s each)."""
        return self.advance(ticks * TICK_SECONDS * 1000.0)
