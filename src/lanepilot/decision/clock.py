"""
Clocks

Time sources for the controller. The controller never reads the system clock
directly, so a recorded run can be replayed and tests can step time by hand.
"""

import time

from lanepilot.core.interfaces import Clock


class SystemClock(Clock):
    """Monotonic wall time."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0


class ManualClock(Clock):
    """
    Clock that only moves when told to.

    Usage:
        clock = ManualClock()
        clock.advance(150)   # 150 ms later
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)

    def now_ms(self) -> float:
        return self._now

    def advance(self, ms: float) -> float:
        if ms < 0:
            raise ValueError("ManualClock can not go backwards")
        self._now += ms
        return self._now

    def set(self, now_ms: float) -> float:
        if now_ms < self._now:
            raise ValueError("ManualClock can not go backwards")
        self._now = float(now_ms)
        return self._now
