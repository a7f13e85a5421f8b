"""
Wall-clock ports.

The engine never reads time on its own: the reducer asks its Clock, and
the turn timer is advanced by TURN_SYNC_TIMER actions carrying a reading.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import logging
import time


logger = logging.getLogger(__name__)


class Clock(ABC):
    """Supplies the current epoch time in milliseconds."""

    @abstractmethod
    def now_ms(self) -> int:
        ...


class SystemClock(Clock):
    def now_ms(self) -> int:
        return int(time.time() * 1000)


class ManualClock(Clock):
    """A clock that only moves when told to. For tests."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self._now = start_ms

    def now_ms(self) -> int:
        return self._now

    def advance(self, ms: int) -> int:
        self._now += ms
        return self._now

    def set(self, ms: int) -> int:
        self._now = ms
        return self._now


class NonDecreasingClock(Clock):
    """
    Wraps another clock so readings never go backwards.

    On a rewind (e.g. the host adjusting the device clock) the last
    reading is repeated until the wrapped clock catches up.
    """

    def __init__(self, inner: Clock):
        self.inner = inner
        self._last: int | None = None

    def now_ms(self) -> int:
        now = self.inner.now_ms()
        if self._last is not None and now < self._last:
            logger.warning("Clock went backwards by %d ms; holding at last reading", self._last - now)
            return self._last
        self._last = now
        return now
