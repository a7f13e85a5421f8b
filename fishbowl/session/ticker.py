"""
Timer Ticker - The periodic wall-clock poll that drives turn timers.

The engine has no background timers of its own. While a turn runs, the
ticker feeds TURN_SYNC_TIMER with the current time every interval;
remaining time is recomputed from the turn's end epoch on each tick, so a
host device that sleeps and wakes loses no accuracy.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging
import threading

from ..engine_core.state import Screen

if TYPE_CHECKING:
    from .manager import GameSession


logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_MS = 250


class TimerTicker:
    """
    Background thread calling session.tick().

    Ticks outside an active turn are skipped; the reducer would ignore
    them anyway.
    """

    def __init__(self, session: GameSession, interval_ms: int = DEFAULT_TICK_INTERVAL_MS):
        if interval_ms <= 0:
            raise ValueError("Tick interval must be positive")
        self.session = session
        self.interval_ms = interval_ms
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="fishbowl-ticker", daemon=True)
        self._thread.start()
        logger.info("Timer ticker started (%d ms)", self.interval_ms)

    def stop(self, timeout: float | None = 1.0):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logger.info("Timer ticker stopped")

    def tick_once(self) -> bool:
        """Tick if a turn is running. Returns whether a tick was sent."""
        if self.session.state.screen is not Screen.TURN_ACTIVE:
            return False
        self.session.tick()
        return True

    def _run(self):
        while not self._stop.wait(self.interval_ms / 1000):
            try:
                self.tick_once()
            except Exception:
                logger.exception("Timer tick failed")
