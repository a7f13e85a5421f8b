"""
Session Module - The live game on the host device.

A session:
- Holds the single live GameState
- Serializes actions from the UI and the timer into the reducer
- Saves the snapshot while a game is in progress
- Offers a saved game for resuming at startup
- Notifies observers (audio, wake lock) of state changes
"""

from .manager import GameSession, ResumeOffer, is_in_progress
from .ticker import TimerTicker, DEFAULT_TICK_INTERVAL_MS

__all__ = [
    "GameSession",
    "ResumeOffer",
    "is_in_progress",
    "TimerTicker",
    "DEFAULT_TICK_INTERVAL_MS",
]
