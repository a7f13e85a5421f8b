"""
Engine Core - Deterministic fishbowl game state machine.

The engine is the runtime that:
1. Holds the immutable GameState model
2. Validates and normalizes word entries
3. Serves items from per-round primary/deferred pools
4. Tracks scores and the bounded undo stack
5. Applies actions via the reducer and appends to the event log
"""

from .state import (
    GameState,
    Screen,
    TeamId,
    Team,
    Player,
    Item,
    RoundPools,
    RoundScores,
    ScoresByRound,
    TimerSettings,
    Carryover,
    UndoEntry,
    UndoKind,
    GameEvent,
    EventType,
    create_new_game_state,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer, apply_action
from .pools import PoolEngine
from .normalize import normalize_item_text, NormalizedText
from .shuffle import EntropySource, SystemEntropy, SeededEntropy, shuffled
from .clock import Clock, SystemClock, ManualClock, NonDecreasingClock
from .scoring import FinalResults, final_results
from .errors import FishbowlError, ValidationError, PreconditionError, NothingToUndoError

__all__ = [
    "GameState",
    "Screen",
    "TeamId",
    "Team",
    "Player",
    "Item",
    "RoundPools",
    "RoundScores",
    "ScoresByRound",
    "TimerSettings",
    "Carryover",
    "UndoEntry",
    "UndoKind",
    "GameEvent",
    "EventType",
    "create_new_game_state",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "apply_action",
    "PoolEngine",
    "normalize_item_text",
    "NormalizedText",
    "EntropySource",
    "SystemEntropy",
    "SeededEntropy",
    "shuffled",
    "Clock",
    "SystemClock",
    "ManualClock",
    "NonDecreasingClock",
    "FinalResults",
    "final_results",
    "FishbowlError",
    "ValidationError",
    "PreconditionError",
    "NothingToUndoError",
]
