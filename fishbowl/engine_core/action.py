"""
Action System - Actions, payloads, and results.

Actions represent:
1. Host setup (team names, player count, timers, restarts)
2. Word entry (one submission per player)
3. Turn play (start, guessed, passed, undo, timer ticks)
4. Screen acknowledgements (handoffs, time up, round proceed)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import TeamId


class ActionType(Enum):
    """Types of actions the reducer accepts."""
    # Host setup (pre-game only)
    HOST_SET_TEAM_NAME = "HOST_SET_TEAM_NAME"
    HOST_SET_PLAYER_COUNT = "HOST_SET_PLAYER_COUNT"
    HOST_SET_TIMER = "HOST_SET_TIMER"
    HOST_START_WORD_ENTRY = "HOST_START_WORD_ENTRY"

    # Word entry
    ENTRY_SUBMIT_PLAYER = "ENTRY_SUBMIT_PLAYER"
    ENTRY_ACK_HANDOFF = "ENTRY_ACK_HANDOFF"
    READY_START_ROUND1 = "READY_START_ROUND1"

    # Turn play
    HANDOFF_ACK = "HANDOFF_ACK"
    TURN_START = "TURN_START"
    TURN_SYNC_TIMER = "TURN_SYNC_TIMER"
    TURN_GUESSED = "TURN_GUESSED"
    TURN_PASSED = "TURN_PASSED"
    TURN_UNDO = "TURN_UNDO"
    TIME_UP_ACK = "TIME_UP_ACK"
    ROUND_PROCEED = "ROUND_PROCEED"

    # Host restarts
    HOST_RESTART_ROUND = "HOST_RESTART_ROUND"
    HOST_RESTART_GAME = "HOST_RESTART_GAME"


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    Validation happens in the reducer.
    """
    team_id: TeamId | None = None
    name: str | None = None  # Team name
    player_count: int | None = None
    round: int | None = None
    seconds: int | None = None

    # Word entry
    player_name: str | None = None
    items: tuple[str, ...] = ()

    # Timer sync
    now_ms: int | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    Actions are applied one at a time, atomically, by the reducer.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def set_team_name(cls, team_id: TeamId, name: str) -> Action:
        return cls(ActionType.HOST_SET_TEAM_NAME, ActionPayload(team_id=team_id, name=name))

    @classmethod
    def set_player_count(cls, player_count: int) -> Action:
        return cls(ActionType.HOST_SET_PLAYER_COUNT, ActionPayload(player_count=player_count))

    @classmethod
    def set_timer(cls, round: int, seconds: int) -> Action:
        return cls(ActionType.HOST_SET_TIMER, ActionPayload(round=round, seconds=seconds))

    @classmethod
    def start_word_entry(cls) -> Action:
        return cls(ActionType.HOST_START_WORD_ENTRY)

    @classmethod
    def submit_player(cls, player_name: str, team_id: TeamId, items: list[str] | tuple[str, ...]) -> Action:
        """Factory for a player's word entry (three items)."""
        return cls(
            ActionType.ENTRY_SUBMIT_PLAYER,
            ActionPayload(player_name=player_name, team_id=team_id, items=tuple(items)),
        )

    @classmethod
    def ack_entry_handoff(cls) -> Action:
        return cls(ActionType.ENTRY_ACK_HANDOFF)

    @classmethod
    def start_round1(cls) -> Action:
        return cls(ActionType.READY_START_ROUND1)

    @classmethod
    def ack_turn_handoff(cls) -> Action:
        return cls(ActionType.HANDOFF_ACK)

    @classmethod
    def start_turn(cls) -> Action:
        return cls(ActionType.TURN_START)

    @classmethod
    def sync_timer(cls, now_ms: int) -> Action:
        """Factory for a timer tick carrying the current wall-clock reading."""
        return cls(ActionType.TURN_SYNC_TIMER, ActionPayload(now_ms=now_ms))

    @classmethod
    def guessed(cls) -> Action:
        return cls(ActionType.TURN_GUESSED)

    @classmethod
    def passed(cls) -> Action:
        return cls(ActionType.TURN_PASSED)

    @classmethod
    def undo(cls) -> Action:
        return cls(ActionType.TURN_UNDO)

    @classmethod
    def ack_time_up(cls) -> Action:
        return cls(ActionType.TIME_UP_ACK)

    @classmethod
    def proceed_round(cls) -> Action:
        return cls(ActionType.ROUND_PROCEED)

    @classmethod
    def restart_round(cls) -> Action:
        return cls(ActionType.HOST_RESTART_ROUND)

    @classmethod
    def restart_game(cls) -> Action:
        return cls(ActionType.HOST_RESTART_GAME)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    new_state is always set: on failure it is either the untouched input
    state (ignored action) or the input state with last_error set.
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    # Human-readable changes, for logs and UI
    state_changes: list[str] = field(default_factory=list)

    @property
    def ignored(self) -> bool:
        """True when the action was dropped as stale (screen mismatch)."""
        return self.error_code == "PRECONDITION_FAILED"

    @classmethod
    def failure(cls, error: str, state: Any, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(cls, state: Any, changes: list[str] | None = None) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, state_changes=changes or [])
