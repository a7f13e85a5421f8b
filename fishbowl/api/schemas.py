"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between the host UI and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- VALIDATION_ERROR: Word entry or round start rejected (shown to the host)
- NOTHING_TO_UNDO: Undo requested with nothing undoable this round
- PRECONDITION_FAILED: Action not valid on the current screen (ignored)
- INVALID_ACTION: Action request is missing required fields
- NO_SAVED_GAME: There is no saved game to resume
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOTHING_TO_UNDO = "NOTHING_TO_UNDO"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    INVALID_ACTION = "INVALID_ACTION"
    NO_SAVED_GAME = "NO_SAVED_GAME"


class ActionName(str, Enum):
    """Action types accepted by POST /actions."""
    HOST_SET_TEAM_NAME = "HOST_SET_TEAM_NAME"
    HOST_SET_PLAYER_COUNT = "HOST_SET_PLAYER_COUNT"
    HOST_SET_TIMER = "HOST_SET_TIMER"
    HOST_START_WORD_ENTRY = "HOST_START_WORD_ENTRY"
    ENTRY_SUBMIT_PLAYER = "ENTRY_SUBMIT_PLAYER"
    ENTRY_ACK_HANDOFF = "ENTRY_ACK_HANDOFF"
    READY_START_ROUND1 = "READY_START_ROUND1"
    HANDOFF_ACK = "HANDOFF_ACK"
    TURN_START = "TURN_START"
    TURN_SYNC_TIMER = "TURN_SYNC_TIMER"
    TURN_GUESSED = "TURN_GUESSED"
    TURN_PASSED = "TURN_PASSED"
    TURN_UNDO = "TURN_UNDO"
    TIME_UP_ACK = "TIME_UP_ACK"
    ROUND_PROCEED = "ROUND_PROCEED"
    HOST_RESTART_ROUND = "HOST_RESTART_ROUND"
    HOST_RESTART_GAME = "HOST_RESTART_GAME"


class TeamName(str, Enum):
    A = "A"
    B = "B"


class EventName(str, Enum):
    """Event log entry types, for filtering GET /events."""
    ROUND_STARTED = "ROUND_STARTED"
    TURN_STARTED = "TURN_STARTED"
    WORD_GUESSED = "WORD_GUESSED"
    WORD_PASSED = "WORD_PASSED"
    UNDO = "UNDO"
    TIME_UP = "TIME_UP"
    ROUND_COMPLETED = "ROUND_COMPLETED"


# =============================================================================
# Requests
# =============================================================================

class ActionRequest(BaseModel):
    """
    One UI action.

    Only the fields used by the given action type are read.
    """
    type: ActionName
    team_id: Optional[TeamName] = None
    name: Optional[str] = Field(None, description="Team name")
    player_count: Optional[int] = None
    round: Optional[int] = Field(None, ge=1, le=3)
    seconds: Optional[int] = None
    player_name: Optional[str] = None
    items: Optional[list[str]] = Field(None, description="Exactly three items")
    now_ms: Optional[int] = Field(None, description="Clock reading for TURN_SYNC_TIMER")


class TickRequest(BaseModel):
    now_ms: Optional[int] = Field(None, description="Defaults to the server clock")


# =============================================================================
# Shared Models
# =============================================================================

class TeamInfo(BaseModel):
    team_id: TeamName
    name: str
    total_score: int = 0


class PlayerInfo(BaseModel):
    player_id: str
    name: str
    team_id: TeamName
    entry_index: int


class ItemInfo(BaseModel):
    item_id: str
    text: str


class TimerSettingsInfo(BaseModel):
    round1_seconds: int
    round2_seconds: int
    round3_seconds: int


class RoundScoreInfo(BaseModel):
    round: int
    round_name: str
    a: int = 0
    b: int = 0


class CarryoverInfo(BaseModel):
    seconds: int
    team_id: TeamName


class EventInfo(BaseModel):
    event_id: str
    timestamp_ms: int
    type: str
    round: Optional[int] = None
    team: Optional[TeamName] = None
    item_id: Optional[str] = None
    item_text: Optional[str] = None
    points_delta: Optional[int] = None
    note: Optional[str] = None


# =============================================================================
# Responses
# =============================================================================

class GameStateResponse(BaseModel):
    """
    The host's view of the game.

    current_item is only filled while a turn is running.
    """
    screen: str
    teams: list[TeamInfo]
    player_count: int
    timer_settings: TimerSettingsInfo
    entry_index: int
    players: list[PlayerInfo] = Field(default_factory=list)
    item_count: int = 0

    current_round: Optional[int] = None
    round_name: Optional[str] = None
    current_team_turn: TeamName
    current_item: Optional[ItemInfo] = None
    items_remaining: Optional[int] = None

    scores: list[RoundScoreInfo] = Field(default_factory=list)
    timer_seconds_remaining: Optional[int] = None
    turn_duration_seconds: Optional[int] = None
    turn_end_epoch_ms: Optional[int] = None
    carryover: Optional[CarryoverInfo] = None
    pending_carryover_seconds: Optional[int] = None

    can_undo: bool = False
    last_error: Optional[str] = None


class ActionResponse(BaseModel):
    success: bool
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    changes: list[str] = Field(default_factory=list)
    state: GameStateResponse


class EventsResponse(BaseModel):
    events: list[EventInfo]
    count: int


class ResultsResponse(BaseModel):
    """Per-round scores, totals and the winner (None on a tie)."""
    rounds: list[RoundScoreInfo]
    teams: list[TeamInfo]
    winner: Optional[TeamName] = None
    winner_name: Optional[str] = None
    is_tie: bool
    is_final: bool


class ResumeOfferResponse(BaseModel):
    saved_at_ms: int
    screen: str
    current_round: Optional[int] = None
    player_count: int
    players_entered: int
    item_count: int


class ErrorResponse(BaseModel):
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    environment: str
