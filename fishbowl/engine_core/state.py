"""
Game State - The immutable snapshot the reducer operates on.

Design principles:
- Immutable: every transition returns a new GameState (frozen dataclasses,
  tuples for ordered collections)
- Serializable: the whole snapshot round-trips through the storage codec
- Single owner: exactly one live GameState per game session
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
import unicodedata


STATE_VERSION = 1
ROUNDS = (1, 2, 3)
FINAL_ROUND = 3
ITEMS_PER_PLAYER = 3

MIN_PLAYERS = 2
MAX_PLAYERS = 30
MIN_TURN_SECONDS = 5
MAX_TURN_SECONDS = 300


class Screen(Enum):
    """Screens of the game state machine, in play order."""
    HOST_SETUP = "hostSetup"
    WORD_ENTRY = "wordEntry"
    ENTRY_HANDOFF = "entryHandoff"
    READY = "ready"
    TURN_HANDOFF = "turnHandoff"
    TURN_START = "turnStart"
    TURN_ACTIVE = "turnActive"
    TIME_UP = "timeUp"
    ROUND_COMPLETE = "roundComplete"
    FINAL = "final"


class TeamId(Enum):
    """The two teams. There are never more."""
    A = "A"
    B = "B"

    @property
    def other(self) -> TeamId:
        return TeamId.B if self is TeamId.A else TeamId.A


class EventType(Enum):
    """Types of entries in the event log."""
    ROUND_STARTED = "ROUND_STARTED"
    TURN_STARTED = "TURN_STARTED"
    WORD_GUESSED = "WORD_GUESSED"
    WORD_PASSED = "WORD_PASSED"
    UNDO = "UNDO"
    TIME_UP = "TIME_UP"
    ROUND_COMPLETED = "ROUND_COMPLETED"


class UndoKind(Enum):
    """Reversible in-turn actions."""
    GUESSED = "WORD_GUESSED"
    PASSED = "WORD_PASSED"


ROUND_NAMES = {
    1: "Describe",
    2: "Charades",
    3: "One-word clue",
}


def round_name(round_number: int) -> str:
    return ROUND_NAMES[round_number]


def clamp_int(value: int | float, low: int, high: int) -> int:
    """Truncate toward zero, then clamp into [low, high]."""
    return max(low, min(high, int(value)))


def count_letters(text: str) -> int:
    """Count Unicode letters (any L* category) in text."""
    return sum(1 for ch in text if unicodedata.category(ch).startswith("L"))


@dataclass(frozen=True)
class Team:
    team_id: TeamId
    name: str


@dataclass(frozen=True)
class Player:
    """A player, created once when their word entry is accepted."""
    player_id: str
    name: str
    team_id: TeamId
    entry_index: int


@dataclass(frozen=True)
class Item:
    """
    A fishbowl item (word or phrase).

    Items are never mutated or deleted; they only move between the
    round pools and the guessed state.
    """
    item_id: str
    text: str  # Trimmed display text, original casing
    normalized_text: str  # Canonical form used for duplicate detection
    owner_player_id: str


@dataclass(frozen=True)
class TimerSettings:
    """Default turn duration per round, in seconds."""
    round1_seconds: int = 30
    round2_seconds: int = 45
    round3_seconds: int = 20

    def seconds_for(self, round_number: int) -> int:
        seconds = {
            1: self.round1_seconds,
            2: self.round2_seconds,
            3: self.round3_seconds,
        }[round_number]
        return clamp_int(seconds, MIN_TURN_SECONDS, MAX_TURN_SECONDS)

    def with_round(self, round_number: int, seconds: int) -> TimerSettings:
        if round_number not in ROUNDS:
            raise ValueError(f"Unknown round: {round_number}")
        return replace(self, **{f"round{round_number}_seconds": seconds})


@dataclass(frozen=True)
class Carryover:
    """Leftover turn time owed to the finishing team in the next round."""
    seconds: int
    team_id: TeamId


@dataclass(frozen=True)
class RoundPools:
    """
    Draw state for the current round.

    An item id appears in at most one of primary, deferred and
    current_item_id. Guessed items appear in none of them.
    """
    primary: tuple[str, ...] = ()
    deferred: tuple[str, ...] = ()
    current_item_id: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.current_item_id is None and not self.primary and not self.deferred

    @property
    def remaining_count(self) -> int:
        current = 1 if self.current_item_id is not None else 0
        return len(self.primary) + len(self.deferred) + current


@dataclass(frozen=True)
class RoundScores:
    a: int = 0
    b: int = 0

    def get(self, team_id: TeamId) -> int:
        return self.a if team_id is TeamId.A else self.b

    def add(self, team_id: TeamId, delta: int) -> RoundScores:
        if team_id is TeamId.A:
            return replace(self, a=self.a + delta)
        return replace(self, b=self.b + delta)


@dataclass(frozen=True)
class ScoresByRound:
    round1: RoundScores = field(default_factory=RoundScores)
    round2: RoundScores = field(default_factory=RoundScores)
    round3: RoundScores = field(default_factory=RoundScores)

    def for_round(self, round_number: int) -> RoundScores:
        return {1: self.round1, 2: self.round2, 3: self.round3}[round_number]

    def with_round(self, round_number: int, scores: RoundScores) -> ScoresByRound:
        if round_number not in ROUNDS:
            raise ValueError(f"Unknown round: {round_number}")
        return replace(self, **{f"round{round_number}": scores})

    def total(self, team_id: TeamId) -> int:
        return sum(self.for_round(r).get(team_id) for r in ROUNDS)


@dataclass(frozen=True)
class UndoEntry:
    """
    A reversible in-turn action.

    Holds full copies of pools and scores from before the action;
    undo restores them wholesale.
    """
    kind: UndoKind
    round: int
    team: TeamId
    pools: RoundPools
    scores_by_round: ScoresByRound
    item_id: str | None = None
    item_text: str | None = None
    points_delta: int = 0


@dataclass(frozen=True)
class GameEvent:
    """An append-only log entry."""
    event_id: str
    timestamp_ms: int
    event_type: EventType
    round: int | None = None
    team: TeamId | None = None
    item_id: str | None = None
    item_text: str | None = None
    points_delta: int | None = None
    note: str | None = None


def default_teams() -> dict[TeamId, Team]:
    return {
        TeamId.A: Team(team_id=TeamId.A, name="Blue"),
        TeamId.B: Team(team_id=TeamId.B, name="Red"),
    }


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer, which replaces the
    snapshot wholesale.
    """
    version: int = STATE_VERSION
    screen: Screen = Screen.HOST_SETUP

    # Host setup
    teams: dict[TeamId, Team] = field(default_factory=default_teams)
    player_count: int = 8
    timer_settings: TimerSettings = field(default_factory=TimerSettings)

    # Word entry
    entry_index: int = 0
    starting_team_round1: TeamId | None = None

    # Entities
    players: tuple[Player, ...] = ()
    items: tuple[Item, ...] = ()

    # Gameplay
    current_round: int | None = None
    current_team_turn: TeamId = TeamId.A
    round_start_team: dict[int, TeamId] = field(default_factory=dict)
    round_finisher_team: dict[int, TeamId] = field(default_factory=dict)
    carryover_for_next_round: Carryover | None = None
    pending_carryover_seconds: int | None = None

    pools: RoundPools | None = None
    scores_by_round: ScoresByRound = field(default_factory=ScoresByRound)

    # Timer: remaining time is always derived from the end epoch
    turn_end_epoch_ms: int | None = None
    turn_duration_seconds: int | None = None
    timer_seconds_remaining: int | None = None

    undo_stack: tuple[UndoEntry, ...] = ()
    events: tuple[GameEvent, ...] = ()

    last_error: str | None = None

    @property
    def is_setup_editable(self) -> bool:
        """Setup can only change before round 1 starts."""
        return self.current_round is None

    @property
    def current_item(self) -> Item | None:
        if self.pools is None:
            return None
        return self.get_item(self.pools.current_item_id)

    def get_item(self, item_id: str | None) -> Item | None:
        if item_id is None:
            return None
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None

    def team_name(self, team_id: TeamId) -> str:
        return self.teams[team_id].name

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


def create_new_game_state() -> GameState:
    """The clean pre-game baseline."""
    return GameState()
