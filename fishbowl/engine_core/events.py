"""
Event Log - Append-only record of significant transitions.

Entries are never reordered, edited or removed during a game. The final
results view reads them back.
"""

from __future__ import annotations
import uuid

from .state import EventType, GameEvent, GameState, TeamId


def new_id(prefix: str) -> str:
    """Unique id such as 'evt_3f2a...'."""
    return f"{prefix}_{uuid.uuid4().hex}"


def append_event(
    state: GameState,
    event_type: EventType,
    timestamp_ms: int,
    round: int | None = None,
    team: TeamId | None = None,
    item_id: str | None = None,
    item_text: str | None = None,
    points_delta: int | None = None,
    note: str | None = None,
) -> GameState:
    """Return state with a new event appended to the log."""
    event = GameEvent(
        event_id=new_id("evt"),
        timestamp_ms=timestamp_ms,
        event_type=event_type,
        round=round,
        team=team,
        item_id=item_id,
        item_text=item_text,
        points_delta=points_delta,
        note=note,
    )
    return state._copy_with(events=state.events + (event,))


def events_of_type(state: GameState, event_type: EventType) -> list[GameEvent]:
    return [e for e in state.events if e.event_type is event_type]
