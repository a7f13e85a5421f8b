"""
Snapshot codec - GameState to and from JSON.

The saved payload is the whole GameState plus the time it was saved.
Pydantic validates the dataclass model on the way back in, so a snapshot
that no longer matches the model is rejected instead of half-loaded.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from ..engine_core.state import GameState, STATE_VERSION


class SnapshotError(Exception):
    """A saved snapshot could not be decoded."""


@dataclass(frozen=True)
class SavedGame:
    state: GameState
    saved_at_ms: int


_STATE_ADAPTER = TypeAdapter(GameState)
_SAVED_ADAPTER = TypeAdapter(SavedGame)


def state_to_dict(state: GameState) -> dict[str, Any]:
    """JSON-compatible dict for a state."""
    return _STATE_ADAPTER.dump_python(state, mode="json")


def state_from_dict(data: dict[str, Any]) -> GameState:
    try:
        state = _STATE_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise SnapshotError(f"Invalid game snapshot: {e}") from e
    _check_version(state)
    return state


def encode_saved_game(saved: SavedGame) -> bytes:
    return _SAVED_ADAPTER.dump_json(saved, indent=2)


def decode_saved_game(raw: bytes | str) -> SavedGame:
    try:
        saved = _SAVED_ADAPTER.validate_json(raw)
    except PydanticValidationError as e:
        raise SnapshotError(f"Invalid saved game: {e}") from e
    _check_version(saved.state)
    return saved


def _check_version(state: GameState):
    if state.version != STATE_VERSION:
        raise SnapshotError(
            f"Unsupported snapshot version {state.version} (expected {STATE_VERSION})"
        )
