"""
Score & Undo Ledger.

Scores only go up during play. Every guess or pass pushes an UndoEntry
holding the pools and scores from before the action, so undo is a plain
restore. The stack never crosses a round: it is cleared on every screen
transition out of the active turn.
"""

from __future__ import annotations

from .state import GameState, Item, UndoEntry, UndoKind
from .errors import NothingToUndoError, PreconditionError


UNDO_STACK_LIMIT = 10


def push_undo(stack: tuple[UndoEntry, ...], entry: UndoEntry) -> tuple[UndoEntry, ...]:
    """Push onto the bounded stack, evicting the oldest entries."""
    return (stack + (entry,))[-UNDO_STACK_LIMIT:]


def _snapshot(state: GameState, kind: UndoKind, item: Item | None, points_delta: int) -> UndoEntry:
    if state.current_round is None or state.pools is None:
        raise PreconditionError("No round in progress")
    return UndoEntry(
        kind=kind,
        round=state.current_round,
        team=state.current_team_turn,
        pools=state.pools,
        scores_by_round=state.scores_by_round,
        item_id=item.item_id if item else state.pools.current_item_id,
        item_text=item.text if item else None,
        points_delta=points_delta,
    )


def record_guess(state: GameState, item: Item | None) -> GameState:
    """Award one point to the team on turn and remember how to take it back."""
    entry = _snapshot(state, UndoKind.GUESSED, item, points_delta=1)
    round_scores = state.scores_by_round.for_round(entry.round).add(entry.team, 1)
    return state._copy_with(
        scores_by_round=state.scores_by_round.with_round(entry.round, round_scores),
        undo_stack=push_undo(state.undo_stack, entry),
    )


def record_pass(state: GameState, item: Item | None) -> GameState:
    entry = _snapshot(state, UndoKind.PASSED, item, points_delta=0)
    return state._copy_with(undo_stack=push_undo(state.undo_stack, entry))


def undo_last(state: GameState) -> tuple[GameState, UndoEntry]:
    """
    Pop the newest entry and restore its pools and scores.

    Raises NothingToUndoError when the stack is empty or the newest entry
    belongs to another round.
    """
    if not state.undo_stack:
        raise NothingToUndoError()
    top = state.undo_stack[-1]
    if state.current_round is None or top.round != state.current_round:
        raise NothingToUndoError()

    restored = state._copy_with(
        pools=top.pools,
        scores_by_round=top.scores_by_round,
        undo_stack=state.undo_stack[:-1],
    )
    return restored, top

