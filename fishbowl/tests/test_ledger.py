"""
Tests for the score and undo ledger.
"""

import pytest

from ..engine_core import ledger
from ..engine_core.state import GameState, Item, RoundPools, TeamId, UndoKind
from ..engine_core.errors import NothingToUndoError


ITEM = Item(item_id="w1", text="Pizza", normalized_text="pizza", owner_player_id="p1")


@pytest.fixture
def round_state() -> GameState:
    return GameState(
        current_round=2,
        current_team_turn=TeamId.B,
        items=(ITEM,),
        pools=RoundPools(primary=("w2",), current_item_id="w1"),
    )


class TestRecord:

    def test_guess_scores_one_point(self, round_state):
        state = ledger.record_guess(round_state, ITEM)
        assert state.scores_by_round.for_round(2).b == 1
        assert state.scores_by_round.for_round(2).a == 0
        assert state.scores_by_round.for_round(1).b == 0

    def test_guess_pushes_snapshot(self, round_state):
        state = ledger.record_guess(round_state, ITEM)
        entry = state.undo_stack[-1]
        assert entry.kind is UndoKind.GUESSED
        assert entry.round == 2
        assert entry.team is TeamId.B
        assert entry.pools == round_state.pools
        assert entry.scores_by_round == round_state.scores_by_round
        assert entry.item_text == "Pizza"
        assert entry.points_delta == 1

    def test_pass_does_not_score(self, round_state):
        state = ledger.record_pass(round_state, ITEM)
        assert state.scores_by_round == round_state.scores_by_round
        assert state.undo_stack[-1].kind is UndoKind.PASSED
        assert state.undo_stack[-1].points_delta == 0

    def test_stack_is_bounded(self, round_state):
        state = round_state
        for _ in range(ledger.UNDO_STACK_LIMIT + 5):
            state = ledger.record_guess(state, ITEM)
        assert len(state.undo_stack) == ledger.UNDO_STACK_LIMIT
        # Oldest entries were evicted: the bottom entry saw 5 earlier points
        assert state.undo_stack[0].scores_by_round.for_round(2).b == 5


class TestUndo:

    def test_restores_snapshot(self, round_state):
        guessed = ledger.record_guess(round_state, ITEM)
        guessed = guessed._copy_with(pools=RoundPools(current_item_id="w2"))
        restored, entry = ledger.undo_last(guessed)
        assert restored.pools == round_state.pools
        assert restored.scores_by_round == round_state.scores_by_round
        assert restored.undo_stack == ()
        assert entry.kind is UndoKind.GUESSED

    def test_multiple_undos(self, round_state):
        state = ledger.record_pass(round_state, ITEM)
        state = ledger.record_guess(state, ITEM)
        state, _ = ledger.undo_last(state)
        state, _ = ledger.undo_last(state)
        assert state.scores_by_round == round_state.scores_by_round
        with pytest.raises(NothingToUndoError):
            ledger.undo_last(state)

    def test_empty_stack(self, round_state):
        with pytest.raises(NothingToUndoError):
            ledger.undo_last(round_state)

    def test_cross_round_refused(self, round_state):
        state = ledger.record_guess(round_state, ITEM)
        state = state._copy_with(current_round=3)
        with pytest.raises(NothingToUndoError):
            ledger.undo_last(state)
