"""
Pytest fixtures for Fishbowl tests.
"""

import pytest

from ..engine_core.state import GameState, Screen, TeamId, create_new_game_state
from ..engine_core.action import Action
from ..engine_core.reducer import Reducer
from ..engine_core.shuffle import EntropySource, SeededEntropy
from ..engine_core.clock import ManualClock


class IdentityEntropy(EntropySource):
    """Always picks the top index, so Fisher-Yates keeps the input order."""

    def random_below(self, upper: int) -> int:
        return max(0, upper - 1)


WORDS = [
    ("Ada", TeamId.A, ["Spider-Man", "The Eiffel Tower", "Pizza"]),
    ("Bo", TeamId.B, ["Moon landing", "Beyonce", "Tap dancing"]),
    ("Cy", TeamId.A, ["Dinosaur", "Jazz hands", "Volcano"]),
    ("Di", TeamId.B, ["Mona Lisa", "Skateboard", "Hiccups"]),
]


def play(reducer: Reducer, state: GameState, *actions: Action) -> GameState:
    """Apply actions in order and return the final state."""
    for action in actions:
        state = reducer.apply(state, action).new_state
    return state


def entered_state(reducer: Reducer, players: int = 2) -> GameState:
    """A game with all word entries done, sitting on the ready screen."""
    state = play(
        reducer,
        create_new_game_state(),
        Action.set_player_count(players),
        Action.start_word_entry(),
    )
    for i, (name, team, items) in enumerate(WORDS[:players]):
        state = play(reducer, state, Action.submit_player(name, team, items))
        if i < players - 1:
            state = play(reducer, state, Action.ack_entry_handoff())
    assert state.screen is Screen.READY
    return state


def active_turn_state(reducer: Reducer, players: int = 2) -> GameState:
    """Round 1, first turn running."""
    state = play(
        reducer,
        entered_state(reducer, players),
        Action.start_round1(),
        Action.ack_turn_handoff(),
        Action.start_turn(),
    )
    assert state.screen is Screen.TURN_ACTIVE
    return state


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start_ms=1_000_000)


@pytest.fixture
def reducer(clock) -> Reducer:
    """Reducer with seeded entropy and a manual clock."""
    return Reducer(entropy=SeededEntropy(42), clock=clock)


@pytest.fixture
def ordered_reducer(clock) -> Reducer:
    """Reducer whose shuffles keep input order."""
    return Reducer(entropy=IdentityEntropy(), clock=clock)


@pytest.fixture
def ready_state(reducer) -> GameState:
    return entered_state(reducer)


@pytest.fixture
def active_state(reducer) -> GameState:
    return active_turn_state(reducer)
