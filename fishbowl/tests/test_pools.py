"""
Tests for the pool engine (draw, pass, guess, refill).
"""

import pytest

from ..engine_core.pools import PoolEngine
from ..engine_core.state import RoundPools
from ..engine_core.shuffle import SeededEntropy
from ..engine_core.errors import PreconditionError
from .conftest import IdentityEntropy


IDS = ["w1", "w2", "w3", "w4"]


@pytest.fixture
def engine():
    return PoolEngine(entropy=IdentityEntropy())


def all_ids(pools: RoundPools) -> list[str]:
    current = [pools.current_item_id] if pools.current_item_id else []
    return list(pools.primary) + list(pools.deferred) + current


class TestEnsureReady:

    def test_initializes_shuffled_primary(self):
        engine = PoolEngine(entropy=SeededEntropy(1))
        pools = engine.ensure_ready(None, IDS)
        assert sorted(pools.primary) == sorted(IDS)
        assert pools.deferred == ()
        assert pools.current_item_id is None

    def test_idempotent(self, engine):
        pools = RoundPools(primary=("w2",), deferred=("w1",), current_item_id="w3")
        assert engine.ensure_ready(pools, IDS) is pools


class TestDraw:

    def test_draws_head_of_primary(self, engine):
        pools = engine.draw_if_needed(engine.ensure_ready(None, IDS))
        assert pools.current_item_id == "w1"
        assert pools.primary == ("w2", "w3", "w4")

    def test_no_op_when_item_presented(self, engine):
        pools = RoundPools(primary=("w2",), current_item_id="w1")
        assert engine.draw_if_needed(pools) is pools

    def test_refills_from_deferred(self, engine):
        pools = RoundPools(primary=(), deferred=("w3", "w1"))
        pools = engine.draw_if_needed(pools)
        assert pools.current_item_id == "w3"
        assert pools.primary == ("w1",)
        assert pools.deferred == ()

    def test_empty_means_complete(self, engine):
        pools = engine.draw_if_needed(RoundPools())
        assert pools.current_item_id is None
        assert pools.is_complete


class TestPassAndGuess:

    def test_pass_defers_and_draws_next(self, engine):
        pools = engine.draw_if_needed(engine.ensure_ready(None, IDS))
        pools = engine.pass_current(pools)
        assert pools.deferred == ("w1",)
        assert pools.current_item_id == "w2"

    def test_passed_item_waits_for_primary_to_empty(self):
        """A passed item is not redrawn until every primary item was drawn."""
        engine = PoolEngine(entropy=SeededEntropy(11))
        pools = engine.draw_if_needed(engine.ensure_ready(None, IDS))
        passed = pools.current_item_id
        pools = engine.pass_current(pools)

        drawn = []
        while pools.current_item_id != passed:
            drawn.append(pools.current_item_id)
            pools = engine.mark_guessed(pools)
        assert sorted(drawn) == sorted(i for i in IDS if i != passed)

    def test_guess_removes_permanently(self, engine):
        pools = engine.draw_if_needed(engine.ensure_ready(None, IDS))
        pools = engine.mark_guessed(pools)
        assert "w1" not in all_ids(pools)
        assert pools.current_item_id == "w2"

    def test_conservation(self):
        """Items are never duplicated or lost across passes and guesses."""
        engine = PoolEngine(entropy=SeededEntropy(4))
        pools = engine.draw_if_needed(engine.ensure_ready(None, IDS))
        guessed = []
        for step in range(12):
            if pools.is_complete:
                break
            if step % 3 == 0:
                guessed.append(pools.current_item_id)
                pools = engine.mark_guessed(pools)
            else:
                pools = engine.pass_current(pools)
            live = all_ids(pools)
            assert len(live) == len(set(live))
            assert sorted(live + guessed) == sorted(IDS)

    def test_guess_last_item_completes(self, engine):
        pools = RoundPools(current_item_id="w1")
        pools = engine.mark_guessed(pools)
        assert engine.is_complete(pools)

    def test_requires_current_item(self, engine):
        with pytest.raises(PreconditionError):
            engine.pass_current(RoundPools(primary=("w1",)))
        with pytest.raises(PreconditionError):
            engine.mark_guessed(RoundPools())


class TestReturnCurrent:

    def test_returns_item_to_primary(self, engine):
        pools = RoundPools(primary=("w2",), deferred=("w3",), current_item_id="w1")
        pools = engine.return_current(pools)
        assert pools.current_item_id is None
        assert sorted(pools.primary) == ["w1", "w2"]
        assert pools.deferred == ("w3",)

    def test_without_item_unchanged(self, engine):
        pools = RoundPools(primary=("w2",))
        assert engine.return_current(pools) is pools
