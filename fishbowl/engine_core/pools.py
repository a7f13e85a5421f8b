"""
Pool Engine - Per-round primary/deferred item pools.

Draw algorithm:
- Items are drawn from the head of the primary pool.
- Passed items go to the tail of the deferred pool and are not drawn again
  until the primary pool is exhausted.
- When primary runs dry, deferred is reshuffled into a fresh primary.
- A round is complete when nothing is presented and both pools are empty.

Every item is eventually served, and a passed item waits exactly one full
primary cycle before it can come back.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Sequence

from .state import RoundPools
from .shuffle import EntropySource, SystemEntropy, shuffled
from .errors import PreconditionError


@dataclass
class PoolEngine:
    """
    Pure operations on RoundPools.

    Stateless apart from the entropy source used for shuffling.
    """
    entropy: EntropySource = field(default_factory=SystemEntropy)

    def ensure_ready(self, pools: RoundPools | None, item_ids: Sequence[str]) -> RoundPools:
        """Initialize pools with a shuffled primary. No-op if already present."""
        if pools is not None:
            return pools
        return RoundPools(primary=shuffled(item_ids, self.entropy))

    def draw_if_needed(self, pools: RoundPools) -> RoundPools:
        """Present the next item, refilling from deferred when primary is empty."""
        if pools.current_item_id is not None:
            return pools

        primary, deferred = pools.primary, pools.deferred
        if not primary and deferred:
            primary, deferred = shuffled(deferred, self.entropy), ()

        if not primary:
            # Nothing left: round complete
            return RoundPools(primary=(), deferred=deferred, current_item_id=None)

        return RoundPools(
            primary=primary[1:],
            deferred=deferred,
            current_item_id=primary[0],
        )

    def pass_current(self, pools: RoundPools) -> RoundPools:
        """Defer the presented item and draw the next one."""
        current = self._require_current(pools)
        deferred = pools.deferred + (current,)
        return self.draw_if_needed(
            replace(pools, deferred=deferred, current_item_id=None)
        )

    def mark_guessed(self, pools: RoundPools) -> RoundPools:
        """Remove the presented item permanently and draw the next one."""
        self._require_current(pools)
        return self.draw_if_needed(replace(pools, current_item_id=None))

    def return_current(self, pools: RoundPools) -> RoundPools:
        """
        Shuffle the presented item back into primary (time ran out).

        Without a presented item the pools are returned unchanged.
        """
        if pools.current_item_id is None:
            return pools
        primary = shuffled(pools.primary + (pools.current_item_id,), self.entropy)
        return replace(pools, primary=primary, current_item_id=None)

    @staticmethod
    def is_complete(pools: RoundPools | None) -> bool:
        return pools is not None and pools.is_complete

    @staticmethod
    def _require_current(pools: RoundPools) -> str:
        if pools.current_item_id is None:
            raise PreconditionError("No item is currently presented")
        return pools.current_item_id
