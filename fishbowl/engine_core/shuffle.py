"""
Random permutations with an injectable entropy source.

The engine shuffles through an EntropySource so tests can pin the exact
draw order with a seed, while real games use the operating system's
cryptographic generator.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Sequence, TypeVar
import os
import random


T = TypeVar("T")

_UINT32_RANGE = 1 << 32


class EntropySource(ABC):
    """Supplies uniformly distributed integers."""

    @abstractmethod
    def random_below(self, upper: int) -> int:
        """Return an integer uniformly chosen from [0, upper)."""


class SystemEntropy(EntropySource):
    """
    Cryptographically strong entropy from os.urandom.

    Uses rejection sampling over 32-bit words to avoid modulo bias. Falls
    back to the Mersenne Twister only when the platform has no strong
    randomness source.
    """

    def __init__(self):
        self._fallback = random.Random()

    def random_below(self, upper: int) -> int:
        if upper <= 0:
            return 0
        limit = _UINT32_RANGE - (_UINT32_RANGE % upper)
        while True:
            try:
                word = int.from_bytes(os.urandom(4), "big")
            except NotImplementedError:
                return self._fallback.randrange(upper)
            if word < limit:
                return word % upper


class SeededEntropy(EntropySource):
    """Deterministic entropy for tests and replays."""

    def __init__(self, seed: int = 0):
        self.seed = seed
        self._rng = random.Random(seed)

    def random_below(self, upper: int) -> int:
        if upper <= 0:
            return 0
        return self._rng.randrange(upper)


def shuffled(sequence: Sequence[T], entropy: EntropySource | None = None) -> tuple[T, ...]:
    """
    Return a uniformly shuffled copy of sequence (Fisher-Yates).

    The input is never mutated.
    """
    entropy = entropy or SystemEntropy()
    out = list(sequence)
    for i in range(len(out) - 1, 0, -1):
        j = entropy.random_below(i + 1)
        out[i], out[j] = out[j], out[i]
    return tuple(out)
