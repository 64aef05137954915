from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Randomness seam used by question, distractor and enemy generation."""

    def next_int(self, lo: int, hi: int) -> int:
        """Return a uniform integer in [lo, hi] (inclusive)."""
        ...

    def shuffle(self, seq: Sequence[T]) -> list[T]:
        """Return a new list holding a uniform random permutation of seq."""
        ...


class SeededRng:
    """Seeded RNG wrapper to keep deterministic streams explicit.

    ``seed=None`` draws the seed from the OS, which is what the game uses
    outside of tests.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def next_int(self, lo: int, hi: int) -> int:
        return self._rng.randint(lo, hi)

    def shuffle(self, seq: Sequence[T]) -> list[T]:
        out = list(seq)
        self._rng.shuffle(out)
        return out
