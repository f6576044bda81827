"""
Seeded RNG so sampled scenario sets are reproducible.
"""
from __future__ import annotations

import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class SeededRNG:
    """Wrapper around random.Random for reproducible sampling."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def seed(self) -> int | None:
        return self._seed

    def sample(self, population: Sequence[T] | range, k: int) -> list[T]:
        return self._rng.sample(population, k)
