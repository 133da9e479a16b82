"""Seedable RNG wrapper for suspect pools and question draws."""

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


@dataclass
class Rng:
    seed: int | None = None

    def __post_init__(self) -> None:
        self._random = random.Random(self.seed)

    def randbelow(self, n: int) -> int:
        if n <= 0:
            raise ValueError("randbelow requires a positive bound")
        return self._random.randrange(n)

    def choice(self, seq: Sequence[T]) -> T:
        return self._random.choice(seq)

    def sample(self, seq: Sequence[T], k: int) -> list[T]:
        return self._random.sample(list(seq), k)
