"""Deterministic RNG utilities for reproducible card draws.

Two sources implement the same ``RandomSource`` interface:

- ``SeededRandomSource``: a reproducible stream built from a string/int seed
- ``SystemRandomSource``: system entropy, for draws that need no replay

Sub-streams are obtained with ``derive(context)`` so that, for example, the
orientation roll of a position never correlates with its card pick.
"""

from __future__ import annotations

import hashlib
import random
from abc import ABC, abstractmethod
from typing import Union

Seed = Union[str, int]


def derive_seed(seed: Seed, context: Seed) -> str:
    """Combine a seed with a context label, e.g. ``derive_seed("abc", "pos-1")``."""
    return f"{seed}-{context}"


def _int_seed(seed: Seed, salt: str = "") -> int:
    # Hash so that similar seeds ("abc-pos-1", "abc-pos-2") give unrelated streams
    combined = f"{seed}{salt}"
    hash_obj = hashlib.sha256(combined.encode("utf-8"))
    return int(hash_obj.hexdigest(), 16) & ((1 << 63) - 1)


def seeded_random(seed: Seed, salt: str = "") -> random.Random:
    """Create a deterministic random.Random instance from seed and optional salt.

    Args:
        seed: Base seed string
        salt: Optional salt to modify the seed (e.g., session id)

    Returns:
        random.Random instance that will produce deterministic sequences
    """
    return random.Random(_int_seed(seed, salt))


class RandomSource(ABC):
    """Stream of floats in [0, 1) plus derivation of independent sub-streams."""

    @abstractmethod
    def next(self) -> float:
        ...

    @abstractmethod
    def derive(self, context: Seed) -> "RandomSource":
        ...

    def randbelow(self, n: int) -> int:
        """Integer in ``[0, n)`` taken from one ``next()`` roll."""
        if n <= 0:
            raise ValueError("n must be positive")
        # min() guards the float edge case next() * n rounding up to n
        return min(int(self.next() * n), n - 1)


class SeededRandomSource(RandomSource):
    def __init__(self, seed: Seed):
        self.seed = str(seed)
        self._rng = seeded_random(self.seed)

    @classmethod
    def from_seed(cls, seed: Seed) -> "SeededRandomSource":
        return cls(seed)

    def next(self) -> float:
        return self._rng.random()

    def derive(self, context: Seed) -> "SeededRandomSource":
        return SeededRandomSource(derive_seed(self.seed, context))

    def __repr__(self) -> str:
        return f"SeededRandomSource({self.seed!r})"


class SystemRandomSource(RandomSource):
    def __init__(self) -> None:
        self._rng = random.SystemRandom()

    def next(self) -> float:
        return self._rng.random()

    def derive(self, context: Seed) -> "SystemRandomSource":
        return SystemRandomSource()
