"""
Random sources and weighted sampling for Trade Winds.

Every system that rolls dice takes a RandomSource by injection, so tests
can pin the sequence with a seed or a scripted source.
"""

import math
import random
from typing import Callable, Iterable, Protocol, Sequence, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class RandomSource(Protocol):
    """
    Uniform random generator used by the simulation.

    Implementations:
    - GameRandom: random.Random wrapper (production, optionally seeded)
    - Any object with the same three methods (tests)
    """

    def random(self) -> float:
        """Float in [0.0, 1.0)."""
        ...

    def randint(self, a: int, b: int) -> int:
        """Integer N with a <= N <= b."""
        ...

    def choice(self, seq: Sequence[T]) -> T:
        """Uniformly chosen element of a non-empty sequence."""
        ...


class GameRandom:
    """RandomSource backed by random.Random. Not cryptographically strong."""

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        return self._random.random()

    def randint(self, a: int, b: int) -> int:
        return self._random.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise ValueError("Cannot choose from an empty sequence.")
        return self._random.choice(seq)


def roll_chance(rng: RandomSource, probability: float) -> bool:
    """True with the given probability."""
    return rng.random() < probability


def uniform(rng: RandomSource, low: float, high: float) -> float:
    """Float in [low, high) drawn from any RandomSource."""
    return low + (high - low) * rng.random()


def weighted_choice(
    items: Iterable[T],
    weight: Callable[[T], float],
    rng: RandomSource,
) -> T | None:
    """
    Pick one item with probability proportional to its weight.

    Cumulative draw in iteration order: a threshold is drawn in
    [0, total_weight) and each item's weight is subtracted until the
    threshold goes non-positive.

    Args:
        items: Candidate items (order matters for a fixed random sequence)
        weight: Weight accessor, e.g. ``lambda e: e.weight``
        rng: Random source

    Returns:
        The chosen item, or None if the pool is empty or weightless
    """
    pool = list(items)
    total = sum(weight(item) for item in pool)
    if not pool or total <= 0:
        return None

    threshold = rng.random() * total
    for item in pool:
        threshold -= weight(item)
        if threshold <= 0:
            return item

    # Float residue can leave a sliver above zero after the last item
    return pool[-1]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive prices (banker's rounding off)."""
    return math.floor(value + 0.5)
