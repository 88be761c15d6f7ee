"""Categorical draw over weighted entries with an injectable random source."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence, Tuple, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything with `random() -> float` in [0, 1), e.g. `random.Random`."""

    def random(self) -> float:
        ...


def total_weight(entries: Sequence[Tuple[T, float]]) -> float:
    """Return the sum of entry weights."""
    return float(sum(weight for _, weight in entries))


def weighted_draw(entries: Sequence[Tuple[T, float]], random_source: RandomSource) -> T:
    """Pick one entry with probability proportional to its weight.

    Samples r in [0, total); walks the entries with a running sum and returns
    the first entry whose cumulative weight reaches or exceeds r.

    Raises:
        ValueError: If there are no entries or the weights do not sum to > 0.
    """
    if not entries:
        raise ValueError("weighted_draw requires at least one entry")
    total = total_weight(entries)
    if total <= 0:
        raise ValueError("weights must sum to a positive value")

    threshold = random_source.random() * total
    cumulative = 0.0
    for value, weight in entries:
        cumulative += weight
        if threshold <= cumulative:
            return value
    # Only reachable through float accumulation error at the upper edge.
    return entries[-1][0]
