"""
Random permutation helpers for pair formation.

Formation never calls `random` directly; it receives one of these callables so
tests (and reproducible staging runs) can swap in a seeded source.
"""

import random
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

Shuffle = Callable[[Sequence[T]], List[T]]


def shuffle(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """
    Return a uniformly permuted copy of *items* (Fisher-Yates).

    The input sequence is never mutated.
    """
    source = rng if rng is not None else random
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = source.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def seeded_shuffle(seed: int) -> Shuffle:
    """Shuffle bound to its own random.Random(seed); same seed, same sequence of draws."""
    rng = random.Random(seed)

    def _shuffle(items: Sequence[T]) -> List[T]:
        return shuffle(items, rng)

    return _shuffle


def identity_shuffle(items: Sequence[T]) -> List[T]:
    """No-op permutation; keeps roster order (used for deterministic dry runs)"""
    return list(items)
