"""
Randomness sources for the game engines.

Engines never hold a generator of their own. Every call takes a
``RandomSource``: a zero-argument callable returning a float in [0, 1).
``random.Random(seed).random`` is the usual production source; tests
pass ``fixed()`` or ``sequence()`` to script exact outcomes.
"""

import math
import random
from typing import Callable, Sequence

RandomSource = Callable[[], float]


def random_int(low: int, high: int, rng: RandomSource) -> int:
    """Uniform integer in the inclusive range [low, high]."""
    return low + math.floor(rng() * (high - low + 1))


def seeded(seed: int) -> RandomSource:
    """Reproducible source for replaying a recorded session."""
    return random.Random(seed).random


def fixed(value: float = 0.0) -> RandomSource:
    """Source that always returns the same value."""
    return lambda: value


def sequence(values: Sequence[float]) -> RandomSource:
    """
    Source that replays ``values`` in order.

    Once exhausted it keeps returning the last value (or 0.0 for an
    empty sequence).
    """
    items = list(values)
    index = 0

    def next_value() -> float:
        nonlocal index
        if index < len(items):
            value = items[index]
            index += 1
            return value
        return items[-1] if items else 0.0

    return next_value
