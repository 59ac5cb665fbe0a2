"""
Injectable random source shared by the engine and probability conditions
"""

from random import Random
from typing import Optional

from ..config import settings


class RandomSource:
    """Wrapper around random.Random exposing the two draws playback needs.

    ``next(max)`` breaks ties between several open edges, ``random()`` feeds
    probability conditions. Tests replace the whole object with a scripted
    stub so both are deterministic.
    """

    def __init__(self, seed: Optional[int] = None):
        self._random = Random(seed)

    def next(self, max: int) -> int:
        """Return a random integer N such that 0 <= N < max."""
        if max <= 0:
            raise ValueError("max must be a positive integer")
        return self._random.randrange(max)

    def random(self) -> float:
        """Return the next random floating point number in [0.0, 1.0)."""
        return self._random.random()


def default_random_source() -> RandomSource:
    """Random source seeded from settings (unseeded unless RANDOM_SEED is set)"""
    return RandomSource(settings.random_seed)
