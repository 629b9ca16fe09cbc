from __future__ import annotations
import random
from typing import TYPE_CHECKING, Optional

from ..config import ReplacementPolicy

if TYPE_CHECKING:
    from .store import CacheSet

DEFAULT_SEED = 1000


class RandomReplacement:
    """Picks a victim uniformly among all ways of a full set.

    ``rng`` only needs a ``randrange(n)`` method, so tests can drive the
    choice with a scripted sequence.
    """
    def __init__(self, rng=None):
        self.rng = rng if rng is not None else random.Random(DEFAULT_SEED)

    def select_victim(self, cache_set: CacheSet) -> int:
        way = self.rng.randrange(len(cache_set))
        if not 0 <= way < len(cache_set):
            raise ValueError(f"Random source returned way {way} for a {len(cache_set)}-way set.")
        return way


class LRUReplacement:
    """Evicts the line with the largest recency; ties go to the lowest way."""
    def select_victim(self, cache_set: CacheSet) -> int:
        victim = 0
        oldest = cache_set[0].recency
        for way in range(1, len(cache_set)):
            if cache_set[way].recency > oldest:
                oldest = cache_set[way].recency
                victim = way
        return victim


def make_replacement(policy: Optional[ReplacementPolicy], rng=None):
    """Returns the victim selector for ``policy``."""
    if policy is ReplacementPolicy.LRU:
        return LRUReplacement()
    if policy is ReplacementPolicy.RANDOM:
        return RandomReplacement(rng)
    raise ValueError(f"Unknown or unsupported replacement policy: {policy}")
