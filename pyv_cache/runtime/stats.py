from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Iterable

from ..cache.classify import Outcome


def _rate(count: int, total: int) -> float:
    """Percentage of ``count`` over ``total``, with an empty total counted as 1."""
    return 100.0 * count / (total if total > 0 else 1)


@dataclass
class AccessCounters:
    """Counters for one access direction (reads or writes) of one cache."""
    accesses: int = 0
    hits: int = 0
    compulsory: int = 0
    conflict: int = 0
    capacity: int = 0

    def record(self, outcome: Outcome):
        self.accesses += 1
        if outcome is Outcome.HIT:
            self.hits += 1
        elif outcome is Outcome.COMPULSORY:
            self.compulsory += 1
        elif outcome is Outcome.CONFLICT:
            self.conflict += 1
        elif outcome is Outcome.CAPACITY:
            self.capacity += 1
        else:
            raise ValueError(f"Unknown access outcome: {outcome}")

    @property
    def misses(self) -> int:
        return self.compulsory + self.conflict + self.capacity

    def miss_rate(self, include_compulsory: bool = True) -> float:
        misses = self.misses if include_compulsory else self.misses - self.compulsory
        return _rate(misses, self.accesses)

    def is_consistent(self) -> bool:
        return self.accesses == self.hits + self.misses


@dataclass
class CacheStats:
    name: str
    reads: AccessCounters = field(default_factory=AccessCounters)
    writes: AccessCounters = field(default_factory=AccessCounters)
    words_read: int = 0
    words_written: int = 0

    @property
    def accesses(self) -> int:
        return self.reads.accesses + self.writes.accesses

    @property
    def hits(self) -> int:
        return self.reads.hits + self.writes.hits

    @property
    def misses(self) -> int:
        return self.reads.misses + self.writes.misses

    def is_consistent(self) -> bool:
        return self.reads.is_consistent() and self.writes.is_consistent()


class Statistics:
    """Per-cache counters of a simulation run, keyed by cache name."""

    def __init__(self, names: Iterable[str] = ()):
        self._caches: Dict[str, CacheStats] = {}
        for name in names:
            self.add(name)

    def add(self, name: str) -> CacheStats:
        if name in self._caches:
            raise ValueError(f"Statistics for cache '{name}' already registered.")
        self._caches[name] = CacheStats(name)
        return self._caches[name]

    def __getitem__(self, name: str) -> CacheStats:
        return self._caches[name]

    def __contains__(self, name: str) -> bool:
        return name in self._caches

    def __iter__(self):
        return iter(self._caches.values())

    def record_read(self, name: str, outcome: Outcome):
        self._caches[name].reads.record(outcome)

    def record_write(self, name: str, outcome: Outcome):
        self._caches[name].writes.record(outcome)

    def add_words_read(self, name: str, words: int):
        self._caches[name].words_read += words

    def add_words_written(self, name: str, words: int):
        self._caches[name].words_written += words

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """Returns a plain, detached copy of every counter."""
        snap = {}
        for name, cache_stats in self._caches.items():
            data = asdict(cache_stats)
            data.pop("name")
            snap[name] = data
        return snap

    def miss_rates(self) -> Dict[str, Dict[str, float]]:
        """Read and write miss rates in percent, with and without compulsory misses."""
        rates = {}
        for name, s in self._caches.items():
            rates[name] = {
                "read_miss_rate": s.reads.miss_rate(),
                "read_miss_rate_no_compulsory": s.reads.miss_rate(include_compulsory=False),
                "write_miss_rate": s.writes.miss_rate(),
                "write_miss_rate_no_compulsory": s.writes.miss_rate(include_compulsory=False),
            }
        return rates
