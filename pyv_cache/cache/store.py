from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from ..config import CacheConfig
from .replacement import make_replacement
from .write_policy import WritePolicy


@dataclass
class CacheLine:
    """Metadata of one cache line. No data payload is kept."""
    tag: int = 0
    valid: bool = False
    dirty: bool = False
    recency: int = 0


class CacheSet:
    """A fixed-size group of lines sharing one set index."""
    def __init__(self, associativity: int):
        self.lines: List[CacheLine] = [CacheLine() for _ in range(associativity)]

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, way: int) -> CacheLine:
        return self.lines[way]

    def find_way(self, tag: int) -> Optional[int]:
        """Returns the way holding a valid copy of ``tag``, or None."""
        for way, line in enumerate(self.lines):
            if line.valid and line.tag == tag:
                return way
        return None

    def first_invalid_way(self) -> Optional[int]:
        for way, line in enumerate(self.lines):
            if not line.valid:
                return way
        return None

    def touch(self, way: int):
        """Ages every other line by one and makes ``way`` the most recent."""
        for line in self.lines:
            line.recency += 1
        self.lines[way].recency = 0

    def install(self, way: int, tag: int, dirty: bool = False):
        line = self.lines[way]
        line.tag = tag
        line.valid = True
        line.dirty = dirty
        self.touch(way)

    def tags(self) -> List[int]:
        return [line.tag for line in self.lines if line.valid]


class Cache:
    """
    One cache of the hierarchy: ``num_sets`` sets of ``associativity`` lines.
    The cache holds state only; the engines decide hits, misses and traffic.
    """
    def __init__(self, config: CacheConfig, rng=None):
        self.config = config
        self.sets = [CacheSet(config.associativity) for _ in range(config.num_sets)]
        self.replacement = make_replacement(config.replacement, rng) if config.associativity > 1 else None
        self.write_policy = None if config.is_instruction else WritePolicy.for_config(config)

    @property
    def name(self) -> str:
        return self.config.name

    def __repr__(self) -> str:
        return f"Cache({self.config.label}, sets={len(self.sets)}, ways={self.config.associativity})"
