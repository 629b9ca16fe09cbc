from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from ..config import HierarchyConfig
from ..cache.store import Cache
from .stats import Statistics


@dataclass
class SimulationState:
    """Every cache of one simulation run plus the statistics they feed."""
    icache: Cache
    dcaches: List[Cache] = field(default_factory=list)
    stats: Statistics = field(default_factory=Statistics)

    @classmethod
    def from_hierarchy(cls, hierarchy: HierarchyConfig, rng=None) -> SimulationState:
        """Allocates all caches with every line invalid."""
        icache = Cache(hierarchy.icache, rng)
        dcaches = [Cache(cfg, rng) for cfg in hierarchy.dcaches]
        stats = Statistics(c.name for c in [icache] + dcaches)
        return cls(icache, dcaches, stats)

    @property
    def l1_dcache(self) -> Optional[Cache]:
        return self.dcaches[0] if self.dcaches else None

    def lower_of(self, cache: Cache) -> Optional[Cache]:
        """The data cache that backs ``cache``, or None when memory does."""
        if cache.config.is_instruction:
            return None
        level = cache.config.level
        return self.dcaches[level] if level < len(self.dcaches) else None
