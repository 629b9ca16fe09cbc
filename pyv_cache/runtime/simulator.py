from __future__ import annotations
import random
from typing import Iterable, Optional

from ..config import HierarchyConfig, SimConfig
from ..cache.classify import Outcome
from ..cache.engine import read_access, write_access
from ..trace.access import AccessKind, AccessRequest
from ..trace.reader import read_trace
from ..utils.logging import get_logger
from .state import SimulationState
from .stats import Statistics

log = get_logger(__name__)


class Simulator:
    """Replays access requests, one at a time, against a cache hierarchy."""

    def __init__(self, hierarchy: HierarchyConfig, seed: int = 1000, rng=None):
        self.hierarchy = hierarchy
        self.rng = rng if rng is not None else random.Random(seed)
        self.state = SimulationState.from_hierarchy(hierarchy, self.rng)
        self.processed = 0

    @property
    def stats(self) -> Statistics:
        return self.state.stats

    def handle_access(self, request: AccessRequest) -> Optional[Outcome]:
        """Simulates one access. Data accesses without a data cache return None."""
        if request.kind is AccessKind.INSTRUCTION_FETCH:
            outcome = read_access(self.state, self.state.icache, request.address)
        else:
            l1 = self.state.l1_dcache
            if l1 is None:
                outcome = None
            elif request.kind is AccessKind.DATA_READ:
                outcome = read_access(self.state, l1, request.address)
            elif request.kind is AccessKind.DATA_WRITE:
                outcome = write_access(self.state, l1, request.address)
            else:
                raise ValueError(f"Unknown access kind: {request.kind}")
        self.processed += 1
        return outcome

    def run(self, requests: Iterable[AccessRequest]) -> Statistics:
        """
        Processes every request in order. A failing request propagates its
        exception; counters gathered before it stay readable on ``stats``.
        """
        for request in requests:
            self.handle_access(request)
        log.debug("Processed %d trace records", self.processed)
        return self.stats


def run(config: SimConfig, hierarchy: Optional[HierarchyConfig] = None) -> Statistics:
    """Runs the trace named in ``config`` and returns the statistics."""
    hierarchy = hierarchy or config.hierarchy()
    log.info("Running trace '%s' with %d D-cache level(s)", config.trace, len(hierarchy.dcaches))
    sim = Simulator(hierarchy, seed=config.seed)
    return sim.run(read_trace(config.trace))
