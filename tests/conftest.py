import pytest
from pyv_cache.config import CacheConfig, HierarchyConfig


class ScriptedRandom:
    """Stands in for random.Random with a fixed sequence of randrange results."""
    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randrange(self, n):
        self.calls.append(n)
        return self.values.pop(0)


@pytest.fixture
def scripted_random():
    return ScriptedRandom


@pytest.fixture
def icache_config():
    """4 blocks, 1 word per block, 2-way LRU."""
    return CacheConfig.from_icache_spec("4:1:2:L")


@pytest.fixture
def l1_write_back_config():
    """4 blocks, 2 words per block, direct-mapped, write-back, write-allocate."""
    return CacheConfig.from_dcache_spec("1:4:2:1:L:B:A")


@pytest.fixture
def hierarchy(icache_config, l1_write_back_config):
    return HierarchyConfig(icache_config, (l1_write_back_config,))


@pytest.fixture
def make_state():
    """Builds a SimulationState from CLI-style cache specs."""
    from pyv_cache.runtime.state import SimulationState

    def _make(icache="4:1:1:R", dcaches=(), rng=None):
        hierarchy = HierarchyConfig.build(
            CacheConfig.from_icache_spec(icache),
            [CacheConfig.from_dcache_spec(spec) for spec in dcaches],
        )
        return SimulationState.from_hierarchy(hierarchy, rng)
    return _make
