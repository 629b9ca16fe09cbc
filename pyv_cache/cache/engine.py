from __future__ import annotations
from typing import TYPE_CHECKING

from .address import decode_address, block_address
from .classify import Outcome, classify_miss
from .store import Cache, CacheSet

if TYPE_CHECKING:
    from ..runtime.state import SimulationState


def read_access(state: SimulationState, cache: Cache, address: int) -> Outcome:
    """
    Looks up ``address`` for an instruction fetch or a data read.

    A hit refreshes the line's recency. A miss installs the block in the
    first free way (compulsory), in the only way of a direct-mapped set
    (conflict), or in the way picked by the replacement policy (capacity).
    """
    tag, index, _ = decode_address(address, cache.config)
    cache_set = cache.sets[index]

    way = cache_set.find_way(tag)
    if way is not None:
        cache_set.touch(way)
        state.stats.record_read(cache.name, Outcome.HIT)
        return Outcome.HIT

    outcome, free_way = _classify(cache, cache_set)
    state.stats.record_read(cache.name, outcome)
    victim = _victim_way(cache, cache_set, free_way)
    if cache_set[victim].valid:
        _evict(state, cache, index, victim)
    _fetch_block(state, cache, address, words=_block_words(cache))
    cache_set.install(victim, tag)
    return outcome


def write_access(state: SimulationState, cache: Cache, address: int) -> Outcome:
    """
    Performs a data write under the cache's write policy.

    Write-through sends every written word to the next level; write-back
    marks the line dirty and pays for it when the line is evicted. A miss
    that does not allocate leaves the cache untouched and writes the word
    straight through.
    """
    policy = cache.write_policy
    if policy is None:
        raise ValueError(f"{cache.config.label} does not accept data writes.")
    tag, index, _ = decode_address(address, cache.config)
    cache_set = cache.sets[index]

    way = cache_set.find_way(tag)
    if way is not None:
        cache_set.touch(way)
        state.stats.record_write(cache.name, Outcome.HIT)
        _store_word(state, cache, cache_set, way, address)
        return Outcome.HIT

    outcome, free_way = _classify(cache, cache_set)
    state.stats.record_write(cache.name, outcome)
    if not policy.allocates(outcome):
        _write_memory(state, cache, address, words=1)
        return outcome

    victim = _victim_way(cache, cache_set, free_way)
    if cache_set[victim].valid:
        _evict(state, cache, index, victim)
    _fetch_block(state, cache, address, words=policy.fill_words(outcome, cache.config.words_per_block))
    cache_set.install(victim, tag)
    _store_word(state, cache, cache_set, victim, address)
    return outcome


def _classify(cache: Cache, cache_set: CacheSet):
    """Names the miss and returns the free way that can take the block, if any."""
    free_way = cache_set.first_invalid_way()
    if free_way is not None:
        return classify_miss(False, cache.config.associativity, False), free_way
    return classify_miss(True, cache.config.associativity, True), None


def _victim_way(cache: Cache, cache_set: CacheSet, free_way):
    if free_way is not None:
        return free_way
    if cache.replacement is None:
        return 0
    return cache.replacement.select_victim(cache_set)


def _block_words(cache: Cache) -> int:
    if cache.config.is_instruction or cache.config.words_per_block == 1:
        return 0
    return cache.config.words_per_block


def _store_word(state: SimulationState, cache: Cache, cache_set: CacheSet, way: int, address: int):
    if cache.write_policy.write_back:
        cache_set[way].dirty = True
    else:
        _write_memory(state, cache, address, words=1)


def _evict(state: SimulationState, cache: Cache, index: int, way: int):
    """Flushes a dirty victim of a write-back cache before it is overwritten."""
    line = cache.sets[index][way]
    if line.dirty and cache.write_policy is not None and cache.write_policy.write_back:
        victim_address = block_address(line.tag, index, cache.config)
        _write_memory(state, cache, victim_address, words=cache.config.words_per_block)
    line.dirty = False


def _fetch_block(state: SimulationState, cache: Cache, address: int, words: int):
    if words:
        state.stats.add_words_read(cache.name, words)
    lower = state.lower_of(cache)
    if lower is not None:
        read_access(state, lower, address)


def _write_memory(state: SimulationState, cache: Cache, address: int, words: int):
    state.stats.add_words_written(cache.name, words)
    lower = state.lower_of(cache)
    if lower is not None:
        write_access(state, lower, address)
