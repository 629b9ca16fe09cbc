from __future__ import annotations
from dataclasses import dataclass

from ..config import CacheConfig, WriteScheme, AllocationScheme
from .classify import Outcome


@dataclass(frozen=True)
class WritePolicy:
    """Write behavior of a data cache, resolved once from its two schemes.

    Compulsory write misses in a write-back cache always allocate, whatever
    the allocation scheme says; conflict and capacity misses follow it.
    """
    write_scheme: WriteScheme
    allocate_scheme: AllocationScheme
    allocate_on_compulsory: bool
    allocate_on_eviction: bool
    # whole block fetched even for one-word blocks
    full_fill_on_compulsory: bool

    @property
    def write_back(self) -> bool:
        return self.write_scheme is WriteScheme.WRITE_BACK

    def allocates(self, outcome: Outcome) -> bool:
        if outcome is Outcome.COMPULSORY:
            return self.allocate_on_compulsory
        return self.allocate_on_eviction

    def fill_words(self, outcome: Outcome, words_per_block: int) -> int:
        """Words read from the next level when a write miss allocates."""
        if outcome is Outcome.COMPULSORY and self.full_fill_on_compulsory:
            return words_per_block
        return words_per_block if words_per_block > 1 else 0

    @classmethod
    def for_config(cls, config: CacheConfig) -> WritePolicy:
        key = (config.write_scheme, config.allocate_scheme)
        if key not in _POLICIES:
            raise ValueError(f"Unknown or unsupported write policy: {key}")
        return _POLICIES[key]


_WB, _WT = WriteScheme.WRITE_BACK, WriteScheme.WRITE_THROUGH
_A, _NA = AllocationScheme.ALLOCATE, AllocationScheme.NO_ALLOCATE

_POLICIES = {
    (_WT, _NA): WritePolicy(_WT, _NA, allocate_on_compulsory=False, allocate_on_eviction=False, full_fill_on_compulsory=False),
    (_WT, _A): WritePolicy(_WT, _A, allocate_on_compulsory=True, allocate_on_eviction=True, full_fill_on_compulsory=False),
    (_WB, _NA): WritePolicy(_WB, _NA, allocate_on_compulsory=True, allocate_on_eviction=False, full_fill_on_compulsory=True),
    (_WB, _A): WritePolicy(_WB, _A, allocate_on_compulsory=True, allocate_on_eviction=True, full_fill_on_compulsory=True),
}
