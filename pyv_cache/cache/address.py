from __future__ import annotations
from typing import NamedTuple

from ..config import CacheConfig, BYTE_OFFSET_BITS


class AddressFields(NamedTuple):
    tag: int
    index: int
    offset: int  # word within the block


def decode_address(address: int, config: CacheConfig) -> AddressFields:
    """Decomposes a byte address into tag, set index and word offset.

    The two low bits select a byte within a 4-byte word and are dropped.
    """
    offset_mask = (1 << config.offset_bits) - 1
    index_mask = (1 << config.index_bits) - 1
    tag_mask = (1 << config.tag_bits) - 1

    offset = (address >> BYTE_OFFSET_BITS) & offset_mask
    index = (address >> (config.offset_bits + BYTE_OFFSET_BITS)) & index_mask
    tag = (address >> (config.offset_bits + config.index_bits + BYTE_OFFSET_BITS)) & tag_mask
    return AddressFields(tag, index, offset)


def block_address(tag: int, index: int, config: CacheConfig) -> int:
    """Reconstructs the first byte address of the block held under (tag, index)."""
    return ((tag << (config.index_bits + config.offset_bits + BYTE_OFFSET_BITS))
            | (index << (config.offset_bits + BYTE_OFFSET_BITS)))
