import pytest
from pyv_cache.config import CacheConfig
from pyv_cache.cache.address import decode_address, block_address


def test_address_decomposition():
    """Verify that addresses are correctly decomposed into tag, index, and offset."""
    # 16 blocks, 4 words per block, 2-way -> 8 sets.
    # 2 bits byte offset, 2 bits word offset, 3 bits index.
    # Address: 0b_TAG_INDEX_WORD_BYTE
    cfg = CacheConfig.from_dcache_spec("1:16:4:2:L:B:A")
    address = 0b1111_101_10_11
    tag, index, offset = decode_address(address, cfg)
    assert tag == 0b1111
    assert index == 5
    assert offset == 2


def test_direct_mapped_single_word_blocks():
    cfg = CacheConfig.from_icache_spec("4:1:1:R")
    assert decode_address(0x0, cfg) == (0, 0, 0)
    assert decode_address(0x4, cfg) == (0, 1, 0)
    assert decode_address(0xC, cfg) == (0, 3, 0)
    assert decode_address(0x10, cfg) == (1, 0, 0)


def test_fully_associative_has_no_index_bits():
    cfg = CacheConfig.from_icache_spec("8:1:8:L")
    for address in (0x0, 0x4, 0x1234, 0xFFFFFFFC):
        fields = decode_address(address, cfg)
        assert fields.index == 0
        assert fields.tag == address >> 2


def test_tag_is_masked_to_32_bits():
    cfg = CacheConfig.from_icache_spec("4096:1:2:R")
    tag, index, _ = decode_address(0xFFFFFFFF, cfg)
    assert tag == (1 << cfg.tag_bits) - 1
    assert index == cfg.num_sets - 1


@pytest.mark.parametrize("spec", ["1:4:1:1:R:B:A", "1:64:4:4:L:T:N", "1:1024:8:1:R:B:N", "1:8:2:8:L:B:A"])
def test_set_index_always_in_range(spec):
    cfg = CacheConfig.from_dcache_spec(spec)
    for address in range(0, 1 << 14, 4):
        fields = decode_address(address, cfg)
        assert 0 <= fields.index < cfg.num_sets
        assert decode_address(address, cfg) == fields


def test_block_address_reconstruction():
    cfg = CacheConfig.from_dcache_spec("1:16:4:2:L:B:A")
    address = 0b1111_101_10_11
    tag, index, _ = decode_address(address, cfg)
    base = block_address(tag, index, cfg)
    assert base == 0b1111_101_00_00
    assert decode_address(base, cfg) == (tag, index, 0)
