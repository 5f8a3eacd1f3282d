"""
jettoncodec Cell Primitive Test Suite

Tests the building blocks every encoder relies on:
1. Builder / Slice symmetry for typed fields
2. Bit and ref limits
3. Coin amounts and nanoton conversion
4. Addresses (raw and user-friendly)
5. Representation hash and hex dump
"""

import pytest

from jettoncodec.cell import MAX_BITS, Address, Cell, begin_cell, from_nano, to_nano
from jettoncodec.errors import CellOverflowError, CellUnderflowError


OWNER = Address(0, bytes(range(32)))


# ============================================================================
# 1. Typed fields
# ============================================================================

def test_uint_and_int_fields_read_back():
    cell = (
        begin_cell()
        .store_uint(0x15, 32)
        .store_int(-1, 8)
        .store_bit(True)
        .store_bytes(b"hi")
        .end_cell()
    )
    cs = cell.begin_parse()
    assert cs.load_uint(32) == 0x15
    assert cs.load_int(8) == -1
    assert cs.load_bit() is True
    assert cs.load_bytes(2) == b"hi"
    cs.end_parse()


def test_uint_out_of_range_is_rejected():
    with pytest.raises(ValueError):
        begin_cell().store_uint(256, 8)
    with pytest.raises(ValueError):
        begin_cell().store_uint(-1, 8)


def test_int_out_of_range_is_rejected():
    with pytest.raises(ValueError):
        begin_cell().store_int(128, 8)
    with pytest.raises(ValueError):
        begin_cell().store_int(-129, 8)


def test_preload_does_not_advance():
    cs = begin_cell().store_uint(7, 4).end_cell().begin_parse()
    assert cs.preload_uint(4) == 7
    assert cs.load_uint(4) == 7
    assert cs.remaining_bits == 0


# ============================================================================
# 2. Limits
# ============================================================================

def test_bit_budget_is_enforced():
    b = begin_cell().store_bytes(b"\x00" * 127)
    assert b.available_bits == MAX_BITS - 1016
    b.store_uint(0, 7)
    assert b.available_bits == 0
    with pytest.raises(CellOverflowError):
        b.store_bit(0)


def test_ref_budget_is_enforced():
    leaf = begin_cell().end_cell()
    b = begin_cell()
    for _ in range(4):
        b.store_ref(leaf)
    with pytest.raises(CellOverflowError):
        b.store_ref(leaf)
    with pytest.raises(CellOverflowError):
        b.store_maybe_ref(leaf)
    # the failed maybe-ref must not leave a dangling flag bit
    assert b.bits_used == 0


def test_reading_past_the_end_underflows():
    cs = begin_cell().store_uint(1, 3).end_cell().begin_parse()
    with pytest.raises(CellUnderflowError):
        cs.load_uint(4)
    with pytest.raises(CellUnderflowError):
        cs.load_ref()


def test_store_ref_requires_a_finished_cell():
    with pytest.raises(TypeError):
        begin_cell().store_ref(begin_cell())


def test_string_tail_overflow_leaves_builder_untouched():
    leaf = begin_cell().end_cell()
    b = begin_cell()
    for _ in range(4):
        b.store_ref(leaf)
    with pytest.raises(CellOverflowError):
        b.store_string_tail("x" * 200)
    assert b.bits_used == 0
    # a tail that fits needs no ref
    b.store_string_tail("fits")
    assert b.bits_used == 32


# ============================================================================
# 3. Coins
# ============================================================================

def test_zero_coins_is_four_bits():
    cell = begin_cell().store_coins(0).end_cell()
    assert cell.length == 4
    assert cell.begin_parse().load_coins() == 0


def test_coins_use_minimal_byte_length():
    cell = begin_cell().store_coins(500).end_cell()
    assert cell.length == 4 + 16
    cs = cell.begin_parse()
    assert cs.preload_uint(4) == 2
    assert cs.load_coins() == 500


def test_coins_beyond_fifteen_bytes_are_rejected():
    with pytest.raises(ValueError):
        begin_cell().store_coins(1 << 120)


def test_to_nano():
    assert to_nano("0.001") == 1_000_000
    assert to_nano(0.001) == 1_000_000
    assert to_nano(1) == 10 ** 9
    assert to_nano("0.05") == 50_000_000
    with pytest.raises(ValueError):
        to_nano("0.0000000001")
    with pytest.raises(ValueError):
        to_nano("-1")
    with pytest.raises(ValueError):
        to_nano("abc")


def test_from_nano():
    assert from_nano(1_500_000_000) == "1.5"
    assert from_nano(2 * 10 ** 9) == "2"
    assert from_nano(1) == "0.000000001"


# ============================================================================
# 4. Addresses
# ============================================================================

def test_address_field_layout():
    cell = begin_cell().store_address(OWNER).end_cell()
    assert cell.length == 2 + 1 + 8 + 256
    assert cell.begin_parse().preload_uint(2) == 0b10
    assert cell.begin_parse().load_address() == OWNER


def test_none_address_is_two_zero_bits():
    cell = begin_cell().store_address(None).end_cell()
    assert cell.length == 2
    assert cell.begin_parse().load_address() is None


def test_masterchain_address_keeps_sign():
    master = Address(-1, b"\xff" * 32)
    cs = begin_cell().store_address(master).end_cell().begin_parse()
    assert cs.load_address().workchain == -1


def test_raw_address_parse():
    raw = "0:" + bytes(range(32)).hex()
    assert Address.parse(raw) == OWNER
    assert OWNER.to_raw() == raw


@pytest.mark.parametrize("bounceable,testnet", [(True, False), (False, False), (True, True)])
def test_friendly_address_round_trip(bounceable, testnet):
    text = OWNER.to_friendly(bounceable=bounceable, testnet=testnet)
    assert len(text) == 48
    assert Address.parse(text) == OWNER


def test_friendly_address_standard_base64():
    text = Address(0, b"\xfb" * 32).to_friendly(url_safe=False)
    assert Address.parse(text) == Address(0, b"\xfb" * 32)


def test_friendly_address_checksum_is_verified():
    text = OWNER.to_friendly()
    broken = text[:-3] + ("A" if text[-3] != "A" else "B") + text[-2:]
    with pytest.raises(ValueError):
        Address.parse(broken)


def test_address_validates_parts():
    with pytest.raises(ValueError):
        Address(0, b"\x00" * 31)
    with pytest.raises(ValueError):
        Address(200, b"\x00" * 32)


# ============================================================================
# 5. Hash and dump
# ============================================================================

def test_empty_cell_hash():
    assert begin_cell().end_cell().hash.hex() == (
        "96a296d224f285c67bee93c30f8a309157f0daa35dc5b87e410b78630a09cfc7"
    )


def test_equal_content_means_equal_cells():
    a = begin_cell().store_uint(5, 7).store_ref(begin_cell().end_cell()).end_cell()
    b = begin_cell().store_uint(5, 7).store_ref(begin_cell().end_cell()).end_cell()
    assert a == b
    assert len({a, b}) == 1
    assert a != begin_cell().store_uint(5, 8).end_cell()


def test_depth():
    leaf = begin_cell().end_cell()
    mid = begin_cell().store_ref(leaf).end_cell()
    top = begin_cell().store_ref(leaf).store_ref(mid).end_cell()
    assert leaf.depth == 0
    assert mid.depth == 1
    assert top.depth == 2


def test_hex_uses_completion_tag():
    assert begin_cell().store_uint(0b101, 3).end_cell().hex() == "B_"
    assert begin_cell().store_uint(0x15, 32).end_cell().hex() == "00000015"
    assert begin_cell().end_cell().hex() == ""


def test_dump_indents_children():
    leaf = begin_cell().store_uint(0xAB, 8).end_cell()
    root = begin_cell().store_uint(1, 4).store_ref(leaf).end_cell()
    assert root.dump() == "x{1}\n x{AB}"


def test_cell_rejects_oversized_payload():
    with pytest.raises(CellOverflowError):
        Cell(0, MAX_BITS + 1)
    with pytest.raises(ValueError):
        Cell(0b100, 2)


def test_dump_keeps_ref_order():
    a = begin_cell().store_uint(0xA, 4).end_cell()
    b = begin_cell().store_uint(0xB, 4).store_ref(a).end_cell()
    root = begin_cell().store_ref(b).store_ref(a).end_cell()
    assert root.dump() == "x{}\n x{B}\n  x{A}\n x{A}"


def test_long_chain_hash_depth_and_dump():
    cell = begin_cell().store_uint(0, 8).end_cell()
    for _ in range(1000):
        cell = begin_cell().store_uint(1, 8).store_ref(cell).end_cell()
    assert cell.depth == 1000
    assert len(cell.hash) == 32
    assert cell.dump().count("\n") == 1000
