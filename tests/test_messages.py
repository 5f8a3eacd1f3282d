"""
jettoncodec Message Frame Test Suite

1. Mint request and its internal transfer
2. JettonInitial pass-through framing
3. TokenBurnNotification
4. Text frames
5. Custom layouts
"""

import pytest

from jettoncodec.cell import Address, begin_cell, to_nano
from jettoncodec.messages import (
    BurnNotification,
    InitialConfig,
    MessageEncoder,
    MessageLayout,
    MintRequest,
    TextMessage,
    mint_body,
    store_jetton_initial,
    store_token_burn_notification,
)


A = Address(0, bytes.fromhex("f8" * 32))
TREASURY = Address(-1, bytes(range(32)))


# ============================================================================
# 1. Mint
# ============================================================================

def test_mint_frame_layout():
    cell = MessageEncoder().mint(MintRequest(owner=A, jetton_amount=1000, transfer_fee=500, query_id=7))
    cs = cell.begin_parse()
    assert cs.load_uint(32) == 0x15
    assert cs.load_uint(64) == 7
    assert cs.load_address() == A
    assert cs.load_coins() == 500
    assert cs.remaining_bits == 0
    assert cs.remaining_refs == 1

    transfer = cs.load_ref().begin_parse()
    assert transfer.load_uint(32) == 0x178D4519
    assert transfer.load_uint(64) == 7
    assert transfer.load_coins() == 1000
    assert transfer.load_address() is None
    assert transfer.load_address() == A
    assert transfer.load_coins() == to_nano("0.001")
    assert transfer.load_bit() is False
    transfer.end_parse()


def test_mint_body_defaults_query_id_to_zero():
    cell = mint_body(A, 10 ** 30, to_nano("0.05"))
    cs = cell.begin_parse()
    cs.skip_bits(32)
    assert cs.load_uint(64) == 0
    assert cell.refs[0].begin_parse().skip_bits(32).load_uint(64) == 0


def test_mint_body_matches_encoder():
    assert mint_body(A, 1000, 500, 7) == MessageEncoder().mint(MintRequest(A, 1000, 500, 7))


def test_big_amounts_beyond_float_precision():
    amount = 2 ** 64 + 1
    cell = mint_body(A, amount, 1)
    transfer = cell.refs[0].begin_parse().skip_bits(32 + 64)
    assert transfer.load_coins() == amount


def test_query_id_wider_than_64_bits_is_rejected():
    with pytest.raises(ValueError):
        mint_body(A, 1, 1, 1 << 64)


# ============================================================================
# 2. JettonInitial
# ============================================================================

def test_jetton_initial_frame():
    minting_info = begin_cell().store_uint(1, 8).end_cell()
    content = begin_cell().store_uint(2, 8).end_cell()
    cell = MessageEncoder().jetton_initial(InitialConfig(TREASURY, minting_info, content))

    cs = cell.begin_parse()
    assert cs.load_uint(32) == 2412644301
    assert cs.load_address() == TREASURY
    assert cs.load_ref() == minting_info
    assert cs.load_ref() == content
    cs.end_parse()


def test_store_jetton_initial_appends_to_builder():
    minting_info = begin_cell().end_cell()
    b = begin_cell().store_uint(0xFF, 8)
    store_jetton_initial(b, InitialConfig(TREASURY, minting_info, minting_info))
    cs = b.end_cell().begin_parse()
    assert cs.load_uint(8) == 0xFF
    assert cs.load_uint(32) == 2412644301


# ============================================================================
# 3. Burn notification
# ============================================================================

def test_burn_notification_frame():
    cell = MessageEncoder().burn_notification(BurnNotification(42, 500, A))
    cs = cell.begin_parse()
    assert cs.load_uint(32) == 2078119902
    assert cs.load_uint(64) == 42
    assert cs.load_coins() == 500
    assert cs.load_address() == A
    cs.end_parse()


def test_store_token_burn_notification():
    b = begin_cell()
    store_token_burn_notification(b, BurnNotification(1, 2, A))
    assert b.end_cell() == MessageEncoder().burn_notification(BurnNotification(1, 2, A))


# ============================================================================
# 4. Text
# ============================================================================

def test_text_frame_has_no_length_prefix():
    cell = MessageEncoder().text(TextMessage("hello"))
    cs = cell.begin_parse()
    assert cs.load_uint(32) == 0
    assert cs.load_remaining_bytes() == b"hello"
    assert not cell.refs


def test_long_text_continues_in_refs():
    text = "x" * 300
    cell = MessageEncoder().text(TextMessage(text))
    assert cell.length == 32 + 123 * 8
    assert cell.refs[0].length == 127 * 8
    cs = cell.begin_parse()
    cs.skip_bits(32)
    assert cs.load_string_tail() == text


def test_text_is_utf8():
    cell = MessageEncoder().text(TextMessage("привет"))
    cs = cell.begin_parse().skip_bits(32)
    assert cs.load_string_tail() == "привет"


# ============================================================================
# 5. Layout
# ============================================================================

def test_custom_layout():
    layout = MessageLayout(mint=0x99, forward_ton_amount=0)
    cell = MessageEncoder(layout).mint(MintRequest(A, 1, 1))
    assert cell.begin_parse().load_uint(32) == 0x99
    transfer = cell.refs[0].begin_parse().skip_bits(32 + 64)
    transfer.load_coins()
    transfer.load_address()
    transfer.load_address()
    assert transfer.load_coins() == 0


def test_layout_is_frozen():
    with pytest.raises(AttributeError):
        MessageLayout().mint = 1
