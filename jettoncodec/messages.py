"""
jettoncodec Message Frames

Fixed-layout request bodies understood by the jetton minter contract. Every
frame starts with a 32-bit opcode that tells the receiver which layout
follows:

    Mint                  op=0x15        query_id:uint64 owner:Address fee:Coins ^InternalTransfer
    InternalTransfer      op=0x178d4519  query_id:uint64 amount:Coins from:addr_none
                                         to:Address forward_ton:Coins forward_payload:bit(0)
    JettonInitial         op=2412644301  treasury:Address ^minting_info ^token_content
    TokenBurnNotification op=2078119902  query_id:uint64 amount:Coins response:Address
    Text                  op=0           UTF-8 bytes to the end of the cell (ref chain on overflow)

All encoders are pure: same input, bit-identical cell.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from jettoncodec.cell import Address, Builder, Cell, begin_cell, to_nano


QUERY_ID_BITS = 64
OPCODE_BITS = 32


# ============================================================================
# Layout constants
# ============================================================================

@dataclass(frozen=True)
class MessageLayout:
    """Opcodes and fixed amounts shared by the frame encoders."""
    mint: int = 0x15
    internal_transfer: int = 0x178D4519
    jetton_initial: int = 2412644301
    token_burn_notification: int = 2078119902
    text_comment: int = 0
    # attached to the internal transfer so the wallet can notify the owner
    forward_ton_amount: int = field(default_factory=lambda: to_nano("0.001"))


# ============================================================================
# Frames
# ============================================================================

@dataclass(frozen=True)
class MintRequest:
    owner: Address
    jetton_amount: int
    transfer_fee: int
    query_id: int = 0


@dataclass(frozen=True)
class InitialConfig:
    """JettonInitial: treasury plus two opaque cells built elsewhere."""
    treasury: Address
    minting_info: Cell
    token_content: Cell


@dataclass(frozen=True)
class BurnNotification:
    query_id: int
    amount: int
    response_destination: Address


@dataclass(frozen=True)
class TextMessage:
    """Plain text command, sent with a zero opcode."""
    text: str


# ============================================================================
# Encoder
# ============================================================================

class MessageEncoder:
    """Builds frame cells from typed requests using one MessageLayout."""

    def __init__(self, layout: Optional[MessageLayout] = None) -> None:
        self.layout = layout or MessageLayout()

    def internal_transfer(self, owner: Address, jetton_amount: int, query_id: int = 0) -> Cell:
        return (
            begin_cell()
            .store_uint(self.layout.internal_transfer, OPCODE_BITS)
            .store_uint(query_id, QUERY_ID_BITS)
            .store_coins(jetton_amount)
            .store_address(None)
            .store_address(owner)
            .store_coins(self.layout.forward_ton_amount)
            .store_bit(0)  # forward_payload inline, not in a ref
            .end_cell()
        )

    def mint(self, request: MintRequest) -> Cell:
        transfer = self.internal_transfer(
            request.owner, request.jetton_amount, request.query_id
        )
        return (
            begin_cell()
            .store_uint(self.layout.mint, OPCODE_BITS)
            .store_uint(request.query_id, QUERY_ID_BITS)
            .store_address(request.owner)
            .store_coins(request.transfer_fee)
            .store_ref(transfer)
            .end_cell()
        )

    def store_jetton_initial(self, builder: Builder, message: InitialConfig) -> Builder:
        builder.store_uint(self.layout.jetton_initial, OPCODE_BITS)
        builder.store_address(message.treasury)
        builder.store_ref(message.minting_info)
        return builder.store_ref(message.token_content)

    def jetton_initial(self, message: InitialConfig) -> Cell:
        return self.store_jetton_initial(begin_cell(), message).end_cell()

    def store_burn_notification(self, builder: Builder, message: BurnNotification) -> Builder:
        builder.store_uint(self.layout.token_burn_notification, OPCODE_BITS)
        builder.store_uint(message.query_id, QUERY_ID_BITS)
        builder.store_coins(message.amount)
        return builder.store_address(message.response_destination)

    def burn_notification(self, message: BurnNotification) -> Cell:
        return self.store_burn_notification(begin_cell(), message).end_cell()

    def text(self, message: TextMessage) -> Cell:
        return (
            begin_cell()
            .store_uint(self.layout.text_comment, OPCODE_BITS)
            .store_string_tail(message.text)
            .end_cell()
        )


def mint_body(
    owner: Address,
    jetton_amount: int,
    transfer_fee: int,
    query_id: Optional[int] = None,
) -> Cell:
    """Mint request with the default layout. A missing query id is sent as 0."""
    return MessageEncoder().mint(
        MintRequest(owner, jetton_amount, transfer_fee, query_id or 0)
    )


def store_jetton_initial(builder: Builder, message: InitialConfig) -> Builder:
    return MessageEncoder().store_jetton_initial(builder, message)


def store_token_burn_notification(builder: Builder, message: BurnNotification) -> Builder:
    return MessageEncoder().store_burn_notification(builder, message)
