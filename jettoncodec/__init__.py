"""
jettoncodec - Jetton cell-tree codec
Encodes jetton metadata and minter messages into TON cells.

Cells:     Builder / Cell / Slice primitives, addresses and coin amounts
Content:   Snake encoding and the on-chain metadata dictionary
Messages:  Mint, JettonInitial, TokenBurnNotification and text frames
Contract:  Minter facade over an abstract provider
"""

__version__ = "0.1.0"

from jettoncodec.cell import Address, Builder, Cell, Slice, begin_cell, from_nano, to_nano
from jettoncodec.dictionary import CellDictionary
from jettoncodec.snake import CELL_CAPACITY_BYTES, decode_snake, encode_snake
from jettoncodec.metadata import (
    MetadataCellBuilder,
    MetadataKey,
    MetadataSpec,
    build_token_metadata_cell,
    read_token_metadata,
)
from jettoncodec.messages import (
    BurnNotification,
    InitialConfig,
    MessageEncoder,
    MessageLayout,
    MintRequest,
    TextMessage,
    mint_body,
)
from jettoncodec.dispatch import MINT, OWNER_CLAIM, encode_message
from jettoncodec.contract import ContractProvider, Jetton, JettonData, SendMode, TupleItem, TupleReader
from jettoncodec.graph import CellGraph
from jettoncodec.errors import (
    CellOverflowError,
    CellUnderflowError,
    InvalidMessageError,
    JettonCodecError,
    UnsupportedKeyError,
)

__all__ = [
    "Address",
    "Builder",
    "Cell",
    "Slice",
    "begin_cell",
    "from_nano",
    "to_nano",
    "CellDictionary",
    "CELL_CAPACITY_BYTES",
    "decode_snake",
    "encode_snake",
    "MetadataCellBuilder",
    "MetadataKey",
    "MetadataSpec",
    "build_token_metadata_cell",
    "read_token_metadata",
    "BurnNotification",
    "InitialConfig",
    "MessageEncoder",
    "MessageLayout",
    "MintRequest",
    "TextMessage",
    "mint_body",
    "MINT",
    "OWNER_CLAIM",
    "encode_message",
    "ContractProvider",
    "Jetton",
    "JettonData",
    "SendMode",
    "TupleItem",
    "TupleReader",
    "CellGraph",
    "CellOverflowError",
    "CellUnderflowError",
    "InvalidMessageError",
    "JettonCodecError",
    "UnsupportedKeyError",
]
