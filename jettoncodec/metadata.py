"""
jettoncodec On-chain Token Metadata

Builds the jetton content cell (TEP-64 on-chain layout):

    content = int8 0x00 · HashmapE 256 ^Cell

Each recognized metadata key (name, description, image, symbol) maps to a
snake-encoded value cell. The dictionary key is the first 256 bits of the
SHA-256 of the UTF-8 key name. Text fields are UTF-8; the image URL is ASCII.

Empty or missing values are left out of the dictionary. An unrecognized key
fails the whole build, even if its value is empty.

Usage:
    content = build_token_metadata_cell({"name": "MyJetton", "symbol": "JET1"})
    read_token_metadata(content)   # {'name': 'MyJetton', 'symbol': 'JET1'}
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from loguru import logger

from jettoncodec.cell import Cell, begin_cell
from jettoncodec.dictionary import CellDictionary
from jettoncodec.errors import UnsupportedKeyError
from jettoncodec.snake import SNAKE_PREFIX, decode_snake, encode_snake


ONCHAIN_CONTENT_PREFIX = 0x00


class MetadataKey(str, Enum):
    """Recognized on-chain metadata keys."""
    NAME = "name"
    DESCRIPTION = "description"
    IMAGE = "image"
    SYMBOL = "symbol"


def sha256_digest(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _default_encodings() -> Mapping[str, str]:
    return {
        MetadataKey.NAME.value: "utf-8",
        MetadataKey.DESCRIPTION.value: "utf-8",
        MetadataKey.IMAGE.value: "ascii",
        MetadataKey.SYMBOL.value: "utf-8",
    }


def _key_name(key: Any) -> Any:
    return key.value if isinstance(key, MetadataKey) else key


@dataclass(frozen=True, eq=False)
class MetadataSpec:
    """Immutable table driving the metadata encoder.

    Attributes:
        encodings: key name -> text codec used for its value
        content_prefix: leading int8 of the content cell (0x00 = on-chain)
        snake_prefix: leading byte of every snake-encoded value
        key_bits: dictionary key width
        hasher: bytes -> digest; the digest is truncated to key_bits
    """
    encodings: Mapping[str, str] = field(default_factory=_default_encodings)
    content_prefix: int = ONCHAIN_CONTENT_PREFIX
    snake_prefix: int = SNAKE_PREFIX
    key_bits: int = 256
    hasher: Callable[[bytes], bytes] = sha256_digest

    def __post_init__(self) -> None:
        if self.key_bits % 8:
            raise ValueError(f"Key width must be whole bytes, got {self.key_bits}")
        object.__setattr__(self, "encodings", MappingProxyType(dict(self.encodings)))
        # four fixed keys; a collision would silently merge two fields
        keys = [self.dictionary_key(name) for name in self.encodings]
        if len(set(keys)) != len(keys):
            raise ValueError("Metadata keys collide after hash truncation")

    def encoding_for(self, key: Any) -> str:
        name = _key_name(key)
        if not isinstance(name, str) or name not in self.encodings:
            raise UnsupportedKeyError(str(name))
        return self.encodings[name]

    def dictionary_key(self, key: Any) -> int:
        name = _key_name(key)
        digest = self.hasher(name.encode("utf-8"))
        size = self.key_bits // 8
        if len(digest) < size:
            raise ValueError(f"Digest is {len(digest)} bytes, need at least {size}")
        return int.from_bytes(digest[:size], "big")


class MetadataCellBuilder:
    """Encodes a metadata mapping into a content cell, and back."""

    def __init__(self, spec: Optional[MetadataSpec] = None) -> None:
        self.spec = spec or MetadataSpec()

    def build_dictionary(self, data: Mapping[Any, Optional[str]]) -> CellDictionary:
        spec = self.spec
        # validate every key before encoding anything
        for key in data:
            spec.encoding_for(key)

        dictionary = CellDictionary(spec.key_bits)
        for key, value in data.items():
            if value is None or value == "":
                continue
            raw = value.encode(spec.encoding_for(key))
            dictionary.set(spec.dictionary_key(key), encode_snake(raw, spec.snake_prefix))
        return dictionary

    def build(self, data: Mapping[Any, Optional[str]]) -> Cell:
        dictionary = self.build_dictionary(data)
        cell = (
            begin_cell()
            .store_int(self.spec.content_prefix, 8)
            .store_dict(dictionary.serialize())
            .end_cell()
        )
        logger.debug(
            "Built metadata cell with {} of {} fields", len(dictionary), len(data)
        )
        return cell

    def read(self, content: Cell) -> dict[str, str]:
        """Decode recognized fields from a content cell. Unknown keys are skipped."""
        cs = content.begin_parse()
        prefix = cs.load_int(8)
        if prefix != self.spec.content_prefix:
            raise ValueError(
                f"Not on-chain content: prefix {prefix:#04x}, "
                f"expected {self.spec.content_prefix:#04x}"
            )
        dictionary = CellDictionary.load(cs, self.spec.key_bits)

        result: dict[str, str] = {}
        for name, codec in self.spec.encodings.items():
            value = dictionary.get(self.spec.dictionary_key(name))
            if value is not None:
                result[name] = decode_snake(value, self.spec.snake_prefix).decode(codec)
        return result


def build_token_metadata_cell(
    data: Mapping[Any, Optional[str]],
    spec: Optional[MetadataSpec] = None,
) -> Cell:
    return MetadataCellBuilder(spec).build(data)


def read_token_metadata(content: Cell, spec: Optional[MetadataSpec] = None) -> dict[str, str]:
    return MetadataCellBuilder(spec).read(content)
