"""
jettoncodec Cell Primitives

A Cell is the atomic unit of the TON data format: an ordered bit payload of
at most 1023 bits plus an ordered list of at most 4 child cells. Everything
the codec produces (snake chains, metadata dictionaries, message frames) is a
tree of these.

Key concepts:
- Builder: mutable accumulator; append bits, typed fields, refs, then end_cell()
- Cell: immutable result, identified by its representation hash
- Slice: read cursor over a Cell, the inverse of Builder
- Address: standard internal address (workchain + 256-bit account id)

Usage:
    cell = (
        begin_cell()
        .store_uint(0x15, 32)
        .store_address(owner)
        .store_coins(to_nano("0.05"))
        .end_cell()
    )
    cs = cell.begin_parse()
    assert cs.load_uint(32) == 0x15
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from jettoncodec.errors import CellOverflowError, CellUnderflowError


MAX_BITS = 1023
MAX_REFS = 4

# VarUInteger 16: 4-bit length prefix, up to 15 value bytes
COINS_LENGTH_BITS = 4
NANO = 10 ** 9


# ============================================================================
# Address
# ============================================================================

_FRIENDLY_BOUNCEABLE = 0x11
_FRIENDLY_NON_BOUNCEABLE = 0x51
_FRIENDLY_TESTNET = 0x80


@dataclass(frozen=True)
class Address:
    """Standard internal address (addr_std without anycast).

    Attributes:
        workchain: Signed 8-bit workchain id (0 for basechain, -1 for masterchain)
        hash_part: 32-byte account id
    """
    workchain: int
    hash_part: bytes

    def __post_init__(self) -> None:
        if not -128 <= self.workchain <= 127:
            raise ValueError(f"Workchain {self.workchain} does not fit in int8")
        if len(self.hash_part) != 32:
            raise ValueError(
                f"Account id must be 32 bytes, got {len(self.hash_part)}"
            )

    @classmethod
    def parse(cls, text: str) -> Address:
        """Parse raw (``0:ab12...``) or user-friendly (48 char base64) form."""
        text = text.strip()
        if ":" in text:
            wc, _, hex_part = text.partition(":")
            try:
                return cls(int(wc), bytes.fromhex(hex_part))
            except ValueError as e:
                raise ValueError(f"Invalid raw address {text!r}: {e}") from e
        return cls._parse_friendly(text)

    @classmethod
    def _parse_friendly(cls, text: str) -> Address:
        if len(text) != 48:
            raise ValueError(f"Unknown address format: {text!r}")
        try:
            raw = base64.urlsafe_b64decode(text.replace("+", "-").replace("/", "_"))
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 address {text!r}") from e
        if len(raw) != 36:
            raise ValueError(f"Invalid address length in {text!r}")

        body, checksum = raw[:34], raw[34:]
        if binascii.crc_hqx(body, 0).to_bytes(2, "big") != checksum:
            raise ValueError(f"Address checksum mismatch in {text!r}")

        tag = body[0] & ~_FRIENDLY_TESTNET
        if tag not in (_FRIENDLY_BOUNCEABLE, _FRIENDLY_NON_BOUNCEABLE):
            raise ValueError(f"Unknown address tag {body[0]:#04x}")
        workchain = int.from_bytes(body[1:2], "big", signed=True)
        return cls(workchain, bytes(body[2:34]))

    def to_raw(self) -> str:
        return f"{self.workchain}:{self.hash_part.hex()}"

    def to_friendly(
        self,
        bounceable: bool = True,
        testnet: bool = False,
        url_safe: bool = True,
    ) -> str:
        tag = _FRIENDLY_BOUNCEABLE if bounceable else _FRIENDLY_NON_BOUNCEABLE
        if testnet:
            tag |= _FRIENDLY_TESTNET
        body = bytes([tag]) + self.workchain.to_bytes(1, "big", signed=True) + self.hash_part
        raw = body + binascii.crc_hqx(body, 0).to_bytes(2, "big")
        if url_safe:
            return base64.urlsafe_b64encode(raw).decode("ascii")
        return base64.b64encode(raw).decode("ascii")

    def __str__(self) -> str:
        return self.to_friendly()

    def __repr__(self) -> str:
        return f"<Address {self.to_raw()}>"


# ============================================================================
# Coin amounts
# ============================================================================

def to_nano(value: Union[int, str, Decimal]) -> int:
    """Convert an amount of TON to nanotons.

    Accepts ints, decimal strings and Decimals. Floats are rejected upstream
    by going through str(), so 0.001 and "0.001" give the same result.
    """
    try:
        amount = Decimal(str(value)) * NANO
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e
    if amount != amount.to_integral_value():
        raise ValueError(f"{value!r} has more than 9 decimal places")
    if amount < 0:
        raise ValueError(f"Negative amount: {value!r}")
    return int(amount)


def from_nano(amount: int) -> str:
    """Format nanotons as a TON decimal string."""
    whole, frac = divmod(amount, NANO)
    if not frac:
        return str(whole)
    return f"{whole}.{frac:09d}".rstrip("0")


# ============================================================================
# Cell
# ============================================================================

@dataclass(frozen=True, eq=False)
class Cell:
    """Immutable cell: up to 1023 bits and up to 4 child references.

    The payload is held as a non-negative integer (most significant bit
    first) together with its exact bit length.

    Attributes:
        bits: Payload bits as an integer
        length: Number of payload bits
        refs: Child cells in order
    """
    bits: int = 0
    length: int = 0
    refs: tuple[Cell, ...] = ()
    depth: int = field(init=False, repr=False)
    hash: bytes = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.length > MAX_BITS:
            raise CellOverflowError(f"Cell holds {self.length} bits, max is {MAX_BITS}")
        if len(self.refs) > MAX_REFS:
            raise CellOverflowError(f"Cell holds {len(self.refs)} refs, max is {MAX_REFS}")
        if self.bits < 0 or self.bits >> self.length:
            raise ValueError("Payload does not fit in declared bit length")
        # children are already finalized, so both values are O(1) per cell
        object.__setattr__(self, "depth", self._compute_depth())
        object.__setattr__(self, "hash", self._compute_hash())

    def _compute_depth(self) -> int:
        """0 for a leaf, otherwise 1 + the deepest child."""
        if not self.refs:
            return 0
        return 1 + max(ref.depth for ref in self.refs)

    def _compute_hash(self) -> bytes:
        """Representation hash of an ordinary cell (SHA-256).

        repr = d1 || d2 || padded data || child depths (2 bytes each) || child hashes
        """
        d1 = len(self.refs)
        d2 = (self.length // 8) + ((self.length + 7) // 8)
        parts = [bytes([d1, d2]), self._augmented_bytes()]
        parts.extend(ref.depth.to_bytes(2, "big") for ref in self.refs)
        parts.extend(ref.hash for ref in self.refs)
        return hashlib.sha256(b"".join(parts)).digest()

    def _augmented_bytes(self) -> bytes:
        """Payload padded to a byte boundary with a 1 bit followed by 0 bits."""
        pad = (-self.length) % 8
        value = self.bits
        if pad:
            value = (value << pad) | (1 << (pad - 1))
        return value.to_bytes((self.length + pad) // 8, "big")

    def to_bytes(self) -> bytes:
        """Payload as bytes. Only valid when the bit length is byte-aligned."""
        if self.length % 8:
            raise ValueError(f"Cell payload is {self.length} bits, not byte-aligned")
        return self.bits.to_bytes(self.length // 8, "big")

    def begin_parse(self) -> Slice:
        return Slice(self)

    def hex(self) -> str:
        """Fift-style hex of the payload; '_' marks a completion tag."""
        if self.length == 0:
            return ""
        pad = (-self.length) % 4
        value = self.bits
        if pad:
            value = (value << pad) | (1 << (pad - 1))
        digits = (self.length + pad) // 4
        text = f"{value:0{digits}X}"
        return text + "_" if pad else text

    def dump(self, indent: int = 0) -> str:
        """Multi-line dump of the whole tree, one cell per line."""
        lines = []
        stack = [(self, indent)]
        while stack:
            cell, level = stack.pop()
            lines.append(f"{' ' * level}x{{{cell.hex()}}}")
            stack.extend((ref, level + 1) for ref in reversed(cell.refs))
        return "\n".join(lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self.hash == other.hash

    def __hash__(self) -> int:
        return int.from_bytes(self.hash[:8], "big")

    def __repr__(self) -> str:
        return f"<Cell {self.length}b {len(self.refs)}r x{{{self.hex()}}}>"


# ============================================================================
# Builder
# ============================================================================

class Builder:
    """Accumulates bits and refs, then finalizes into an immutable Cell.

    Every store_* method returns the builder so calls can be chained.
    """

    def __init__(self) -> None:
        self._bits = 0
        self._length = 0
        self._refs: list[Cell] = []

    @property
    def bits_used(self) -> int:
        return self._length

    @property
    def available_bits(self) -> int:
        return MAX_BITS - self._length

    @property
    def refs_used(self) -> int:
        return len(self._refs)

    @property
    def available_refs(self) -> int:
        return MAX_REFS - len(self._refs)

    def _append(self, value: int, width: int) -> Builder:
        if width > self.available_bits:
            raise CellOverflowError(
                f"Cannot store {width} bits, only {self.available_bits} available"
            )
        self._bits = (self._bits << width) | value
        self._length += width
        return self

    def store_bit(self, bit: Union[bool, int]) -> Builder:
        return self._append(1 if bit else 0, 1)

    def store_uint(self, value: int, width: int) -> Builder:
        if width < 0:
            raise ValueError(f"Negative bit width {width}")
        if value < 0 or value >> width:
            raise ValueError(f"{value} does not fit in uint{width}")
        return self._append(value, width)

    def store_int(self, value: int, width: int) -> Builder:
        if width <= 0:
            if value != 0:
                raise ValueError(f"{value} does not fit in int{width}")
            return self
        bound = 1 << (width - 1)
        if not -bound <= value < bound:
            raise ValueError(f"{value} does not fit in int{width}")
        return self._append(value & ((1 << width) - 1), width)

    def store_bytes(self, data: bytes) -> Builder:
        if not data:
            return self
        return self._append(int.from_bytes(data, "big"), len(data) * 8)

    def store_var_uint(self, value: int, length_bits: int) -> Builder:
        """VarUInteger: byte count in `length_bits` bits, then the value bytes."""
        if value < 0:
            raise ValueError(f"Negative varuint {value}")
        size = (value.bit_length() + 7) // 8
        if size >> length_bits:
            raise ValueError(f"{value} is too large for a {length_bits}-bit length prefix")
        self.store_uint(size, length_bits)
        return self.store_uint(value, size * 8)

    def store_coins(self, amount: int) -> Builder:
        return self.store_var_uint(amount, COINS_LENGTH_BITS)

    def store_address(self, address: Optional[Address]) -> Builder:
        """addr_std$10 without anycast, or addr_none$00 for None."""
        if address is None:
            return self.store_uint(0b00, 2)
        self.store_uint(0b10, 2)
        self.store_bit(0)
        self.store_int(address.workchain, 8)
        return self.store_bytes(address.hash_part)

    def store_ref(self, cell: Cell) -> Builder:
        if not isinstance(cell, Cell):
            raise TypeError(f"store_ref expects a Cell, got {type(cell).__name__}")
        if not self.available_refs:
            raise CellOverflowError(f"Cell already holds {MAX_REFS} refs")
        self._refs.append(cell)
        return self

    def store_maybe_ref(self, cell: Optional[Cell]) -> Builder:
        if cell is None:
            return self.store_bit(0)
        # check room for the ref before writing the flag bit
        if not self.available_refs:
            raise CellOverflowError(f"Cell already holds {MAX_REFS} refs")
        self.store_bit(1)
        return self.store_ref(cell)

    def store_dict(self, root: Optional[Cell]) -> Builder:
        """HashmapE: a 0 bit when empty, else a 1 bit and a ref to the root edge."""
        return self.store_maybe_ref(root)

    def store_string_tail(self, text: str) -> Builder:
        """UTF-8 bytes filling this cell, overflow continued in a ref chain."""
        data = text.encode("utf-8")
        head_size = self.available_bits // 8
        head, rest = data[:head_size], data[head_size:]
        if rest and not self.available_refs:
            raise CellOverflowError(f"Cell already holds {MAX_REFS} refs")
        self.store_bytes(head)
        if rest:
            chunk = MAX_BITS // 8
            chunks = [rest[i:i + chunk] for i in range(0, len(rest), chunk)]
            tail: Optional[Cell] = None
            for part in reversed(chunks):
                b = Builder().store_bytes(part)
                if tail is not None:
                    b.store_ref(tail)
                tail = b.end_cell()
            self.store_ref(tail)
        return self

    def end_cell(self) -> Cell:
        return Cell(self._bits, self._length, tuple(self._refs))

    def __repr__(self) -> str:
        return f"<Builder {self._length}b {len(self._refs)}r>"


def begin_cell() -> Builder:
    return Builder()


# ============================================================================
# Slice
# ============================================================================

class Slice:
    """Read cursor over a Cell. Reads consume bits and refs left to right."""

    def __init__(self, cell: Cell) -> None:
        self._cell = cell
        self._bit_pos = 0
        self._ref_pos = 0

    @property
    def remaining_bits(self) -> int:
        return self._cell.length - self._bit_pos

    @property
    def remaining_refs(self) -> int:
        return len(self._cell.refs) - self._ref_pos

    def _peek(self, width: int) -> int:
        if width > self.remaining_bits:
            raise CellUnderflowError(
                f"Cannot read {width} bits, only {self.remaining_bits} left"
            )
        shift = self._cell.length - self._bit_pos - width
        return (self._cell.bits >> shift) & ((1 << width) - 1)

    def preload_uint(self, width: int) -> int:
        return self._peek(width)

    def load_uint(self, width: int) -> int:
        value = self._peek(width)
        self._bit_pos += width
        return value

    def load_int(self, width: int) -> int:
        if width == 0:
            return 0
        value = self.load_uint(width)
        if value >> (width - 1):
            value -= 1 << width
        return value

    def load_bit(self) -> bool:
        return bool(self.load_uint(1))

    def skip_bits(self, width: int) -> Slice:
        self.load_uint(width)
        return self

    def load_bytes(self, count: int) -> bytes:
        return self.load_uint(count * 8).to_bytes(count, "big")

    def load_remaining_bytes(self) -> bytes:
        if self.remaining_bits % 8:
            raise ValueError(f"{self.remaining_bits} bits left, not byte-aligned")
        return self.load_bytes(self.remaining_bits // 8)

    def load_var_uint(self, length_bits: int) -> int:
        size = self.load_uint(length_bits)
        return self.load_uint(size * 8)

    def load_coins(self) -> int:
        return self.load_var_uint(COINS_LENGTH_BITS)

    def load_address(self) -> Optional[Address]:
        tag = self.load_uint(2)
        if tag == 0b00:
            return None
        if tag != 0b10:
            raise ValueError(f"Unsupported address tag {tag:#04b}")
        if self.load_bit():
            raise ValueError("Anycast addresses are not supported")
        workchain = self.load_int(8)
        return Address(workchain, self.load_bytes(32))

    def load_ref(self) -> Cell:
        if not self.remaining_refs:
            raise CellUnderflowError("No refs left")
        ref = self._cell.refs[self._ref_pos]
        self._ref_pos += 1
        return ref

    def load_maybe_ref(self) -> Optional[Cell]:
        return self.load_ref() if self.load_bit() else None

    def load_dict(self) -> Optional[Cell]:
        return self.load_maybe_ref()

    def load_string_tail(self) -> str:
        chunks = [self.load_remaining_bytes()]
        cell = self.load_ref() if self.remaining_refs else None
        while cell is not None:
            cs = cell.begin_parse()
            chunks.append(cs.load_remaining_bytes())
            cell = cs.load_ref() if cs.remaining_refs else None
        return b"".join(chunks).decode("utf-8")

    def end_parse(self) -> None:
        if self.remaining_bits or self.remaining_refs:
            raise ValueError(
                f"Slice not fully consumed: {self.remaining_bits} bits, "
                f"{self.remaining_refs} refs left"
            )

    def __repr__(self) -> str:
        return f"<Slice {self.remaining_bits}b {self.remaining_refs}r left>"
