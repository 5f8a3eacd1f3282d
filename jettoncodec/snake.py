"""
jettoncodec Snake Encoding

Data longer than one cell's capacity is stored as a singly linked chain of
cells ("snake"): each cell holds as many bytes as fit and references the next
cell through its only child.

    c0: [prefix byte][C bytes] -> c1: [C bytes] -> ... -> cn: [1..C bytes]

C = (1023 - 8) // 8 = 126 bytes. The 8 reserved bits hold the format prefix
on the root cell; later cells use the same capacity without a prefix.
"""

from __future__ import annotations

from typing import Optional

from jettoncodec.cell import MAX_BITS, Cell, begin_cell


SNAKE_PREFIX = 0x00
PREFIX_BITS = 8
CELL_CAPACITY_BYTES = (MAX_BITS - PREFIX_BITS) // 8


def split_chunks(data: bytes, capacity: int = CELL_CAPACITY_BYTES) -> list[bytes]:
    """Cut `data` into consecutive pieces of `capacity` bytes; the last may be shorter."""
    return [data[i:i + capacity] for i in range(0, len(data), capacity)]


def encode_snake(data: bytes, prefix: int = SNAKE_PREFIX) -> Cell:
    """Encode `data` as a snake chain and return the root cell.

    Chunks are finished first and then linked from the tail back to the
    head, so no cell is ever reopened after end_cell().
    """
    if not data:
        raise ValueError("Cannot snake-encode an empty buffer")

    chunks = split_chunks(data)
    tail: Optional[Cell] = None
    for index in range(len(chunks) - 1, -1, -1):
        builder = begin_cell()
        if index == 0:
            builder.store_uint(prefix, PREFIX_BITS)
        builder.store_bytes(chunks[index])
        if tail is not None:
            builder.store_ref(tail)
        tail = builder.end_cell()
    return tail


def chain_length(root: Cell) -> int:
    """Number of cells in a snake chain (follows the first ref only)."""
    count = 1
    cell = root
    while cell.refs:
        cell = cell.refs[0]
        count += 1
    return count


def decode_snake(root: Cell, prefix: Optional[int] = SNAKE_PREFIX) -> bytes:
    """Concatenate the payload of a snake chain, stripping the root prefix once.

    Pass prefix=None to read a chain that carries no prefix byte.
    """
    cs = root.begin_parse()
    if prefix is not None:
        found = cs.load_uint(PREFIX_BITS)
        if found != prefix:
            raise ValueError(f"Expected snake prefix {prefix:#04x}, found {found:#04x}")

    parts = [cs.load_remaining_bytes()]
    cell = cs.load_ref() if cs.remaining_refs else None
    while cell is not None:
        cs = cell.begin_parse()
        parts.append(cs.load_remaining_bytes())
        cell = cs.load_ref() if cs.remaining_refs else None
    return b"".join(parts)
