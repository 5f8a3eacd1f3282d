"""
jettoncodec Dictionary (HashmapE)

The ledger's dictionary is a sorted mapping from fixed-width unsigned integer
keys to values, serialized as a binary Patricia tree of cells:

    hm_edge#_ label:(HmLabel ~l n) node:(HashmapNode m X) = Hashmap n X;
    hmn_leaf#_ value:X = HashmapNode 0 X;
    hmn_fork#_ left:^(Hashmap n X) right:^(Hashmap n X) = HashmapNode (n + 1) X;

    hml_short$0  len:(Unary ~n) s:(n * Bit)
    hml_long$10  n:(#<= m) s:(n * Bit)
    hml_same$11  v:Bit n:(#<= m)

    hme_empty$0 = HashmapE n X;
    hme_root$1 root:^(Hashmap n X) = HashmapE n X;

Each edge cell stores the longest common key prefix of its subtree as a
label, picking whichever of the three label encodings is shortest. Values
here are always cells stored as refs (``^Cell``), which is all the metadata
dictionary needs.
"""

from __future__ import annotations

from typing import Iterator, Optional

from loguru import logger

from jettoncodec.cell import Builder, Cell, Slice, begin_cell


# ============================================================================
# Labels
# ============================================================================

def _short_label_bits(label: str) -> int:
    return 1 + len(label) + 1 + len(label)


def _long_label_bits(label: str, max_len: int) -> int:
    return 2 + max_len.bit_length() + len(label)


def _same_label_bits(max_len: int) -> int:
    return 3 + max_len.bit_length()


def _is_same(label: str) -> bool:
    return len(set(label)) <= 1


def store_label(builder: Builder, label: str, max_len: int) -> None:
    """Write `label` (a '0'/'1' string) using the shortest encoding.

    Ties go to short, then long, then same.
    """
    kind = "short"
    best = _short_label_bits(label)
    if _long_label_bits(label, max_len) < best:
        kind, best = "long", _long_label_bits(label, max_len)
    if _is_same(label) and _same_label_bits(max_len) < best:
        kind = "same"

    width = max_len.bit_length()
    if kind == "short":
        builder.store_bit(0)
        for _ in label:
            builder.store_bit(1)
        builder.store_bit(0)
        if label:
            builder.store_uint(int(label, 2), len(label))
    elif kind == "long":
        builder.store_uint(0b10, 2)
        builder.store_uint(len(label), width)
        if label:
            builder.store_uint(int(label, 2), len(label))
    else:
        builder.store_uint(0b11, 2)
        builder.store_bit(label[:1] == "1")
        builder.store_uint(len(label), width)


def load_label(cs: Slice, max_len: int) -> str:
    """Read a label written by store_label (or any conforming writer)."""
    width = max_len.bit_length()
    if not cs.load_bit():
        length = 0
        while cs.load_bit():
            length += 1
        return format(cs.load_uint(length), f"0{length}b") if length else ""
    if not cs.load_bit():
        length = cs.load_uint(width)
        return format(cs.load_uint(length), f"0{length}b") if length else ""
    bit = "1" if cs.load_bit() else "0"
    return bit * cs.load_uint(width)


# ============================================================================
# HashmapE
# ============================================================================

class CellDictionary:
    """HashmapE with `key_bits`-wide unsigned keys and ``^Cell`` values.

    Keys are kept in a plain dict until serialize(); a later set() with the
    same key replaces the earlier value.

    Usage:
        d = CellDictionary(256)
        d.set(key_int, value_cell)
        root = d.serialize()          # None when empty
        b.store_dict(root)
    """

    def __init__(self, key_bits: int) -> None:
        if key_bits <= 0:
            raise ValueError(f"Key width must be positive, got {key_bits}")
        self.key_bits = key_bits
        self._items: dict[int, Cell] = {}

    def set(self, key: int, value: Cell) -> None:
        if key < 0 or key >> self.key_bits:
            raise ValueError(f"Key {key} does not fit in {self.key_bits} bits")
        self._items[key] = value

    def set_bytes(self, key: bytes, value: Cell) -> None:
        """Set using a big-endian byte key of exactly key_bits / 8 bytes."""
        if len(key) * 8 != self.key_bits:
            raise ValueError(
                f"Key is {len(key) * 8} bits, dictionary expects {self.key_bits}"
            )
        self.set(int.from_bytes(key, "big"), value)

    def get(self, key: int) -> Optional[Cell]:
        return self._items.get(key)

    def keys(self) -> list[int]:
        return sorted(self._items)

    def items(self) -> Iterator[tuple[int, Cell]]:
        for key in sorted(self._items):
            yield key, self._items[key]

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def serialize(self) -> Optional[Cell]:
        """Root edge cell of the Hashmap, or None for an empty dictionary."""
        if not self._items:
            return None
        keyed = {format(k, f"0{self.key_bits}b"): v for k, v in self._items.items()}
        root = _build_edge(keyed, self.key_bits)
        logger.debug("Serialized dictionary: {} keys, {} bits", len(keyed), self.key_bits)
        return root

    @classmethod
    def parse(cls, root: Optional[Cell], key_bits: int) -> CellDictionary:
        """Inverse of serialize(): rebuild from a root edge cell (or None)."""
        result = cls(key_bits)
        if root is None:
            return result
        for key, value in _walk_edge(root, key_bits, ""):
            result._items[int(key, 2)] = value
        return result

    @classmethod
    def load(cls, cs: Slice, key_bits: int) -> CellDictionary:
        """Read a HashmapE (flag bit + optional ref) from a slice."""
        return cls.parse(cs.load_dict(), key_bits)

    def __repr__(self) -> str:
        return f"<CellDictionary {self.key_bits}-bit keys, {len(self)} entries>"


def _common_prefix(keys: list[str]) -> str:
    first, last = min(keys), max(keys)
    i = 0
    while i < len(first) and first[i] == last[i]:
        i += 1
    return first[:i]


def _build_edge(items: dict[str, Cell], remaining: int) -> Cell:
    keys = list(items)
    builder = begin_cell()

    if len(keys) == 1:
        key = keys[0]
        store_label(builder, key, remaining)
        builder.store_ref(items[key])
        return builder.end_cell()

    label = _common_prefix(keys)
    store_label(builder, label, remaining)
    child_len = remaining - len(label) - 1
    left = {k[len(label) + 1:]: v for k, v in items.items() if k[len(label)] == "0"}
    right = {k[len(label) + 1:]: v for k, v in items.items() if k[len(label)] == "1"}
    builder.store_ref(_build_edge(left, child_len))
    builder.store_ref(_build_edge(right, child_len))
    return builder.end_cell()


def _walk_edge(edge: Cell, remaining: int, prefix: str) -> Iterator[tuple[str, Cell]]:
    cs = edge.begin_parse()
    label = load_label(cs, remaining)
    rest = remaining - len(label)
    if rest == 0:
        yield prefix + label, cs.load_ref()
        return
    left, right = cs.load_ref(), cs.load_ref()
    yield from _walk_edge(left, rest - 1, prefix + label + "0")
    yield from _walk_edge(right, rest - 1, prefix + label + "1")
