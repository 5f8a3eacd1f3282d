"""
jettoncodec Cell Graph

A cell tree is really a DAG: identical subtrees share one representation
hash and are stored once on the wire. CellGraph loads a tree into a networkx
DiGraph keyed by hash so it can be inspected:

- how many distinct cells a structure needs
- how deep it goes (the ledger caps depth)
- the root-first order a bag-of-cells writer would use
"""

from __future__ import annotations

from dataclasses import dataclass

import networkx as nx

from jettoncodec.cell import Cell


@dataclass(frozen=True)
class CellStats:
    unique_cells: int
    total_refs: int
    total_bits: int
    depth: int
    is_tree: bool

    def __repr__(self) -> str:
        shape = "tree" if self.is_tree else "dag"
        return (
            f"<CellStats: {self.unique_cells} cells, {self.total_refs} refs, "
            f"{self.total_bits} bits, depth={self.depth} ({shape})>"
        )


class CellGraph:
    """Directed graph of a cell tree. Nodes are hex hashes, edges point parent → child."""

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self._cells: dict[str, Cell] = {}
        self._root: str = ""

    @classmethod
    def from_cell(cls, root: Cell) -> CellGraph:
        graph = cls()
        graph._root = graph._add(root)
        return graph

    def _add(self, root: Cell) -> str:
        root_key = root.hash.hex()
        stack = [root]
        while stack:
            cell = stack.pop()
            key = cell.hash.hex()
            if key in self._cells:
                continue
            self._cells[key] = cell
            self._graph.add_node(key, bits=cell.length, refs=len(cell.refs))
            for index, ref in enumerate(cell.refs):
                self._graph.add_edge(key, ref.hash.hex(), index=index)
                stack.append(ref)
        return root_key

    @property
    def root(self) -> Cell:
        return self._cells[self._root]

    @property
    def unique_cells(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def total_bits(self) -> int:
        return sum(bits for _, bits in self._graph.nodes(data="bits"))

    @property
    def depth(self) -> int:
        return nx.dag_longest_path_length(self._graph)

    @property
    def is_tree(self) -> bool:
        """True when no cell is referenced more than once."""
        return all(deg <= 1 for _, deg in self._graph.in_degree())

    def topological_order(self) -> list[Cell]:
        """Root first; every cell appears before the cells it references."""
        return [self._cells[key] for key in nx.topological_sort(self._graph)]

    def children(self, cell: Cell) -> list[Cell]:
        key = cell.hash.hex()
        edges = sorted(self._graph.out_edges(key, data="index"), key=lambda e: e[2])
        return [self._cells[child] for _, child, _ in edges]

    def stats(self) -> CellStats:
        return CellStats(
            unique_cells=self.unique_cells,
            total_refs=self._graph.number_of_edges(),
            total_bits=self.total_bits,
            depth=self.depth,
            is_tree=self.is_tree,
        )

    def summary(self) -> str:
        s = self.stats()
        lines = [
            f"Cell graph: {s.unique_cells} unique cells, {s.total_refs} refs",
            f"  root hash: {self._root}",
            f"  bits: {s.total_bits}",
            f"  depth: {s.depth}",
            f"  shared subtrees: {'no' if s.is_tree else 'yes'}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<CellGraph: {self.unique_cells} cells, root={self._root[:16]}>"
