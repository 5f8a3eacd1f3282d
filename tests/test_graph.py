"""
jettoncodec Cell Graph Test Suite

1. Snake chains as graphs
2. Shared subtrees
3. Metadata content stats
"""

from jettoncodec.cell import Address, begin_cell
from jettoncodec.graph import CellGraph
from jettoncodec.messages import InitialConfig, MessageEncoder
from jettoncodec.metadata import build_token_metadata_cell
from jettoncodec.snake import CELL_CAPACITY_BYTES, encode_snake


# ============================================================================
# 1. Chains
# ============================================================================

def test_snake_chain_graph():
    root = encode_snake(b"\x01" * (2 * CELL_CAPACITY_BYTES + 1))
    graph = CellGraph.from_cell(root)
    stats = graph.stats()

    assert stats.unique_cells == 3
    assert stats.total_refs == 2
    assert stats.depth == 2 == root.depth
    assert stats.is_tree
    assert stats.total_bits == 8 + (2 * CELL_CAPACITY_BYTES + 1) * 8


def test_topological_order_is_root_first():
    root = encode_snake(b"\x02" * (3 * CELL_CAPACITY_BYTES))
    order = CellGraph.from_cell(root).topological_order()
    assert order[0] == root
    assert order[1] == root.refs[0]
    assert order[-1].refs == ()


def test_children_keep_ref_order():
    a = begin_cell().store_uint(1, 8).end_cell()
    b = begin_cell().store_uint(2, 8).end_cell()
    root = begin_cell().store_ref(b).store_ref(a).end_cell()
    graph = CellGraph.from_cell(root)
    assert graph.children(root) == [b, a]
    assert graph.root == root


def test_long_chain_graph():
    root = encode_snake(b"x" * (CELL_CAPACITY_BYTES * 400))
    graph = CellGraph.from_cell(root)
    assert graph.unique_cells == 400
    assert graph.depth == root.depth == 399
    assert graph.topological_order()[0] == root
    assert "400 unique cells" in graph.summary()


# ============================================================================
# 2. Shared subtrees
# ============================================================================

def test_identical_refs_are_one_node():
    shared = begin_cell().store_uint(7, 8).end_cell()
    cell = MessageEncoder().jetton_initial(
        InitialConfig(Address(0, b"\x00" * 32), shared, shared)
    )
    stats = CellGraph.from_cell(cell).stats()
    assert stats.unique_cells == 2
    assert stats.total_refs == 2
    assert not stats.is_tree


# ============================================================================
# 3. Metadata
# ============================================================================

def test_metadata_summary():
    content = build_token_metadata_cell({"name": "MyJetton", "symbol": "JET1"})
    graph = CellGraph.from_cell(content)
    # content -> root fork -> two leaf edges -> two value cells
    assert graph.unique_cells == 6
    assert graph.depth == 3
    summary = graph.summary()
    assert content.hash.hex() in summary
    assert "6 unique cells" in summary
