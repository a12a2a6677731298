import pytest

from adinsightmap.core.GraphPrimitives import CompanyNode, Edge
from adinsightmap.core.Layout import (
    NODE_HEIGHT,
    NODE_SEP,
    NODE_WIDTH,
    RANK_SEP,
    compute_ranks,
    get_layouted_elements,
)
from adinsightmap.core.Types import LayoutDirection, NodeKind


def star(count):
    root = CompanyNode.create("Root", NodeKind.ROOT, node_id="root")
    comps = [CompanyNode.create(f"C{i}", NodeKind.COMPETITOR, node_id=f"c{i}") for i in range(count)]
    return [root] + comps, [Edge("root", c.id) for c in comps]


class TestLayout:

    def test_empty_graph(self):
        assert get_layouted_elements([], []) == []

    def test_ranks_follow_edges(self):
        nodes, edges = star(3)
        ranks = compute_ranks(nodes, edges)
        assert ranks["root"] == 0
        assert all(ranks[f"c{i}"] == 1 for i in range(3))

    def test_cycles_share_a_rank(self):
        nodes, edges = star(2)
        edges = edges + [Edge("c0", "c1"), Edge("c1", "c0")]
        ranks = compute_ranks(nodes, edges)
        assert ranks["c0"] == ranks["c1"] == 1

    def test_dangling_edges_are_ignored(self):
        nodes, edges = star(1)
        ranks = compute_ranks(nodes, edges + [Edge("c0", "ghost")])
        assert set(ranks) == {"root", "c0"}

    def test_top_bottom_positions(self):
        nodes, edges = star(2)
        laid = {n.id: n.position for n in get_layouted_elements(nodes, edges, LayoutDirection.TOP_BOTTOM)}

        # Root is centred over its rank; positions are top-left corners.
        assert laid["root"] == {"x": -NODE_WIDTH / 2, "y": 0}
        rank_y = NODE_HEIGHT + RANK_SEP
        assert laid["c0"]["y"] == laid["c1"]["y"] == rank_y
        assert laid["c1"]["x"] - laid["c0"]["x"] == NODE_WIDTH + NODE_SEP
        # Children are centred around the root's axis.
        assert laid["c0"]["x"] + laid["c1"]["x"] + NODE_WIDTH == pytest.approx(0)

    def test_left_right_swaps_axes(self):
        nodes, edges = star(2)
        laid = {n.id: n.position for n in get_layouted_elements(nodes, edges, "LR")}

        assert laid["root"]["x"] == 0
        assert laid["c0"]["x"] == laid["c1"]["x"] == NODE_WIDTH + RANK_SEP
        assert laid["c1"]["y"] - laid["c0"]["y"] == NODE_HEIGHT + NODE_SEP

    def test_inputs_are_not_modified(self):
        nodes, edges = star(2)
        laid = get_layouted_elements(nodes, edges)
        assert all(n.position == {"x": 0.0, "y": 0.0} for n in nodes)
        assert [n.id for n in laid] == [n.id for n in nodes]

    def test_unknown_direction(self):
        nodes, edges = star(1)
        with pytest.raises(ValueError):
            get_layouted_elements(nodes, edges, "diagonal")
