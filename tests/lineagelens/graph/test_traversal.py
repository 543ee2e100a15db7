"""Tests for impact traversal."""

import pytest

from lineagelens.global_models import EdgeKind, TraversalDirection
from lineagelens.graph.models import (
    ColumnInfo,
    EdgeData,
    RenderEdge,
    RenderGraph,
    RenderNode,
    TableNodeData,
)
from lineagelens.graph.traversal import (
    GraphIndex,
    ImpactTraversal,
    find_connected_elements,
    find_connected_elements_directional,
    find_connected_elements_multiple,
    find_connected_elements_multiple_directional,
)


def edge(edge_id, source, target, source_handle=None, target_handle=None):
    return RenderEdge(
        id=edge_id,
        source=source,
        target=target,
        source_handle=source_handle,
        target_handle=target_handle,
        data=EdgeData(kind=EdgeKind.DATA_FLOW),
    )


@pytest.fixture
def chain():
    return [edge("edge1", "node1", "node2"), edge("edge2", "node2", "node3")]


@pytest.fixture
def cycle():
    return [
        edge("edge1", "node1", "node2"),
        edge("edge2", "node2", "node3"),
        edge("edge3", "node3", "node1"),
    ]


class TestFindConnectedElements:
    """Tests for find_connected_elements."""

    def test_chain_from_middle(self, chain):
        """Test that both directions are followed from the middle of a chain."""
        result = find_connected_elements("node2", chain)
        assert result == {"node1", "edge1", "node2", "edge2", "node3"}

    def test_cycle_terminates(self, cycle):
        """Test that a cycle returns all nodes and edges without looping."""
        result = find_connected_elements("node1", cycle)
        assert result == {"node1", "node2", "node3", "edge1", "edge2", "edge3"}

    def test_unknown_start(self, chain):
        """Test that an id not in the graph returns only itself."""
        assert find_connected_elements("missing", chain) == {"missing"}

    def test_start_from_edge(self, chain):
        """Test that an edge id is traversed as an edge."""
        result = find_connected_elements("edge1", chain)
        assert result == {"node1", "edge1", "node2", "edge2", "node3"}

    def test_handles_preferred(self):
        """Test that column handles are traversal endpoints."""
        edges = [
            edge("e1", "a", "b", "a.x", "b.x"),
            edge("e2", "a", "b", "a.y", "b.y"),
            edge("e3", "b", "c", "b.x", "c.x"),
        ]
        assert find_connected_elements("a.x", edges) == {
            "a.x",
            "e1",
            "b.x",
            "e3",
            "c.x",
        }

    def test_upstream_not_followed_downstream(self):
        """Test that upstream and downstream reachability stay separate."""
        edges = [edge("e1", "a", "b"), edge("e2", "x", "b"), edge("e3", "b", "c")]
        result = find_connected_elements("a", edges)

        assert "x" not in result
        assert result == {"a", "e1", "b", "e3", "c"}

    def test_multiple(self):
        """Test the union over several start ids."""
        edges = [edge("e1", "a", "b"), edge("e2", "c", "d")]
        assert find_connected_elements_multiple(["a", "d"], edges) == {
            "a",
            "e1",
            "b",
            "c",
            "e2",
            "d",
        }


class TestDirectional:
    """Tests for the directional traversal variants."""

    def test_downstream_only(self, chain):
        """Test downstream traversal."""
        result = find_connected_elements_directional(
            "node2", chain, TraversalDirection.DOWNSTREAM
        )
        assert result == {"node2", "edge2", "node3"}

    def test_upstream_only(self, chain):
        """Test upstream traversal."""
        result = find_connected_elements_directional(
            "node2", chain, TraversalDirection.UPSTREAM
        )
        assert result == {"node1", "edge1", "node2"}

    def test_multiple_directional(self, chain):
        """Test directional union over several start ids."""
        result = find_connected_elements_multiple_directional(
            ["node1", "node3"], chain, TraversalDirection.UPSTREAM
        )
        assert result == {"node1", "node2", "node3", "edge1", "edge2"}


class TestGraphIndex:
    """Tests for GraphIndex reuse."""

    def test_index_reused_for_many_queries(self, chain):
        """Test that one index answers repeated queries consistently."""
        index = GraphIndex.from_edges(chain)

        assert index.connected_elements("node1") == {
            "node1",
            "edge1",
            "node2",
            "edge2",
            "node3",
        }
        assert index.connected_elements(
            "node3", TraversalDirection.DOWNSTREAM
        ) == {"node3"}

    def test_hop_counts(self, chain):
        """Test that hops count rendered edges."""
        index = GraphIndex.from_edges(chain)
        hops = index.hop_counts("node1", TraversalDirection.DOWNSTREAM)

        assert hops[("edge", "edge1")] == 1
        assert hops[("node", "node2")] == 1
        assert hops[("edge", "edge2")] == 2
        assert hops[("node", "node3")] == 2


class TestImpactTraversal:
    """Tests for ImpactTraversal.trace."""

    @pytest.fixture
    def graph(self):
        def node(node_id, columns):
            return RenderNode(
                id=node_id,
                type="table",
                data=TableNodeData(
                    label=node_id,
                    node_type="table",
                    columns=[ColumnInfo(id=c, name=c) for c in columns],
                ),
            )

        return RenderGraph(
            nodes=[
                node("a", ["a.x"]),
                node("b", ["b.x"]),
                node("c", []),
                node("d", []),
            ],
            edges=[
                edge("e1", "a", "b", "a.x", "b.x"),
                edge("e2", "b", "c", "b.x", None),
            ],
        )

    def test_trace_downstream(self, graph):
        """Test element types and hop counts downstream of a column."""
        result = ImpactTraversal(graph).trace("a.x", TraversalDirection.DOWNSTREAM)

        found = {(e.id, e.element_type, e.hops) for e in result.elements}
        assert found == {
            ("e1", "edge", 1),
            ("b.x", "column", 1),
            ("e2", "edge", 2),
            ("c", "node", 2),
        }
        assert result.element_ids() == {"a.x", "e1", "b.x", "e2", "c"}

    def test_trace_both_directions(self, graph):
        """Test that both sides are reported with their direction."""
        result = ImpactTraversal(graph).trace("b.x")

        directions = {(e.id, e.direction) for e in result.elements}
        assert ("a.x", TraversalDirection.UPSTREAM) in directions
        assert ("c", TraversalDirection.DOWNSTREAM) in directions

    def test_isolated_node(self, graph):
        """Test that a node without edges has an empty impact."""
        result = ImpactTraversal(graph).trace("d")
        assert len(result) == 0

    def test_unknown_element_raises(self, graph):
        """Test that an unknown start id is rejected."""
        with pytest.raises(ValueError, match="not found"):
            ImpactTraversal(graph).trace("nope")
