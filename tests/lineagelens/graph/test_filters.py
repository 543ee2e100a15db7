"""Tests for focus-mode and table-selection filters."""

from lineagelens.global_models import EdgeKind, TraversalDirection
from lineagelens.graph.filters import (
    apply_table_filter,
    build_table_label_map,
    filter_graph_to_highlights,
)
from lineagelens.graph.models import (
    ColumnInfo,
    EdgeData,
    RenderEdge,
    RenderGraph,
    RenderNode,
    TableFilter,
    TableNodeData,
)


def table_node(node_id, label=None, columns=()):
    return RenderNode(
        id=node_id,
        type="table",
        data=TableNodeData(
            label=label or node_id,
            node_type="table",
            columns=[ColumnInfo(id=c, name=c) for c in columns],
        ),
    )


def edge(source, target, source_handle=None, target_handle=None):
    return RenderEdge(
        id=f"{source_handle or source}->{target_handle or target}",
        source=source,
        target=target,
        source_handle=source_handle,
        target_handle=target_handle,
        data=EdgeData(kind=EdgeKind.DATA_FLOW),
    )


def chain_graph():
    """raw -> staging -> mart, plus an unrelated island."""
    return RenderGraph(
        nodes=[
            table_node("raw"),
            table_node("staging"),
            table_node("mart"),
            table_node("island"),
        ],
        edges=[edge("raw", "staging"), edge("staging", "mart")],
    )


class TestFilterGraphToHighlights:
    """Tests for filter_graph_to_highlights."""

    def test_keeps_highlighted_nodes_and_edges(self):
        """Test that nodes and edges between highlighted elements survive."""
        graph = chain_graph()
        result = filter_graph_to_highlights(graph, {"raw", "staging", "raw->staging"})

        assert result.node_ids() == {"raw", "staging"}
        assert [e.id for e in result.edges] == ["raw->staging"]

    def test_node_kept_through_column(self):
        """Test that a highlighted column keeps its table."""
        graph = RenderGraph(
            nodes=[table_node("a", columns=["a.x"]), table_node("b", columns=["b.y"])],
            edges=[edge("a", "b", "a.x", "b.y")],
        )
        result = filter_graph_to_highlights(graph, {"a.x", "b.y"})

        assert result.node_ids() == {"a", "b"}
        assert len(result.edges) == 1


class TestBuildTableLabelMap:
    """Tests for build_table_label_map."""

    def test_groups_ids_by_label(self):
        """Test that nodes sharing a label are grouped."""
        nodes = [
            table_node("sales.orders", "orders"),
            table_node("archive.orders", "orders"),
            table_node("people"),
        ]
        assert build_table_label_map(nodes) == {
            "orders": ["sales.orders", "archive.orders"],
            "people": ["people"],
        }


class TestApplyTableFilter:
    """Tests for apply_table_filter."""

    def test_no_selection_is_identity(self):
        """Test that an empty selection keeps the graph."""
        graph = chain_graph()
        assert apply_table_filter(graph, TableFilter()) is graph
        assert apply_table_filter(graph, None) is graph

    def test_both_directions(self):
        """Test that everything connected to the selection is kept."""
        table_filter = TableFilter(selected_table_labels=frozenset({"staging"}))
        result = apply_table_filter(chain_graph(), table_filter)

        assert result.node_ids() == {"raw", "staging", "mart"}
        assert len(result.edges) == 2

    def test_downstream_only(self):
        """Test directional table filtering."""
        table_filter = TableFilter(
            selected_table_labels=frozenset({"staging"}),
            direction=TraversalDirection.DOWNSTREAM,
        )
        result = apply_table_filter(chain_graph(), table_filter)

        assert result.node_ids() == {"staging", "mart"}

    def test_isolated_selection_kept(self):
        """Test that a selected table without edges is still shown."""
        table_filter = TableFilter(selected_table_labels=frozenset({"island"}))
        result = apply_table_filter(chain_graph(), table_filter)

        assert result.node_ids() == {"island"}
        assert result.edges == []

    def test_unknown_label_empties_graph(self):
        """Test that a selection matching nothing yields an empty graph."""
        table_filter = TableFilter(selected_table_labels=frozenset({"nope"}))
        result = apply_table_filter(chain_graph(), table_filter)

        assert result.nodes == []
        assert result.edges == []

    def test_column_level_edges_followed(self):
        """Test that traversal starts from the selected tables' columns."""
        graph = RenderGraph(
            nodes=[
                table_node("a", columns=["a.x"]),
                table_node("b", columns=["b.x"]),
                table_node("c", columns=["c.x"]),
            ],
            edges=[edge("a", "b", "a.x", "b.x")],
        )
        table_filter = TableFilter(selected_table_labels=frozenset({"a"}))
        result = apply_table_filter(graph, table_filter)

        assert result.node_ids() == {"a", "b"}
