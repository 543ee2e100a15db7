"""Tests for the end-to-end view pipeline."""

import pytest

from lineagelens.global_models import EdgeKind, NodeKind, TraversalDirection, ViewMode
from lineagelens.graph.models import (
    VIRTUAL_OUTPUT_NODE_ID,
    NamespaceFilterState,
    TableFilter,
    ViewOptions,
)
from lineagelens.graph.pipeline import render_view, select_statements
from lineagelens.lineage.models import (
    LineageEdge,
    LineageNode,
    StatementLineageUnit,
)


def statement(index, source_name, source, target, source_col="id", target_col="id"):
    """INSERT INTO target SELECT source_col FROM source"""
    src_schema, src_name = source.split(".")
    tgt_schema, tgt_name = target.split(".")
    src_col_id = f"{source}.{source_col}"
    tgt_col_id = f"{target}.{target_col}"
    return StatementLineageUnit(
        statement_index=index,
        statement_type="INSERT",
        source_name=source_name,
        nodes=[
            LineageNode(
                id=source,
                kind=NodeKind.TABLE,
                label=src_name,
                qualified_name=source,
                schema_name=src_schema,
            ),
            LineageNode(
                id=target,
                kind=NodeKind.TABLE,
                label=tgt_name,
                qualified_name=target,
                schema_name=tgt_schema,
            ),
            LineageNode(id=src_col_id, kind=NodeKind.COLUMN, label=source_col),
            LineageNode(id=tgt_col_id, kind=NodeKind.COLUMN, label=target_col),
        ],
        edges=[
            LineageEdge(
                id=f"own:{src_col_id}",
                from_id=source,
                to_id=src_col_id,
                kind=EdgeKind.OWNERSHIP,
            ),
            LineageEdge(
                id=f"own:{tgt_col_id}",
                from_id=target,
                to_id=tgt_col_id,
                kind=EdgeKind.OWNERSHIP,
            ),
            LineageEdge(
                id=f"flow:{src_col_id}",
                from_id=src_col_id,
                to_id=tgt_col_id,
                kind=EdgeKind.DATA_FLOW,
            ),
            LineageEdge(
                id=f"flow:{source}",
                from_id=source,
                to_id=target,
                kind=EdgeKind.DATA_FLOW,
            ),
        ],
    )


@pytest.fixture
def units():
    return [
        statement(0, "load.sql", "raw.orders", "staging.orders"),
        statement(1, "build.sql", "staging.orders", "mart.orders"),
        statement(2, "hr.sql", "raw.people", "hr.people"),
    ]


class TestSelectStatements:
    """Tests for select_statements."""

    def test_all_by_default(self, units):
        """Test that None keeps every statement."""
        assert select_statements(units) == units

    def test_positions(self, units):
        """Test selection by position, ignoring unknown positions."""
        selected = select_statements(units, [2, 0, 7])
        assert [u.statement_index for u in selected] == [0, 2]


class TestRenderView:
    """Tests for render_view."""

    def test_table_view_merges_statements(self, units):
        """Test that table view draws one graph over all statements."""
        graph = render_view(units, ViewMode.TABLE)

        assert graph.node_ids() == {
            "raw.orders",
            "staging.orders",
            "mart.orders",
            "raw.people",
            "hr.people",
        }
        assert graph.table_pairs() == {
            ("raw.orders", "staging.orders"),
            ("staging.orders", "mart.orders"),
            ("raw.people", "hr.people"),
        }
        assert graph.get_node(VIRTUAL_OUTPUT_NODE_ID) is None

    def test_empty_input(self):
        """Test that no statements yield an empty graph in every view."""
        for view_mode in ViewMode:
            graph = render_view([], view_mode)
            assert graph.nodes == []
            assert graph.edges == []

    def test_collapsed_column_view(self, units):
        """Test that collapsed nodes get handle-free edges."""
        options = ViewOptions(default_collapsed=True)
        graph = render_view(units, ViewMode.COLUMN, options)

        assert len(graph.edges) == 3
        assert all(edge.source_handle is None for edge in graph.edges)
        assert all(edge.target_handle is None for edge in graph.edges)

    def test_namespace_filter_prunes_edges(self, units):
        """Test that namespace filtering drops nodes and their edges."""
        options = ViewOptions(
            namespace=NamespaceFilterState(schemas=frozenset({"raw", "staging"}))
        )
        graph = render_view(units, ViewMode.COLUMN, options)

        assert graph.node_ids() == {"raw.orders", "staging.orders", "raw.people"}
        assert graph.table_pairs() == {("raw.orders", "staging.orders")}

    def test_focus_mode(self, units):
        """Test that focus mode keeps only the lineage of search matches."""
        options = ViewOptions(search_term="people", focus_mode=True)
        graph = render_view(units, ViewMode.TABLE, options)

        assert graph.node_ids() == {"raw.people", "hr.people"}

    def test_focus_mode_without_matches(self, units):
        """Test that focus mode without matches keeps the graph."""
        options = ViewOptions(search_term="zzz", focus_mode=True)
        graph = render_view(units, ViewMode.TABLE, options)

        assert len(graph.nodes) == 5

    def test_table_filter(self, units):
        """Test filtering to what is downstream of a table label."""
        options = ViewOptions(
            table_filter=TableFilter(
                selected_table_labels=frozenset({"orders"}),
                direction=TraversalDirection.DOWNSTREAM,
            )
        )
        graph = render_view(units, ViewMode.TABLE, options)

        assert graph.node_ids() == {"raw.orders", "staging.orders", "mart.orders"}

    def test_script_view(self, units):
        """Test that the script view links producer and consumer scripts."""
        graph = render_view(units, ViewMode.SCRIPT)

        assert graph.node_ids() == {
            "script:load.sql",
            "script:build.sql",
            "script:hr.sql",
        }
        assert graph.table_pairs() == {("script:load.sql", "script:build.sql")}

    def test_hybrid_view_namespace_filter(self, units):
        """Test that hybrid table nodes are scoped while scripts are kept."""
        options = ViewOptions(
            namespace=NamespaceFilterState(schemas=frozenset({"hr"}))
        )
        graph = render_view(units, ViewMode.HYBRID, options)

        table_ids = {n.id for n in graph.nodes if n.type == "simple_table"}
        assert table_ids == {"table:hr.people"}
        assert len([n for n in graph.nodes if n.type == "script"]) == 3

    def test_collapsed_target_receives_one_edge(self):
        """Test that a collapsed node gets a single line from an expanded one."""
        nodes = [
            LineageNode(id="s", kind=NodeKind.TABLE, label="s"),
            LineageNode(id="t", kind=NodeKind.TABLE, label="t"),
        ]
        edges = []
        for name in ["a", "b"]:
            nodes.append(LineageNode(id=f"s.{name}", kind=NodeKind.COLUMN, label=name))
            nodes.append(LineageNode(id=f"t.{name}", kind=NodeKind.COLUMN, label=name))
            edges.extend(
                [
                    LineageEdge(
                        id=f"own:s.{name}",
                        from_id="s",
                        to_id=f"s.{name}",
                        kind=EdgeKind.OWNERSHIP,
                    ),
                    LineageEdge(
                        id=f"own:t.{name}",
                        from_id="t",
                        to_id=f"t.{name}",
                        kind=EdgeKind.OWNERSHIP,
                    ),
                    LineageEdge(
                        id=f"flow:{name}",
                        from_id=f"s.{name}",
                        to_id=f"t.{name}",
                        kind=EdgeKind.DATA_FLOW,
                    ),
                ]
            )
        unit = StatementLineageUnit(statement_type="INSERT", nodes=nodes, edges=edges)

        options = ViewOptions(collapse_overrides=frozenset({"t"}))
        graph = render_view([unit], ViewMode.COLUMN, options)

        into_t = [edge for edge in graph.edges if edge.target == "t"]
        assert len(into_t) == 1
        assert into_t[0].source_handle is None
        assert into_t[0].target_handle is None
