"""Tests for analysis loading and graph saving."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from lineagelens.global_models import EdgeKind, NodeKind
from lineagelens.graph.models import RenderGraph, RenderNode, TableNodeData
from lineagelens.lineage.serialization import (
    load_analysis,
    parse_analysis,
    save_render_graph,
)

ANALYSIS = {
    "statements": [
        {
            "statementIndex": 0,
            "statementType": "SELECT",
            "sourceName": "query.sql",
            "nodes": [
                {
                    "id": "table:orders",
                    "type": "table",
                    "label": "orders",
                    "qualifiedName": "sales.orders",
                    "schema": "sales",
                    "catalog": "prod",
                    "joinType": "LEFT",
                },
                {"id": "column:orders.id", "type": "column", "label": "id"},
            ],
            "edges": [
                {
                    "id": "e1",
                    "from": "table:orders",
                    "to": "column:orders.id",
                    "type": "ownership",
                }
            ],
        }
    ],
    "resolvedSchema": {
        "tables": [
            {
                "catalog": "prod",
                "schema": "sales",
                "name": "orders",
                "columns": [{"name": "id", "dataType": "INT"}],
            }
        ]
    },
}


class TestParseAnalysis:
    """Tests for parse_analysis."""

    def test_camel_case_document(self):
        """Test that the analysis engine's camelCase JSON is accepted."""
        result = parse_analysis(json.dumps(ANALYSIS))

        unit = result.statements[0]
        assert unit.source_name == "query.sql"
        table = unit.nodes[0]
        assert table.kind == NodeKind.TABLE
        assert table.qualified_name == "sales.orders"
        assert table.schema_name == "sales"
        assert table.database == "prod"
        assert table.join_type == "LEFT"
        assert unit.edges[0].from_id == "table:orders"
        assert unit.edges[0].kind == EdgeKind.OWNERSHIP
        assert result.resolved_schema.tables[0].qualified_name == "prod.sales.orders"
        assert result.resolved_schema.tables[0].columns[0].data_type == "INT"

    def test_bare_statement_list(self):
        """Test that a bare list of statements is accepted."""
        result = parse_analysis(json.dumps(ANALYSIS["statements"]))
        assert len(result.statements) == 1
        assert result.resolved_schema is None

    def test_invalid_json(self):
        """Test that malformed JSON raises ValueError."""
        with pytest.raises(ValueError, match="Invalid analysis JSON"):
            parse_analysis("{not json")

    def test_invalid_schema(self):
        """Test that unknown node kinds raise ValueError."""
        bad = {"statements": [{"nodes": [{"id": "x", "type": "bogus", "label": "x"}]}]}
        with pytest.raises(ValueError, match="Invalid analysis result"):
            parse_analysis(json.dumps(bad))


class TestLoadAnalysis:
    """Tests for load_analysis."""

    def test_load_from_file(self):
        """Test loading an analysis file."""
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "analysis.json"
            path.write_text(json.dumps(ANALYSIS), encoding="utf-8")

            result = load_analysis(path)
            assert result.statements[0].nodes[1].label == "id"

    def test_missing_file(self):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_analysis(Path("/nonexistent/analysis.json"))


class TestSaveRenderGraph:
    """Tests for save_render_graph."""

    def test_save_omits_unset_fields(self):
        """Test that the saved graph is JSON without null fields."""
        graph = RenderGraph(
            nodes=[
                RenderNode(
                    id="t",
                    type="table",
                    data=TableNodeData(label="t", node_type="table"),
                )
            ]
        )
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "graph.json"
            save_render_graph(graph, path)

            data = json.loads(path.read_text(encoding="utf-8"))
            assert data["nodes"][0]["id"] == "t"
            assert "qualified_name" not in data["nodes"][0]["data"]
            assert data["edges"] == []
