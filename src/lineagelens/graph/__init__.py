"""Renderable lineage graphs: view builders, filters and traversal."""

from lineagelens.graph.builder import build_column_graph, build_table_graph
from lineagelens.graph.collapse import (
    is_collapsed,
    remap_collapsed_handles,
    toggle_override,
)
from lineagelens.graph.filters import (
    apply_table_filter,
    build_table_label_map,
    filter_graph_to_highlights,
)
from lineagelens.graph.models import (
    ColumnInfo,
    EdgeData,
    NamespaceFilterState,
    RenderEdge,
    RenderGraph,
    RenderNode,
    ScriptNodeData,
    TableFilter,
    TableNodeData,
    ViewOptions,
)
from lineagelens.graph.namespace import collect_namespaces, filter_by_namespace
from lineagelens.graph.output import find_orphan_columns, synthesize_output_node
from lineagelens.graph.pipeline import render_view, select_statements
from lineagelens.graph.prune import prune_dangling_edges
from lineagelens.graph.scripts import build_hybrid_graph, build_script_graph
from lineagelens.graph.search import find_search_match_ids
from lineagelens.graph.traversal import (
    GraphIndex,
    ImpactResult,
    ImpactTraversal,
    find_connected_elements,
    find_connected_elements_multiple,
)

__all__ = [
    # Models
    "ColumnInfo",
    "EdgeData",
    "NamespaceFilterState",
    "RenderEdge",
    "RenderGraph",
    "RenderNode",
    "ScriptNodeData",
    "TableFilter",
    "TableNodeData",
    "ViewOptions",
    # Builders
    "build_table_graph",
    "build_column_graph",
    "build_script_graph",
    "build_hybrid_graph",
    "find_orphan_columns",
    "synthesize_output_node",
    # Collapse
    "is_collapsed",
    "toggle_override",
    "remap_collapsed_handles",
    # Filters
    "filter_by_namespace",
    "collect_namespaces",
    "apply_table_filter",
    "build_table_label_map",
    "filter_graph_to_highlights",
    "prune_dangling_edges",
    # Search and traversal
    "find_search_match_ids",
    "GraphIndex",
    "ImpactResult",
    "ImpactTraversal",
    "find_connected_elements",
    "find_connected_elements_multiple",
    # Pipeline
    "render_view",
    "select_statements",
]
