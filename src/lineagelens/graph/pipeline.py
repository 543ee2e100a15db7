"""End-to-end rendering of one lineage view."""

from typing import Iterable, List, Optional

from lineagelens.global_models import ViewMode
from lineagelens.graph.builder import build_column_graph, build_table_graph
from lineagelens.graph.collapse import remap_collapsed_handles
from lineagelens.graph.filters import apply_table_filter, filter_graph_to_highlights
from lineagelens.graph.models import RenderGraph, ViewOptions
from lineagelens.graph.namespace import filter_by_namespace
from lineagelens.graph.prune import prune_dangling_edges
from lineagelens.graph.scripts import build_hybrid_graph, build_script_graph
from lineagelens.graph.search import find_search_match_ids
from lineagelens.graph.traversal import GraphIndex
from lineagelens.lineage.merge import merge_statements
from lineagelens.lineage.models import StatementLineageUnit


def select_statements(
    units: List[StatementLineageUnit], indices: Optional[Iterable[int]] = None
) -> List[StatementLineageUnit]:
    """
    Narrow the statements to render.

    Args:
        units: All statements of the analysis
        indices: Positions to keep; None keeps every statement

    Returns:
        Selected statements in analysis order (unknown positions are ignored)
    """
    if indices is None:
        return list(units)
    wanted = set(indices)
    return [unit for position, unit in enumerate(units) if position in wanted]


def build_view(
    units: List[StatementLineageUnit],
    view_mode: ViewMode,
    options: ViewOptions,
) -> RenderGraph:
    """Build the unfiltered graph of a view mode."""
    if view_mode == ViewMode.SCRIPT:
        return build_script_graph(units, options)
    if view_mode == ViewMode.HYBRID:
        return build_hybrid_graph(units, options)

    merged = merge_statements(units)
    if view_mode == ViewMode.COLUMN:
        return build_column_graph(merged, options)
    return build_table_graph(merged, options)


def _focus(
    graph: RenderGraph, view_mode: ViewMode, options: ViewOptions
) -> RenderGraph:
    """Reduce the graph to the lineage of the search matches."""
    match_ids = find_search_match_ids(options.search_term, graph.nodes, view_mode)
    if not match_ids:
        return graph
    connected = GraphIndex.from_edges(graph.edges).connected_elements_multiple(
        match_ids
    )
    return filter_graph_to_highlights(graph, connected)


def render_view(
    units: List[StatementLineageUnit],
    view_mode: ViewMode,
    options: Optional[ViewOptions] = None,
) -> RenderGraph:
    """
    Render one view of the lineage, ready for layout.

    Table and column views merge all statements first. The built graph then
    goes through collapse remapping, namespace filtering, focus filtering
    (when enabled and the search term matches), table filtering and finally
    dangling-edge pruning.

    Args:
        units: Statements to render
        view_mode: Granularity of the view
        options: Caller-owned selection, search, collapse and filter inputs

    Returns:
        RenderGraph without unresolved references
    """
    options = options or ViewOptions()

    graph = build_view(units, view_mode, options)
    graph = remap_collapsed_handles(graph)
    graph = filter_by_namespace(graph, options.namespace)
    if options.focus_mode and options.search_term:
        graph = _focus(graph, view_mode, options)
    graph = apply_table_filter(graph, options.table_filter)
    return prune_dangling_edges(graph)
