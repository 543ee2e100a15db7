"""Focus-mode and table-selection filters over rendered graphs."""

from typing import AbstractSet, Dict, List, Optional

from lineagelens.graph.models import RenderGraph, RenderNode, TableFilter
from lineagelens.graph.traversal import GraphIndex


def _includes_node(node: RenderNode, highlight_ids: AbstractSet[str]) -> bool:
    if node.id in highlight_ids:
        return True
    return any(column_id in highlight_ids for column_id in node.column_ids)


def filter_graph_to_highlights(
    graph: RenderGraph, highlight_ids: AbstractSet[str]
) -> RenderGraph:
    """
    Keep only the nodes and edges of a highlight set.

    A node is kept when it or one of its columns is highlighted. An edge is
    kept when both of its endpoints (handles preferred) survive.

    Args:
        graph: Graph to filter
        highlight_ids: Highlighted node, column and edge ids

    Returns:
        Filtered graph
    """
    nodes = [node for node in graph.nodes if _includes_node(node, highlight_ids)]
    valid_ids = RenderGraph(nodes=nodes).element_ids()
    edges = [
        edge
        for edge in graph.edges
        if edge.source_element in valid_ids and edge.target_element in valid_ids
    ]
    return RenderGraph(nodes=nodes, edges=edges)


def build_table_label_map(nodes: List[RenderNode]) -> Dict[str, List[str]]:
    """Map each table-like label to the ids of the nodes carrying it."""
    label_map: Dict[str, List[str]] = {}
    for node in nodes:
        data = node.table_data
        if data is not None:
            label_map.setdefault(data.label, []).append(node.id)
    return label_map


def apply_table_filter(
    graph: RenderGraph,
    table_filter: Optional[TableFilter],
    index: Optional[GraphIndex] = None,
) -> RenderGraph:
    """
    Restrict a graph to what is connected to the selected tables.

    Traversal starts from the selected table nodes and their columns so both
    table-level and column-level edges are followed. Selected tables are kept
    even when they have no edges. A selection matching nothing in the graph
    yields an empty graph.

    Args:
        graph: Graph to filter
        table_filter: Selected labels and traversal direction
        index: Pre-built traversal index of the graph's edges

    Returns:
        Filtered graph (the input graph when nothing is selected)
    """
    if table_filter is None or not table_filter.selected_table_labels:
        return graph

    label_map = build_table_label_map(graph.nodes)
    matching_ids = {
        node_id
        for label in table_filter.selected_table_labels
        for node_id in label_map.get(label, [])
    }
    if not matching_ids:
        return RenderGraph()

    start_ids = set(matching_ids)
    for node in graph.nodes:
        if node.id in matching_ids:
            start_ids.update(node.column_ids)

    index = index or GraphIndex.from_edges(graph.edges)
    connected = index.connected_elements_multiple(start_ids, table_filter.direction)
    return filter_graph_to_highlights(graph, connected | matching_ids)
