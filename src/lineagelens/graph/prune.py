"""Final consistency pass removing edges with unresolved references."""

from lineagelens.graph.models import RenderGraph


def prune_dangling_edges(graph: RenderGraph) -> RenderGraph:
    """
    Remove edges that reference missing nodes or handles.

    An edge is dropped when its source or target node is absent, or when a
    handle it carries is not a column of the corresponding endpoint node.

    Args:
        graph: Graph to check

    Returns:
        Graph without dangling edges (the input graph if none were found)
    """
    node_ids = graph.node_ids()
    handles = graph.handles_by_node()

    def is_resolved(edge) -> bool:
        if edge.source not in node_ids or edge.target not in node_ids:
            return False
        if edge.source_handle and edge.source_handle not in handles.get(
            edge.source, ()
        ):
            return False
        if edge.target_handle and edge.target_handle not in handles.get(
            edge.target, ()
        ):
            return False
        return True

    edges = [edge for edge in graph.edges if is_resolved(edge)]
    if len(edges) == len(graph.edges):
        return graph
    return RenderGraph(nodes=graph.nodes, edges=edges)
