"""Collapse state resolution and edge handle remapping."""

from typing import AbstractSet, List, Set, Tuple

from lineagelens.graph.dedup import table_edge_id
from lineagelens.graph.models import (
    CollapseOverrideSet,
    RenderEdge,
    RenderGraph,
)


def is_collapsed(
    node_id: str,
    default_collapsed: bool,
    overrides: AbstractSet[str],
) -> bool:
    """
    Determine whether a node is displayed collapsed.

    Overrides hold the nodes whose state differs from the view default, so
    the result is the default flipped for every overridden id.

    Args:
        node_id: Node to check
        default_collapsed: Collapse state of the view
        overrides: Node ids whose state differs from the default

    Returns:
        True if the node should be displayed collapsed
    """
    return default_collapsed != (node_id in overrides)


def toggle_override(
    overrides: AbstractSet[str], node_id: str
) -> CollapseOverrideSet:
    """
    Return a new override set with the given node's state flipped.

    Args:
        overrides: Current override set (not modified)
        node_id: Node whose collapse state is toggled

    Returns:
        New override set
    """
    if node_id in overrides:
        return frozenset(overrides - {node_id})
    return frozenset(overrides | {node_id})


def collapsed_node_ids(graph: RenderGraph) -> Set[str]:
    """Ids of table-like nodes whose payload is marked collapsed."""
    return {
        node.id
        for node in graph.nodes
        if node.table_data is not None and node.table_data.is_collapsed
    }


def remap_collapsed_handles(graph: RenderGraph) -> RenderGraph:
    """
    Re-anchor edges touching collapsed nodes onto the nodes themselves.

    A collapsed node hides its columns, so an edge with a collapsed endpoint
    loses both handles and becomes a plain table-to-table edge. Every
    (source, target) pair touching a collapsed node is drawn exactly once,
    however many column connections produced it.

    Args:
        graph: Graph whose node payloads already carry the collapse state

    Returns:
        Graph with remapped edges (the input graph if nothing changed)
    """
    collapsed = collapsed_node_ids(graph)
    if not collapsed:
        return graph

    edges: List[RenderEdge] = []
    seen_pairs: Set[Tuple[str, str]] = set()
    changed = False

    for edge in graph.edges:
        if edge.source not in collapsed and edge.target not in collapsed:
            edges.append(edge)
            continue

        pair = (edge.source, edge.target)
        if pair in seen_pairs:
            changed = True
            continue
        seen_pairs.add(pair)

        if edge.source_handle or edge.target_handle:
            changed = True
            edge = edge.model_copy(
                update={
                    "id": table_edge_id(edge.source, edge.target),
                    "source_handle": None,
                    "target_handle": None,
                }
            )
        edges.append(edge)

    if not changed:
        return graph

    return RenderGraph(nodes=graph.nodes, edges=edges)
