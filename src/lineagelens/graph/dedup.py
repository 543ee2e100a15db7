"""Endpoint resolution and table-pair edge deduplication."""

from typing import Dict, Iterator, List, Optional, Set, Tuple

from lineagelens.global_models import FLOW_EDGE_KINDS, EdgeKind
from lineagelens.graph.models import EdgeData, RenderEdge
from lineagelens.graph.ownership import OwnershipIndex
from lineagelens.lineage.models import LineageEdge, LineageNode

JOIN_TYPE_LABELS: Dict[str, str] = {
    "INNER": "INNER JOIN",
    "LEFT": "LEFT JOIN",
    "LEFT_OUTER": "LEFT JOIN",
    "RIGHT": "RIGHT JOIN",
    "RIGHT_OUTER": "RIGHT JOIN",
    "FULL": "FULL JOIN",
    "FULL_OUTER": "FULL JOIN",
    "CROSS": "CROSS JOIN",
    "LEFT_SEMI": "SEMI JOIN",
    "LEFT_ANTI": "ANTI JOIN",
}

# (owner node id, column handle or None)
Endpoint = Tuple[str, Optional[str]]


def format_join_type(join_type: Optional[str]) -> Optional[str]:
    """
    Format a join type for display as an edge label.

    Args:
        join_type: Raw join type from the analysis (e.g. "LEFT_OUTER")

    Returns:
        Display label, or None if there is no join type
    """
    if not join_type:
        return None
    return JOIN_TYPE_LABELS.get(join_type.upper(), join_type.replace("_", " "))


def table_edge_id(source_id: str, target_id: str) -> str:
    """Stable id of the deduplicated edge between two nodes."""
    return f"edge_{source_id}_to_{target_id}"


class EndpointResolver:
    """Resolve lineage edge endpoints onto the nodes that will be drawn."""

    def __init__(
        self,
        index: OwnershipIndex,
        orphans: List[LineageNode],
        output_id: str,
    ):
        """
        Initialize the resolver.

        Args:
            index: Ownership index of the statement
            orphans: Columns routed to the Output node
            output_id: Id of the Output node
        """
        self.index = index
        self.output_id = output_id
        self._orphan_ids: Set[str] = {column.id for column in orphans}

    def resolve(self, node_id: str) -> Optional[Endpoint]:
        """
        Resolve a lineage node id to its drawn owner and handle.

        Columns resolve to their owning relation (or the Output node for
        orphans) with the column id as handle. Bare relations resolve to
        themselves without a handle. Anything else is not drawn.

        Args:
            node_id: Lineage node id

        Returns:
            (owner id, handle) tuple, or None if the node is not drawn
        """
        owner = self.index.owner_of(node_id)
        if owner is not None:
            return owner, node_id
        if node_id in self._orphan_ids:
            return self.output_id, node_id
        if node_id in self.index.relations:
            return node_id, None
        return None

    def resolve_edge(
        self, edge: LineageEdge
    ) -> Optional[Tuple[Endpoint, Endpoint]]:
        """
        Resolve both endpoints of an edge, skipping self-loops.

        Args:
            edge: Lineage edge

        Returns:
            (source endpoint, target endpoint), or None if the edge is not drawn
        """
        source = self.resolve(edge.from_id)
        target = self.resolve(edge.to_id)
        if source is None or target is None or source[0] == target[0]:
            return None
        return source, target

    def join_info(self, node_id: str) -> Tuple[Optional[str], Optional[str]]:
        """Join type and condition of a drawn relation, if any."""
        node = self.index.relations.get(node_id)
        if node is None:
            return None, None
        return node.join_type, node.join_condition


def relation_edge(
    resolver: EndpointResolver,
    source_id: str,
    target_id: str,
    kind: EdgeKind,
) -> RenderEdge:
    """
    Build the single handle-free edge drawn between two relations.

    Args:
        resolver: Endpoint resolver of the statement
        source_id: Source node id
        target_id: Target node id
        kind: Kind of the first underlying lineage edge

    Returns:
        RenderEdge labelled with the source relation's join type
    """
    join_type, join_condition = resolver.join_info(source_id)
    return RenderEdge(
        id=table_edge_id(source_id, target_id),
        source=source_id,
        target=target_id,
        label=format_join_type(join_type),
        data=EdgeData(
            kind=kind,
            join_type=join_type,
            join_condition=join_condition,
        ),
    )


def flow_edges(
    resolver: EndpointResolver,
) -> Iterator[Tuple[LineageEdge, Endpoint, Endpoint]]:
    """Yield every drawable data_flow/derivation edge with resolved endpoints."""
    for edge in resolver.index.unit.edges:
        if edge.kind not in FLOW_EDGE_KINDS:
            continue
        resolved = resolver.resolve_edge(edge)
        if resolved is not None:
            yield edge, resolved[0], resolved[1]


def join_dependency_edges(
    resolver: EndpointResolver, seen_pairs: Set[Tuple[str, str]]
) -> List[RenderEdge]:
    """
    Build edges for join dependencies between relations not yet connected.

    Args:
        resolver: Endpoint resolver of the statement
        seen_pairs: (source, target) pairs already drawn; updated in place

    Returns:
        One edge per new relation pair
    """
    edges: List[RenderEdge] = []
    for edge in resolver.index.unit.edges:
        if edge.kind != EdgeKind.JOIN_DEPENDENCY:
            continue
        resolved = resolver.resolve_edge(edge)
        if resolved is None:
            continue
        pair = (resolved[0][0], resolved[1][0])
        if pair in seen_pairs:
            continue
        seen_pairs.add(pair)

        node_join_type, node_join_condition = resolver.join_info(pair[0])
        join_type = edge.join_type or node_join_type
        edges.append(
            RenderEdge(
                id=edge.id,
                source=pair[0],
                target=pair[1],
                label=format_join_type(join_type),
                data=EdgeData(
                    kind=EdgeKind.JOIN_DEPENDENCY,
                    join_type=join_type,
                    join_condition=edge.join_condition or node_join_condition,
                ),
            )
        )
    return edges


def deduplicate_table_edges(resolver: EndpointResolver) -> List[RenderEdge]:
    """
    Collapse column-level relationships into unique table-pair edges.

    Every drawable flow edge contributes its (source owner, target owner)
    pair; each distinct pair yields exactly one edge no matter how many
    column connections produced it. Join dependencies are added afterwards
    for pairs not already connected.

    Args:
        resolver: Endpoint resolver of the statement

    Returns:
        Deduplicated table-level edges
    """
    edges: List[RenderEdge] = []
    seen_pairs: Set[Tuple[str, str]] = set()

    for edge, source, target in flow_edges(resolver):
        pair = (source[0], target[0])
        if pair in seen_pairs:
            continue
        seen_pairs.add(pair)
        edges.append(relation_edge(resolver, pair[0], pair[1], edge.kind))

    edges.extend(join_dependency_edges(resolver, seen_pairs))
    return edges
