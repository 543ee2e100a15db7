"""Upstream/downstream impact traversal over rendered graphs."""

from typing import Dict, Iterable, List, Literal, Optional, Set, Tuple

import rustworkx as rx
from pydantic import BaseModel, Field

from lineagelens.global_models import TraversalDirection
from lineagelens.graph.models import RenderEdge, RenderGraph

# Element keys: ("node", id) for nodes and column handles, ("edge", id) for edges
ElementKey = Tuple[str, str]


class GraphIndex:
    """
    Element graph used for reachability queries.

    Nodes, column handles and edges are all visitable elements. Each rendered
    edge becomes a vertex of its own, linked from its source element and to
    its target element, so a traversal reports the edges it walks through.
    Endpoints prefer the column handle over the node id.
    """

    def __init__(self, edges: List[RenderEdge]):
        """
        Build the index once for a set of edges.

        Args:
            edges: Rendered edges of the graph
        """
        self.rx_graph = rx.PyDiGraph()
        self.element_map: Dict[ElementKey, int] = {}
        self.edge_map: Dict[str, RenderEdge] = {}
        self._rx_graph_reversed: Optional[rx.PyDiGraph] = None

        for edge in edges:
            self.edge_map[edge.id] = edge
            edge_idx = self._add_element(("edge", edge.id))
            source_idx = self._add_element(("node", edge.source_element))
            target_idx = self._add_element(("node", edge.target_element))
            self.rx_graph.add_edge(source_idx, edge_idx, None)
            self.rx_graph.add_edge(edge_idx, target_idx, None)

    @classmethod
    def from_edges(cls, edges: List[RenderEdge]) -> "GraphIndex":
        """Create an index from rendered edges."""
        return cls(edges)

    def _add_element(self, key: ElementKey) -> int:
        idx = self.element_map.get(key)
        if idx is None:
            idx = self.rx_graph.add_node(key)
            self.element_map[key] = idx
        return idx

    @property
    def rx_graph_reversed(self) -> rx.PyDiGraph:
        """Get reversed graph for upstream traversal (created lazily)."""
        if self._rx_graph_reversed is None:
            self._rx_graph_reversed = self.rx_graph.copy()
            self._rx_graph_reversed.reverse()
        return self._rx_graph_reversed

    def lookup(self, element_id: str) -> Optional[int]:
        """Index of an element; an id naming an edge is treated as that edge."""
        if element_id in self.edge_map:
            return self.element_map[("edge", element_id)]
        return self.element_map.get(("node", element_id))

    def _reachable(self, idx: int, direction: TraversalDirection) -> Set[int]:
        if direction == TraversalDirection.DOWNSTREAM:
            return set(rx.descendants(self.rx_graph, idx))
        return set(rx.ancestors(self.rx_graph, idx))

    def connected_elements(
        self,
        start_id: str,
        direction: TraversalDirection = TraversalDirection.BOTH,
    ) -> Set[str]:
        """
        Find every element reachable from a start element.

        Upstream and downstream reachability are computed independently, so
        an element upstream of the start is never followed downstream.

        Args:
            start_id: Node, column or edge id to start from
            direction: Direction(s) to follow

        Returns:
            Set of element ids including the start id
        """
        result = {start_id}
        idx = self.lookup(start_id)
        if idx is None:
            return result

        directions = (
            [TraversalDirection.DOWNSTREAM, TraversalDirection.UPSTREAM]
            if direction == TraversalDirection.BOTH
            else [direction]
        )
        for current in directions:
            for reached in self._reachable(idx, current):
                result.add(self.rx_graph[reached][1])
        return result

    def connected_elements_multiple(
        self,
        start_ids: Iterable[str],
        direction: TraversalDirection = TraversalDirection.BOTH,
    ) -> Set[str]:
        """Union of connected_elements() over several start ids."""
        result: Set[str] = set()
        for start_id in start_ids:
            result |= self.connected_elements(start_id, direction)
        return result

    def hop_counts(
        self, start_id: str, direction: TraversalDirection
    ) -> Dict[ElementKey, int]:
        """
        Shortest hop count from a start element to each reachable element.

        One hop is one rendered edge: an edge element and its target are
        both one hop away from the element the edge leaves.

        Args:
            start_id: Node, column or edge id to start from
            direction: UPSTREAM or DOWNSTREAM

        Returns:
            Mapping from element key to hop count (start excluded)
        """
        idx = self.lookup(start_id)
        if idx is None:
            return {}

        graph = (
            self.rx_graph_reversed
            if direction == TraversalDirection.UPSTREAM
            else self.rx_graph
        )
        distances = rx.dijkstra_shortest_path_lengths(
            graph, idx, edge_cost_fn=lambda _: 1.0
        )
        return {
            self.rx_graph[reached]: (int(distance) + 1) // 2
            for reached, distance in distances.items()
            if reached != idx
        }


def find_connected_elements(start_id: str, edges: List[RenderEdge]) -> Set[str]:
    """
    Find all elements upstream and downstream of a start element.

    Builds an index internally; use GraphIndex directly for repeated queries
    on the same graph.

    Args:
        start_id: Node, column or edge id to start from
        edges: All edges of the graph

    Returns:
        Start id plus every reached node, column and edge id
    """
    return GraphIndex.from_edges(edges).connected_elements(start_id)


def find_connected_elements_multiple(
    start_ids: Iterable[str], edges: List[RenderEdge]
) -> Set[str]:
    """Union of find_connected_elements() over several start ids."""
    return GraphIndex.from_edges(edges).connected_elements_multiple(start_ids)


def find_connected_elements_directional(
    start_id: str,
    edges: List[RenderEdge],
    direction: TraversalDirection,
) -> Set[str]:
    """find_connected_elements() restricted to one direction (or both)."""
    return GraphIndex.from_edges(edges).connected_elements(start_id, direction)


def find_connected_elements_multiple_directional(
    start_ids: Iterable[str],
    edges: List[RenderEdge],
    direction: TraversalDirection,
) -> Set[str]:
    """find_connected_elements_multiple() restricted to one direction."""
    index = GraphIndex.from_edges(edges)
    return index.connected_elements_multiple(start_ids, direction)


class ImpactedElement(BaseModel):
    """An element reached by an impact trace."""

    id: str = Field(..., description="Node, column or edge id")
    element_type: Literal["node", "column", "edge"]
    direction: TraversalDirection = Field(
        ..., description="Side of the start element it was reached on"
    )
    hops: int = Field(..., description="Rendered edges between it and the start")


class ImpactResult(BaseModel):
    """Result of an impact trace."""

    start_id: str
    direction: TraversalDirection
    elements: List[ImpactedElement] = Field(default_factory=list)

    def element_ids(self) -> Set[str]:
        """Start id plus every reached element id."""
        return {self.start_id} | {element.id for element in self.elements}

    def __len__(self) -> int:
        """Return number of impacted elements."""
        return len(self.elements)


class ImpactTraversal:
    """Trace what a node, column or edge affects and depends on."""

    def __init__(self, graph: RenderGraph):
        """
        Initialize the traversal with a rendered graph.

        Args:
            graph: Graph to trace through
        """
        self.graph = graph
        self.index = GraphIndex.from_edges(graph.edges)
        self._node_ids = graph.node_ids()
        self._known_ids = graph.element_ids() | set(self.index.edge_map)

    def _element_type(self, key: ElementKey) -> str:
        kind, element_id = key
        if kind == "edge":
            return "edge"
        return "node" if element_id in self._node_ids else "column"

    def trace(
        self,
        start_id: str,
        direction: TraversalDirection = TraversalDirection.BOTH,
    ) -> ImpactResult:
        """
        Trace the elements reachable from a start element with hop counts.

        Args:
            start_id: Node, column or edge id to start from
            direction: Direction(s) to follow

        Returns:
            ImpactResult sorted by direction, hops and id

        Raises:
            ValueError: If the start id is not part of the graph
        """
        if start_id not in self._known_ids:
            raise ValueError(f"Element '{start_id}' not found in graph")

        directions = (
            [TraversalDirection.UPSTREAM, TraversalDirection.DOWNSTREAM]
            if direction == TraversalDirection.BOTH
            else [direction]
        )
        elements = []
        for current in directions:
            for key, hops in self.index.hop_counts(start_id, current).items():
                elements.append(
                    ImpactedElement(
                        id=key[1],
                        element_type=self._element_type(key),
                        direction=current,
                        hops=hops,
                    )
                )

        elements.sort(key=lambda e: (e.direction.value, e.hops, e.id))
        return ImpactResult(start_id=start_id, direction=direction, elements=elements)
