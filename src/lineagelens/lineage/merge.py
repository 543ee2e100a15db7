"""Statement merging functionality."""

from typing import Dict, List, Optional, Set

from lineagelens.lineage.models import (
    LineageEdge,
    LineageNode,
    StatementLineageUnit,
)

MERGED_STATEMENT_TYPE = "SELECT"


def _with_source_name(
    node: LineageNode, source_name: Optional[str]
) -> LineageNode:
    """Stamp the unit's source name onto a node that does not carry one."""
    if not source_name or node.source_name:
        return node
    return node.model_copy(update={"source_name": source_name})


def normalize_statement(unit: StatementLineageUnit) -> StatementLineageUnit:
    """
    Propagate the unit's source name onto its nodes.

    Args:
        unit: Statement to normalize

    Returns:
        The same unit if nothing changed, otherwise a copy with stamped nodes
    """
    if not unit.source_name:
        return unit
    nodes = [_with_source_name(node, unit.source_name) for node in unit.nodes]
    if all(new is old for new, old in zip(nodes, unit.nodes)):
        return unit
    return unit.model_copy(update={"nodes": nodes})


class StatementMerger:
    """Merge multiple statement lineage units into one."""

    def __init__(self):
        """Initialize the merger."""
        self._nodes: Dict[str, LineageNode] = {}  # id -> node, insertion ordered
        self._edges: Dict[str, LineageEdge] = {}  # id -> edge, insertion ordered
        self._statement_types: Set[str] = set()
        self._units: List[StatementLineageUnit] = []

    def add_unit(self, unit: StatementLineageUnit) -> "StatementMerger":
        """
        Add a statement to be merged.

        Nodes are deduplicated by id (first occurrence wins), except that join
        metadata carried by a later occurrence replaces the earlier one.
        Edges are deduplicated by id.

        Args:
            unit: StatementLineageUnit to add

        Returns:
            self for method chaining
        """
        self._units.append(unit)
        self._statement_types.add(unit.statement_type.upper())

        for node in unit.nodes:
            node = _with_source_name(node, unit.source_name)
            existing = self._nodes.get(node.id)
            if existing is None:
                self._nodes[node.id] = node
                continue

            update = {}
            if node.join_type:
                update["join_type"] = node.join_type
            if node.join_condition:
                update["join_condition"] = node.join_condition
            if update:
                self._nodes[node.id] = existing.model_copy(update=update)

        for edge in unit.edges:
            if edge.id not in self._edges:
                self._edges[edge.id] = edge

        return self

    def add_units(self, units: List[StatementLineageUnit]) -> "StatementMerger":
        """
        Add multiple statements.

        Args:
            units: Statements to add, in analysis order

        Returns:
            self for method chaining
        """
        for unit in units:
            self.add_unit(unit)
        return self

    def merge(self) -> StatementLineageUnit:
        """
        Build the merged statement.

        Returns:
            StatementLineageUnit with combined nodes and edges
        """
        if len(self._units) == 1:
            return normalize_statement(self._units[0])

        if len(self._statement_types) == 1:
            statement_type = next(iter(self._statement_types))
        else:
            statement_type = MERGED_STATEMENT_TYPE

        return StatementLineageUnit(
            statement_index=0,
            statement_type=statement_type,
            nodes=list(self._nodes.values()),
            edges=list(self._edges.values()),
        )


def merge_statements(units: List[StatementLineageUnit]) -> StatementLineageUnit:
    """
    Convenience function to merge statements into a single unit.

    Args:
        units: Statements to merge

    Returns:
        Merged StatementLineageUnit (empty when no statements were given)
    """
    return StatementMerger().add_units(units).merge()
