"""Column ownership index for a single statement."""

from typing import Dict, List, Optional

from lineagelens.global_models import EdgeKind, NodeKind
from lineagelens.lineage.models import LineageNode, StatementLineageUnit


class OwnershipIndex:
    """Lookup tables derived once per statement for graph building."""

    def __init__(self, unit: StatementLineageUnit):
        """
        Index the nodes and ownership edges of a statement.

        Args:
            unit: Statement to index
        """
        self.unit = unit
        self.nodes: Dict[str, LineageNode] = {node.id: node for node in unit.nodes}
        self.relations: Dict[str, LineageNode] = {
            node.id: node for node in unit.nodes if node.is_relation
        }
        self.columns: Dict[str, LineageNode] = {
            node.id: node for node in unit.nodes if node.kind == NodeKind.COLUMN
        }
        self.output_node: Optional[LineageNode] = next(
            (node for node in unit.nodes if node.kind == NodeKind.OUTPUT), None
        )

        self.owner_by_column: Dict[str, str] = {}
        self.columns_by_owner: Dict[str, List[LineageNode]] = {}

        for edge in unit.edges:
            if edge.kind != EdgeKind.OWNERSHIP:
                continue
            if edge.from_id not in self.relations or edge.to_id not in self.columns:
                continue
            # A column has at most one owner; keep the first one seen
            if edge.to_id in self.owner_by_column:
                continue
            self.owner_by_column[edge.to_id] = edge.from_id
            self.columns_by_owner.setdefault(edge.from_id, []).append(
                self.columns[edge.to_id]
            )

    def owner_of(self, column_id: str) -> Optional[str]:
        """Id of the relation owning a column, if any."""
        return self.owner_by_column.get(column_id)

    def owned_columns(self, relation_id: str) -> List[LineageNode]:
        """Columns owned by a relation, in ownership-edge order."""
        return self.columns_by_owner.get(relation_id, [])

    def unowned_columns(self) -> List[LineageNode]:
        """Column nodes with no owning relation, in node order."""
        return [
            column
            for column_id, column in self.columns.items()
            if column_id not in self.owner_by_column
        ]
