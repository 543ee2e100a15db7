"""Virtual Output node synthesis for unowned projection columns."""

from typing import List, Optional

from lineagelens.global_models import FLOW_EDGE_KINDS, NodeKind
from lineagelens.graph.models import (
    VIRTUAL_OUTPUT_LABEL,
    VIRTUAL_OUTPUT_NODE_ID,
    ColumnInfo,
    RenderNode,
    TableNodeData,
)
from lineagelens.graph.ownership import OwnershipIndex
from lineagelens.graph.search import matches_search
from lineagelens.lineage.models import LineageNode, StatementLineageUnit

SELECT_STATEMENT_TYPES = frozenset(
    {"SELECT", "WITH", "UNION", "INTERSECT", "EXCEPT", "VALUES"}
)

# Relations that can be the physical write target of a DML statement
PHYSICAL_KINDS = frozenset({NodeKind.TABLE, NodeKind.VIEW})


def is_select_statement(unit: StatementLineageUnit) -> bool:
    """Check if a statement is a SELECT-like read query."""
    return (unit.statement_type or "").upper() in SELECT_STATEMENT_TYPES


def writes_to_owned_target(index: OwnershipIndex) -> bool:
    """
    Check if a statement already writes into a real physical table.

    A write target is a table or view that receives a data flow, either on the
    relation itself or on one of the columns it owns.

    Args:
        index: Ownership index of the statement

    Returns:
        True if any flow edge lands on a physical relation
    """
    for edge in index.unit.edges:
        if edge.kind not in FLOW_EDGE_KINDS:
            continue
        target_id = index.owner_of(edge.to_id) or edge.to_id
        target = index.relations.get(target_id)
        if target is not None and target.kind in PHYSICAL_KINDS:
            return True
    return False


def find_orphan_columns(index: OwnershipIndex) -> List[LineageNode]:
    """
    Find the columns that must surface through the Output node.

    Every column without an owning relation is an orphan, except when a
    non-SELECT statement already writes into a real owned table: its unowned
    projection columns are intermediate and are not drawn.

    Args:
        index: Ownership index of the statement

    Returns:
        Orphan column nodes in node order
    """
    unowned = index.unowned_columns()
    if not unowned:
        return []
    if not is_select_statement(index.unit) and writes_to_owned_target(index):
        return []
    return unowned


def output_node_id(index: OwnershipIndex) -> str:
    """Id of the Output node: the analysis' own output node or the sentinel."""
    if index.output_node is not None:
        return index.output_node.id
    return VIRTUAL_OUTPUT_NODE_ID


def synthesize_output_node(
    orphans: List[LineageNode],
    node_id: str,
    selected_node_id: Optional[str],
    search_term: str,
    collapsed: bool,
) -> Optional[RenderNode]:
    """
    Create the Output node owning all orphan columns.

    Args:
        orphans: Orphan columns from find_orphan_columns()
        node_id: Id for the Output node
        selected_node_id: Currently selected node id
        search_term: Current search term
        collapsed: Displayed collapse state of the node

    Returns:
        RenderNode, or None when there are no orphan columns
    """
    if not orphans:
        return None

    columns = [
        ColumnInfo(
            id=column.id,
            name=column.label,
            expression=column.expression,
            source_name=column.source_name,
        )
        for column in orphans
    ]

    return RenderNode(
        id=node_id,
        type="table",
        data=TableNodeData(
            label=VIRTUAL_OUTPUT_LABEL,
            node_type="output",
            columns=columns,
            is_selected=node_id == selected_node_id,
            is_highlighted=matches_search(search_term, VIRTUAL_OUTPUT_LABEL, columns),
            is_collapsed=collapsed,
        ),
    )
