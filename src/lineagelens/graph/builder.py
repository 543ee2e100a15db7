"""Table-level and column-level graph construction for one statement."""

from typing import List, Optional, Set, Tuple

from lineagelens.global_models import EdgeKind, NodeKind
from lineagelens.graph.collapse import is_collapsed
from lineagelens.graph.dedup import (
    EndpointResolver,
    deduplicate_table_edges,
    flow_edges,
    join_dependency_edges,
    relation_edge,
)
from lineagelens.graph.models import (
    ColumnInfo,
    EdgeData,
    RenderEdge,
    RenderGraph,
    RenderNode,
    TableNodeData,
    ViewOptions,
)
from lineagelens.graph.namespace import resolve_namespace
from lineagelens.graph.output import (
    find_orphan_columns,
    output_node_id,
    synthesize_output_node,
)
from lineagelens.graph.ownership import OwnershipIndex
from lineagelens.graph.schema import process_table_columns
from lineagelens.graph.search import matches_search
from lineagelens.lineage.models import LineageNode, StatementLineageUnit


def _node_type(node: LineageNode) -> str:
    if node.kind == NodeKind.CTE:
        return "cte"
    if node.kind == NodeKind.VIEW:
        return "view"
    return "table"


def _base_table_ids(index: OwnershipIndex) -> Set[str]:
    """
    Find the driving tables of a joined statement.

    When at least one relation carries join metadata, the physical tables
    without join metadata are the ones the joins hang off. CTEs and views
    are never base tables.
    """
    relations = index.relations.values()
    if not any(node.join_type for node in relations):
        return set()
    return {
        node.id
        for node in relations
        if node.kind == NodeKind.TABLE and not node.join_type
    }


def _recursive_node_ids(unit: StatementLineageUnit) -> Set[str]:
    return {
        edge.from_id
        for edge in unit.edges
        if edge.kind == EdgeKind.DATA_FLOW and edge.from_id == edge.to_id
    }


def _build_relation_node(
    node: LineageNode,
    index: OwnershipIndex,
    options: ViewOptions,
    base_table_ids: Set[str],
    recursive_ids: Set[str],
) -> RenderNode:
    existing = [
        ColumnInfo(
            id=column.id,
            name=column.label,
            expression=column.expression,
            source_name=column.source_name,
        )
        for column in index.owned_columns(node.id)
    ]
    columns, hidden_column_count = process_table_columns(
        node.label,
        node.qualified_name,
        node.id,
        existing,
        node.id in options.expanded_table_ids,
        options.resolved_schema,
    )
    schema_name, database = resolve_namespace(node)

    return RenderNode(
        id=node.id,
        type="table",
        data=TableNodeData(
            label=node.label,
            node_type=_node_type(node),
            columns=columns,
            is_selected=node.id == options.selected_node_id,
            is_highlighted=matches_search(options.search_term, node.label, columns),
            is_collapsed=is_collapsed(
                node.id, options.default_collapsed, options.collapse_overrides
            ),
            is_base_table=node.id in base_table_ids,
            is_recursive=node.id in recursive_ids,
            hidden_column_count=hidden_column_count,
            qualified_name=node.qualified_name or node.label,
            schema_name=schema_name,
            database=database,
            join_type=node.join_type,
            join_condition=node.join_condition,
            source_name=node.source_name,
        ),
    )


def _prepare(
    unit: StatementLineageUnit, options: ViewOptions
) -> Tuple[List[RenderNode], EndpointResolver]:
    """Build the node set shared by the table and column views."""
    index = OwnershipIndex(unit)
    orphans = find_orphan_columns(index)
    output_id = output_node_id(index)
    base_table_ids = _base_table_ids(index)
    recursive_ids = _recursive_node_ids(unit)

    # Tables and views first, then CTEs
    relations = sorted(
        index.relations.values(), key=lambda node: node.kind == NodeKind.CTE
    )
    nodes = [
        _build_relation_node(node, index, options, base_table_ids, recursive_ids)
        for node in relations
    ]

    output_node = synthesize_output_node(
        orphans,
        output_id,
        options.selected_node_id,
        options.search_term,
        is_collapsed(output_id, options.default_collapsed, options.collapse_overrides),
    )
    if output_node is not None:
        nodes.append(output_node)

    return nodes, EndpointResolver(index, orphans, output_id)


def build_table_graph(
    unit: StatementLineageUnit, options: Optional[ViewOptions] = None
) -> RenderGraph:
    """
    Build the table-level graph of a statement.

    One node per table, view and CTE (plus the Output node when orphan
    columns exist) and exactly one edge per connected (source, target) pair.

    Args:
        unit: Statement (usually the merge of all selected statements)
        options: Selection, search and collapse inputs

    Returns:
        RenderGraph with deduplicated table-pair edges
    """
    options = options or ViewOptions()
    nodes, resolver = _prepare(unit, options)
    return RenderGraph(nodes=nodes, edges=deduplicate_table_edges(resolver))


def build_column_graph(
    unit: StatementLineageUnit, options: Optional[ViewOptions] = None
) -> RenderGraph:
    """
    Build the column-level graph of a statement.

    Nodes match the table-level graph. Every column-to-column connection
    becomes its own edge anchored on the column handles; connections that
    touch a bare relation become one handle-free edge per relation pair.

    Args:
        unit: Statement (usually the merge of all selected statements)
        options: Selection, search and collapse inputs

    Returns:
        RenderGraph with one edge per column connection
    """
    options = options or ViewOptions()
    nodes, resolver = _prepare(unit, options)
    columns = resolver.index.columns

    edges: List[RenderEdge] = []
    seen_pairs: Set[Tuple[str, str]] = set()
    relation_connections = []

    for edge, source, target in flow_edges(resolver):
        if source[1] is None or target[1] is None:
            relation_connections.append((edge, source[0], target[0]))
            continue

        seen_pairs.add((source[0], target[0]))
        source_col = columns[edge.from_id]
        target_col = columns[edge.to_id]
        expression = edge.expression or target_col.expression
        is_derived = edge.kind == EdgeKind.DERIVATION or bool(expression)

        edges.append(
            RenderEdge(
                id=edge.id,
                source=source[0],
                target=target[0],
                source_handle=source[1],
                target_handle=target[1],
                data=EdgeData(
                    kind=edge.kind,
                    expression=expression,
                    source_column=source_col.label,
                    target_column=target_col.label,
                    is_derived=is_derived,
                ),
            )
        )

    # UPDATE/DELETE/MERGE style lineage lands on the relation itself
    for edge, source_id, target_id in relation_connections:
        if (source_id, target_id) in seen_pairs:
            continue
        seen_pairs.add((source_id, target_id))
        edges.append(relation_edge(resolver, source_id, target_id, edge.kind))

    edges.extend(join_dependency_edges(resolver, seen_pairs))
    return RenderGraph(nodes=nodes, edges=edges)
