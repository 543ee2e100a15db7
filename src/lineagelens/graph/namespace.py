"""Namespace (schema/database) resolution and filtering."""

from typing import List, Optional, Tuple

from sqlglot import exp
from sqlglot.errors import SqlglotError

from lineagelens.global_models import NodeKind
from lineagelens.graph.models import NamespaceFilterState, RenderGraph, RenderNode
from lineagelens.lineage.models import LineageNode

# Only physical relations live in a namespace; CTEs are statement-local
NAMESPACED_KINDS = frozenset({NodeKind.TABLE, NodeKind.VIEW})

IDENTIFIER_QUOTES = "\"`[]"


def split_qualified_name(
    qualified_name: str,
) -> Tuple[Optional[str], Optional[str], str]:
    """
    Split a qualified relation name into database, schema and name.

    Quoted identifiers may contain dots (e.g. '"my.schema"."orders"'). Names
    with more than three parts keep the last three, and identifier quotes
    (double quotes, backticks, brackets) are stripped. A name sqlglot cannot
    tokenize is treated as an unscoped bare name.

    Args:
        qualified_name: Name such as "catalog.schema.table" or "schema.table"

    Returns:
        Tuple of (database, schema, name); missing parts are None
    """
    try:
        table = exp.to_table(qualified_name)
    except SqlglotError:
        return None, None, qualified_name

    parts = [part.name.strip(IDENTIFIER_QUOTES) for part in table.parts][-3:]
    if not parts or not parts[-1]:
        return None, None, qualified_name

    parts = [None] * (3 - len(parts)) + parts
    return parts[0] or None, parts[1] or None, parts[2]


def resolve_namespace(node: LineageNode) -> Tuple[Optional[str], Optional[str]]:
    """
    Determine the (schema, database) a lineage node belongs to.

    Explicit namespace fields from the analysis win; otherwise they are
    derived from the node's qualified name.

    Args:
        node: Lineage node

    Returns:
        Tuple of (schema, database); None where unscoped
    """
    if node.schema_name or node.database or node.kind not in NAMESPACED_KINDS:
        return node.schema_name, node.database
    if not node.qualified_name or "." not in node.qualified_name:
        return None, None
    database, schema, _ = split_qualified_name(node.qualified_name)
    return schema, database


def _in_namespace(node: RenderNode, state: NamespaceFilterState) -> bool:
    data = node.table_data
    if data is None or data.node_type == "output":
        return True

    # Unscoped nodes pass; filtering never excludes on a missing dimension
    if state.schemas and data.schema_name and data.schema_name not in state.schemas:
        return False
    if state.databases and data.database and data.database not in state.databases:
        return False
    return True


def filter_by_namespace(
    graph: RenderGraph, state: Optional[NamespaceFilterState]
) -> RenderGraph:
    """
    Scope a graph to the selected schemas and databases.

    Args:
        graph: Graph to filter
        state: Inclusion lists; None or both empty means show all

    Returns:
        Filtered graph (the input graph when no filter is active)
    """
    if state is None or not state.is_active:
        return graph

    nodes = [node for node in graph.nodes if _in_namespace(node, state)]
    valid_ids = RenderGraph(nodes=nodes).element_ids()
    edges = [
        edge
        for edge in graph.edges
        if edge.source_element in valid_ids and edge.target_element in valid_ids
    ]
    return RenderGraph(nodes=nodes, edges=edges)


def collect_namespaces(graph: RenderGraph) -> Tuple[List[str], List[str]]:
    """
    List the schemas and databases present in a graph.

    Args:
        graph: Graph to inspect

    Returns:
        Tuple of (sorted schemas, sorted databases)
    """
    schemas = set()
    databases = set()
    for node in graph.nodes:
        data = node.table_data
        if data is None:
            continue
        if data.schema_name:
            schemas.add(data.schema_name)
        if data.database:
            databases.add(data.database)
    return sorted(schemas), sorted(databases)
