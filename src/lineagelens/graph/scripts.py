"""Script-level and hybrid (script + table) graph construction."""

from typing import Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, Field

from lineagelens.global_models import EdgeKind, NodeKind
from lineagelens.graph.models import (
    EdgeData,
    RenderEdge,
    RenderGraph,
    RenderNode,
    ScriptNodeData,
    TableNodeData,
    ViewOptions,
)
from lineagelens.graph.namespace import resolve_namespace
from lineagelens.lineage.models import LineageNode, StatementLineageUnit

CREATE_STATEMENT_TYPES = frozenset({"CREATE_TABLE", "CREATE_TABLE_AS", "CREATE_VIEW"})
UNKNOWN_SCRIPT = "unknown"
MAX_EDGE_LABEL_TABLES = 3

_SCRIPT_RELATION_KINDS = frozenset({NodeKind.TABLE, NodeKind.VIEW})


class ScriptIO(BaseModel):
    """Tables a script reads and writes, by label and by qualified name."""

    reads: List[str] = Field(default_factory=list)
    writes: List[str] = Field(default_factory=list)
    read_qualified: List[str] = Field(default_factory=list)
    write_qualified: List[str] = Field(default_factory=list)


def _append_unique(items: List[str], value: str) -> None:
    if value not in items:
        items.append(value)


def _relation_nodes(unit: StatementLineageUnit) -> List[LineageNode]:
    return [node for node in unit.nodes if node.kind in _SCRIPT_RELATION_KINDS]


def get_created_relation_node_ids(unit: StatementLineageUnit) -> Set[str]:
    """
    Find the relations created by a CREATE TABLE/VIEW statement.

    Relations receiving a data flow are preferred. Without explicit flows the
    sole relation of the statement is the created one, or else the single
    relation whose kind matches the statement type.

    Args:
        unit: Statement lineage unit

    Returns:
        Ids of created relation nodes (empty for non-CREATE statements)
    """
    created = {node.id for node in unit.nodes if node.is_created}
    statement_type = (unit.statement_type or "").upper()
    if statement_type not in CREATE_STATEMENT_TYPES:
        return created

    relations = _relation_nodes(unit)
    relation_ids = {node.id for node in relations}
    flow_targets = {
        edge.to_id
        for edge in unit.edges
        if edge.kind == EdgeKind.DATA_FLOW and edge.to_id in relation_ids
    }
    if flow_targets:
        return created | flow_targets

    if len(relations) == 1:
        return created | {relations[0].id}

    target_kind = NodeKind.VIEW if statement_type == "CREATE_VIEW" else NodeKind.TABLE
    matching = [node for node in relations if node.kind == target_kind]
    if len(matching) == 1:
        return created | {matching[0].id}
    return created


def _relation_access(
    unit: StatementLineageUnit,
) -> List[Tuple[LineageNode, bool, bool]]:
    """(node, is_written, is_read) for every table/view of a statement."""
    created = get_created_relation_node_ids(unit)
    flow_edges = [edge for edge in unit.edges if edge.kind == EdgeKind.DATA_FLOW]
    written_ids = {edge.to_id for edge in flow_edges} | created
    read_ids = {edge.from_id for edge in flow_edges}

    access = []
    for node in _relation_nodes(unit):
        is_written = node.id in written_ids
        is_read = node.id in read_ids or not is_written
        access.append((node, is_written, is_read))
    return access


def get_script_io(units: List[StatementLineageUnit]) -> ScriptIO:
    """
    Compute the read and write sets of a script.

    A table is written when a data flow targets it or the statement creates
    it, and read when a data flow leaves it or it is not written at all.
    A table can be both.

    Args:
        units: Statements of one script

    Returns:
        ScriptIO with insertion-ordered, duplicate-free sets
    """
    io = ScriptIO()
    for unit in units:
        for node, is_written, is_read in _relation_access(unit):
            qualified = node.qualified_name or node.label
            if is_written:
                _append_unique(io.writes, node.label)
                _append_unique(io.write_qualified, qualified)
            if is_read:
                _append_unique(io.reads, node.label)
                _append_unique(io.read_qualified, qualified)
    return io


def group_statements_by_script(
    units: List[StatementLineageUnit],
) -> Dict[str, List[StatementLineageUnit]]:
    """Group statements by source name, keeping first-seen script order."""
    scripts: Dict[str, List[StatementLineageUnit]] = {}
    for unit in units:
        scripts.setdefault(unit.source_name or UNKNOWN_SCRIPT, []).append(unit)
    return scripts


def script_node_id(source_name: str) -> str:
    return f"script:{source_name}"


def hybrid_table_node_id(qualified_name: str) -> str:
    return f"table:{qualified_name}"


def _short_name(qualified_name: str) -> str:
    return qualified_name.rsplit(".", 1)[-1]


def format_shared_tables_label(tables: List[str]) -> str:
    """
    Label a script-to-script edge with the tables it carries.

    Args:
        tables: Short names of the shared tables

    Returns:
        Up to MAX_EDGE_LABEL_TABLES names, plus " +N more" for the rest
    """
    label = ", ".join(tables[:MAX_EDGE_LABEL_TABLES])
    extra = len(tables) - MAX_EDGE_LABEL_TABLES
    if extra > 0:
        label += f" +{extra} more"
    return label


def _script_nodes(
    scripts: Dict[str, List[StatementLineageUnit]],
    ios: Dict[str, ScriptIO],
    options: ViewOptions,
) -> List[RenderNode]:
    lowered = options.search_term.lower()
    nodes = []
    for source_name, units in scripts.items():
        node_id = script_node_id(source_name)
        nodes.append(
            RenderNode(
                id=node_id,
                type="script",
                data=ScriptNodeData(
                    label=source_name,
                    source_name=source_name,
                    tables_read=ios[source_name].reads,
                    tables_written=ios[source_name].writes,
                    statement_count=len(units),
                    is_selected=node_id == options.selected_node_id,
                    is_highlighted=bool(lowered) and lowered in source_name.lower(),
                ),
            )
        )
    return nodes


def build_script_graph(
    units: List[StatementLineageUnit], options: Optional[ViewOptions] = None
) -> RenderGraph:
    """
    Build the script-level graph: one node per script.

    A producer script connects to a consumer script when a table it writes
    is read by the consumer. At most one edge exists per ordered pair.

    Args:
        units: All statements of the analysis
        options: Selection and search inputs

    Returns:
        RenderGraph with script nodes and producer->consumer edges
    """
    options = options or ViewOptions()
    scripts = group_statements_by_script(units)
    ios = {name: get_script_io(stmts) for name, stmts in scripts.items()}

    edges: List[RenderEdge] = []
    seen: Set[str] = set()
    for producer, producer_io in ios.items():
        for consumer, consumer_io in ios.items():
            if producer == consumer:
                continue
            shared = [
                _short_name(table)
                for table in producer_io.write_qualified
                if table in consumer_io.read_qualified
            ]
            edge_id = f"{producer}->{consumer}"
            if not shared or edge_id in seen:
                continue
            seen.add(edge_id)
            edges.append(
                RenderEdge(
                    id=edge_id,
                    source=script_node_id(producer),
                    target=script_node_id(consumer),
                    label=format_shared_tables_label(shared),
                    data=EdgeData(kind=EdgeKind.DATA_FLOW),
                )
            )

    return RenderGraph(nodes=_script_nodes(scripts, ios, options), edges=edges)


def build_hybrid_graph(
    units: List[StatementLineageUnit], options: Optional[ViewOptions] = None
) -> RenderGraph:
    """
    Build the hybrid graph: script nodes plus one node per distinct table.

    Scripts point at the tables they write and tables point at the scripts
    reading them. When several scripts mention a table, the provenance of
    the script writing it wins over readers.

    Args:
        units: All statements of the analysis
        options: Selection and search inputs

    Returns:
        RenderGraph with script and simple_table nodes
    """
    options = options or ViewOptions()
    scripts = group_statements_by_script(units)
    ios = {name: get_script_io(stmts) for name, stmts in scripts.items()}

    # qualified name -> (representative node, writer script)
    tables: Dict[str, Tuple[LineageNode, Optional[str]]] = {}
    edges: List[RenderEdge] = []

    for source_name, stmts in scripts.items():
        for unit in stmts:
            for node, is_written, _ in _relation_access(unit):
                qualified = node.qualified_name or node.label
                if is_written:
                    tables[qualified] = (node, source_name)
                elif qualified not in tables:
                    tables[qualified] = (node, None)

        script_id = script_node_id(source_name)
        for qualified in ios[source_name].write_qualified:
            table_id = hybrid_table_node_id(qualified)
            edges.append(
                RenderEdge(
                    id=f"{script_id}->{table_id}",
                    source=script_id,
                    target=table_id,
                    data=EdgeData(kind=EdgeKind.DATA_FLOW),
                )
            )
        for qualified in ios[source_name].read_qualified:
            table_id = hybrid_table_node_id(qualified)
            edges.append(
                RenderEdge(
                    id=f"{table_id}->{script_id}",
                    source=table_id,
                    target=script_id,
                    data=EdgeData(kind=EdgeKind.DATA_FLOW),
                )
            )

    lowered = options.search_term.lower()
    table_nodes = []
    for qualified, (node, writer) in tables.items():
        table_id = hybrid_table_node_id(qualified)
        schema_name, database = resolve_namespace(node)
        table_nodes.append(
            RenderNode(
                id=table_id,
                type="simple_table",
                data=TableNodeData(
                    label=node.label,
                    node_type="view" if node.kind == NodeKind.VIEW else "table",
                    is_selected=table_id == options.selected_node_id,
                    is_highlighted=bool(lowered) and lowered in node.label.lower(),
                    qualified_name=qualified,
                    schema_name=schema_name,
                    database=database,
                    source_name=writer,
                ),
            )
        )

    return RenderGraph(
        nodes=_script_nodes(scripts, ios, options) + table_nodes, edges=edges
    )
