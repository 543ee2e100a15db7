"""Pydantic models for renderable lineage graphs and view options."""

from typing import Dict, FrozenSet, List, Literal, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field

from lineagelens.global_models import EdgeKind, TraversalDirection
from lineagelens.lineage.models import SchemaMetadata

VIRTUAL_OUTPUT_NODE_ID = "virtual:output"
VIRTUAL_OUTPUT_LABEL = "Output"

# Type alias for the caller-owned set of collapse overrides
CollapseOverrideSet = FrozenSet[str]


class ColumnInfo(BaseModel):
    """A column shown inside a table node (also a handle id)."""

    id: str = Field(..., description="Column node id, used as edge handle")
    name: str = Field(..., description="Column name")
    expression: Optional[str] = Field(None, description="Computed expression")
    source_name: Optional[str] = Field(None, description="Originating script")


class TableNodeData(BaseModel):
    """View payload for table, view, CTE and Output nodes."""

    label: str
    node_type: Literal["table", "view", "cte", "output"]
    columns: List[ColumnInfo] = Field(default_factory=list)
    is_selected: bool = False
    is_highlighted: bool = False
    is_collapsed: bool = False
    is_base_table: bool = False
    is_recursive: bool = False
    hidden_column_count: int = 0
    qualified_name: Optional[str] = None
    schema_name: Optional[str] = None
    database: Optional[str] = None
    join_type: Optional[str] = None
    join_condition: Optional[str] = None
    source_name: Optional[str] = None


class ScriptNodeData(BaseModel):
    """View payload for script nodes."""

    label: str
    source_name: str
    tables_read: List[str] = Field(default_factory=list)
    tables_written: List[str] = Field(default_factory=list)
    statement_count: int = 0
    is_selected: bool = False
    is_highlighted: bool = False


class RenderNode(BaseModel):
    """A node handed to the layout/rendering collaborator."""

    id: str
    type: Literal["table", "simple_table", "script"]
    data: Union[TableNodeData, ScriptNodeData]

    @property
    def table_data(self) -> Optional[TableNodeData]:
        """The payload if this node is drawn as a table box."""
        return self.data if isinstance(self.data, TableNodeData) else None

    @property
    def column_ids(self) -> List[str]:
        """Ids of the columns (handles) this node exposes."""
        data = self.table_data
        return [col.id for col in data.columns] if data else []


class EdgeData(BaseModel):
    """Semantic payload attached to a rendered edge."""

    kind: EdgeKind
    expression: Optional[str] = None
    source_column: Optional[str] = None
    target_column: Optional[str] = None
    is_derived: bool = False
    join_type: Optional[str] = None
    join_condition: Optional[str] = None


class RenderEdge(BaseModel):
    """An edge handed to the layout/rendering collaborator."""

    id: str
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    label: Optional[str] = None
    data: Optional[EdgeData] = None

    @property
    def source_element(self) -> str:
        """Traversal endpoint on the source side (handle preferred)."""
        return self.source_handle or self.source

    @property
    def target_element(self) -> str:
        """Traversal endpoint on the target side (handle preferred)."""
        return self.target_handle or self.target


class RenderGraph(BaseModel):
    """Order-irrelevant node/edge projection for one view mode."""

    nodes: List[RenderNode] = Field(default_factory=list)
    edges: List[RenderEdge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[RenderNode]:
        """
        Find a node by its id.

        Args:
            node_id: Node id to find

        Returns:
            RenderNode if found, None otherwise
        """
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_ids(self) -> Set[str]:
        """Ids of all nodes in the graph."""
        return {node.id for node in self.nodes}

    def element_ids(self) -> Set[str]:
        """Ids of all nodes plus the column handles they expose."""
        ids = set()
        for node in self.nodes:
            ids.add(node.id)
            ids.update(node.column_ids)
        return ids

    def handles_by_node(self) -> Dict[str, Set[str]]:
        """Map from table-like node id to its column handle ids."""
        return {
            node.id: set(node.column_ids)
            for node in self.nodes
            if node.table_data is not None
        }

    def table_pairs(self) -> Set[tuple]:
        """Distinct (source, target) node pairs connected by an edge."""
        return {(edge.source, edge.target) for edge in self.edges}


class NamespaceFilterState(BaseModel):
    """Schema/database inclusion lists; both empty means no filtering."""

    model_config = ConfigDict(frozen=True)

    schemas: FrozenSet[str] = Field(default_factory=frozenset)
    databases: FrozenSet[str] = Field(default_factory=frozenset)

    @property
    def is_active(self) -> bool:
        """True if at least one inclusion list is non-empty."""
        return bool(self.schemas or self.databases)


class TableFilter(BaseModel):
    """Restrict a graph to elements connected to the selected tables."""

    model_config = ConfigDict(frozen=True)

    selected_table_labels: FrozenSet[str] = Field(default_factory=frozenset)
    direction: TraversalDirection = TraversalDirection.BOTH


class ViewOptions(BaseModel):
    """Caller-owned inputs of one render, passed by value on every call."""

    model_config = ConfigDict(frozen=True)

    selected_node_id: Optional[str] = None
    search_term: str = ""
    default_collapsed: bool = False
    collapse_overrides: CollapseOverrideSet = Field(default_factory=frozenset)
    expanded_table_ids: FrozenSet[str] = Field(default_factory=frozenset)
    namespace: NamespaceFilterState = Field(default_factory=NamespaceFilterState)
    table_filter: TableFilter = Field(default_factory=TableFilter)
    focus_mode: bool = False
    resolved_schema: Optional[SchemaMetadata] = None
