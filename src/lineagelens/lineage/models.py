"""Pydantic models for statement-level lineage records.

These models describe the snapshot handed over by the external lineage
analysis engine. They are treated as immutable for the lifetime of one
analysis run; every derived graph is rebuilt from them.
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lineagelens.global_models import RELATION_KINDS, EdgeKind, NodeKind

# Analysis results are produced by a camelCase JSON API; accept both spellings.
_LINEAGE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
)


class LineageNode(BaseModel):
    """A table, CTE, view, column, script or output node of one statement."""

    model_config = _LINEAGE_CONFIG

    id: str = Field(..., description="Stable identifier within one analysis run")
    kind: NodeKind = Field(
        ...,
        validation_alias=AliasChoices("kind", "type"),
        description="Node kind discriminant",
    )
    label: str = Field(..., description="Human-readable short name")
    qualified_name: Optional[str] = Field(
        None, description="Fully qualified name when available"
    )
    schema_name: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("schema_name", "schemaName", "schema"),
        description="Schema the relation lives in",
    )
    database: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("database", "catalog"),
        description="Database (catalog) the relation lives in",
    )
    expression: Optional[str] = Field(
        None, description="SQL expression text for computed columns"
    )
    join_type: Optional[str] = Field(
        None, description="Join type when the relation participates in a join"
    )
    join_condition: Optional[str] = Field(
        None, description="Join condition when the relation participates in a join"
    )
    is_created: bool = Field(
        default=False, description="True if the statement creates this relation"
    )
    statement_index: Optional[int] = Field(
        None, description="Index of the statement that produced the node"
    )
    source_name: Optional[str] = Field(
        None, description="Script or file the node was read from"
    )

    @property
    def is_relation(self) -> bool:
        """True for tables, CTEs and views."""
        return self.kind in RELATION_KINDS

    @property
    def has_join_metadata(self) -> bool:
        """True if the node carries a join type or join condition."""
        return bool(self.join_type or self.join_condition)


class LineageEdge(BaseModel):
    """A directed relationship between two lineage nodes."""

    model_config = _LINEAGE_CONFIG

    id: str = Field(..., description="Stable identifier within one analysis run")
    from_id: str = Field(
        ...,
        validation_alias=AliasChoices("from_id", "fromId", "from"),
        description="Source node identifier",
    )
    to_id: str = Field(
        ...,
        validation_alias=AliasChoices("to_id", "toId", "to"),
        description="Target node identifier",
    )
    kind: EdgeKind = Field(
        ...,
        validation_alias=AliasChoices("kind", "type"),
        description="Edge kind discriminant",
    )
    expression: Optional[str] = Field(
        None, description="SQL expression if the edge is a transformation"
    )
    operation: Optional[str] = Field(
        None, description="Operation label (JOIN, UNION, AGGREGATE, ...)"
    )
    join_type: Optional[str] = Field(None, description="Join type for join edges")
    join_condition: Optional[str] = Field(
        None, description="Join condition for join edges"
    )


class StatementLineageUnit(BaseModel):
    """Node and edge set of a single analyzed statement."""

    model_config = _LINEAGE_CONFIG

    statement_index: int = Field(default=0, description="Index of the statement")
    statement_type: str = Field(default="SELECT", description="Type of statement")
    source_name: Optional[str] = Field(
        None, description="Script or file the statement was read from"
    )
    nodes: List[LineageNode] = Field(default_factory=list)
    edges: List[LineageEdge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[LineageNode]:
        """
        Find a node by its id.

        Args:
            node_id: Node identifier to find

        Returns:
            LineageNode if found, None otherwise
        """
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


class ColumnSchema(BaseModel):
    """A column known from resolved schema metadata."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    data_type: Optional[str] = None


class SchemaTable(BaseModel):
    """A table known from resolved schema metadata."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    catalog: Optional[str] = None
    schema_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("schema_name", "schemaName", "schema")
    )
    name: str
    columns: List[ColumnSchema] = Field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        """Dot-joined catalog, schema and table name."""
        return ".".join(
            part for part in (self.catalog, self.schema_name, self.name) if part
        )


class SchemaMetadata(BaseModel):
    """Resolved schema metadata supplied alongside an analysis result."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tables: List[SchemaTable] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """The document produced by the external lineage analysis boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    statements: List[StatementLineageUnit] = Field(default_factory=list)
    resolved_schema: Optional[SchemaMetadata] = Field(
        None, description="Schema metadata used during analysis, if any"
    )
