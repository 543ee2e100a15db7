"""Statement-level lineage records and their merging."""

from lineagelens.lineage.merge import StatementMerger, merge_statements
from lineagelens.lineage.models import (
    AnalysisResult,
    ColumnSchema,
    LineageEdge,
    LineageNode,
    SchemaMetadata,
    SchemaTable,
    StatementLineageUnit,
)

__all__ = [
    "AnalysisResult",
    "ColumnSchema",
    "LineageEdge",
    "LineageNode",
    "SchemaMetadata",
    "SchemaTable",
    "StatementLineageUnit",
    "StatementMerger",
    "merge_statements",
]
