"""Injection of resolved schema columns into table nodes."""

from typing import List, Optional, Tuple

from rich.console import Console

from lineagelens.graph.models import ColumnInfo
from lineagelens.lineage.models import SchemaMetadata, SchemaTable

console = Console(stderr=True)


def find_schema_table(
    label: str,
    qualified_name: Optional[str],
    schema: Optional[SchemaMetadata],
) -> Optional[SchemaTable]:
    """
    Find the schema table matching a relation node.

    An exact qualified-name match is preferred. Otherwise the table is looked
    up by its short name; when several schema tables share that name the
    first one wins and a warning is printed.

    Args:
        label: Short name of the relation
        qualified_name: Qualified name of the relation, if known
        schema: Resolved schema metadata

    Returns:
        Matching SchemaTable, or None
    """
    if schema is None or not schema.tables:
        return None

    if qualified_name:
        for table in schema.tables:
            if table.qualified_name == qualified_name:
                return table

    candidates = [table for table in schema.tables if table.name == label]
    if not candidates:
        return None

    if len(candidates) > 1:
        names = ", ".join(table.qualified_name for table in candidates)
        console.print(
            f"[yellow]Warning:[/yellow] Table '{label}' is ambiguous in schema "
            f"metadata ({names}); using {candidates[0].qualified_name}"
        )
    return candidates[0]


def process_table_columns(
    label: str,
    qualified_name: Optional[str],
    node_id: str,
    existing_columns: List[ColumnInfo],
    is_expanded: bool,
    schema: Optional[SchemaMetadata],
) -> Tuple[List[ColumnInfo], int]:
    """
    Complete a table's columns with the ones known only from schema metadata.

    Args:
        label: Short name of the relation
        qualified_name: Qualified name of the relation
        node_id: Id of the table node (prefix of injected column ids)
        existing_columns: Columns referenced by the lineage
        is_expanded: Whether the caller asked to show all schema columns
        schema: Resolved schema metadata

    Returns:
        Tuple of (columns to display, number of schema columns not referenced)
    """
    schema_table = find_schema_table(label, qualified_name, schema)
    if schema_table is None:
        return existing_columns, 0

    existing_names = {col.name.lower() for col in existing_columns}
    missing = [
        col for col in schema_table.columns if col.name.lower() not in existing_names
    ]

    if is_expanded and missing:
        injected = [
            ColumnInfo(
                id=f"{node_id}__schema_{col.name}",
                name=col.name,
                expression=col.data_type,
            )
            for col in missing
        ]
        return existing_columns + injected, len(missing)

    return existing_columns, len(missing)
