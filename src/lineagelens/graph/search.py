"""Resolution of search terms to matching element ids per view mode."""

from typing import List, Set

from lineagelens.global_models import ViewMode
from lineagelens.graph.models import ColumnInfo, RenderNode


def matches_search(search_term: str, label: str, columns: List[ColumnInfo]) -> bool:
    """Case-insensitive substring match on a label or any column name."""
    if not search_term:
        return False
    lowered = search_term.lower()
    if lowered in label.lower():
        return True
    return any(lowered in col.name.lower() for col in columns)


def find_search_match_ids(
    search_term: str, nodes: List[RenderNode], view_mode: ViewMode
) -> Set[str]:
    """
    Find the element ids matching a search term.

    Matching is a case-insensitive substring test.

    - Column view: matching column ids; a matching table label selects all of
      that table's columns.
    - Table view: ids of table, view and CTE nodes whose label matches.
    - Script and hybrid views: ids of script and table nodes whose label
      matches.

    Args:
        search_term: Search term; empty means no matches
        nodes: Nodes of the rendered graph
        view_mode: View the nodes were built for

    Returns:
        Set of matching node or column ids
    """
    if not search_term:
        return set()

    lowered = search_term.lower()
    matches: Set[str] = set()

    for node in nodes:
        data = node.table_data

        if view_mode == ViewMode.COLUMN:
            if data is None:
                continue
            label_matches = lowered in data.label.lower()
            for column in data.columns:
                if label_matches or lowered in column.name.lower():
                    matches.add(column.id)

        elif view_mode == ViewMode.TABLE:
            if data is not None and lowered in data.label.lower():
                matches.add(node.id)

        elif node.type in ("script", "simple_table"):
            if lowered in node.data.label.lower():
                matches.add(node.id)

    return matches
