"""Shared models and enums used across lineagelens modules."""

from enum import Enum


class NodeKind(str, Enum):
    """Kind of a node produced by the lineage analysis."""

    TABLE = "table"
    CTE = "cte"
    VIEW = "view"
    COLUMN = "column"
    SCRIPT = "script"
    OUTPUT = "output"


class EdgeKind(str, Enum):
    """Kind of a relationship between two lineage nodes."""

    OWNERSHIP = "ownership"
    DATA_FLOW = "data_flow"
    DERIVATION = "derivation"
    JOIN_DEPENDENCY = "join_dependency"


class ViewMode(str, Enum):
    """Granularity of a rendered lineage graph."""

    TABLE = "table"
    COLUMN = "column"
    SCRIPT = "script"
    HYBRID = "hybrid"


class TraversalDirection(str, Enum):
    """Direction followed by an impact traversal."""

    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"
    BOTH = "both"


# Kinds that can own columns and be drawn as a table box
RELATION_KINDS = frozenset({NodeKind.TABLE, NodeKind.CTE, NodeKind.VIEW})

# Edge kinds that move data between columns or relations
FLOW_EDGE_KINDS = frozenset({EdgeKind.DATA_FLOW, EdgeKind.DERIVATION})
