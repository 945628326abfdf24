"""
Edge model for the project graph.

Edges connect two nodes by id. An edge may reference ids that are not (or no
longer) present in the graph; such dangling edges are kept by the store but
ignored by traversal and analytics.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..enums import EdgeKind, EdgeStyle
from .base import (
    coerce_enum,
    coerce_optional_enum,
    validate_dataclass,
    validate_identifier,
    validate_range,
)
from .metadata import EdgeMetadata

DEFAULT_EDGE_LABELS = {
    EdgeKind.HIERARCHY: "contains",
    EdgeKind.DEPENDENCY: "depends on",
    EdgeKind.VERSION: "evolves to",
    EdgeKind.TEST: "tests",
    EdgeKind.ASSIGNMENT: "assigned to",
}


@validate_dataclass
@dataclass
class Edge:
    """
    Directed connection between two nodes.

    Attributes:
        id (str): Identifier, unique within a graph
        source (str): Source node id
        target (str): Target node id
        kind (EdgeKind): Variant tag of the relationship
        label (Optional[str]): Display label
        weight (Optional[float]): Non-negative numeric weight
        color (Optional[str]): Explicit stroke colour
        style (Optional[EdgeStyle]): Stroke style
        metadata (EdgeMetadata): Timestamps, strength and flags
    """

    id: str
    source: str
    target: str
    kind: EdgeKind
    label: Optional[str] = None
    weight: Optional[float] = None
    color: Optional[str] = None
    style: Optional[EdgeStyle] = None
    metadata: EdgeMetadata = field(default_factory=EdgeMetadata)

    def __post_init__(self):
        validate_identifier("edge id", self.id)
        validate_identifier("edge source", self.source)
        validate_identifier("edge target", self.target)
        self.kind = coerce_enum(EdgeKind, self.kind, "kind")
        self.style = coerce_optional_enum(EdgeStyle, self.style, "style")
        validate_range("weight", self.weight, 0)

    @property
    def display_label(self) -> Optional[str]:
        """Label to show for the edge, falling back to the kind's verb."""
        return self.label or DEFAULT_EDGE_LABELS.get(self.kind)
