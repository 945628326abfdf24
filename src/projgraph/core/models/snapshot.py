"""
Graph document and snapshot models.

A snapshot is the unit handed out by the graph store: ordered nodes, ordered
edges and document-level metadata. Snapshots are copies; mutating one never
affects the store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Set

from ..enums import LayoutName
from .base import coerce_optional_enum, validate_dataclass, validate_identifier
from .edge import Edge
from .node import Node
from .views import GraphFilter, GraphView


@validate_dataclass
@dataclass
class DocumentMetadata:
    """
    Document-level metadata of a graph.

    Attributes:
        id (str): Document identifier
        name (str): Display name
        description (Optional[str]): Free-text description
        created_at (datetime): Creation timestamp
        updated_at (datetime): Timestamp of the last mutation
        version (str): Three-part version, patch-incremented on every mutation
        revision (int): Mutation counter, strictly increasing until reset
        layout (Optional[LayoutName]): Preferred layout
        filters (List[GraphFilter]): Saved filters
        views (List[GraphView]): Saved views
    """

    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    version: str = "1.0.0"
    revision: int = 0
    layout: Optional[LayoutName] = None
    filters: List[GraphFilter] = field(default_factory=list)
    views: List[GraphView] = field(default_factory=list)

    def __post_init__(self):
        validate_identifier("document id", self.id)
        self.layout = coerce_optional_enum(LayoutName, self.layout, "layout")


@dataclass
class GraphSnapshot:
    """
    Ordered node and edge collections plus document metadata.

    Attributes:
        nodes (List[Node]): Nodes in insertion order
        edges (List[Edge]): Edges in insertion order, dangling ones included
        metadata (DocumentMetadata): Document-level metadata
    """

    nodes: List[Node]
    edges: List[Edge]
    metadata: DocumentMetadata

    def node_ids(self) -> List[str]:
        """Node ids in insertion order."""
        return [node.id for node in self.nodes]

    def node_index(self) -> Dict[str, int]:
        """Map each node id to its insertion position."""
        return {node.id: position for position, node in enumerate(self.nodes)}

    def get_node(self, node_id: str) -> Optional[Node]:
        return next((node for node in self.nodes if node.id == node_id), None)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return next((edge for edge in self.edges if edge.id == edge_id), None)

    def valid_edges(self, node_ids: Optional[Set[str]] = None) -> Iterator[Edge]:
        """
        Yield edges whose endpoints both exist.

        Dangling edges are excluded from every traversal and analytics result;
        this is the single place that rule is applied.
        """
        present = node_ids if node_ids is not None else set(self.node_ids())
        for edge in self.edges:
            if edge.source in present and edge.target in present:
                yield edge

    def dangling_edges(self) -> List[Edge]:
        """Edges referencing at least one missing node."""
        present = set(self.node_ids())
        return [e for e in self.edges if e.source not in present or e.target not in present]
