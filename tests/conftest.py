"""Shared test fixtures."""

from typing import List, Sequence, Tuple

import pytest

from projgraph.core.enums import EdgeKind, NodeKind
from projgraph.core.models import DocumentMetadata, Edge, GraphSnapshot, Node
from projgraph.core.store import GraphStore


def create_node(node_id: str, kind: NodeKind = NodeKind.TASK, **kwargs) -> Node:
    """Helper function to create a test node."""
    return Node(id=node_id, label=kwargs.pop("label", node_id.upper()), kind=kind, **kwargs)


def create_edge(
    source: str, target: str, kind: EdgeKind = EdgeKind.DEPENDENCY, edge_id: str = None, **kwargs
) -> Edge:
    """Helper function to create a test edge."""
    return Edge(
        id=edge_id or f"{source}-{target}", source=source, target=target, kind=kind, **kwargs
    )


def create_snapshot(
    node_ids: Sequence[str], pairs: Sequence[Tuple[str, str]] = ()
) -> GraphSnapshot:
    """Snapshot with task nodes and dependency edges between them."""
    return GraphSnapshot(
        nodes=[create_node(node_id) for node_id in node_ids],
        edges=[create_edge(source, target) for source, target in pairs],
        metadata=DocumentMetadata(id="test-graph", name="Test Graph"),
    )


@pytest.fixture
def path_graph() -> GraphSnapshot:
    """A -> B -> C -> D."""
    return create_snapshot(["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "d")])


@pytest.fixture
def cycle_graph() -> GraphSnapshot:
    """A -> B -> C -> A."""
    return create_snapshot(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "a")])


@pytest.fixture
def store() -> GraphStore:
    return GraphStore(name="Test Graph")


@pytest.fixture
def populated_store(store: GraphStore, path_graph: GraphSnapshot) -> GraphStore:
    store.add_nodes(path_graph.nodes)
    store.add_edges(path_graph.edges)
    return store


class RecordingListener:
    """Store listener remembering every notification."""

    def __init__(self):
        self.events: List = []

    def on_state_change(self, event, change) -> None:
        self.events.append((event, change))


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()
