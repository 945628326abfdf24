"""Deterministic sample project graphs for demos and tests."""

import random
from typing import List, Optional

from ..core.enums import EdgeKind, EdgeStyle, NodeKind, NodeStatus, Priority
from ..core.exceptions import ValidationError
from ..core.models import (
    DeliverablePayload,
    DocumentMetadata,
    Edge,
    EdgeMetadata,
    GraphSnapshot,
    Node,
    NodeMetadata,
    RequirementPayload,
    SubtaskPayload,
    TaskPayload,
)

CATEGORIES = ["frontend", "backend", "infrastructure", "documentation", "testing"]
ASSIGNEES = ["alice", "bob", "carol", "dave"]


def generate_sample_graph(node_count: int = 20, seed: Optional[int] = None) -> GraphSnapshot:
    """
    Build a requirement → deliverable → task → subtask tree with dependencies.

    Roughly a fifth of the nodes are deliverables and the rest are split
    between tasks and subtasks. Dependency edges only point from later tasks
    to earlier ones, so the result is acyclic. The same seed always yields the
    same graph.

    Raises:
        ValidationError: If node_count is smaller than 1
    """
    if node_count < 1:
        raise ValidationError("node_count must be at least 1")
    rng = random.Random(seed)

    nodes: List[Node] = []
    edges: List[Edge] = []

    def add_edge(source: str, target: str, kind: EdgeKind, **kwargs) -> None:
        edges.append(
            Edge(id=f"edge-{len(edges) + 1}", source=source, target=target, kind=kind, **kwargs)
        )

    root = Node(
        id="req-1",
        label="Sample requirements",
        kind=NodeKind.REQUIREMENT,
        payload=RequirementPayload(title="Sample requirements"),
        status=NodeStatus.IN_PROGRESS,
    )
    nodes.append(root)
    remaining = node_count - 1
    deliverable_count = min(remaining, max(1, remaining // 5))
    deliverables: List[Node] = []
    for index in range(1, deliverable_count + 1):
        node = Node(
            id=f"del-{index}",
            label=f"Deliverable {index}",
            kind=NodeKind.DELIVERABLE,
            payload=DeliverablePayload(
                title=f"Deliverable {index}",
                category=rng.choice(CATEGORIES),
                estimated_hours=float(rng.randint(8, 80)),
            ),
            status=rng.choice(list(NodeStatus)),
            metadata=NodeMetadata(priority=rng.choice(list(Priority))),
        )
        deliverables.append(node)
        root.payload.deliverable_ids.append(node.id)
        add_edge(root.id, node.id, EdgeKind.HIERARCHY)
    nodes.extend(deliverables)
    remaining -= deliverable_count

    tasks: List[Node] = []
    task_count = (remaining + 1) // 2
    for index in range(1, task_count + 1):
        parent = rng.choice(deliverables)
        hours = float(rng.randint(1, 16))
        node = Node(
            id=f"task-{index}",
            label=f"Task {index}",
            kind=NodeKind.TASK,
            payload=TaskPayload(
                title=f"Task {index}",
                assignee=rng.choice(ASSIGNEES),
                estimated_hours=hours,
            ),
            status=rng.choice(list(NodeStatus)),
            metadata=NodeMetadata(
                priority=rng.choice(list(Priority)),
                estimated_hours=hours,
                progress=float(rng.randint(0, 100)),
            ),
        )
        if tasks and rng.random() < 0.4:
            dependency = rng.choice(tasks)
            node.payload.dependencies.append(dependency.id)
            add_edge(
                node.id,
                dependency.id,
                EdgeKind.DEPENDENCY,
                style=EdgeStyle.DASHED,
                metadata=EdgeMetadata(strength=round(rng.random(), 2)),
            )
        tasks.append(node)
        add_edge(parent.id, node.id, EdgeKind.HIERARCHY)
    nodes.extend(tasks)
    remaining -= task_count

    for index in range(1, remaining + 1):
        parent = rng.choice(tasks)
        node = Node(
            id=f"sub-{index}",
            label=f"Subtask {index}",
            kind=NodeKind.SUBTASK,
            payload=SubtaskPayload(
                title=f"Subtask {index}",
                completed=rng.random() < 0.3,
                estimated_minutes=float(rng.choice([15, 30, 60, 120])),
            ),
        )
        nodes.append(node)
        add_edge(parent.id, node.id, EdgeKind.HIERARCHY)

    metadata = DocumentMetadata(
        id="sample-graph",
        name="Sample Project",
        description=f"Generated sample with {node_count} nodes",
    )
    return GraphSnapshot(nodes=nodes, edges=edges, metadata=metadata)
