"""Colour and shape tables shared by the backend adapters and the DOT export."""

from typing import Dict, Optional

from ..core.enums import EdgeKind, NodeKind, NodeStatus
from ..core.models import Node

DEFAULT_NODE_COLOR = "#6b7280"
DEFAULT_NODE_SHAPE = "circle"
DEFAULT_EDGE_COLOR = "#6b7280"

NODE_COLORS: Dict[NodeKind, str] = {
    NodeKind.REQUIREMENT: "#3b82f6",
    NodeKind.DELIVERABLE: "#10b981",
    NodeKind.TASK: "#f59e0b",
    NodeKind.SUBTASK: "#8b5cf6",
    NodeKind.MILESTONE: "#ef4444",
    NodeKind.AGENT: "#06b6d4",
    NodeKind.FEATURE: "#84cc16",
}

NODE_SHAPES: Dict[NodeKind, str] = {
    NodeKind.REQUIREMENT: "box",
    NodeKind.DELIVERABLE: "ellipse",
    NodeKind.TASK: "circle",
    NodeKind.SUBTASK: "dot",
    NodeKind.MILESTONE: "diamond",
    NodeKind.AGENT: "triangle",
    NodeKind.FEATURE: "square",
}

# Border colours marking a node's lifecycle status
STATUS_BORDERS: Dict[NodeStatus, str] = {
    NodeStatus.COMPLETE: "#10b981",
    NodeStatus.IN_PROGRESS: "#f59e0b",
    NodeStatus.BLOCKED: "#ef4444",
}

EDGE_COLORS: Dict[EdgeKind, str] = {
    EdgeKind.DEPENDENCY: "#ef4444",
    EdgeKind.HIERARCHY: "#3b82f6",
}


def node_color(node: Node) -> str:
    """Explicit node colour, else the colour of its kind."""
    if node.color:
        return node.color
    return NODE_COLORS.get(node.kind, DEFAULT_NODE_COLOR)


def node_shape(kind: NodeKind) -> str:
    return NODE_SHAPES.get(kind, DEFAULT_NODE_SHAPE)


def status_border(status: Optional[NodeStatus]) -> Optional[str]:
    return STATUS_BORDERS.get(status) if status is not None else None


def edge_color(kind: EdgeKind, explicit: Optional[str] = None) -> str:
    return explicit or EDGE_COLORS.get(kind, DEFAULT_EDGE_COLOR)
