"""
Node model for the project graph.

A node is one vertex of the project graph: a requirement, deliverable, task,
subtask, milestone, dependency marker, agent and so on.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..enums import NodeKind, NodeStatus
from .base import (
    coerce_enum,
    coerce_optional_enum,
    validate_dataclass,
    validate_identifier,
)
from .metadata import NodeMetadata, Position
from .payloads import NodePayload, check_payload, default_payload, payload_from_dict


@validate_dataclass
@dataclass
class Node:
    """
    Vertex of the project graph.

    Attributes:
        id (str): Identifier, unique within a graph
        label (str): Display label; defaults to the id when blank
        kind (NodeKind): Variant tag selecting the payload type
        payload (Optional[NodePayload]): Kind-specific domain object; a missing
            payload is replaced by the kind's empty payload
        position (Optional[Position]): Position on a canvas
        status (Optional[NodeStatus]): Lifecycle status
        color (Optional[str]): Explicit fill colour overriding the kind colour
        metadata (NodeMetadata): Timestamps, priority, effort, progress and tags
    """

    id: str
    label: str
    kind: NodeKind
    payload: Optional[NodePayload] = None
    position: Optional[Position] = None
    status: Optional[NodeStatus] = None
    color: Optional[str] = None
    metadata: NodeMetadata = field(default_factory=NodeMetadata)

    def __post_init__(self):
        validate_identifier("node id", self.id)
        self.kind = coerce_enum(NodeKind, self.kind, "kind")
        self.status = coerce_optional_enum(NodeStatus, self.status, "status")
        if not isinstance(self.label, str) or not self.label.strip():
            self.label = self.id
        if self.payload is None:
            self.payload = default_payload(self.kind)
        elif isinstance(self.payload, dict):
            self.payload = payload_from_dict(self.kind, self.payload)
        check_payload(self.kind, self.payload)
        self.position = Position.coerce(self.position)
