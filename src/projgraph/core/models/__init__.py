"""
Core domain models package for the project graph.

This package provides the node, edge, metadata, payload, filter/view and
snapshot models.
"""

from .base import coerce_enum, validate_date_order, validate_identifier, validate_range
from .edge import DEFAULT_EDGE_LABELS, Edge
from .metadata import EdgeMetadata, NodeMetadata, Position
from .node import Node
from .payloads import (
    PAYLOAD_TYPES,
    AgentPayload,
    DeliverablePayload,
    DependencyPayload,
    GenericPayload,
    MilestonePayload,
    NodePayload,
    RequirementPayload,
    SubtaskPayload,
    TaskPayload,
    default_payload,
    payload_from_dict,
    payload_to_dict,
)
from .snapshot import DocumentMetadata, GraphSnapshot
from .views import FilterCriterion, GraphFilter, GraphView

__all__ = [
    # Base utilities
    "coerce_enum",
    "validate_date_order",
    "validate_identifier",
    "validate_range",
    # Node models
    "Node",
    "NodeMetadata",
    "Position",
    # Payloads
    "NodePayload",
    "PAYLOAD_TYPES",
    "RequirementPayload",
    "DeliverablePayload",
    "TaskPayload",
    "SubtaskPayload",
    "MilestonePayload",
    "DependencyPayload",
    "AgentPayload",
    "GenericPayload",
    "default_payload",
    "payload_from_dict",
    "payload_to_dict",
    # Edge models
    "Edge",
    "EdgeMetadata",
    "DEFAULT_EDGE_LABELS",
    # Document models
    "DocumentMetadata",
    "GraphSnapshot",
    "FilterCriterion",
    "GraphFilter",
    "GraphView",
]
