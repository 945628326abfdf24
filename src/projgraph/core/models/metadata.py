"""
Metadata models for the project graph.

This module defines the metadata records attached to nodes and edges, and the
2-D position used by rendering backends.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from ..enums import Priority
from .base import (
    coerce_optional_enum,
    validate_dataclass,
    validate_date_order,
    validate_range,
)


@validate_dataclass
@dataclass
class Position:
    """
    2-D position of a node on a canvas.

    Attributes:
        x (float): Horizontal coordinate
        y (float): Vertical coordinate
    """

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def coerce(cls, value: Any) -> Optional["Position"]:
        """Build a position from a mapping or an ``(x, y)`` pair."""
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, dict):
            return cls(x=value.get("x", 0.0), y=value.get("y", 0.0))
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return cls(x=value[0], y=value[1])
        return value


@validate_dataclass
@dataclass
class NodeMetadata:
    """
    Metadata associated with a node.

    Attributes:
        created_at (datetime): Timestamp of node creation
        updated_at (datetime): Timestamp of the last update
        author (Optional[str]): Creator or owner of the node
        version (Optional[str]): Free-form version label of the represented object
        priority (Optional[Priority]): Priority level
        estimated_hours (Optional[float]): Estimated effort in hours
        actual_hours (Optional[float]): Effort spent so far in hours
        progress (Optional[float]): Completion percentage (0 to 100)
        tags (List[str]): Free-form classification tags
    """

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    author: Optional[str] = None
    version: Optional[str] = None
    priority: Optional[Priority] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    progress: Optional[float] = None
    tags: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.priority = coerce_optional_enum(Priority, self.priority, "priority")
        validate_date_order(self.created_at, self.updated_at)
        validate_range("progress", self.progress, 0, 100)
        validate_range("estimated_hours", self.estimated_hours, 0)
        validate_range("actual_hours", self.actual_hours, 0)

    def touch(self) -> None:
        """Update the updated_at timestamp to the current time."""
        self.updated_at = max(datetime.now(), self.created_at)


@validate_dataclass
@dataclass
class EdgeMetadata:
    """
    Metadata associated with an edge.

    Attributes:
        created_at (datetime): Timestamp of edge creation
        updated_at (datetime): Timestamp of the last update
        priority (Optional[Priority]): Priority level
        strength (Optional[float]): Relationship strength (0.0 to 1.0)
        bidirectional (bool): Whether the relationship holds in both directions
        conditional (bool): Whether the relationship only holds conditionally
        description (Optional[str]): Free-text description
        tags (List[str]): Free-form classification tags
    """

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    priority: Optional[Priority] = None
    strength: Optional[float] = None
    bidirectional: bool = False
    conditional: bool = False
    description: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.priority = coerce_optional_enum(Priority, self.priority, "priority")
        validate_date_order(self.created_at, self.updated_at)
        validate_range("strength", self.strength, 0.0, 1.0)

    def touch(self) -> None:
        """Update the updated_at timestamp to the current time."""
        self.updated_at = max(datetime.now(), self.created_at)
