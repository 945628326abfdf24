"""Core graph functionality."""

from .enums import (
    BackendKind,
    EdgeKind,
    EdgeStyle,
    FilterOperator,
    FilterTarget,
    GraphFormat,
    LayoutName,
    MergeStrategy,
    NodeKind,
    NodeStatus,
    Priority,
    QueryType,
    RenderEventType,
)
from .exceptions import (
    ConfigurationError,
    EventError,
    GraphOperationError,
    InvalidRequestError,
    QueryError,
    ResourceNotFoundError,
    StorageError,
    UnsupportedFormatError,
    ValidationError,
    VersionNotFoundError,
)
from .models import (
    DocumentMetadata,
    Edge,
    EdgeMetadata,
    FilterCriterion,
    GraphFilter,
    GraphSnapshot,
    GraphView,
    Node,
    NodeMetadata,
    Position,
)
from .events import ChangeSet, GraphChange, GraphEvent, GraphEventListener, GraphEventManager
from .history import VersionHistoryManager, VersionRecord
from .store import GraphStore
from .graph_operations.components import ComponentAnalysis
from .graph_operations.metrics import GraphAnalytics, MetricsCalculator

__all__ = [
    "BackendKind",
    "ChangeSet",
    "ComponentAnalysis",
    "ConfigurationError",
    "DocumentMetadata",
    "Edge",
    "EdgeKind",
    "EdgeMetadata",
    "EdgeStyle",
    "EventError",
    "FilterCriterion",
    "FilterOperator",
    "FilterTarget",
    "GraphAnalytics",
    "GraphChange",
    "GraphEvent",
    "GraphEventListener",
    "GraphEventManager",
    "GraphFilter",
    "GraphFormat",
    "GraphOperationError",
    "GraphSnapshot",
    "GraphStore",
    "GraphView",
    "InvalidRequestError",
    "LayoutName",
    "MergeStrategy",
    "MetricsCalculator",
    "Node",
    "NodeKind",
    "NodeMetadata",
    "NodeStatus",
    "Position",
    "Priority",
    "QueryError",
    "QueryType",
    "RenderEventType",
    "ResourceNotFoundError",
    "StorageError",
    "UnsupportedFormatError",
    "ValidationError",
    "VersionHistoryManager",
    "VersionNotFoundError",
    "VersionRecord",
]
