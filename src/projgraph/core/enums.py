"""
Enumerations shared across the project graph engine.

Every vocabulary used by the data model, the query surface and the exchange
formats is a closed string-valued enum. The string values are the ones written
to and read from the structured document format.
"""

from enum import Enum


class NodeKind(str, Enum):
    """Kinds of nodes in a project graph."""

    REQUIREMENT = "requirement"
    DELIVERABLE = "deliverable"
    TASK = "task"
    SUBTASK = "subtask"
    MILESTONE = "milestone"
    DEPENDENCY = "dependency"
    AGENT = "agent"
    COMMIT = "commit"
    BRANCH = "branch"
    TEST = "test"
    FEATURE = "feature"

    @classmethod
    def _missing_(cls, value):
        # Older documents tag requirement nodes as "prd".
        if isinstance(value, str) and value.lower() == "prd":
            return cls.REQUIREMENT
        return None


class EdgeKind(str, Enum):
    """Kinds of edges in a project graph."""

    HIERARCHY = "hierarchy"
    DEPENDENCY = "dependency"
    REFERENCE = "reference"
    FLOW = "flow"
    VERSION = "version"
    TEST = "test"
    ASSIGNMENT = "assignment"


class NodeStatus(str, Enum):
    """Lifecycle status of a node."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    COMPLETE = "complete"
    BLOCKED = "blocked"
    FAILED = "failed"


class Priority(str, Enum):
    """Priority levels carried in node and edge metadata."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EdgeStyle(str, Enum):
    """Stroke style of an edge."""

    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


class FilterTarget(str, Enum):
    """Which element collection a filter applies to."""

    NODE = "node"
    EDGE = "edge"
    BOTH = "both"


class FilterOperator(str, Enum):
    """Comparison operators available to filter criteria."""

    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER = "greater"
    LESS = "less"
    IN = "in"
    NOT_IN = "not-in"


class LayoutName(str, Enum):
    """Layout algorithms a rendering backend may be asked to run."""

    HIERARCHICAL = "hierarchical"
    FORCE = "force"
    CIRCULAR = "circular"
    GRID = "grid"
    DAGRE = "dagre"
    COLA = "cola"
    ELK = "elk"


class MergeStrategy(str, Enum):
    """How imported data is applied to the live store."""

    REPLACE = "replace"
    MERGE = "merge"
    APPEND = "append"


class GraphFormat(str, Enum):
    """Exchange formats known to the serialization adapters."""

    JSON = "json"
    GRAPHML = "graphml"
    GEXF = "gexf"
    DOT = "dot"
    SVG = "svg"
    PNG = "png"
    PDF = "pdf"
    CSV = "csv"


class QueryType(str, Enum):
    """Tags of the single query request surface."""

    PATH = "path"
    NEIGHBORS = "neighbors"
    SUBGRAPH = "subgraph"
    PATTERN = "pattern"
    ANALYTICS = "analytics"


class RenderEventType(str, Enum):
    """Raw events emitted by rendering backends and by the engine."""

    NODE_CLICK = "node-click"
    EDGE_CLICK = "edge-click"
    NODE_HOVER = "node-hover"
    EDGE_HOVER = "edge-hover"
    SELECTION_CHANGE = "selection-change"
    LAYOUT_CHANGE = "layout-change"
    DATA_UPDATE = "data-update"


class BackendKind(str, Enum):
    """Rendering backends the engine can drive."""

    CYTOSCAPE = "cytoscape"
    D3 = "d3"
    VIS = "vis"
