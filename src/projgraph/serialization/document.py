"""Structured JSON document serialization.

The structured document is the canonical, lossless exchange form of a graph:
``{"nodes": [...], "edges": [...], "metadata": {...}}`` with camelCase keys.
Node kinds are stored under ``type`` and payloads under ``data``.

Imports are validated against a JSON schema before any model is built, so a
malformed document never reaches the graph store.
"""

import json
import uuid
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.enums import EdgeKind, FilterOperator, LayoutName, NodeKind, NodeStatus, Priority
from ..core.exceptions import ValidationError
from ..core.models import (
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
    payload_to_dict,
)
from ..utils.validation import SchemaValidator

_ID = {"type": "string", "minLength": 1, "pattern": r"\S"}
_TIMESTAMP = {"type": "string"}
_TAGS = {"type": "array", "items": {"type": "string"}}
_PRIORITY = {"enum": [p.value for p in Priority]}

NODE_SCHEMA = {
    "type": "object",
    "required": ["id", "type"],
    "properties": {
        "id": _ID,
        "label": {"type": "string"},
        "type": {"enum": [k.value for k in NodeKind] + ["prd"]},
        "data": {"type": ["object", "null"]},
        "position": {
            "type": "object",
            "required": ["x", "y"],
            "properties": {"x": {"type": "number"}, "y": {"type": "number"}},
        },
        "status": {"enum": [s.value for s in NodeStatus]},
        "color": {"type": "string"},
        "metadata": {
            "type": "object",
            "properties": {
                "createdAt": _TIMESTAMP,
                "updatedAt": _TIMESTAMP,
                "author": {"type": "string"},
                "version": {"type": "string"},
                "priority": _PRIORITY,
                "estimatedHours": {"type": "number", "minimum": 0},
                "actualHours": {"type": "number", "minimum": 0},
                "progress": {"type": "number", "minimum": 0, "maximum": 100},
                "tags": _TAGS,
            },
        },
    },
}

EDGE_SCHEMA = {
    "type": "object",
    "required": ["id", "source", "target", "type"],
    "properties": {
        "id": _ID,
        "source": _ID,
        "target": _ID,
        "type": {"enum": [k.value for k in EdgeKind]},
        "label": {"type": "string"},
        "weight": {"type": "number", "minimum": 0},
        "color": {"type": "string"},
        "style": {"enum": ["solid", "dashed", "dotted"]},
        "metadata": {
            "type": "object",
            "properties": {
                "createdAt": _TIMESTAMP,
                "updatedAt": _TIMESTAMP,
                "priority": _PRIORITY,
                "strength": {"type": "number", "minimum": 0, "maximum": 1},
                "bidirectional": {"type": "boolean"},
                "conditional": {"type": "boolean"},
                "description": {"type": "string"},
                "tags": _TAGS,
            },
        },
    },
}

FILTER_SCHEMA = {
    "type": "object",
    "required": ["id", "name", "criteria"],
    "properties": {
        "id": _ID,
        "name": {"type": "string"},
        "type": {"enum": ["node", "edge", "both"]},
        "criteria": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["property", "operator"],
                "properties": {
                    "property": _ID,
                    "operator": {"enum": [o.value for o in FilterOperator]},
                },
            },
        },
        "active": {"type": "boolean"},
    },
}

VIEW_SCHEMA = {
    "type": "object",
    "required": ["id", "name"],
    "properties": {
        "id": _ID,
        "name": {"type": "string"},
        "description": {"type": "string"},
        "layout": {"enum": [layout.value for layout in LayoutName]},
        "filters": {"type": "array", "items": {"type": "string"}},
        "zoom": {"type": "number", "exclusiveMinimum": 0},
        "center": {
            "type": "object",
            "properties": {"x": {"type": "number"}, "y": {"type": "number"}},
        },
    },
}

DOCUMENT_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["nodes", "edges"],
    "properties": {
        "nodes": {"type": "array", "items": NODE_SCHEMA},
        "edges": {"type": "array", "items": EDGE_SCHEMA},
        "metadata": {
            "type": "object",
            "properties": {
                "id": _ID,
                "name": {"type": "string"},
                "description": {"type": "string"},
                "createdAt": _TIMESTAMP,
                "updatedAt": _TIMESTAMP,
                "version": {"type": "string", "pattern": r"^\d+\.\d+\.\d+$"},
                "revision": {"type": "integer", "minimum": 0},
                "layout": {"enum": [layout.value for layout in LayoutName]},
                "filters": {"type": "array", "items": FILTER_SCHEMA},
                "views": {"type": "array", "items": VIEW_SCHEMA},
            },
        },
    },
}

_validator = SchemaValidator({"document": DOCUMENT_SCHEMA})


def serialize_datetime(dt: datetime) -> str:
    """Convert datetime to ISO format string."""
    return dt.isoformat()


def deserialize_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Convert an ISO format string to a naive local datetime.

    Raises:
        ValidationError: If the string is not an ISO timestamp
    """
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"invalid timestamp {value!r}") from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def _enum_value(value: Any) -> Any:
    return value.value if value is not None else None


# Export


def node_metadata_to_dict(metadata: NodeMetadata) -> Dict[str, Any]:
    return _compact(
        {
            "createdAt": serialize_datetime(metadata.created_at),
            "updatedAt": serialize_datetime(metadata.updated_at),
            "author": metadata.author,
            "version": metadata.version,
            "priority": _enum_value(metadata.priority),
            "estimatedHours": metadata.estimated_hours,
            "actualHours": metadata.actual_hours,
            "progress": metadata.progress,
            "tags": list(metadata.tags),
        }
    )


def edge_metadata_to_dict(metadata: EdgeMetadata) -> Dict[str, Any]:
    return _compact(
        {
            "createdAt": serialize_datetime(metadata.created_at),
            "updatedAt": serialize_datetime(metadata.updated_at),
            "priority": _enum_value(metadata.priority),
            "strength": metadata.strength,
            "bidirectional": metadata.bidirectional,
            "conditional": metadata.conditional,
            "description": metadata.description,
            "tags": list(metadata.tags),
        }
    )


def node_to_dict(node: Node, include_metadata: bool = True) -> Dict[str, Any]:
    """Convert a node to its document form."""
    data = _compact(
        {
            "id": node.id,
            "label": node.label,
            "type": node.kind.value,
            "data": payload_to_dict(node.payload),
            "position": {"x": node.position.x, "y": node.position.y} if node.position else None,
            "status": _enum_value(node.status),
            "color": node.color,
        }
    )
    if include_metadata:
        data["metadata"] = node_metadata_to_dict(node.metadata)
    return data


def edge_to_dict(edge: Edge, include_metadata: bool = True) -> Dict[str, Any]:
    """Convert an edge to its document form."""
    data = _compact(
        {
            "id": edge.id,
            "source": edge.source,
            "target": edge.target,
            "type": edge.kind.value,
            "label": edge.label,
            "weight": edge.weight,
            "color": edge.color,
            "style": _enum_value(edge.style),
        }
    )
    if include_metadata:
        data["metadata"] = edge_metadata_to_dict(edge.metadata)
    return data


def filter_to_dict(graph_filter: GraphFilter) -> Dict[str, Any]:
    return {
        "id": graph_filter.id,
        "name": graph_filter.name,
        "type": graph_filter.target.value,
        "criteria": [
            {
                "property": criterion.property_path,
                "operator": criterion.operator.value,
                "value": criterion.value,
            }
            for criterion in graph_filter.criteria
        ],
        "active": graph_filter.active,
    }


def view_to_dict(view: GraphView) -> Dict[str, Any]:
    return _compact(
        {
            "id": view.id,
            "name": view.name,
            "description": view.description,
            "layout": view.layout.value,
            "filters": list(view.filters),
            "zoom": view.zoom,
            "center": {"x": view.center.x, "y": view.center.y},
        }
    )


def metadata_to_dict(metadata: DocumentMetadata) -> Dict[str, Any]:
    return _compact(
        {
            "id": metadata.id,
            "name": metadata.name,
            "description": metadata.description,
            "createdAt": serialize_datetime(metadata.created_at),
            "updatedAt": serialize_datetime(metadata.updated_at),
            "version": metadata.version,
            "revision": metadata.revision,
            "layout": _enum_value(metadata.layout),
            "filters": [filter_to_dict(f) for f in metadata.filters],
            "views": [view_to_dict(v) for v in metadata.views],
        }
    )


def document_to_dict(snapshot: GraphSnapshot, include_metadata: bool = True) -> Dict[str, Any]:
    """
    Convert a snapshot to the structured document form.

    Args:
        snapshot: Graph to convert
        include_metadata: Whether node and edge metadata records are included

    Returns:
        JSON-serializable dictionary
    """
    return {
        "nodes": [node_to_dict(node, include_metadata) for node in snapshot.nodes],
        "edges": [edge_to_dict(edge, include_metadata) for edge in snapshot.edges],
        "metadata": metadata_to_dict(snapshot.metadata),
    }


def to_json(
    snapshot: GraphSnapshot, indent: Optional[int] = 2, include_metadata: bool = True
) -> str:
    """Convert a snapshot to a JSON document string."""
    return json.dumps(document_to_dict(snapshot, include_metadata), indent=indent)


# Import


def node_metadata_from_dict(data: Dict[str, Any]) -> NodeMetadata:
    created_at = deserialize_datetime(data.get("createdAt")) or datetime.now()
    return NodeMetadata(
        created_at=created_at,
        updated_at=deserialize_datetime(data.get("updatedAt")) or created_at,
        author=data.get("author"),
        version=data.get("version"),
        priority=data.get("priority"),
        estimated_hours=data.get("estimatedHours"),
        actual_hours=data.get("actualHours"),
        progress=data.get("progress"),
        tags=list(data.get("tags", [])),
    )


def edge_metadata_from_dict(data: Dict[str, Any]) -> EdgeMetadata:
    created_at = deserialize_datetime(data.get("createdAt")) or datetime.now()
    return EdgeMetadata(
        created_at=created_at,
        updated_at=deserialize_datetime(data.get("updatedAt")) or created_at,
        priority=data.get("priority"),
        strength=data.get("strength"),
        bidirectional=data.get("bidirectional", False),
        conditional=data.get("conditional", False),
        description=data.get("description"),
        tags=list(data.get("tags", [])),
    )


def node_from_dict(data: Dict[str, Any]) -> Node:
    """Build a node from its document form."""
    return Node(
        id=data["id"],
        label=data.get("label", ""),
        kind=data["type"],
        payload=dict(data["data"]) if data.get("data") is not None else None,
        position=Position.coerce(data.get("position")),
        status=data.get("status"),
        color=data.get("color"),
        metadata=node_metadata_from_dict(data.get("metadata") or {}),
    )


def edge_from_dict(data: Dict[str, Any]) -> Edge:
    """Build an edge from its document form."""
    return Edge(
        id=data["id"],
        source=data["source"],
        target=data["target"],
        kind=data["type"],
        label=data.get("label"),
        weight=data.get("weight"),
        color=data.get("color"),
        style=data.get("style"),
        metadata=edge_metadata_from_dict(data.get("metadata") or {}),
    )


def filter_from_dict(data: Dict[str, Any]) -> GraphFilter:
    return GraphFilter(
        id=data["id"],
        name=data.get("name", data["id"]),
        target=data.get("type", "node"),
        criteria=[
            FilterCriterion(
                property_path=criterion["property"],
                operator=criterion["operator"],
                value=criterion.get("value"),
            )
            for criterion in data.get("criteria", [])
        ],
        active=data.get("active", True),
    )


def view_from_dict(data: Dict[str, Any]) -> GraphView:
    return GraphView(
        id=data["id"],
        name=data.get("name", data["id"]),
        layout=data.get("layout", LayoutName.HIERARCHICAL),
        filters=list(data.get("filters", [])),
        zoom=data.get("zoom", 1.0),
        center=Position.coerce(data.get("center") or {}),
        description=data.get("description"),
    )


def new_document_metadata(name: str = "Imported Graph") -> DocumentMetadata:
    """Metadata for a document that arrived without any."""
    return DocumentMetadata(id=f"imported-{uuid.uuid4().hex[:12]}", name=name)


def metadata_from_dict(data: Optional[Dict[str, Any]]) -> DocumentMetadata:
    if not data:
        return new_document_metadata()
    created_at = deserialize_datetime(data.get("createdAt")) or datetime.now()
    return DocumentMetadata(
        id=data.get("id") or f"imported-{uuid.uuid4().hex[:12]}",
        name=data.get("name", "Imported Graph"),
        description=data.get("description"),
        created_at=created_at,
        updated_at=deserialize_datetime(data.get("updatedAt")) or created_at,
        version=data.get("version", "1.0.0"),
        revision=data.get("revision", 0),
        layout=data.get("layout"),
        filters=[filter_from_dict(f) for f in data.get("filters", [])],
        views=[view_from_dict(v) for v in data.get("views", [])],
    )


def validate_document(data: Any) -> None:
    """
    Check a raw document against the document schema.

    Raises:
        ValidationError: Listing every schema violation
    """
    result = _validator.validate("document", data)
    if not result.is_valid:
        raise ValidationError("Invalid graph document: " + "; ".join(result.errors))


def document_from_dict(data: Dict[str, Any]) -> GraphSnapshot:
    """
    Build a snapshot from the structured document form.

    The whole document is validated and converted before anything is
    returned; nothing is applied to a store here.

    Raises:
        ValidationError: If the document is malformed
    """
    validate_document(data)
    try:
        nodes: List[Node] = [node_from_dict(item) for item in data["nodes"]]
        edges: List[Edge] = [edge_from_dict(item) for item in data["edges"]]
        metadata = metadata_from_dict(data.get("metadata"))
    except (KeyError, TypeError) as e:
        raise ValidationError(f"Invalid graph document: {e}") from e
    return GraphSnapshot(nodes=nodes, edges=edges, metadata=metadata)


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON format: {e}") from e


def from_json(text: str) -> GraphSnapshot:
    """
    Build a snapshot from a JSON document string.

    Raises:
        ValidationError: If the text is not valid JSON or not a valid document
    """
    return document_from_dict(_load_json(text))


def read_json(text: str) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Return the node and edge descriptors of a JSON document as written.

    Raises:
        ValidationError: If the text is not valid JSON or not a valid document
    """
    data = _load_json(text)
    validate_document(data)
    return data["nodes"], data["edges"]


def merge_descriptor(current: Dict[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Lay the keys of ``incoming`` over ``current``, both in document form.

    Keys absent from ``incoming`` keep their current value; the nested
    ``data`` and ``metadata`` mappings are combined key by key.
    """
    merged = {**current, **incoming}
    for key in ("data", "metadata"):
        if isinstance(current.get(key), dict) and isinstance(incoming.get(key), Mapping):
            merged[key] = {**current[key], **incoming[key]}
    return merged
