"""Serialization adapters: JSON document, GraphML and DOT."""

from .document import (
    document_from_dict,
    document_to_dict,
    edge_from_dict,
    edge_to_dict,
    from_json,
    merge_descriptor,
    node_from_dict,
    node_to_dict,
    read_json,
    to_json,
    validate_document,
)
from .dot import to_dot
from .graphml import from_graphml, read_graphml, to_graphml
from .registry import GraphExport, export_graph, parse_descriptors, parse_graph, resolve_format

__all__ = [
    "GraphExport",
    "document_from_dict",
    "document_to_dict",
    "edge_from_dict",
    "edge_to_dict",
    "export_graph",
    "from_graphml",
    "from_json",
    "merge_descriptor",
    "node_from_dict",
    "node_to_dict",
    "parse_descriptors",
    "parse_graph",
    "read_graphml",
    "read_json",
    "resolve_format",
    "to_dot",
    "to_graphml",
    "to_json",
    "validate_document",
]
