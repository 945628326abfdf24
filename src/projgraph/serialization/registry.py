"""Format dispatch for exports and imports."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Tuple

from ..core.enums import GraphFormat
from ..core.exceptions import UnsupportedFormatError
from ..core.models import GraphSnapshot
from .document import from_json, read_json, serialize_datetime, to_json
from .dot import from_dot, to_dot
from .graphml import from_graphml, read_graphml, to_graphml

logger = logging.getLogger(__name__)


@dataclass
class GraphExport:
    """
    Result of exporting a graph.

    Attributes:
        format (GraphFormat): Format of ``data``
        data (str): Serialized graph
        exported_at (datetime): Export time
        version (str): Graph version at export time
        include_metadata (bool): Whether element metadata is represented
        include_styles (bool): Whether styling is represented
    """

    format: GraphFormat
    data: str
    version: str
    exported_at: datetime = field(default_factory=datetime.now)
    include_metadata: bool = True
    include_styles: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format.value,
            "data": self.data,
            "metadata": {
                "exportedAt": serialize_datetime(self.exported_at),
                "version": self.version,
                "includeMetadata": self.include_metadata,
                "includeStyles": self.include_styles,
            },
        }


def _export_json(snapshot: GraphSnapshot, include_metadata: bool) -> GraphExport:
    return GraphExport(
        format=GraphFormat.JSON,
        data=to_json(snapshot, include_metadata=include_metadata),
        version=snapshot.metadata.version,
        include_metadata=include_metadata,
        include_styles=True,
    )


def _export_graphml(snapshot: GraphSnapshot, include_metadata: bool) -> GraphExport:
    return GraphExport(
        format=GraphFormat.GRAPHML,
        data=to_graphml(snapshot),
        version=snapshot.metadata.version,
        include_metadata=False,
        include_styles=False,
    )


def _export_dot(snapshot: GraphSnapshot, include_metadata: bool) -> GraphExport:
    return GraphExport(
        format=GraphFormat.DOT,
        data=to_dot(snapshot),
        version=snapshot.metadata.version,
        include_metadata=False,
        include_styles=True,
    )


EXPORTERS: Dict[GraphFormat, Callable[[GraphSnapshot, bool], GraphExport]] = {
    GraphFormat.JSON: _export_json,
    GraphFormat.GRAPHML: _export_graphml,
    GraphFormat.DOT: _export_dot,
}

PARSERS: Dict[GraphFormat, Callable[[str], GraphSnapshot]] = {
    GraphFormat.JSON: from_json,
    GraphFormat.GRAPHML: from_graphml,
    GraphFormat.DOT: from_dot,
}

Descriptors = Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]

# Formats whose raw node and edge descriptors can be read for merging
READERS: Dict[GraphFormat, Callable[[str], Descriptors]] = {
    GraphFormat.JSON: read_json,
    GraphFormat.GRAPHML: read_graphml,
}


def resolve_format(value: Any) -> GraphFormat:
    """
    Convert a format name to a GraphFormat.

    Raises:
        UnsupportedFormatError: If the name is not a known format
    """
    try:
        return GraphFormat(value)
    except ValueError:
        raise UnsupportedFormatError(f"Unknown graph format: {value!r}") from None


def export_graph(snapshot: GraphSnapshot, fmt: Any, include_metadata: bool = True) -> GraphExport:
    """
    Serialize a snapshot in the requested format.

    Raises:
        UnsupportedFormatError: For formats without an exporter
    """
    graph_format = resolve_format(fmt)
    exporter = EXPORTERS.get(graph_format)
    if exporter is None:
        raise UnsupportedFormatError(f"Unsupported export format: {graph_format.value}")
    result = exporter(snapshot, include_metadata)
    logger.info(
        "Exported %d nodes and %d edges as %s",
        len(snapshot.nodes),
        len(snapshot.edges),
        graph_format.value,
    )
    return result


def parse_graph(data: str, fmt: Any) -> GraphSnapshot:
    """
    Parse serialized data into a snapshot without touching any store.

    Raises:
        UnsupportedFormatError: For formats without a parser
        ValidationError: If the data is malformed
    """
    graph_format = resolve_format(fmt)
    parser = PARSERS.get(graph_format)
    if parser is None:
        raise UnsupportedFormatError(f"Unsupported import format: {graph_format.value}")
    return parser(data)


def parse_descriptors(data: str, fmt: Any) -> Tuple[GraphSnapshot, Descriptors]:
    """
    Parse serialized data into a snapshot and the descriptors it was built from.

    The descriptors are in document form and hold only the keys the data
    supplies; they line up one-to-one with the snapshot's nodes and edges.

    Raises:
        UnsupportedFormatError: For formats without a parser
        ValidationError: If the data is malformed
    """
    graph_format = resolve_format(fmt)
    snapshot = parse_graph(data, graph_format)
    reader = READERS.get(graph_format)
    if reader is None:
        raise UnsupportedFormatError(f"Cannot merge from format: {graph_format.value}")
    return snapshot, reader(data)
