"""GraphML export and import.

GraphML carries node id/label/kind and edge id/source/target/label/kind. Every
other field (payloads, metadata, positions, styles) is not represented, so the
format is lossy; import fills the model defaults for them.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Tuple

from ..core.enums import EdgeKind, NodeKind
from ..core.exceptions import ValidationError
from ..core.models import Edge, GraphSnapshot, Node
from .document import new_document_metadata

logger = logging.getLogger(__name__)

GRAPHML_NS = "http://graphml.graphdrawing.org/xmlns"
DEFAULT_NODE_KIND = NodeKind.TASK
DEFAULT_EDGE_KIND = EdgeKind.REFERENCE

ET.register_namespace("", GRAPHML_NS)


def _tag(name: str) -> str:
    return f"{{{GRAPHML_NS}}}{name}"


def _add_data(parent: ET.Element, key: str, value: str) -> None:
    data = ET.SubElement(parent, _tag("data"), {"key": key})
    data.text = value


def to_graphml(snapshot: GraphSnapshot) -> str:
    """Render a snapshot as a GraphML document."""
    root = ET.Element(_tag("graphml"))
    for key in ("label", "type"):
        ET.SubElement(
            root,
            _tag("key"),
            {"id": key, "for": "all", "attr.name": key, "attr.type": "string"},
        )
    graph = ET.SubElement(root, _tag("graph"), {"id": "G", "edgedefault": "directed"})

    for node in snapshot.nodes:
        element = ET.SubElement(graph, _tag("node"), {"id": node.id})
        _add_data(element, "label", node.label)
        _add_data(element, "type", node.kind.value)

    for edge in snapshot.edges:
        element = ET.SubElement(
            graph,
            _tag("edge"),
            {"id": edge.id, "source": edge.source, "target": edge.target},
        )
        if edge.label:
            _add_data(element, "label", edge.label)
        _add_data(element, "type", edge.kind.value)

    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body


def _find(element: ET.Element, name: str) -> List[ET.Element]:
    # Accept documents with and without the GraphML namespace
    return element.findall(_tag(name)) or element.findall(name)


def _key_names(root: ET.Element) -> Dict[str, str]:
    """Map key ids to their attribute names."""
    return {
        key.get("id"): key.get("attr.name") or key.get("id")
        for key in _find(root, "key")
        if key.get("id")
    }


def _data(element: ET.Element, key_names: Dict[str, str]) -> Dict[str, str]:
    values = {}
    for data in _find(element, "data"):
        key = data.get("key")
        values[key_names.get(key, key)] = (data.text or "").strip()
    return values


def read_graphml(text: str) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Read the node and edge descriptors of a GraphML document.

    Descriptors are in document form and hold only the keys the GraphML
    actually carries; edges without an id get a positional one.

    Raises:
        ValidationError: If the XML is malformed or has no graph
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ValidationError(f"Invalid GraphML: {e}") from e

    graphs = _find(root, "graph")
    if not graphs:
        raise ValidationError("Invalid GraphML: no <graph> element")
    if len(graphs) > 1:
        logger.warning("GraphML document has %d graphs; only the first is read", len(graphs))
    graph = graphs[0]
    key_names = _key_names(root)

    nodes = []
    for element in _find(graph, "node"):
        values = _data(element, key_names)
        node = {"id": element.get("id", "")}
        if "label" in values:
            node["label"] = values["label"]
        if values.get("type"):
            node["type"] = values["type"]
        nodes.append(node)

    edges = []
    for position, element in enumerate(_find(graph, "edge")):
        values = _data(element, key_names)
        edge = {
            "id": element.get("id") or f"edge-{position}",
            "source": element.get("source", ""),
            "target": element.get("target", ""),
        }
        if values.get("label"):
            edge["label"] = values["label"]
        if values.get("type"):
            edge["type"] = values["type"]
        edges.append(edge)

    return nodes, edges


def from_graphml(text: str) -> GraphSnapshot:
    """
    Parse a GraphML document into a snapshot.

    Nodes without a ``type`` become tasks and edges without one references.

    Raises:
        ValidationError: If the XML is malformed or an element is invalid
    """
    node_items, edge_items = read_graphml(text)
    nodes = [
        Node(
            id=item["id"],
            label=item.get("label", ""),
            kind=item.get("type", DEFAULT_NODE_KIND),
        )
        for item in node_items
    ]
    edges = [
        Edge(
            id=item["id"],
            source=item["source"],
            target=item["target"],
            kind=item.get("type", DEFAULT_EDGE_KIND),
            label=item.get("label"),
        )
        for item in edge_items
    ]
    logger.debug("Parsed GraphML with %d nodes and %d edges", len(nodes), len(edges))
    return GraphSnapshot(nodes=nodes, edges=edges, metadata=new_document_metadata())
