"""DOT (Graphviz) export.

The DOT form is presentation only: node labels and fill colours, edge labels
and dashed styles. It cannot be read back.
"""

from typing import List

from ..core.enums import EdgeStyle
from ..core.exceptions import UnsupportedFormatError
from ..core.models import GraphSnapshot
from ..rendering.styles import node_color


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def to_dot(snapshot: GraphSnapshot, rankdir: str = "TB") -> str:
    """
    Render a snapshot as a DOT directed graph.

    Every stored edge is written, dangling ones included; Graphviz creates
    implicit nodes for missing endpoints.
    """
    lines: List[str] = ["digraph G {", f"  rankdir={rankdir};", "  node [shape=box];"]

    for node in snapshot.nodes:
        lines.append(
            f"  {_quote(node.id)} [label={_quote(node.label)} "
            f"fillcolor={_quote(node_color(node))} style=filled];"
        )

    for edge in snapshot.edges:
        attributes = []
        if edge.label:
            attributes.append(f"label={_quote(edge.label)}")
        if edge.style is EdgeStyle.DASHED:
            attributes.append("style=dashed")
        suffix = f" [{' '.join(attributes)}]" if attributes else ""
        lines.append(f"  {_quote(edge.source)} -> {_quote(edge.target)}{suffix};")

    lines.append("}")
    return "\n".join(lines)


def from_dot(text: str) -> GraphSnapshot:
    """DOT is an export-only format."""
    raise UnsupportedFormatError("Import from DOT is not supported")
