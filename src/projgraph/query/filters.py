"""
Filter evaluation over graph snapshots.

Criteria address elements by dotted paths into their structured document form
(``status``, ``type``, ``metadata.priority``, ``data.assignee``). A path that
does not resolve yields :data:`UNDEFINED`, which only satisfies ``not-in`` and
``equals None``; evaluation never raises for a missing property.
"""

import logging
from typing import Any, Dict, Iterable, List, Sequence, Union

from ..core.enums import FilterOperator
from ..core.models import Edge, FilterCriterion, GraphFilter, GraphSnapshot, Node
from ..serialization.document import edge_to_dict, node_to_dict

logger = logging.getLogger(__name__)


class _Undefined:
    """Marker for a property path that does not resolve."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


def resolve_property(document: Any, path: str) -> Any:
    """Follow a dotted path through nested mappings and lists."""
    current = document
    for key in path.split("."):
        if isinstance(current, dict) and key in current:
            current = current[key]
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return UNDEFINED
    return current


def _as_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(_as_text(item) for item in value)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_number(value: Any) -> Union[float, None]:
    if isinstance(value, bool) or value is None or value is UNDEFINED:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _members(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return []


def matches_criterion(document: Dict[str, Any], criterion: FilterCriterion) -> bool:
    """Evaluate one criterion against an element's document form."""
    value = resolve_property(document, criterion.property_path)
    operator = criterion.operator
    expected = criterion.value

    if value is UNDEFINED:
        if operator is FilterOperator.NOT_IN:
            return True
        return operator is FilterOperator.EQUALS and expected is None

    if operator is FilterOperator.EQUALS:
        return value == expected
    if operator is FilterOperator.CONTAINS:
        return _as_text(expected).lower() in _as_text(value).lower()
    if operator in (FilterOperator.GREATER, FilterOperator.LESS):
        left, right = _as_number(value), _as_number(expected)
        if left is None or right is None:
            return False
        return left > right if operator is FilterOperator.GREATER else left < right
    if operator is FilterOperator.IN:
        return value in _members(expected)
    if operator is FilterOperator.NOT_IN:
        return value not in _members(expected)
    return False


def matches_criteria(document: Dict[str, Any], criteria: Iterable[FilterCriterion]) -> bool:
    """True when every criterion matches (an empty list matches everything)."""
    return all(matches_criterion(document, criterion) for criterion in criteria)


def node_matches(node: Node, criteria: Sequence[FilterCriterion]) -> bool:
    return matches_criteria(node_to_dict(node), criteria)


def edge_matches(edge: Edge, criteria: Sequence[FilterCriterion]) -> bool:
    return matches_criteria(edge_to_dict(edge), criteria)


def apply_filters(snapshot: GraphSnapshot, filters: Iterable[GraphFilter]) -> GraphSnapshot:
    """
    Apply the active filters to a snapshot.

    Node filters narrow the node set and edge filters narrow the edge set;
    afterwards every edge touching a removed or missing node is dropped. The
    input snapshot is left untouched and document metadata is carried over.
    """
    nodes = list(snapshot.nodes)
    edges = list(snapshot.edges)
    applied = 0
    for graph_filter in filters:
        if not graph_filter.active:
            continue
        applied += 1
        if graph_filter.applies_to_nodes:
            nodes = [node for node in nodes if node_matches(node, graph_filter.criteria)]
        if graph_filter.applies_to_edges:
            edges = [edge for edge in edges if edge_matches(edge, graph_filter.criteria)]

    kept = {node.id for node in nodes}
    edges = [edge for edge in edges if edge.source in kept and edge.target in kept]
    logger.debug(
        "Applied %d filter(s): %d/%d nodes, %d/%d edges kept",
        applied,
        len(nodes),
        len(snapshot.nodes),
        len(edges),
        len(snapshot.edges),
    )
    return GraphSnapshot(nodes=nodes, edges=edges, metadata=snapshot.metadata)
