"""Path, neighbourhood, subgraph and pattern queries over a graph snapshot."""

import uuid
from collections import deque
from copy import deepcopy
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..core.exceptions import ValidationError
from ..core.models import Edge, FilterCriterion, GraphSnapshot
from .filters import edge_matches, node_matches


@dataclass(frozen=True)
class PatternMatch:
    """Ids of one source-edge-target triple matching a pattern."""

    source: str
    edge: str
    target: str

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.source, "edge": self.edge, "target": self.target}


def criteria_from_raw(raw: Optional[Iterable[Any]]) -> List[FilterCriterion]:
    """
    Build criteria from models or ``{"property", "operator", "value"}`` mappings.

    Raises:
        ValidationError: If an entry is not a criterion description
    """
    criteria = []
    for item in raw or []:
        if isinstance(item, FilterCriterion):
            criteria.append(item)
        elif isinstance(item, Mapping):
            criteria.append(
                FilterCriterion(
                    property_path=item.get("property", item.get("property_path")),
                    operator=item.get("operator"),
                    value=item.get("value"),
                )
            )
        else:
            raise ValidationError(f"invalid criterion: {item!r}")
    return criteria


def _require_id(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a node id string, got {value!r}")
    return value


class QueryEngine:
    """
    Answers structural queries about one snapshot.

    Only edges whose endpoints both exist are traversed. All results are
    deterministic for a given snapshot: ties follow edge insertion order.
    """

    def __init__(self, snapshot: GraphSnapshot):
        """Initialize the engine and build adjacency lists."""
        self.snapshot = snapshot
        self.node_ids = snapshot.node_ids()
        self.node_set = set(self.node_ids)
        self.edges: List[Edge] = list(snapshot.valid_edges(self.node_set))
        self.out_adj: Dict[str, List[str]] = {node_id: [] for node_id in self.node_ids}
        self.undirected_adj: Dict[str, List[str]] = {node_id: [] for node_id in self.node_ids}
        for edge in self.edges:
            self.out_adj[edge.source].append(edge.target)
            self.undirected_adj[edge.source].append(edge.target)
            self.undirected_adj[edge.target].append(edge.source)

    def find_path(self, source: str, target: str) -> List[str]:
        """
        Find the first shortest directed path from ``source`` to ``target``.

        Returns:
            List[str]: Node ids from source to target, ``[source]`` when both
            are the same node, or ``[]`` when unreachable or unknown

        Raises:
            ValidationError: If an endpoint is not a string
        """
        _require_id("source", source)
        _require_id("target", target)
        if source not in self.node_set or target not in self.node_set:
            return []
        if source == target:
            return [source]

        parents: Dict[str, str] = {}
        visited = {source}
        queue = deque([source])
        while queue:
            node = queue.popleft()
            for neighbor in self.out_adj[node]:
                if neighbor in visited:
                    continue
                visited.add(neighbor)
                parents[neighbor] = node
                if neighbor == target:
                    return self._walk_back(parents, source, target)
                queue.append(neighbor)
        return []

    @staticmethod
    def _walk_back(parents: Dict[str, str], source: str, target: str) -> List[str]:
        path = [target]
        while path[-1] != source:
            path.append(parents[path[-1]])
        path.reverse()
        return path

    def get_neighbors(self, node_id: str, depth: int = 1) -> List[str]:
        """
        Nodes within ``depth`` hops of ``node_id``, edges taken as undirected.

        Returns:
            List[str]: Reachable ids in discovery order, origin excluded

        Raises:
            ValidationError: If node_id is not a string, or depth is negative
                or not an integer
        """
        _require_id("node_id", node_id)
        if isinstance(depth, bool) or not isinstance(depth, int):
            raise ValidationError(f"depth must be an integer, got {depth!r}")
        if depth < 0:
            raise ValidationError("depth must not be negative")
        if depth == 0 or node_id not in self.node_set:
            return []

        distances = {node_id: 0}
        found = []
        queue = deque([node_id])
        while queue:
            node = queue.popleft()
            if distances[node] >= depth:
                continue
            for neighbor in self.undirected_adj[node]:
                if neighbor in distances:
                    continue
                distances[neighbor] = distances[node] + 1
                found.append(neighbor)
                queue.append(neighbor)
        return found

    def extract_subgraph(self, node_ids: Iterable[str]) -> GraphSnapshot:
        """
        Induce the subgraph on ``node_ids``.

        Unknown ids are ignored. Nodes and edges keep snapshot order; the
        document metadata is copied under a new id and the name "Subgraph".
        """
        if isinstance(node_ids, (str, Mapping)) or not isinstance(node_ids, Iterable):
            raise ValidationError(f"node_ids must be a collection of ids, got {node_ids!r}")
        wanted = {_require_id("node id", node_id) for node_id in node_ids}
        nodes = [deepcopy(node) for node in self.snapshot.nodes if node.id in wanted]
        edges = [deepcopy(edge) for edge in self.snapshot.valid_edges(wanted)]
        metadata = replace(
            deepcopy(self.snapshot.metadata),
            id=f"subgraph-{uuid.uuid4().hex[:12]}",
            name="Subgraph",
        )
        return GraphSnapshot(nodes=nodes, edges=edges, metadata=metadata)

    def find_pattern(self, pattern: Mapping[str, Any]) -> List[PatternMatch]:
        """
        Find source-edge-target triples matching a one-hop pattern.

        ``pattern`` maps ``source``, ``edge`` and ``target`` to lists of
        criteria; a missing part matches anything.

        Example:
            >>> engine.find_pattern({
            ...     "source": [{"property": "type", "operator": "equals", "value": "task"}],
            ...     "edge": [{"property": "type", "operator": "equals", "value": "dependency"}],
            ... })
        """
        if not isinstance(pattern, Mapping):
            raise ValidationError("pattern must be a mapping")
        unknown = set(pattern) - {"source", "edge", "target"}
        if unknown:
            raise ValidationError(f"Unknown pattern parts: {sorted(unknown)}")
        source_criteria = criteria_from_raw(pattern.get("source"))
        edge_criteria = criteria_from_raw(pattern.get("edge"))
        target_criteria = criteria_from_raw(pattern.get("target"))

        nodes = {node.id: node for node in self.snapshot.nodes}
        source_ok = self._node_cache(source_criteria, nodes)
        target_ok = self._node_cache(target_criteria, nodes)

        matches = []
        for edge in self.edges:
            if not source_ok(edge.source) or not target_ok(edge.target):
                continue
            if edge_criteria and not edge_matches(edge, edge_criteria):
                continue
            matches.append(PatternMatch(source=edge.source, edge=edge.id, target=edge.target))
        return matches

    @staticmethod
    def _node_cache(criteria: Sequence[FilterCriterion], nodes: Dict[str, Any]):
        results: Dict[str, bool] = {}

        def check(node_id: str) -> bool:
            if not criteria:
                return True
            if node_id not in results:
                results[node_id] = node_matches(nodes[node_id], criteria)
            return results[node_id]

        return check
