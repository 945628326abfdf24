"""Graph metrics calculation functionality."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..models import GraphSnapshot
from .components import ComponentAnalysis
from .ordering import topological_order


@dataclass(frozen=True)
class DegreeEntry:
    """In-, out- and total degree of one node."""

    in_degree: int = 0
    out_degree: int = 0

    @property
    def total(self) -> int:
        return self.in_degree + self.out_degree

    def to_dict(self) -> Dict[str, int]:
        return {"in": self.in_degree, "out": self.out_degree, "total": self.total}


@dataclass
class GraphAnalytics:
    """
    Container for graph analytics results.

    Attributes:
        node_count (int): Number of nodes
        edge_count (int): Number of edges whose endpoints both exist
        density (float): ``2E / (N(N-1))``, 0 for graphs with fewer than two nodes
        average_degree (float): ``2E / N``, 0 for an empty graph
        degrees (Dict[str, DegreeEntry]): Degree table in node insertion order
        clusters (int): Number of connected components
        components (List[List[str]]): Partition of node ids into components
        critical_path (List[str]): Topological order of the acyclic part
        unordered_nodes (List[str]): Nodes omitted from the order by cycles
        bottlenecks (List[str]): Nodes whose degree exceeds twice the average
        metrics (Dict[str, int]): max_degree, min_degree and isolated_nodes
    """

    node_count: int
    edge_count: int
    density: float
    average_degree: float
    degrees: Dict[str, DegreeEntry] = field(default_factory=dict)
    clusters: int = 0
    components: List[List[str]] = field(default_factory=list)
    critical_path: List[str] = field(default_factory=list)
    unordered_nodes: List[str] = field(default_factory=list)
    bottlenecks: List[str] = field(default_factory=list)
    metrics: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodeCount": self.node_count,
            "edgeCount": self.edge_count,
            "density": self.density,
            "averageDegree": self.average_degree,
            "degrees": {node_id: entry.to_dict() for node_id, entry in self.degrees.items()},
            "clusters": self.clusters,
            "components": [list(component) for component in self.components],
            "criticalPath": list(self.critical_path),
            "unorderedNodes": list(self.unordered_nodes),
            "bottlenecks": list(self.bottlenecks),
            "metrics": {
                "maxDegree": self.metrics.get("max_degree", 0),
                "minDegree": self.metrics.get("min_degree", 0),
                "isolatedNodes": self.metrics.get("isolated_nodes", 0),
            },
        }


class MetricsCalculator:
    """
    Calculates structural metrics of a graph snapshot.

    This class provides functionality to compute the metrics that
    characterize a project graph:
    - Degree table, density and average degree
    - Connected components
    - Topological order (critical path)
    - Bottleneck detection

    Only edges whose endpoints both exist are counted. The calculator never
    modifies the snapshot it is given.
    """

    def __init__(self, snapshot: GraphSnapshot):
        """Initialize calculator with a graph snapshot."""
        self.snapshot = snapshot
        self.node_ids = snapshot.node_ids()
        self.edges = list(snapshot.valid_edges(set(self.node_ids)))

    def calculate_metrics(self) -> GraphAnalytics:
        """Calculate all graph metrics."""
        degrees = self.get_degree_table()
        average_degree = self.get_average_degree()
        components = ComponentAnalysis(self.snapshot)
        order, unordered = topological_order(self.snapshot)
        totals = [entry.total for entry in degrees.values()]

        return GraphAnalytics(
            node_count=len(self.node_ids),
            edge_count=len(self.edges),
            density=self.get_density(),
            average_degree=average_degree,
            degrees=degrees,
            clusters=components.get_component_count(),
            components=components.get_components(),
            critical_path=order,
            unordered_nodes=unordered,
            bottlenecks=self.get_bottlenecks(degrees, average_degree),
            metrics={
                "max_degree": max(totals, default=0),
                "min_degree": min(totals, default=0),
                "isolated_nodes": sum(1 for total in totals if total == 0),
            },
        )

    def get_degree_table(self) -> Dict[str, DegreeEntry]:
        """Get in-degree and out-degree for each node."""
        in_degree = {node_id: 0 for node_id in self.node_ids}
        out_degree = {node_id: 0 for node_id in self.node_ids}
        for edge in self.edges:
            out_degree[edge.source] += 1
            in_degree[edge.target] += 1
        return {
            node_id: DegreeEntry(in_degree=in_degree[node_id], out_degree=out_degree[node_id])
            for node_id in self.node_ids
        }

    def get_average_degree(self) -> float:
        """Calculate average degree across all nodes."""
        if not self.node_ids:
            return 0.0
        return 2 * len(self.edges) / len(self.node_ids)

    def get_density(self) -> float:
        """Calculate graph density."""
        n = len(self.node_ids)
        if n <= 1:
            return 0.0
        return 2 * len(self.edges) / (n * (n - 1))

    @staticmethod
    def get_bottlenecks(degrees: Dict[str, DegreeEntry], average_degree: float) -> List[str]:
        """Nodes whose total degree exceeds twice the average degree."""
        threshold = 2 * average_degree
        return [node_id for node_id, entry in degrees.items() if entry.total > threshold]
