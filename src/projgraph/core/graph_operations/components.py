"""Graph component analysis functionality."""

from typing import Dict, List

from ..models import GraphSnapshot


class ComponentAnalysis:
    """
    Analyzes connected components in a graph snapshot.

    Every edge is treated as bidirectional for reachability. Nodes without any
    valid edge form singleton components. Traversal uses an explicit stack, so
    long chains do not hit the interpreter's recursion limit.
    """

    def __init__(self, snapshot: GraphSnapshot):
        """Initialize component analyzer with a graph snapshot."""
        self.node_ids: List[str] = snapshot.node_ids()
        self.adjacency: Dict[str, List[str]] = {node_id: [] for node_id in self.node_ids}
        for edge in snapshot.valid_edges(set(self.node_ids)):
            self.adjacency[edge.source].append(edge.target)
            self.adjacency[edge.target].append(edge.source)

        self.components: List[List[str]] = []
        self.membership: Dict[str, int] = {}  # Map nodes to their component index
        self._analyze_components()

    def _analyze_components(self) -> None:
        """Identify connected components using iterative depth-first search."""
        for start in self.node_ids:
            if start in self.membership:
                continue
            index = len(self.components)
            component = []
            stack = [start]
            self.membership[start] = index
            while stack:
                node = stack.pop()
                component.append(node)
                for neighbor in self.adjacency[node]:
                    if neighbor not in self.membership:
                        self.membership[neighbor] = index
                        stack.append(neighbor)
            self.components.append(component)

    def get_components(self) -> List[List[str]]:
        """Get list of all components, in order of their first node."""
        return [list(component) for component in self.components]

    def get_component_count(self) -> int:
        """Get number of connected components."""
        return len(self.components)
