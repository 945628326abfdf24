"""Topological ordering of the directed project graph."""

from collections import deque
from typing import Deque, Dict, List, Tuple

from ..models import GraphSnapshot


def topological_order(snapshot: GraphSnapshot) -> Tuple[List[str], List[str]]:
    """
    Order nodes with Kahn's algorithm.

    Ready nodes are taken first in, first out. The queue starts with the
    nodes that have no predecessors, in insertion order; nodes released by
    the same predecessor join the queue in insertion order. Nodes on or
    behind a cycle never reach zero in-degree; they are left out of the order
    and returned separately.

    Args:
        snapshot (GraphSnapshot): Graph to order

    Returns:
        Tuple[List[str], List[str]]: The partial order and the omitted nodes
    """
    index = snapshot.node_index()
    in_degree: Dict[str, int] = {node_id: 0 for node_id in index}
    successors: Dict[str, List[str]] = {node_id: [] for node_id in index}
    for edge in snapshot.valid_edges(set(index)):
        successors[edge.source].append(edge.target)
        in_degree[edge.target] += 1

    queue: Deque[str] = deque(node_id for node_id in index if in_degree[node_id] == 0)

    order = []
    while queue:
        node_id = queue.popleft()
        order.append(node_id)
        released = []
        for successor in successors[node_id]:
            in_degree[successor] -= 1
            if in_degree[successor] == 0:
                released.append(successor)
        queue.extend(sorted(released, key=index.__getitem__))

    ordered = set(order)
    return order, [node_id for node_id in index if node_id not in ordered]


def critical_path(snapshot: GraphSnapshot) -> List[str]:
    """Topological order reported as the project's critical path."""
    order, _ = topological_order(snapshot)
    return order
