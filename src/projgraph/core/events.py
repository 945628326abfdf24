"""
Graph change event system.

This module provides the change records the graph store emits after every
mutation and the listener registry that dispatches them. The version history
manager is one such listener.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from .models import GraphSnapshot

logger = logging.getLogger(__name__)


class GraphEvent(Enum):
    """Events that can occur in the graph store."""

    NODES_ADDED = auto()
    EDGES_ADDED = auto()
    ELEMENTS_ADDED = auto()
    NODES_REMOVED = auto()
    EDGES_REMOVED = auto()
    NODE_UPDATED = auto()
    EDGE_UPDATED = auto()
    GRAPH_MERGED = auto()
    GRAPH_REPLACED = auto()
    GRAPH_RESET = auto()


@dataclass(frozen=True)
class ChangeSet:
    """Ids touched by one mutation, partitioned by kind of change."""

    added_nodes: Tuple[str, ...] = ()
    added_edges: Tuple[str, ...] = ()
    modified_nodes: Tuple[str, ...] = ()
    modified_edges: Tuple[str, ...] = ()
    removed_nodes: Tuple[str, ...] = ()
    removed_edges: Tuple[str, ...] = ()

    @classmethod
    def of(cls, **id_lists: Iterable[str]) -> "ChangeSet":
        """Build a change set from any iterables of ids."""
        return cls(**{name: tuple(ids) for name, ids in id_lists.items()})

    @property
    def is_empty(self) -> bool:
        return not any(
            (
                self.added_nodes,
                self.added_edges,
                self.modified_nodes,
                self.modified_edges,
                self.removed_nodes,
                self.removed_edges,
            )
        )

    def to_dict(self) -> Dict[str, Dict[str, List[str]]]:
        return {
            "added": {"nodes": list(self.added_nodes), "edges": list(self.added_edges)},
            "modified": {"nodes": list(self.modified_nodes), "edges": list(self.modified_edges)},
            "removed": {"nodes": list(self.removed_nodes), "edges": list(self.removed_edges)},
        }


@dataclass(frozen=True)
class GraphChange:
    """
    Description of one committed mutation.

    Attributes:
        event (GraphEvent): What kind of mutation happened
        message (str): Human-readable summary
        changes (ChangeSet): Ids added, modified and removed
        version (str): Version after the mutation
        parent_version (Optional[str]): Version before the mutation
        revision (int): Revision counter after the mutation
        timestamp (datetime): Commit time
        snapshot (Optional[GraphSnapshot]): Copy of the graph after the mutation
    """

    event: GraphEvent
    message: str
    changes: ChangeSet
    version: str
    parent_version: Optional[str]
    revision: int
    timestamp: datetime = field(default_factory=datetime.now)
    snapshot: Optional[GraphSnapshot] = field(default=None, compare=False, repr=False)


class GraphEventListener(Protocol):
    """Protocol for objects that listen to graph state changes."""

    def on_state_change(self, event: GraphEvent, change: GraphChange) -> None:
        """
        Called after the graph state changed.

        Args:
            event (GraphEvent): Type of event that occurred
            change (GraphChange): Details of the committed mutation
        """
        ...


@dataclass
class GraphEventManager:
    """
    Manages graph event subscriptions and notifications.

    Listeners are called synchronously in registration order.

    Attributes:
        _listeners (List[GraphEventListener]): Registered event listeners
    """

    _listeners: List[GraphEventListener] = field(default_factory=list)

    def add_listener(self, listener: GraphEventListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: GraphEventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listeners(self) -> List[GraphEventListener]:
        return list(self._listeners)

    def notify(self, event: GraphEvent, change: GraphChange) -> None:
        """
        Notify all listeners of a graph event.

        A failing listener is logged and the remaining listeners are still
        notified.
        """
        for listener in list(self._listeners):
            try:
                listener.on_state_change(event, change)
            except Exception:
                logger.exception("Error notifying listener %r of %s", listener, event.name)

    def clear_listeners(self) -> None:
        self._listeners.clear()


def describe_change(change: GraphChange) -> Dict[str, Any]:
    """Summarise a change as a JSON-friendly mapping."""
    return {
        "event": change.event.name.lower(),
        "message": change.message,
        "version": change.version,
        "revision": change.revision,
        "timestamp": change.timestamp.isoformat(),
        "changes": change.changes.to_dict(),
    }
