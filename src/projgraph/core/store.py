"""
Graph store owning the canonical node and edge collections.

The GraphStore is the only mutable holder of a graph. Every mutation goes
through its API so that version numbers, timestamps and change notifications
stay consistent; readers receive deep copies. The store does no analytics of
its own: after a mutation it only marks itself dirty and notifies listeners.

The store assumes a single logical writer and performs no locking. Each public
mutation is all-or-nothing: input is validated before anything changes, and the
work runs inside :meth:`GraphStore.transaction`, which restores a backup if an
unexpected error escapes.
"""

import logging
import uuid
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import fields, is_dataclass, replace
from datetime import datetime
from typing import (
    Any,
    Dict,
    Generator,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from .constants import DEFAULT_DOCUMENT_NAME, INITIAL_VERSION
from .enums import NodeKind
from .events import ChangeSet, GraphChange, GraphEvent, GraphEventListener, GraphEventManager
from .exceptions import ValidationError
from .history import increment_version
from .models import (
    DocumentMetadata,
    Edge,
    GraphSnapshot,
    Node,
    coerce_enum,
    payload_from_dict,
    payload_to_dict,
    validate_identifier,
)

logger = logging.getLogger(__name__)

NODE_FIELDS = frozenset(f.name for f in fields(Node))
EDGE_FIELDS = frozenset(f.name for f in fields(Edge))
DOCUMENT_FIELDS = frozenset({"name", "description", "layout", "filters", "views"})


def _merge_record(record: Any, updates: Mapping[str, Any], name: str) -> Any:
    """Return a copy of a metadata record with ``updates`` applied field by field."""
    allowed = {f.name for f in fields(record)}
    unknown = set(updates) - allowed
    if unknown:
        raise ValidationError(f"Unknown {name} fields: {sorted(unknown)}")
    return replace(record, **updates)


def _sets_updated_at(updates: Mapping[str, Any]) -> bool:
    metadata = updates.get("metadata")
    return isinstance(metadata, Mapping) and "updated_at" in metadata


def _overlay(existing: Any, incoming: Any) -> Any:
    """
    Field-level merge of two dataclass instances of the same type.

    Fields that are None (or empty collections) in ``incoming`` keep the
    existing value; nested dataclasses are merged recursively.
    """
    if type(existing) is not type(incoming):
        return deepcopy(incoming)
    changes = {}
    for f in fields(incoming):
        if not f.init:
            continue
        new_value = getattr(incoming, f.name)
        old_value = getattr(existing, f.name)
        if new_value is None:
            continue
        if isinstance(new_value, (list, dict)) and not new_value:
            continue
        if is_dataclass(new_value) and is_dataclass(old_value):
            changes[f.name] = _overlay(old_value, new_value)
        else:
            changes[f.name] = deepcopy(new_value)
    return replace(existing, **changes)


class GraphStore:
    """
    Canonical, versioned container of one graph.

    Attributes:
        _nodes (Dict[str, Node]): Nodes keyed by id, in insertion order
        _edges (Dict[str, Edge]): Edges keyed by id, in insertion order
        _metadata (DocumentMetadata): Document-level metadata
        _events (GraphEventManager): Change listeners
        _dirty (bool): Whether derived data computed from the store is stale
    """

    def __init__(
        self,
        metadata: Optional[DocumentMetadata] = None,
        name: str = DEFAULT_DOCUMENT_NAME,
        initial_version: str = INITIAL_VERSION,
    ):
        """
        Create an empty store.

        Args:
            metadata (Optional[DocumentMetadata]): Initial document metadata;
                a fresh document is created when omitted
            name (str): Name of the fresh document
            initial_version (str): Version a fresh or reset document starts at
        """
        increment_version(initial_version)  # validates the format
        self._initial_version = initial_version
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}
        self._metadata = deepcopy(metadata) if metadata is not None else self._new_metadata(name)
        self._events = GraphEventManager()
        self._dirty = False

    def _new_metadata(self, name: str) -> DocumentMetadata:
        return DocumentMetadata(
            id=f"project-graph-{uuid.uuid4().hex[:12]}",
            name=name,
            version=self._initial_version,
        )

    # Listeners and state

    def add_listener(self, listener: GraphEventListener) -> None:
        """Add a listener for committed changes."""
        self._events.add_listener(listener)

    def remove_listener(self, listener: GraphEventListener) -> None:
        """Remove a change listener."""
        self._events.remove_listener(listener)

    @property
    def version(self) -> str:
        return self._metadata.version

    @property
    def revision(self) -> int:
        return self._metadata.revision

    @property
    def is_dirty(self) -> bool:
        """True when the store changed since :meth:`mark_clean` was last called."""
        return self._dirty

    def mark_clean(self) -> None:
        self._dirty = False

    @property
    def metadata(self) -> DocumentMetadata:
        """Copy of the document metadata."""
        return deepcopy(self._metadata)

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """Context manager for atomic store operations."""
        backup = deepcopy((self._nodes, self._edges, self._metadata))
        try:
            yield
        except Exception:
            self._nodes, self._edges, self._metadata = backup
            raise

    def _commit(
        self, event: GraphEvent, message: str, changes: ChangeSet, force: bool = False
    ) -> Optional[GraphChange]:
        """Bump version, revision and timestamp, then notify listeners."""
        if changes.is_empty and not force:
            return None
        parent_version = self._metadata.version
        self._metadata.version = increment_version(parent_version)
        self._metadata.revision += 1
        self._metadata.updated_at = max(datetime.now(), self._metadata.created_at)
        self._dirty = True
        change = GraphChange(
            event=event,
            message=message,
            changes=changes,
            version=self._metadata.version,
            parent_version=parent_version,
            revision=self._metadata.revision,
            snapshot=self.get_snapshot(),
        )
        logger.debug(
            "%s: %s -> %s (revision %d)",
            message,
            parent_version,
            change.version,
            change.revision,
        )
        self._events.notify(event, change)
        return change

    # Validation helpers

    @staticmethod
    def _check_nodes(nodes: Iterable[Node]) -> List[Node]:
        checked = list(nodes)
        for node in checked:
            if not isinstance(node, Node):
                raise ValidationError(f"expected Node, got {type(node).__name__}")
            validate_identifier("node id", node.id)
        return checked

    @staticmethod
    def _check_edges(edges: Iterable[Edge]) -> List[Edge]:
        checked = list(edges)
        for edge in checked:
            if not isinstance(edge, Edge):
                raise ValidationError(f"expected Edge, got {type(edge).__name__}")
            validate_identifier("edge id", edge.id)
            validate_identifier("edge source", edge.source)
            validate_identifier("edge target", edge.target)
        return checked

    @staticmethod
    def _check_ids(ids: Iterable[str], name: str) -> List[str]:
        if isinstance(ids, str):
            raise ValidationError(f"{name} ids must be given as a collection, not a string")
        checked = list(ids)
        for element_id in checked:
            validate_identifier(f"{name} id", element_id)
        return list(dict.fromkeys(checked))

    def _insert_nodes(self, nodes: Sequence[Node]) -> List[Node]:
        inserted = []
        for node in nodes:
            if node.id in self._nodes:
                continue
            stored = deepcopy(node)
            self._nodes[node.id] = stored
            inserted.append(deepcopy(stored))
        return inserted

    def _insert_edges(self, edges: Sequence[Edge]) -> List[Edge]:
        inserted = []
        for edge in edges:
            if edge.id in self._edges:
                continue
            stored = deepcopy(edge)
            self._edges[edge.id] = stored
            inserted.append(deepcopy(stored))
        dangling = [e.id for e in inserted if not self._is_attached(e)]
        if dangling:
            logger.warning("Stored %d edge(s) with missing endpoints: %s", len(dangling), dangling)
        return inserted

    def _is_attached(self, edge: Edge) -> bool:
        return edge.source in self._nodes and edge.target in self._nodes

    # Mutations

    def add_nodes(self, nodes: Iterable[Node]) -> List[Node]:
        """
        Insert nodes whose ids are not present yet.

        Nodes whose id already exists (in the store or earlier in the same
        batch) are skipped. A call that inserts nothing changes nothing.

        Returns:
            List[Node]: Copies of the nodes actually inserted

        Raises:
            ValidationError: If any element is not a Node or has a blank id
        """
        checked = self._check_nodes(nodes)
        with self.transaction():
            inserted = self._insert_nodes(checked)
            self._commit(
                GraphEvent.NODES_ADDED,
                "Added nodes",
                ChangeSet.of(added_nodes=[n.id for n in inserted]),
            )
        return inserted

    def add_edges(self, edges: Iterable[Edge]) -> List[Edge]:
        """
        Insert edges whose ids are not present yet.

        Edges may reference missing nodes; they are stored but ignored by
        traversal and analytics.

        Returns:
            List[Edge]: Copies of the edges actually inserted

        Raises:
            ValidationError: If any element is not an Edge or has a blank id
        """
        checked = self._check_edges(edges)
        with self.transaction():
            inserted = self._insert_edges(checked)
            self._commit(
                GraphEvent.EDGES_ADDED,
                "Added edges",
                ChangeSet.of(added_edges=[e.id for e in inserted]),
            )
        return inserted

    def append(
        self, nodes: Iterable[Node], edges: Iterable[Edge], message: str = "Appended data"
    ) -> Tuple[List[Node], List[Edge]]:
        """Insert nodes and edges in one change; duplicates are dropped."""
        checked_nodes = self._check_nodes(nodes)
        checked_edges = self._check_edges(edges)
        with self.transaction():
            inserted_nodes = self._insert_nodes(checked_nodes)
            inserted_edges = self._insert_edges(checked_edges)
            self._commit(
                GraphEvent.ELEMENTS_ADDED,
                message,
                ChangeSet.of(
                    added_nodes=[n.id for n in inserted_nodes],
                    added_edges=[e.id for e in inserted_edges],
                ),
            )
        return inserted_nodes, inserted_edges

    def remove_nodes(self, node_ids: Iterable[str]) -> List[str]:
        """
        Remove nodes and every edge incident to them.

        Returns:
            List[str]: Ids of the nodes actually removed

        Raises:
            ValidationError: If any id is blank
        """
        ids = self._check_ids(node_ids, "node")
        with self.transaction():
            removed = [node_id for node_id in ids if node_id in self._nodes]
            for node_id in removed:
                del self._nodes[node_id]
            removed_set = set(removed)
            cascaded = [
                edge_id
                for edge_id, edge in self._edges.items()
                if edge.source in removed_set or edge.target in removed_set
            ]
            for edge_id in cascaded:
                del self._edges[edge_id]
            self._commit(
                GraphEvent.NODES_REMOVED,
                "Removed nodes",
                ChangeSet.of(removed_nodes=removed, removed_edges=cascaded),
            )
        return removed

    def remove_edges(self, edge_ids: Iterable[str]) -> List[str]:
        """Remove edges by id; returns the ids actually removed."""
        ids = self._check_ids(edge_ids, "edge")
        with self.transaction():
            removed = [edge_id for edge_id in ids if edge_id in self._edges]
            for edge_id in removed:
                del self._edges[edge_id]
            self._commit(
                GraphEvent.EDGES_REMOVED, "Removed edges", ChangeSet.of(removed_edges=removed)
            )
        return removed

    def update_node(self, node_id: str, updates: Mapping[str, Any]) -> Optional[Node]:
        """
        Merge ``updates`` into an existing node.

        Nested ``metadata`` and ``payload`` mappings merge key by key. Changing
        the kind converts the payload to the new kind's payload class. The id
        cannot be changed. Absent ids are silently ignored.

        Returns:
            Optional[Node]: Copy of the updated node, or None if absent

        Raises:
            ValidationError: If the update is malformed
        """
        validate_identifier("node id", node_id)
        current = self._nodes.get(node_id)
        if current is None:
            logger.debug("update_node ignored for absent node %s", node_id)
            return None
        updated = self._merge_node(current, updates)
        with self.transaction():
            self._nodes[node_id] = updated
            self._commit(
                GraphEvent.NODE_UPDATED, "Updated node", ChangeSet.of(modified_nodes=[node_id])
            )
        return deepcopy(updated)

    def _merge_node(self, current: Node, updates: Mapping[str, Any]) -> Node:
        unknown = set(updates) - NODE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown node fields: {sorted(unknown)}")
        if "id" in updates and updates["id"] != current.id:
            raise ValidationError("node id cannot be changed")

        base = deepcopy(current)
        values = {name: getattr(base, name) for name in NODE_FIELDS}
        kind = coerce_enum(NodeKind, updates.get("kind", base.kind), "kind")
        values["kind"] = kind

        for key, value in updates.items():
            if key in ("id", "kind"):
                continue
            if key == "metadata" and isinstance(value, Mapping):
                values["metadata"] = _merge_record(base.metadata, value, "node metadata")
            elif key == "payload" and isinstance(value, Mapping):
                values["payload"] = payload_from_dict(
                    kind, {**payload_to_dict(base.payload), **value}
                )
            else:
                values[key] = deepcopy(value)

        if kind is not base.kind and "payload" not in updates:
            values["payload"] = payload_from_dict(kind, payload_to_dict(base.payload))

        updated = Node(**values)
        if not _sets_updated_at(updates):
            updated.metadata.touch()
        return updated

    def update_edge(self, edge_id: str, updates: Mapping[str, Any]) -> Optional[Edge]:
        """
        Merge ``updates`` into an existing edge.

        Works like :meth:`update_node`; source and target may be changed.
        """
        validate_identifier("edge id", edge_id)
        current = self._edges.get(edge_id)
        if current is None:
            logger.debug("update_edge ignored for absent edge %s", edge_id)
            return None
        unknown = set(updates) - EDGE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown edge fields: {sorted(unknown)}")
        if "id" in updates and updates["id"] != edge_id:
            raise ValidationError("edge id cannot be changed")

        base = deepcopy(current)
        values = {name: getattr(base, name) for name in EDGE_FIELDS}
        for key, value in updates.items():
            if key == "metadata" and isinstance(value, Mapping):
                values["metadata"] = _merge_record(base.metadata, value, "edge metadata")
            elif key != "id":
                values[key] = deepcopy(value)
        updated = Edge(**values)
        if not _sets_updated_at(updates):
            updated.metadata.touch()

        with self.transaction():
            self._edges[edge_id] = updated
            self._commit(
                GraphEvent.EDGE_UPDATED, "Updated edge", ChangeSet.of(modified_edges=[edge_id])
            )
        return deepcopy(updated)

    def merge(
        self, nodes: Iterable[Node], edges: Iterable[Edge], message: str = "Merged data"
    ) -> Optional[GraphChange]:
        """
        Update-or-insert nodes and edges by id in one change.

        Existing elements are merged field by field: values that are None or
        empty in the incoming element keep the stored value.
        """
        checked_nodes = self._check_nodes(nodes)
        checked_edges = self._check_edges(edges)

        merged_nodes: Dict[str, Node] = {}
        for node in checked_nodes:
            existing = merged_nodes.get(node.id) or self._nodes.get(node.id)
            merged_nodes[node.id] = _overlay(existing, node) if existing else deepcopy(node)
        merged_edges: Dict[str, Edge] = {}
        for edge in checked_edges:
            existing = merged_edges.get(edge.id) or self._edges.get(edge.id)
            merged_edges[edge.id] = _overlay(existing, edge) if existing else deepcopy(edge)

        with self.transaction():
            added_nodes = [i for i in merged_nodes if i not in self._nodes]
            modified_nodes = [i for i in merged_nodes if i in self._nodes]
            added_edges = [i for i in merged_edges if i not in self._edges]
            modified_edges = [i for i in merged_edges if i in self._edges]
            self._nodes.update(merged_nodes)
            self._edges.update(merged_edges)
            return self._commit(
                GraphEvent.GRAPH_MERGED,
                message,
                ChangeSet.of(
                    added_nodes=added_nodes,
                    added_edges=added_edges,
                    modified_nodes=modified_nodes,
                    modified_edges=modified_edges,
                ),
            )

    def replace(
        self, snapshot: GraphSnapshot, message: str = "Replaced graph"
    ) -> Optional[GraphChange]:
        """
        Discard the current content and load ``snapshot`` in one change.

        Document fields (name, description, layout, filters, views, creation
        time) come from the snapshot; version and revision keep increasing.
        Duplicate ids inside the snapshot keep their first occurrence.
        """
        checked_nodes = self._check_nodes(snapshot.nodes)
        checked_edges = self._check_edges(snapshot.edges)
        incoming = deepcopy(snapshot.metadata)

        with self.transaction():
            old_nodes: Set[str] = set(self._nodes)
            old_edges: Set[str] = set(self._edges)
            self._nodes = {}
            self._edges = {}
            self._insert_nodes(checked_nodes)
            self._insert_edges(checked_edges)

            incoming.version = self._metadata.version
            incoming.revision = self._metadata.revision
            self._metadata = incoming

            return self._commit(
                GraphEvent.GRAPH_REPLACED,
                message,
                ChangeSet.of(
                    added_nodes=[i for i in self._nodes if i not in old_nodes],
                    added_edges=[i for i in self._edges if i not in old_edges],
                    modified_nodes=[i for i in self._nodes if i in old_nodes],
                    modified_edges=[i for i in self._edges if i in old_edges],
                    removed_nodes=[i for i in old_nodes if i not in self._nodes],
                    removed_edges=[i for i in old_edges if i not in self._edges],
                ),
                force=True,
            )

    def update_document(self, **changes: Any) -> DocumentMetadata:
        """
        Change document-level fields (name, description, layout, filters, views).

        Document fields are not graph structure, so the version is not bumped.
        """
        unknown = set(changes) - DOCUMENT_FIELDS
        if unknown:
            raise ValidationError(f"Unknown document fields: {sorted(unknown)}")
        updated = replace(self._metadata, **deepcopy(changes))
        updated.updated_at = max(datetime.now(), updated.created_at)
        self._metadata = updated
        return deepcopy(updated)

    def reset(self) -> None:
        """
        Irreversibly clear the graph and restart versioning.

        Listeners receive GRAPH_RESET; the history manager clears itself.
        """
        self._nodes = {}
        self._edges = {}
        parent_version = self._metadata.version
        self._metadata = self._new_metadata(self._metadata.name)
        self._dirty = True
        logger.info("Graph reset from version %s", parent_version)
        self._events.notify(
            GraphEvent.GRAPH_RESET,
            GraphChange(
                event=GraphEvent.GRAPH_RESET,
                message="Reset graph",
                changes=ChangeSet(),
                version=self._metadata.version,
                parent_version=parent_version,
                revision=self._metadata.revision,
            ),
        )

    # Reads

    def get_snapshot(self) -> GraphSnapshot:
        """Return a deep copy of the current nodes, edges and metadata."""
        return GraphSnapshot(
            nodes=deepcopy(list(self._nodes.values())),
            edges=deepcopy(list(self._edges.values())),
            metadata=deepcopy(self._metadata),
        )

    def get_node(self, node_id: str) -> Optional[Node]:
        node = self._nodes.get(node_id)
        return deepcopy(node) if node is not None else None

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        edge = self._edges.get(edge_id)
        return deepcopy(edge) if edge is not None else None

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self._edges

    def node_count(self) -> int:
        return len(self._nodes)

    def edge_count(self) -> int:
        return len(self._edges)

    def incident_edges(self, node_id: str) -> List[Edge]:
        """Copies of the edges touching ``node_id``."""
        return [
            deepcopy(edge)
            for edge in self._edges.values()
            if edge.source == node_id or edge.target == node_id
        ]
