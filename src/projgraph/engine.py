"""
Graph engine facade.

The GraphEngine wires one graph store to its version history, the analytics
and query engines, the serializers, the render event bus and any attached
rendering backends. Engines are constructed explicitly and passed to whoever
needs them; there is no shared module-level instance, so tests and
applications can run any number of isolated engines side by side.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .config import EngineConfig
from .core.enums import BackendKind, GraphFormat, LayoutName, MergeStrategy, RenderEventType
from .core.events import GraphChange, GraphEvent, describe_change
from .core.exceptions import GraphOperationError, ValidationError
from .core.graph_operations import GraphAnalytics, MetricsCalculator
from .core.history import VersionHistoryManager, VersionRecord
from .core.models import Edge, GraphFilter, GraphSnapshot, GraphView, Node, coerce_enum
from .core.store import GraphStore
from .infrastructure.event_bus import EventBus, GraphSubscription, RenderEvent, to_event_type
from .infrastructure.files import format_from_path, read_text, write_text
from .query.filters import apply_filters
from .query.requests import execute_query
from .rendering.backends import BackendAdapter, Renderer, Viewport, create_backend
from .serialization.document import (
    edge_from_dict,
    edge_to_dict,
    merge_descriptor,
    node_from_dict,
    node_to_dict,
)
from .serialization.registry import (
    GraphExport,
    export_graph,
    parse_descriptors,
    parse_graph,
    resolve_format,
)

logger = logging.getLogger(__name__)

NodeInput = Union[Node, Mapping[str, Any]]
EdgeInput = Union[Edge, Mapping[str, Any]]


def _from_descriptor(data: Mapping[str, Any], model: type, from_dict: Callable[[Any], Any]) -> Any:
    try:
        return from_dict(data)
    except (KeyError, TypeError) as e:
        raise ValidationError(f"Invalid {model.__name__.lower()} descriptor: {e}") from e


def _coerce(items: Iterable[Any], model: type, from_dict: Callable[[Any], Any]) -> List[Any]:
    return [
        _from_descriptor(item, model, from_dict) if isinstance(item, Mapping) else item
        for item in items
    ]


class GraphEngine:
    """
    Facade over one versioned project graph.

    Attributes:
        config (EngineConfig): Engine settings
        store (GraphStore): Canonical node and edge collections
        history (VersionHistoryManager): Record of every committed mutation
        events (EventBus): Render event channel
        backends (Dict[BackendKind, BackendAdapter]): Attached rendering backends
        layout (LayoutName): Layout requested from backends
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        store: Optional[GraphStore] = None,
        history: Optional[VersionHistoryManager] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.config = config or EngineConfig()
        self.store = store or GraphStore(name=self.config.document_name)
        self.history = history or VersionHistoryManager(
            limit=self.config.history_limit, author=self.config.author
        )
        self.events = event_bus or EventBus()
        self.backends: Dict[BackendKind, BackendAdapter] = {}
        self.layout = self.config.layout
        self.viewport: Optional[Viewport] = None
        self._analytics: Optional[GraphAnalytics] = None

        # History records the change before the engine reacts to it
        self.store.add_listener(self.history)
        self.store.add_listener(self)

    # Store listener

    def on_state_change(self, event: GraphEvent, change: GraphChange) -> None:
        """Invalidate derived data, publish data-update and refresh backends."""
        self._analytics = None
        if self.config.realtime:
            self.events.emit(RenderEventType.DATA_UPDATE, describe_change(change))
        self._render(change.snapshot or self.store.get_snapshot())

    def _render(self, snapshot: GraphSnapshot) -> None:
        for backend in self.backends.values():
            if not backend.initialized:
                continue
            if len(snapshot.nodes) > self.config.max_nodes:
                logger.warning(
                    "Not sending %d nodes to %s backend (limit %d)",
                    len(snapshot.nodes),
                    backend.kind.value,
                    self.config.max_nodes,
                )
                continue
            backend.apply_data(snapshot)

    # Mutations

    def add_nodes(self, nodes: Iterable[NodeInput]) -> List[Node]:
        """Add nodes (models or document-form mappings); existing ids are skipped."""
        return self.store.add_nodes(_coerce(nodes, Node, node_from_dict))

    def add_edges(self, edges: Iterable[EdgeInput]) -> List[Edge]:
        """Add edges (models or document-form mappings); existing ids are skipped."""
        return self.store.add_edges(_coerce(edges, Edge, edge_from_dict))

    def remove_nodes(self, node_ids: Iterable[str]) -> List[str]:
        return self.store.remove_nodes(node_ids)

    def remove_edges(self, edge_ids: Iterable[str]) -> List[str]:
        return self.store.remove_edges(edge_ids)

    def update_node(self, node_id: str, updates: Mapping[str, Any]) -> Optional[Node]:
        return self.store.update_node(node_id, updates)

    def update_edge(self, edge_id: str, updates: Mapping[str, Any]) -> Optional[Edge]:
        return self.store.update_edge(edge_id, updates)

    def reset(self) -> None:
        """Clear the graph and its history; the version restarts."""
        self.store.reset()

    # Reads

    def get_snapshot(self) -> GraphSnapshot:
        return self.store.get_snapshot()

    def get_analytics(self) -> GraphAnalytics:
        """Analytics of the current graph, recomputed only after a mutation."""
        if self._analytics is None or self.store.is_dirty:
            self._analytics = MetricsCalculator(self.store.get_snapshot()).calculate_metrics()
            self.store.mark_clean()
        return self._analytics

    def query(self, query: Any) -> Any:
        """
        Run a tagged query (a GraphQuery or ``{"type", "parameters"}`` mapping).

        Raises:
            InvalidRequestError: For unsupported query types or missing parameters
        """
        return execute_query(query, self.store.get_snapshot(), lambda _: self.get_analytics())

    # Filters, views and layout

    def register_filter(self, graph_filter: GraphFilter) -> None:
        """Store a filter in the document, replacing one with the same id."""
        filters = [f for f in self.store.metadata.filters if f.id != graph_filter.id]
        self.store.update_document(filters=filters + [graph_filter])

    def remove_filter(self, filter_id: str) -> bool:
        filters = self.store.metadata.filters
        kept = [f for f in filters if f.id != filter_id]
        if len(kept) == len(filters):
            return False
        self.store.update_document(filters=kept)
        return True

    def register_view(self, view: GraphView) -> None:
        """Store a view in the document, replacing one with the same id."""
        views = [v for v in self.store.metadata.views if v.id != view.id]
        self.store.update_document(views=views + [view])

    def apply_filters(self, filters: Optional[Iterable[GraphFilter]] = None) -> GraphSnapshot:
        """
        Filter the current graph and show the result on the backends.

        Without arguments the filters stored in the document are used. The
        store is never modified.
        """
        snapshot = self.store.get_snapshot()
        selected = list(filters) if filters is not None else snapshot.metadata.filters
        filtered = apply_filters(snapshot, selected)
        self._render(filtered)
        return filtered

    def apply_view(self, view: Union[GraphView, str]) -> GraphSnapshot:
        """
        Apply a view: its filters, its layout and its viewport.

        Raises:
            ValidationError: If a view id is given that the document does not hold
        """
        if isinstance(view, str):
            found = next((v for v in self.store.metadata.views if v.id == view), None)
            if found is None:
                raise ValidationError(f"Unknown view: {view}")
            view = found
        document_filters = self.store.metadata.filters
        filters = [f for f in document_filters if f.id in view.filters]
        missing = set(view.filters) - {f.id for f in filters}
        if missing:
            logger.warning("View %s references unknown filters: %s", view.id, sorted(missing))
        filtered = self.apply_filters(filters)
        self.change_layout(view.layout, Viewport(zoom=view.zoom, center=view.center))
        return filtered

    def change_layout(self, layout: Union[LayoutName, str], viewport: Optional[Viewport] = None):
        """Switch the layout on every backend and publish a layout-change event."""
        self.layout = coerce_enum(LayoutName, layout, "layout")
        if viewport is not None:
            self.viewport = viewport
        for backend in self.backends.values():
            if backend.initialized:
                backend.apply_layout(self.layout, self.viewport)
        self.events.emit(RenderEventType.LAYOUT_CHANGE, {"layout": self.layout.value})

    # Import and export

    def export(
        self, fmt: Union[GraphFormat, str] = GraphFormat.JSON, **options: Any
    ) -> GraphExport:
        """
        Export the current graph.

        Raises:
            UnsupportedFormatError: For formats without an exporter
        """
        return export_graph(self.store.get_snapshot(), fmt, **options)

    def import_data(
        self,
        data: str,
        fmt: Union[GraphFormat, str] = GraphFormat.JSON,
        strategy: Union[MergeStrategy, str] = MergeStrategy.REPLACE,
    ) -> Optional[GraphChange]:
        """
        Parse serialized data completely, then apply it with one strategy.

        ``replace`` discards the current graph. ``merge`` inserts new ids and,
        for ids already stored, replaces only the fields the data supplies.
        ``append`` inserts everything, letting duplicate ids drop.

        Raises:
            UnsupportedFormatError: For formats without a parser
            ValidationError: If the data is malformed; the store is untouched
        """
        strategy = coerce_enum(MergeStrategy, strategy, "strategy")
        if strategy is MergeStrategy.MERGE:
            snapshot, descriptors = parse_descriptors(data, fmt)
            nodes, edges = self._merged_elements(snapshot, *descriptors)
        else:
            snapshot = parse_graph(data, fmt)
        logger.info(
            "Importing %d nodes and %d edges (%s)",
            len(snapshot.nodes),
            len(snapshot.edges),
            strategy.value,
        )
        if strategy is MergeStrategy.REPLACE:
            return self.store.replace(snapshot, message="Imported data")
        if strategy is MergeStrategy.MERGE:
            return self.store.merge(nodes, edges, message="Imported data")
        nodes, edges = self.store.append(snapshot.nodes, snapshot.edges, message="Imported data")
        if len(nodes) < len(snapshot.nodes) or len(edges) < len(snapshot.edges):
            logger.info(
                "Append dropped %d duplicate node(s) and %d duplicate edge(s)",
                len(snapshot.nodes) - len(nodes),
                len(snapshot.edges) - len(edges),
            )
        return None

    def _merged_elements(
        self,
        snapshot: GraphSnapshot,
        node_items: List[Dict[str, Any]],
        edge_items: List[Dict[str, Any]],
    ) -> Tuple[List[Node], List[Edge]]:
        """
        Combine imported elements with the stored ones they share an id with.

        Only the keys an imported descriptor supplies replace stored values;
        elements new to the store are taken as parsed.
        """
        nodes = []
        for node, item in zip(snapshot.nodes, node_items):
            current = self.store.get_node(node.id)
            if current is not None:
                merged = merge_descriptor(node_to_dict(current), item)
                node = _from_descriptor(merged, Node, node_from_dict)
            nodes.append(node)
        edges = []
        for edge, item in zip(snapshot.edges, edge_items):
            current = self.store.get_edge(edge.id)
            if current is not None:
                merged = merge_descriptor(edge_to_dict(current), item)
                edge = _from_descriptor(merged, Edge, edge_from_dict)
            edges.append(edge)
        return nodes, edges

    async def import_file(
        self,
        file_path: str,
        fmt: Optional[Union[GraphFormat, str]] = None,
        strategy: Union[MergeStrategy, str] = MergeStrategy.REPLACE,
    ) -> Optional[GraphChange]:
        """Read a graph file and import it; the format defaults to the file extension."""
        graph_format = resolve_format(fmt) if fmt is not None else format_from_path(file_path)
        content = await read_text(file_path)
        return self.import_data(content, graph_format, strategy)

    async def export_file(
        self, file_path: str, fmt: Optional[Union[GraphFormat, str]] = None, **options: Any
    ) -> GraphExport:
        """Export the graph and write it to ``file_path``."""
        graph_format = resolve_format(fmt) if fmt is not None else format_from_path(file_path)
        result = self.export(graph_format, **options)
        await write_text(file_path, result.data)
        logger.info("Exported graph to %s", file_path)
        return result

    # History

    def get_version_history(self) -> List[VersionRecord]:
        return self.history.get_version_history()

    def revert_to_version(self, version_id: str) -> Optional[GraphChange]:
        """
        Restore the graph content recorded with a version.

        The restore is itself a mutation: the version keeps increasing and a
        new history record is appended.

        Raises:
            VersionNotFoundError: If no retained record has that id
        """
        record = self.history.get_record(version_id)
        if record.snapshot is None:
            raise GraphOperationError(f"Version {version_id} carries no snapshot")
        logger.info("Reverting to version %s", record.version)
        return self.store.replace(record.snapshot, message=f"Reverted to {record.version}")

    # Backends and events

    async def attach_backend(
        self,
        kind: Union[BackendKind, str, None] = None,
        renderer: Optional[Renderer] = None,
        backend: Optional[BackendAdapter] = None,
    ) -> BackendAdapter:
        """
        Initialize a backend and send it the current graph and layout.

        Either pass a ready adapter or a kind (default from the config) plus
        the renderer the adapter should drive.
        """
        if backend is None:
            backend = create_backend(kind or self.config.backend, renderer)
        previous = self.backends.get(backend.kind)
        if previous is not None and previous is not backend:
            await previous.teardown()
        await backend.initialize()
        self.backends[backend.kind] = backend
        snapshot = self.store.get_snapshot()
        if len(snapshot.nodes) <= self.config.max_nodes:
            backend.apply_data(snapshot)
        backend.apply_layout(self.layout, self.viewport)
        return backend

    async def detach_backend(self, kind: Union[BackendKind, str]) -> bool:
        backend = self.backends.pop(coerce_enum(BackendKind, kind, "backend"), None)
        if backend is None:
            return False
        await backend.teardown()
        return True

    def handle_backend_event(
        self, event_type: Union[RenderEventType, str], data: Optional[Dict[str, Any]] = None
    ) -> Optional[RenderEvent]:
        """
        Publish a raw event reported by a backend.

        Clicks and hovers on ids the graph does not hold select nothing: they
        are dropped and None is returned.
        """
        event_type = to_event_type(event_type)
        data = dict(data or {})
        if event_type in (RenderEventType.NODE_CLICK, RenderEventType.NODE_HOVER):
            if not self.store.has_node(data.get("nodeId", "")):
                logger.debug("Ignoring %s on unknown node %s", event_type.value, data.get("nodeId"))
                return None
        elif event_type in (RenderEventType.EDGE_CLICK, RenderEventType.EDGE_HOVER):
            if not self.store.has_edge(data.get("edgeId", "")):
                logger.debug("Ignoring %s on unknown edge %s", event_type.value, data.get("edgeId"))
                return None
        elif event_type is RenderEventType.SELECTION_CHANGE:
            data["nodes"] = [i for i in data.get("nodes", []) if self.store.has_node(i)]
            data["edges"] = [i for i in data.get("edges", []) if self.store.has_edge(i)]
        return self.events.emit(event_type, data)

    def add_event_listener(
        self, event_type: Union[RenderEventType, str], callback: Callable[[RenderEvent], Any]
    ) -> None:
        self.events.subscribe(event_type, callback)

    def remove_event_listener(
        self, event_type: Union[RenderEventType, str], callback: Callable[[RenderEvent], Any]
    ) -> bool:
        return self.events.unsubscribe(event_type, callback)

    def subscribe(
        self,
        callback: Callable[[RenderEvent], Any],
        event_types: Optional[Iterable[Union[RenderEventType, str]]] = None,
    ) -> GraphSubscription:
        """Subscribe to several (default: all) render event types at once."""
        subscription = GraphSubscription(
            callback=callback,
            event_types=frozenset(event_types) if event_types is not None else None,
        )
        return self.events.add_subscription(subscription)

    def unsubscribe(self, subscription_id: str) -> bool:
        return self.events.remove_subscription(subscription_id)

    async def destroy(self) -> None:
        """Tear down every backend and drop all listeners and subscriptions."""
        for kind in list(self.backends):
            await self.detach_backend(kind)
        self.events.clear_subscribers()
        self.store.remove_listener(self)
        self.store.remove_listener(self.history)

    def describe_last_change(self) -> Optional[Dict[str, Any]]:
        """JSON-friendly summary of the most recent history record."""
        record = self.history.latest()
        return record.to_dict() if record is not None else None
