"""
Rendering backend adapters.

Backends are external drawing engines. The engine talks to them only through
the :class:`RenderBackend` capability interface; each adapter translates graph
snapshots and layout requests into its backend's primitives and hands them to
an injected renderer callable, which owns the actual drawing.

The renderer is called as ``renderer(command, payload)`` with command one of
``"initialize"``, ``"data"``, ``"layout"`` or ``"teardown"``. It may return an
awaitable from ``initialize`` and ``teardown``.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Type

from ..core.enums import BackendKind, LayoutName
from ..core.exceptions import ConfigurationError, GraphOperationError
from ..core.models import GraphSnapshot, Position, coerce_enum, payload_to_dict
from .styles import edge_color, node_color, node_shape, status_border

logger = logging.getLogger(__name__)

Renderer = Callable[[str, Any], Any]


def null_renderer(command: str, payload: Any) -> None:
    """Renderer that draws nothing."""
    return None


@dataclass
class Viewport:
    """Zoom factor and centre of the visible canvas."""

    zoom: float = 1.0
    center: Position = field(default_factory=Position)


class RenderBackend(Protocol):
    """Capability interface every rendering backend implements."""

    kind: BackendKind

    async def initialize(self) -> None:
        """Start the backend (create canvas, load layout engines)."""
        ...

    def apply_data(self, snapshot: GraphSnapshot) -> None:
        """Replace the drawn elements with the content of ``snapshot``."""
        ...

    def apply_layout(self, layout: LayoutName, viewport: Optional[Viewport] = None) -> None:
        """Run a layout and optionally move the viewport."""
        ...

    async def teardown(self) -> None:
        """Release every backend resource."""
        ...


class BackendAdapter:
    """
    Shared lifecycle of the adapters.

    Subclasses implement :meth:`translate` and :meth:`layout_options`.
    """

    kind: BackendKind

    def __init__(
        self, renderer: Optional[Renderer] = None, options: Optional[Dict[str, Any]] = None
    ):
        self.renderer: Renderer = renderer or null_renderer
        self.options = dict(options or {})
        self.initialized = False

    async def initialize(self) -> None:
        if self.initialized:
            return
        result = self.renderer("initialize", {"backend": self.kind.value, **self.options})
        if inspect.isawaitable(result):
            await result
        self.initialized = True
        logger.info("Initialized %s backend", self.kind.value)

    def apply_data(self, snapshot: GraphSnapshot) -> None:
        self._require_initialized()
        self.renderer("data", self.translate(snapshot))

    def apply_layout(self, layout: LayoutName, viewport: Optional[Viewport] = None) -> None:
        self._require_initialized()
        layout = coerce_enum(LayoutName, layout, "layout")
        self.renderer("layout", self.layout_options(layout, viewport))

    async def teardown(self) -> None:
        if not self.initialized:
            return
        result = self.renderer("teardown", {"backend": self.kind.value})
        if inspect.isawaitable(result):
            await result
        self.initialized = False
        logger.info("Tore down %s backend", self.kind.value)

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise GraphOperationError(f"{self.kind.value} backend used before initialize()")

    def translate(self, snapshot: GraphSnapshot) -> Any:
        raise NotImplementedError

    def layout_options(self, layout: LayoutName, viewport: Optional[Viewport]) -> Dict[str, Any]:
        raise NotImplementedError


CYTOSCAPE_LAYOUTS: Dict[LayoutName, Dict[str, Any]] = {
    LayoutName.HIERARCHICAL: {
        "name": "dagre",
        "rankDir": "TB",
        "spacingFactor": 1.2,
        "nodeDimensionsIncludeLabels": True,
    },
    LayoutName.FORCE: {
        "name": "cola",
        "animate": True,
        "maxSimulationTime": 4000,
        "fit": True,
        "padding": 30,
        "nodeSpacing": 10,
    },
    LayoutName.CIRCULAR: {"name": "circle", "fit": True, "padding": 30, "avoidOverlap": True},
    LayoutName.GRID: {"name": "grid", "fit": True, "padding": 30, "avoidOverlap": True},
}


class CytoscapeAdapter(BackendAdapter):
    """Element-list adapter for Cytoscape-style backends."""

    kind = BackendKind.CYTOSCAPE

    def translate(self, snapshot: GraphSnapshot) -> List[Dict[str, Any]]:
        elements = []
        for node in snapshot.nodes:
            status = node.status.value if node.status else "unknown"
            element = {
                "data": {
                    **payload_to_dict(node.payload),
                    "id": node.id,
                    "label": node.label,
                    "type": node.kind.value,
                    "color": node_color(node),
                },
                "classes": f"node-{node.kind.value} status-{status}",
            }
            border = status_border(node.status)
            if border:
                element["data"]["borderColor"] = border
            if node.position:
                element["position"] = {"x": node.position.x, "y": node.position.y}
            elements.append(element)

        for edge in snapshot.valid_edges():
            elements.append(
                {
                    "data": {
                        "id": edge.id,
                        "source": edge.source,
                        "target": edge.target,
                        "label": edge.display_label,
                        "type": edge.kind.value,
                        "weight": edge.weight,
                        "color": edge_color(edge.kind, edge.color),
                    },
                    "classes": f"edge-{edge.kind.value}",
                }
            )
        return elements

    def layout_options(self, layout: LayoutName, viewport: Optional[Viewport]) -> Dict[str, Any]:
        preset = CYTOSCAPE_LAYOUTS.get(layout, CYTOSCAPE_LAYOUTS[LayoutName.HIERARCHICAL])
        options = {"layout": dict(preset)}
        if viewport is not None:
            options["zoom"] = viewport.zoom
            options["pan"] = {"x": viewport.center.x, "y": viewport.center.y}
        return options


class D3Adapter(BackendAdapter):
    """Node-link adapter for D3 force and tree layouts."""

    kind = BackendKind.D3

    def translate(self, snapshot: GraphSnapshot) -> Dict[str, List[Dict[str, Any]]]:
        nodes = []
        for node in snapshot.nodes:
            item = {
                "id": node.id,
                "label": node.label,
                "type": node.kind.value,
                "status": node.status.value if node.status else None,
                "color": node_color(node),
            }
            if node.position:
                item["x"], item["y"] = node.position.x, node.position.y
            nodes.append(item)
        links = [
            {
                "id": edge.id,
                "source": edge.source,
                "target": edge.target,
                "type": edge.kind.value,
                "label": edge.display_label,
                "weight": edge.weight if edge.weight is not None else 1.0,
            }
            for edge in snapshot.valid_edges()
        ]
        return {"nodes": nodes, "links": links}

    def layout_options(self, layout: LayoutName, viewport: Optional[Viewport]) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "layout": layout.value,
            "simulation": "tree" if layout is LayoutName.HIERARCHICAL else "force",
        }
        if viewport is not None:
            options["transform"] = {
                "k": viewport.zoom,
                "x": viewport.center.x,
                "y": viewport.center.y,
            }
        return options


class VisAdapter(BackendAdapter):
    """Dataset adapter for vis-network style backends."""

    kind = BackendKind.VIS

    def translate(self, snapshot: GraphSnapshot) -> Dict[str, List[Dict[str, Any]]]:
        nodes = [
            {
                "id": node.id,
                "label": node.label,
                "color": node_color(node),
                "shape": node_shape(node.kind),
            }
            for node in snapshot.nodes
        ]
        edges = [
            {
                "id": edge.id,
                "from": edge.source,
                "to": edge.target,
                "label": edge.label,
                "dashes": edge.style is not None and edge.style.value != "solid",
            }
            for edge in snapshot.valid_edges()
        ]
        return {"nodes": nodes, "edges": edges}

    def layout_options(self, layout: LayoutName, viewport: Optional[Viewport]) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "layout": {
                "hierarchical": {
                    "enabled": layout is LayoutName.HIERARCHICAL,
                    "direction": "UD",
                }
            }
        }
        if viewport is not None:
            options["moveTo"] = {
                "scale": viewport.zoom,
                "position": {"x": viewport.center.x, "y": viewport.center.y},
            }
        return options


BACKENDS: Dict[BackendKind, Type[BackendAdapter]] = {
    BackendKind.CYTOSCAPE: CytoscapeAdapter,
    BackendKind.D3: D3Adapter,
    BackendKind.VIS: VisAdapter,
}


def create_backend(
    kind: Any, renderer: Optional[Renderer] = None, options: Optional[Dict[str, Any]] = None
) -> BackendAdapter:
    """
    Instantiate the adapter registered for ``kind``.

    Raises:
        ConfigurationError: If no adapter is registered for the kind
    """
    try:
        adapter_class = BACKENDS[BackendKind(kind)]
    except (ValueError, KeyError):
        raise ConfigurationError(f"No rendering backend registered for {kind!r}") from None
    return adapter_class(renderer=renderer, options=options)
