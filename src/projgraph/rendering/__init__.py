"""Rendering boundary: backend capability interface, adapters and styles."""

from .backends import (
    BACKENDS,
    BackendAdapter,
    CytoscapeAdapter,
    D3Adapter,
    RenderBackend,
    Renderer,
    VisAdapter,
    Viewport,
    create_backend,
    null_renderer,
)
from .styles import NODE_COLORS, NODE_SHAPES, node_color, node_shape

__all__ = [
    "BACKENDS",
    "BackendAdapter",
    "CytoscapeAdapter",
    "D3Adapter",
    "NODE_COLORS",
    "NODE_SHAPES",
    "RenderBackend",
    "Renderer",
    "Viewport",
    "VisAdapter",
    "create_backend",
    "node_color",
    "node_shape",
    "null_renderer",
]
