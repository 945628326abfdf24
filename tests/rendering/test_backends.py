"""Tests for the rendering backend adapters."""

import asyncio

import pytest

from conftest import create_edge, create_node, create_snapshot
from projgraph.core.enums import BackendKind, EdgeStyle, LayoutName, NodeKind, NodeStatus
from projgraph.core.exceptions import ConfigurationError, GraphOperationError
from projgraph.core.models import Position
from projgraph.rendering.backends import (
    CytoscapeAdapter,
    D3Adapter,
    VisAdapter,
    Viewport,
    create_backend,
)
from projgraph.rendering.styles import edge_color, node_color, node_shape, status_border


class RecordingRenderer:
    """Renderer remembering every command it receives."""

    def __init__(self):
        self.calls = []

    def __call__(self, command, payload):
        self.calls.append((command, payload))

    def last(self, command):
        return [payload for name, payload in self.calls if name == command][-1]


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def snapshot():
    graph = create_snapshot([])
    graph.nodes = [
        create_node("r1", kind=NodeKind.REQUIREMENT, status=NodeStatus.BLOCKED),
        create_node("t1", position=Position(x=5, y=6), color="#123456"),
    ]
    graph.edges = [
        create_edge("r1", "t1", style=EdgeStyle.DASHED, weight=3),
        create_edge("t1", "ghost"),
    ]
    return graph


def initialized(adapter):
    asyncio.run(adapter.initialize())
    return adapter


def test_styles():
    assert node_color(create_node("a", kind=NodeKind.TASK)) == "#f59e0b"
    assert node_color(create_node("a", color="#000000")) == "#000000"
    assert node_shape(NodeKind.MILESTONE) == "diamond"
    assert node_shape(NodeKind.COMMIT) == "circle"
    assert status_border(None) is None
    assert edge_color(create_edge("a", "b").kind) == "#ef4444"


def test_adapter_lifecycle(renderer):
    adapter = CytoscapeAdapter(renderer, options={"container": "#graph"})
    with pytest.raises(GraphOperationError):
        adapter.apply_data(create_snapshot(["a"]))

    initialized(adapter)
    assert renderer.calls[0] == ("initialize", {"backend": "cytoscape", "container": "#graph"})
    asyncio.run(adapter.initialize())
    assert len(renderer.calls) == 1

    asyncio.run(adapter.teardown())
    assert renderer.calls[-1] == ("teardown", {"backend": "cytoscape"})
    assert not adapter.initialized


def test_async_renderer_is_awaited():
    commands = []

    async def renderer(command, payload):
        commands.append(command)

    adapter = D3Adapter(renderer)
    asyncio.run(adapter.initialize())
    asyncio.run(adapter.teardown())
    assert commands == ["initialize", "teardown"]


def test_cytoscape_translation(renderer, snapshot):
    adapter = initialized(CytoscapeAdapter(renderer))
    adapter.apply_data(snapshot)
    elements = renderer.last("data")

    assert [e["data"]["id"] for e in elements] == ["r1", "t1", "r1-t1"]
    assert elements[0]["classes"] == "node-requirement status-blocked"
    assert elements[0]["data"]["borderColor"] == "#ef4444"
    assert elements[1]["position"] == {"x": 5, "y": 6}
    assert elements[1]["data"]["color"] == "#123456"
    assert elements[2]["data"]["label"] == "depends on"

    adapter.apply_layout(LayoutName.FORCE, Viewport(zoom=2.0, center=Position(x=1, y=2)))
    layout = renderer.last("layout")
    assert layout["layout"]["name"] == "cola"
    assert layout["zoom"] == 2.0
    assert layout["pan"] == {"x": 1, "y": 2}


def test_d3_translation(renderer, snapshot):
    adapter = initialized(D3Adapter(renderer))
    adapter.apply_data(snapshot)
    data = renderer.last("data")
    assert [n["id"] for n in data["nodes"]] == ["r1", "t1"]
    assert data["nodes"][1]["x"] == 5
    assert data["links"] == [
        {
            "id": "r1-t1",
            "source": "r1",
            "target": "t1",
            "type": "dependency",
            "label": "depends on",
            "weight": 3,
        }
    ]
    adapter.apply_layout("hierarchical")
    assert renderer.last("layout") == {"layout": "hierarchical", "simulation": "tree"}


def test_vis_translation(renderer, snapshot):
    adapter = initialized(VisAdapter(renderer))
    adapter.apply_data(snapshot)
    data = renderer.last("data")
    assert data["nodes"][0]["shape"] == "box"
    assert data["edges"][0]["from"] == "r1"
    assert data["edges"][0]["dashes"] is True
    assert len(data["edges"]) == 1

    adapter.apply_layout(LayoutName.GRID, Viewport(zoom=0.5))
    layout = renderer.last("layout")
    assert layout["layout"]["hierarchical"]["enabled"] is False
    assert layout["moveTo"]["scale"] == 0.5


def test_create_backend():
    assert isinstance(create_backend("vis"), VisAdapter)
    assert create_backend(BackendKind.D3).kind is BackendKind.D3
    with pytest.raises(ConfigurationError):
        create_backend("canvas")
