"""Tests for GraphML and DOT conversion and format dispatch."""

import pytest

from conftest import create_edge, create_node, create_snapshot
from projgraph.core.enums import EdgeKind, EdgeStyle, GraphFormat, NodeKind
from projgraph.core.exceptions import UnsupportedFormatError, ValidationError
from projgraph.serialization.dot import to_dot
from projgraph.serialization.graphml import from_graphml, read_graphml, to_graphml
from projgraph.serialization.registry import (
    GraphExport,
    export_graph,
    parse_descriptors,
    parse_graph,
    resolve_format,
)


def test_graphml_round_trip_keeps_structure():
    snapshot = create_snapshot([])
    snapshot.nodes = [create_node("d1", kind=NodeKind.DELIVERABLE, label="API"), create_node("t1")]
    snapshot.edges = [create_edge("d1", "t1", kind=EdgeKind.HIERARCHY, label="contains")]

    text = to_graphml(snapshot)
    assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    restored = from_graphml(text)

    assert [(n.id, n.label, n.kind) for n in restored.nodes] == [
        ("d1", "API", NodeKind.DELIVERABLE),
        ("t1", "T1", NodeKind.TASK),
    ]
    edge = restored.edges[0]
    assert (edge.id, edge.source, edge.target) == ("d1-t1", "d1", "t1")
    assert edge.kind is EdgeKind.HIERARCHY
    assert edge.label == "contains"


def test_graphml_without_namespace_or_keys():
    text = """<graphml>
      <graph edgedefault="directed">
        <node id="a"/>
        <node id="b"><data key="label">Bee</data></node>
        <edge source="a" target="b"/>
      </graph>
    </graphml>"""
    snapshot = from_graphml(text)
    assert [n.kind for n in snapshot.nodes] == [NodeKind.TASK, NodeKind.TASK]
    assert snapshot.nodes[1].label == "Bee"
    assert snapshot.edges[0].id == "edge-0"
    assert snapshot.edges[0].kind is EdgeKind.REFERENCE


def test_graphml_descriptors_hold_only_supplied_keys():
    text = """<graphml>
      <graph edgedefault="directed">
        <node id="a"/>
        <node id="b"><data key="label">Bee</data><data key="type">milestone</data></node>
        <edge source="a" target="b"/>
      </graph>
    </graphml>"""
    nodes, edges = read_graphml(text)
    assert nodes == [{"id": "a"}, {"id": "b", "label": "Bee", "type": "milestone"}]
    assert edges == [{"id": "edge-0", "source": "a", "target": "b"}]


def test_graphml_uses_key_attribute_names():
    text = """<graphml xmlns="http://graphml.graphdrawing.org/xmlns">
      <key id="d0" for="node" attr.name="label" attr.type="string"/>
      <key id="d1" for="node" attr.name="type" attr.type="string"/>
      <graph><node id="m"><data key="d0">Launch</data><data key="d1">milestone</data></node>
      </graph>
    </graphml>"""
    node = from_graphml(text).nodes[0]
    assert node.label == "Launch"
    assert node.kind is NodeKind.MILESTONE


@pytest.mark.parametrize(
    "text",
    [
        "<graphml><graph>",
        "<graphml/>",
        "<graphml><graph><node id=''/></graph></graphml>",
        "<graphml><graph><node id='a'><data key='type'>epic</data></node></graph></graphml>",
    ],
)
def test_graphml_invalid_input(text):
    with pytest.raises(ValidationError):
        from_graphml(text)


def test_dot_export():
    snapshot = create_snapshot(["a", "b"])
    snapshot.nodes[1].label = 'Say "hi"'
    snapshot.edges = [
        create_edge("a", "b", label="needs", style=EdgeStyle.DASHED),
        create_edge("b", "ghost"),
    ]
    text = to_dot(snapshot, rankdir="LR")

    assert text.startswith("digraph G {")
    assert "rankdir=LR;" in text
    assert '"b" [label="Say \\"hi\\"" fillcolor=' in text
    assert '"a" -> "b" [label="needs" style=dashed];' in text
    assert '"b" -> "ghost";' in text
    assert text.endswith("}")


def test_export_graph_dispatch(path_graph):
    result = export_graph(path_graph, "graphml")
    assert isinstance(result, GraphExport)
    assert result.format is GraphFormat.GRAPHML
    assert result.version == path_graph.metadata.version
    assert result.to_dict()["metadata"]["version"] == path_graph.metadata.version


def test_parse_graph_dispatch(path_graph):
    data = export_graph(path_graph, GraphFormat.JSON).data
    assert parse_graph(data, "json").node_ids() == ["a", "b", "c", "d"]


@pytest.mark.parametrize("fmt", ["gexf", "svg", "png", "pdf", "csv"])
def test_unimplemented_exports(path_graph, fmt):
    with pytest.raises(UnsupportedFormatError):
        export_graph(path_graph, fmt)


def test_dot_import_is_unsupported():
    with pytest.raises(UnsupportedFormatError):
        parse_graph("digraph G {}", "dot")


def test_unknown_format_name():
    with pytest.raises(UnsupportedFormatError):
        resolve_format("yaml")


def test_parse_descriptors_lines_up_with_snapshot():
    text = '{"nodes": [{"id": "a", "type": "task", "status": "review"}], "edges": []}'
    snapshot, (nodes, edges) = parse_descriptors(text, "json")
    assert snapshot.node_ids() == ["a"]
    assert nodes == [{"id": "a", "type": "task", "status": "review"}]
    assert edges == []
    with pytest.raises(UnsupportedFormatError):
        parse_descriptors("digraph G {}", "dot")
