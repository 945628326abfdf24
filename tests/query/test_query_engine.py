"""Tests for path, neighbourhood, subgraph and pattern queries."""

import pytest

from conftest import create_edge, create_node, create_snapshot
from projgraph.core.enums import EdgeKind, NodeKind
from projgraph.core.exceptions import ValidationError
from projgraph.query.engine import PatternMatch, QueryEngine, criteria_from_raw


@pytest.fixture
def diamond():
    """a -> b -> d, a -> c -> d, plus an isolated node e."""
    return create_snapshot(
        ["a", "b", "c", "d", "e"], [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")]
    )


def test_find_path_is_directed(path_graph):
    engine = QueryEngine(path_graph)
    assert engine.find_path("a", "d") == ["a", "b", "c", "d"]
    assert engine.find_path("d", "a") == []


def test_find_path_picks_first_shortest(diamond):
    assert QueryEngine(diamond).find_path("a", "d") == ["a", "b", "d"]


def test_find_path_edge_cases(diamond):
    engine = QueryEngine(diamond)
    assert engine.find_path("a", "a") == ["a"]
    assert engine.find_path("a", "e") == []
    assert engine.find_path("a", "missing") == []
    assert engine.find_path("missing", "missing") == []


def test_find_path_ignores_dangling_edges():
    snapshot = create_snapshot(["a", "b"])
    snapshot.edges = [create_edge("a", "ghost"), create_edge("ghost", "b")]
    assert QueryEngine(snapshot).find_path("a", "b") == []


def test_neighbors_are_undirected_and_bounded(path_graph):
    engine = QueryEngine(path_graph)
    assert engine.get_neighbors("b") == ["a", "c"]
    assert engine.get_neighbors("a", depth=2) == ["b", "c"]
    assert engine.get_neighbors("a", depth=10) == ["b", "c", "d"]
    assert engine.get_neighbors("a", depth=0) == []
    assert engine.get_neighbors("missing") == []


@pytest.mark.parametrize("depth", [-1, 1.5, "2", True])
def test_neighbors_rejects_bad_depth(path_graph, depth):
    with pytest.raises(ValidationError):
        QueryEngine(path_graph).get_neighbors("a", depth=depth)


def test_neighbors_of_self_loop_exclude_origin():
    snapshot = create_snapshot(["a", "b"], [("a", "a"), ("a", "b")])
    assert QueryEngine(snapshot).get_neighbors("a") == ["b"]


def test_extract_subgraph(path_graph):
    subgraph = QueryEngine(path_graph).extract_subgraph(["c", "b", "missing"])
    assert [n.id for n in subgraph.nodes] == ["b", "c"]
    assert [e.id for e in subgraph.edges] == ["b-c"]
    assert subgraph.metadata.name == "Subgraph"
    assert subgraph.metadata.id != path_graph.metadata.id
    subgraph.nodes[0].label = "changed"
    assert path_graph.nodes[1].label == "B"


def test_extract_subgraph_rejects_string(path_graph):
    with pytest.raises(ValidationError):
        QueryEngine(path_graph).extract_subgraph("abc")
    with pytest.raises(ValidationError):
        QueryEngine(path_graph).extract_subgraph(None)
    with pytest.raises(ValidationError):
        QueryEngine(path_graph).extract_subgraph([("a",)])


def test_endpoints_must_be_strings(path_graph):
    engine = QueryEngine(path_graph)
    assert engine.find_path("a", "missing") == []
    with pytest.raises(ValidationError):
        engine.find_path(["a"], "c")
    with pytest.raises(ValidationError):
        engine.get_neighbors({"id": "a"})


def test_find_pattern():
    snapshot = create_snapshot([])
    snapshot.nodes = [
        create_node("d1", kind=NodeKind.DELIVERABLE),
        create_node("t1"),
        create_node("t2"),
    ]
    snapshot.edges = [
        create_edge("d1", "t1", kind=EdgeKind.HIERARCHY),
        create_edge("d1", "t2", kind=EdgeKind.HIERARCHY),
        create_edge("t2", "t1"),
    ]
    engine = QueryEngine(snapshot)

    matches = engine.find_pattern(
        {
            "source": [{"property": "type", "operator": "equals", "value": "deliverable"}],
            "target": [{"property": "id", "operator": "equals", "value": "t2"}],
        }
    )
    assert matches == [PatternMatch(source="d1", edge="d1-t2", target="t2")]

    dependencies = engine.find_pattern(
        {"edge": [{"property": "type", "operator": "equals", "value": "dependency"}]}
    )
    assert [m.to_dict() for m in dependencies] == [
        {"source": "t2", "edge": "t2-t1", "target": "t1"}
    ]
    assert len(engine.find_pattern({})) == 3


def test_find_pattern_rejects_unknown_parts(path_graph):
    with pytest.raises(ValidationError):
        QueryEngine(path_graph).find_pattern({"middle": []})
    with pytest.raises(ValidationError):
        QueryEngine(path_graph).find_pattern(["source"])


def test_criteria_from_raw_rejects_garbage():
    with pytest.raises(ValidationError):
        criteria_from_raw(["status"])
