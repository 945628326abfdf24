"""Tests for graph component analysis."""

import pytest

from conftest import create_edge, create_snapshot
from projgraph.core.graph_operations import ComponentAnalysis


def test_component_analysis():
    """Test basic component analysis functionality."""
    snapshot = create_snapshot(["a", "b", "c", "d", "e"], [("a", "b"), ("c", "b"), ("d", "e")])
    analyzer = ComponentAnalysis(snapshot)

    assert analyzer.get_component_count() == 2
    assert analyzer.get_components() == [["a", "b", "c"], ["d", "e"]]
    assert analyzer.membership == {"a": 0, "b": 0, "c": 0, "d": 1, "e": 1}


def test_unconnected_nodes_are_singletons():
    snapshot = create_snapshot(["a", "b", "c"], [("a", "b"), ("c", "c")])
    analyzer = ComponentAnalysis(snapshot)
    assert analyzer.get_components() == [["a", "b"], ["c"]]


def test_dangling_edges_do_not_join_components():
    snapshot = create_snapshot(["a", "b"])
    snapshot.edges.append(create_edge("a", "ghost"))
    assert ComponentAnalysis(snapshot).get_component_count() == 2


def test_components_are_returned_as_copies():
    analyzer = ComponentAnalysis(create_snapshot(["a"]))
    analyzer.get_components()[0].append("x")
    assert analyzer.get_components() == [["a"]]


@pytest.mark.timeout(5)
def test_deep_chain_does_not_recurse():
    ids = [f"n{i}" for i in range(20000)]
    analysis = ComponentAnalysis(create_snapshot(ids, list(zip(ids, ids[1:]))))
    assert analysis.get_component_count() == 1
