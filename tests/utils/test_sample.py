"""Tests for sample graph generation."""

import pytest

from projgraph.core.enums import NodeKind
from projgraph.core.exceptions import ValidationError
from projgraph.core.graph_operations import MetricsCalculator
from projgraph.utils.sample import generate_sample_graph


def test_sample_has_requested_size():
    snapshot = generate_sample_graph(25, seed=1)
    assert len(snapshot.nodes) == 25
    assert snapshot.nodes[0].kind is NodeKind.REQUIREMENT
    assert snapshot.dangling_edges() == []
    assert len({e.id for e in snapshot.edges}) == len(snapshot.edges)


def test_sample_is_deterministic_for_a_seed():
    first = generate_sample_graph(15, seed=42)
    second = generate_sample_graph(15, seed=42)
    assert [n.id for n in first.nodes] == [n.id for n in second.nodes]
    assert [(e.source, e.target) for e in first.edges] == [
        (e.source, e.target) for e in second.edges
    ]


@pytest.mark.parametrize("count", [1, 2, 3, 7, 40])
def test_sample_is_acyclic(count):
    snapshot = generate_sample_graph(count, seed=3)
    analytics = MetricsCalculator(snapshot).calculate_metrics()
    assert analytics.unordered_nodes == []
    assert len(analytics.critical_path) == count


def test_sample_rejects_empty_graph():
    with pytest.raises(ValidationError):
        generate_sample_graph(0)
