"""Tests for the graph store."""

import pytest

from conftest import create_edge, create_node
from projgraph.core.enums import NodeKind, NodeStatus
from projgraph.core.events import GraphEvent
from projgraph.core.exceptions import ValidationError
from projgraph.core.models import SubtaskPayload


def test_new_store_is_empty(store):
    snapshot = store.get_snapshot()
    assert snapshot.nodes == [] and snapshot.edges == []
    assert store.version == "1.0.0"
    assert store.revision == 0
    assert snapshot.metadata.name == "Test Graph"


def test_add_nodes_is_idempotent(store, listener):
    store.add_listener(listener)
    first = store.add_nodes([create_node("a"), create_node("b")])
    second = store.add_nodes([create_node("a", label="Other")])

    assert [n.id for n in first] == ["a", "b"]
    assert second == []
    assert store.node_count() == 2
    assert store.get_node("a").label == "A"
    # The second call inserted nothing, so no change was committed
    assert len(listener.events) == 1
    assert store.revision == 1


def test_duplicate_ids_within_one_call_keep_first(store):
    store.add_nodes([create_node("a", label="First"), create_node("a", label="Second")])
    assert store.get_node("a").label == "First"


def test_add_rejects_non_models_without_mutating(store):
    with pytest.raises(ValidationError):
        store.add_nodes([create_node("a"), {"id": "b"}])
    assert store.node_count() == 0
    assert store.revision == 0


def test_dangling_edges_are_stored(store):
    store.add_nodes([create_node("a")])
    store.add_edges([create_edge("a", "ghost")])
    assert store.edge_count() == 1
    assert store.get_snapshot().dangling_edges()[0].id == "a-ghost"


def test_remove_nodes_cascades_edges(populated_store, listener):
    populated_store.add_listener(listener)
    removed = populated_store.remove_nodes(["b", "missing"])

    assert removed == ["b"]
    assert not populated_store.has_node("b")
    assert [e.id for e in populated_store.get_snapshot().edges] == ["c-d"]
    event, change = listener.events[-1]
    assert event is GraphEvent.NODES_REMOVED
    assert change.changes.removed_edges == ("a-b", "b-c")


def test_remove_with_string_rejected(populated_store):
    with pytest.raises(ValidationError):
        populated_store.remove_nodes("a")


def test_remove_edges(populated_store):
    assert populated_store.remove_edges(["a-b", "a-b", "nope"]) == ["a-b"]
    assert populated_store.edge_count() == 2


def test_version_increases_on_every_mutation(store):
    versions = [store.version]
    store.add_nodes([create_node("a")])
    versions.append(store.version)
    store.update_node("a", {"label": "Renamed"})
    versions.append(store.version)
    store.remove_nodes(["a"])
    versions.append(store.version)

    assert versions == ["1.0.0", "1.0.1", "1.0.2", "1.0.3"]
    assert store.revision == 3


def test_snapshots_are_isolated(populated_store):
    snapshot = populated_store.get_snapshot()
    snapshot.nodes[0].label = "Changed"
    snapshot.nodes.clear()
    assert populated_store.get_node("a").label == "A"
    assert populated_store.node_count() == 4


def test_inserted_models_are_copied(store):
    node = create_node("a")
    store.add_nodes([node])
    node.label = "Mutated"
    assert store.get_node("a").label == "A"


def test_update_node_merges_fields(populated_store):
    updated = populated_store.update_node(
        "a",
        {
            "status": "in-progress",
            "metadata": {"priority": "high"},
            "payload": {"assignee": "bob"},
        },
    )
    assert updated.status is NodeStatus.IN_PROGRESS
    assert updated.metadata.priority.value == "high"
    assert updated.payload.assignee == "bob"
    assert updated.metadata.updated_at >= updated.metadata.created_at


def test_update_node_kind_converts_payload(populated_store):
    populated_store.update_node("a", {"payload": {"title": "Keep me"}})
    updated = populated_store.update_node("a", {"kind": NodeKind.SUBTASK})
    assert isinstance(updated.payload, SubtaskPayload)
    assert updated.payload.title == "Keep me"


def test_update_node_rejects_bad_updates(populated_store):
    with pytest.raises(ValidationError):
        populated_store.update_node("a", {"id": "z"})
    with pytest.raises(ValidationError):
        populated_store.update_node("a", {"colour": "red"})
    with pytest.raises(ValidationError):
        populated_store.update_node("a", {"status": "done"})
    assert populated_store.get_node("a").status is None


def test_update_absent_element_is_ignored(populated_store):
    revision = populated_store.revision
    assert populated_store.update_node("missing", {"label": "x"}) is None
    assert populated_store.update_edge("missing", {"label": "x"}) is None
    assert populated_store.revision == revision


def test_update_edge(populated_store):
    updated = populated_store.update_edge("a-b", {"label": "needs", "metadata": {"strength": 0.5}})
    assert updated.label == "needs"
    assert updated.metadata.strength == 0.5


def test_transaction_rolls_back(populated_store):
    with pytest.raises(RuntimeError):
        with populated_store.transaction():
            populated_store._nodes.clear()
            raise RuntimeError("boom")
    assert populated_store.node_count() == 4


def test_merge_updates_and_inserts(populated_store):
    change = populated_store.merge(
        [create_node("a", label="Merged"), create_node("e")], [create_edge("d", "e")]
    )
    assert change.event is GraphEvent.GRAPH_MERGED
    assert change.changes.added_nodes == ("e",)
    assert change.changes.modified_nodes == ("a",)
    assert populated_store.get_node("a").label == "Merged"
    assert populated_store.has_edge("d-e")


def test_replace_keeps_version_monotonic(populated_store, path_graph):
    revision = populated_store.revision
    change = populated_store.replace(path_graph)
    assert change.revision == revision + 1
    assert change.version == "1.0.3"
    assert populated_store.get_snapshot().metadata.name == path_graph.metadata.name
    assert set(change.changes.modified_nodes) == {"a", "b", "c", "d"}


def test_update_document_does_not_bump_version(populated_store):
    version = populated_store.version
    metadata = populated_store.update_document(name="Renamed")
    assert metadata.name == "Renamed"
    assert populated_store.version == version
    with pytest.raises(ValidationError):
        populated_store.update_document(nodes=[])


def test_reset(populated_store, listener):
    populated_store.add_listener(listener)
    populated_store.reset()
    assert populated_store.node_count() == 0
    assert populated_store.version == "1.0.0"
    assert populated_store.revision == 0
    assert listener.events[-1][0] is GraphEvent.GRAPH_RESET


def test_dirty_flag(store):
    assert not store.is_dirty
    store.add_nodes([create_node("a")])
    assert store.is_dirty
    store.mark_clean()
    assert not store.is_dirty


def test_incident_edges(populated_store):
    assert [e.id for e in populated_store.incident_edges("b")] == ["a-b", "b-c"]
