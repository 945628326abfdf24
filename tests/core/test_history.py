"""Tests for version history recording."""

import pytest

from conftest import create_node
from projgraph.core.exceptions import ValidationError, VersionNotFoundError
from projgraph.core.history import HistoryState, VersionHistoryManager, increment_version
from projgraph.core.store import GraphStore


@pytest.fixture
def tracked_store():
    store = GraphStore()
    history = VersionHistoryManager(limit=3, author="tester")
    store.add_listener(history)
    return store, history


def test_increment_version():
    assert increment_version("1.0.0") == "1.0.1"
    assert increment_version("2.3.9") == "2.3.10"
    with pytest.raises(ValidationError):
        increment_version("1.0")
    with pytest.raises(ValidationError):
        increment_version("1.a.0")


def test_one_record_per_mutation(tracked_store):
    store, history = tracked_store
    store.add_nodes([create_node("a")])
    store.update_node("a", {"label": "Renamed"})

    records = history.get_version_history()
    assert [r.version for r in records] == ["1.0.1", "1.0.2"]
    assert records[1].parent_version == "1.0.1"
    assert records[0].author == "tester"
    assert records[0].changes.added_nodes == ("a",)
    assert records[1].snapshot.get_node("a").label == "Renamed"
    assert history.state is HistoryState.IDLE


class RelabellingListener:
    def on_state_change(self, event, change):
        for node in change.snapshot.nodes:
            node.label = "tampered"


def test_records_are_isolated_from_other_listeners(tracked_store):
    store, history = tracked_store
    store.add_listener(RelabellingListener())
    store.add_nodes([create_node("a")])
    assert history.get_version_history()[0].snapshot.get_node("a").label == "A"


def test_empty_mutation_is_not_recorded(tracked_store):
    store, history = tracked_store
    store.remove_nodes(["missing"])
    assert len(history) == 0


def test_history_is_bounded(tracked_store):
    store, history = tracked_store
    for index in range(5):
        store.add_nodes([create_node(f"n{index}")])
    versions = [r.version for r in history.get_version_history()]
    assert versions == ["1.0.3", "1.0.4", "1.0.5"]


def test_default_limit_is_fifty():
    store = GraphStore()
    history = VersionHistoryManager()
    store.add_listener(history)
    for index in range(55):
        store.add_nodes([create_node(f"n{index}")])
    assert len(history) == 50
    assert history.get_version_history()[0].version == "1.0.6"


def test_get_record(tracked_store):
    store, history = tracked_store
    store.add_nodes([create_node("a")])
    record = history.latest()
    assert history.get_record(record.id) is record
    assert history.find_by_version("1.0.1") is record
    with pytest.raises(VersionNotFoundError):
        history.get_record("version-missing")


def test_reset_clears_history(tracked_store):
    store, history = tracked_store
    store.add_nodes([create_node("a")])
    store.reset()
    assert history.get_version_history() == []


def test_record_to_dict(tracked_store):
    store, history = tracked_store
    store.add_nodes([create_node("a")])
    data = history.latest().to_dict()
    assert data["version"] == "1.0.1"
    assert data["parentVersion"] == "1.0.0"
    assert data["changes"]["added"]["nodes"] == ["a"]
