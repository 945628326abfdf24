"""Tests for the JSON graph document."""

import json
from datetime import datetime

import pytest

from conftest import create_edge, create_node
from projgraph.core.enums import EdgeStyle, NodeKind, NodeStatus, Priority
from projgraph.core.exceptions import ValidationError
from projgraph.core.models import (
    DocumentMetadata,
    EdgeMetadata,
    GraphFilter,
    GraphSnapshot,
    GraphView,
    NodeMetadata,
    Position,
    TaskPayload,
)
from projgraph.serialization.document import (
    deserialize_datetime,
    document_from_dict,
    document_to_dict,
    from_json,
    merge_descriptor,
    node_to_dict,
    serialize_datetime,
    to_json,
)


@pytest.fixture
def rich_snapshot():
    created = datetime(2024, 1, 2, 3, 4, 5)
    task = create_node(
        "t1",
        label="Implement export",
        payload=TaskPayload(title="Export", assignee="alice", estimated_hours=4, extra={"k": 1}),
        position=Position(x=10, y=-5.5),
        status=NodeStatus.REVIEW,
        color="#ff0000",
        metadata=NodeMetadata(
            created_at=created, updated_at=created, priority=Priority.HIGH, tags=["io"]
        ),
    )
    milestone = create_node("m1", kind=NodeKind.MILESTONE, label="Beta")
    edge = create_edge(
        "t1",
        "m1",
        label="blocks",
        weight=2.5,
        style=EdgeStyle.DASHED,
        metadata=EdgeMetadata(created_at=created, updated_at=created, strength=0.75),
    )
    metadata = DocumentMetadata(
        id="doc-1",
        name="Plan",
        description="Release plan",
        created_at=created,
        updated_at=created,
        version="1.0.7",
        revision=7,
        filters=[
            GraphFilter(
                id="open",
                name="Open",
                criteria=[{"property_path": "status", "operator": "not-in", "value": ["complete"]}],
            )
        ],
        views=[GraphView(id="v1", name="Main", filters=["open"], zoom=1.5)],
    )
    return GraphSnapshot(nodes=[task, milestone], edges=[edge], metadata=metadata)


def test_json_round_trip_preserves_content(rich_snapshot):
    restored = from_json(to_json(rich_snapshot))

    assert restored.nodes == rich_snapshot.nodes
    assert restored.edges == rich_snapshot.edges
    assert restored.metadata.version == "1.0.7"
    assert restored.metadata.filters == rich_snapshot.metadata.filters
    assert restored.metadata.views == rich_snapshot.metadata.views


def test_document_form_uses_type_and_data_keys(rich_snapshot):
    data = document_to_dict(rich_snapshot)
    node = data["nodes"][0]
    assert node["type"] == "task"
    assert node["data"]["assignee"] == "alice"
    assert node["data"]["k"] == 1
    assert node["metadata"]["priority"] == "high"
    assert node["metadata"]["createdAt"] == "2024-01-02T03:04:05"
    assert data["edges"][0]["style"] == "dashed"
    assert data["metadata"]["filters"][0]["criteria"][0]["property"] == "status"
    assert "status" not in data["nodes"][1]


def test_include_metadata_false(rich_snapshot):
    data = json.loads(to_json(rich_snapshot, include_metadata=False))
    assert "metadata" not in data["nodes"][0]
    assert "metadata" not in data["edges"][0]
    assert data["metadata"]["name"] == "Plan"


def test_minimal_document_gets_defaults():
    snapshot = document_from_dict(
        {"nodes": [{"id": "r", "type": "prd"}], "edges": []}
    )
    assert snapshot.nodes[0].kind is NodeKind.REQUIREMENT
    assert snapshot.nodes[0].label == "r"
    assert snapshot.metadata.id.startswith("imported-")
    assert snapshot.metadata.name == "Imported Graph"


@pytest.mark.parametrize(
    "document",
    [
        {"nodes": []},
        {"nodes": [{"id": "", "type": "task"}], "edges": []},
        {"nodes": [{"id": "a", "type": "epic"}], "edges": []},
        {"nodes": [{"id": "a", "type": "task", "metadata": {"progress": 150}}], "edges": []},
        {"nodes": [], "edges": [{"id": "e", "source": "a", "type": "flow"}]},
        {"nodes": [], "edges": [], "metadata": {"filters": [{"id": "f"}]}},
        [],
    ],
)
def test_invalid_documents_are_rejected(document):
    with pytest.raises(ValidationError):
        document_from_dict(document)


def test_invalid_json_is_rejected():
    with pytest.raises(ValidationError):
        from_json("{not json")


def test_datetime_helpers():
    moment = datetime(2024, 5, 6, 7, 8, 9)
    assert deserialize_datetime(serialize_datetime(moment)) == moment
    assert deserialize_datetime(None) is None
    assert deserialize_datetime("2024-05-06T07:08:09Z").tzinfo is None
    with pytest.raises(ValidationError):
        deserialize_datetime("yesterday")


def test_node_to_dict_omits_empty_values():
    data = node_to_dict(create_node("a"), include_metadata=False)
    assert set(data) == {"id", "label", "type", "data"}


def test_merge_descriptor_combines_nested_mappings():
    current = node_to_dict(
        create_node("a", label="Alpha", payload={"title": "Docs", "estimated_hours": 2.0})
    )
    merged = merge_descriptor(
        current, {"id": "a", "status": "blocked", "data": {"title": "Guide"}, "metadata": {}}
    )
    assert merged["label"] == "Alpha"
    assert merged["status"] == "blocked"
    assert merged["data"]["title"] == "Guide"
    assert merged["data"]["estimated_hours"] == 2.0
    assert merged["metadata"] == current["metadata"]
