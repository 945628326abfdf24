"""Tests for graph file access."""

import asyncio

import pytest

from projgraph.core.enums import GraphFormat
from projgraph.core.exceptions import StorageError, UnsupportedFormatError
from projgraph.infrastructure.files import format_from_path, read_text, write_text


@pytest.mark.parametrize(
    "path, expected",
    [
        ("plan.json", GraphFormat.JSON),
        ("/tmp/PLAN.GraphML", GraphFormat.GRAPHML),
        ("graph.gv", GraphFormat.DOT),
    ],
)
def test_format_from_path(path, expected):
    assert format_from_path(path) is expected


def test_format_from_path_unknown_extension():
    with pytest.raises(UnsupportedFormatError):
        format_from_path("plan.yaml")
    assert format_from_path("plan", default=GraphFormat.JSON) is GraphFormat.JSON


def test_write_then_read(tmp_path):
    target = tmp_path / "graph.json"
    asyncio.run(write_text(target, '{"nodes": []}'))
    assert asyncio.run(read_text(target)) == '{"nodes": []}'
    assert not (tmp_path / "graph.json.tmp").exists()


def test_read_missing_file(tmp_path):
    with pytest.raises(StorageError):
        asyncio.run(read_text(tmp_path / "missing.json"))


def test_write_into_missing_directory(tmp_path):
    with pytest.raises(StorageError):
        asyncio.run(write_text(tmp_path / "nope" / "graph.json", "{}"))
