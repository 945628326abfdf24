"""Tests for engine configuration."""

import pytest

from projgraph.config import DEFAULT_MAX_NODES, EngineConfig
from projgraph.core.enums import BackendKind, LayoutName
from projgraph.core.exceptions import ConfigurationError


def test_defaults():
    config = EngineConfig()
    assert config.backend is BackendKind.CYTOSCAPE
    assert config.layout is LayoutName.HIERARCHICAL
    assert config.history_limit == 50
    assert config.max_nodes == DEFAULT_MAX_NODES
    assert config.realtime


def test_from_dict_coerces_values():
    config = EngineConfig.from_dict({"backend": "d3", "layout": "force", "history_limit": 5})
    assert config.backend is BackendKind.D3
    assert config.layout is LayoutName.FORCE
    assert config.history_limit == 5


@pytest.mark.parametrize(
    "data",
    [
        {"backend": "canvas"},
        {"layout": "spiral"},
        {"history_limit": 0},
        {"max_nodes": -5},
        {"author": "  "},
        {"theme": "dark"},
    ],
)
def test_invalid_configuration(data):
    with pytest.raises(ConfigurationError):
        EngineConfig.from_dict(data)
