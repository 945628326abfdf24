"""
Configuration for the project graph engine.

Module-level constants hold the defaults; :class:`EngineConfig` bundles the
settings one engine instance is constructed with. Configuration objects are
passed explicitly to constructors, there is no global settings object.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict

from .core.constants import DEFAULT_AUTHOR, DEFAULT_DOCUMENT_NAME, DEFAULT_HISTORY_LIMIT
from .core.enums import BackendKind, LayoutName
from .core.exceptions import ConfigurationError

# Document defaults
DEFAULT_LAYOUT = LayoutName.HIERARCHICAL

# Rendering defaults
DEFAULT_BACKEND = BackendKind.CYTOSCAPE
DEFAULT_MAX_NODES = 5000


@dataclass
class EngineConfig:
    """
    Settings for one GraphEngine instance.

    Attributes:
        backend (BackendKind): Default rendering backend to attach
        layout (LayoutName): Layout requested from backends
        history_limit (int): Number of version records kept
        author (str): Author stamped on version records
        document_name (str): Name of a newly created graph document
        realtime (bool): Whether data-update events are published after mutations
        max_nodes (int): Node count above which backends are not sent data
    """

    backend: BackendKind = DEFAULT_BACKEND
    layout: LayoutName = DEFAULT_LAYOUT
    history_limit: int = DEFAULT_HISTORY_LIMIT
    author: str = DEFAULT_AUTHOR
    document_name: str = DEFAULT_DOCUMENT_NAME
    realtime: bool = True
    max_nodes: int = DEFAULT_MAX_NODES

    def __post_init__(self):
        try:
            self.backend = BackendKind(self.backend)
            self.layout = LayoutName(self.layout)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        if not isinstance(self.history_limit, int) or self.history_limit < 1:
            raise ConfigurationError("history_limit must be a positive integer")
        if not isinstance(self.max_nodes, int) or self.max_nodes < 1:
            raise ConfigurationError("max_nodes must be a positive integer")
        if not self.author.strip():
            raise ConfigurationError("author must be a non-empty string")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create a configuration from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**data)
