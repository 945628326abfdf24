"""
Project graph data and analytics engine.

Holds a versioned graph of project planning elements, answers analytics and
structural queries about it, converts it between interchange formats and
drives pluggable rendering backends through a validated event channel.
"""

from .core import GraphStore, VersionHistoryManager
from .config import EngineConfig
from .engine import GraphEngine
from .utils.sample import generate_sample_graph

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "GraphEngine",
    "GraphStore",
    "VersionHistoryManager",
    "generate_sample_graph",
    "__version__",
]
