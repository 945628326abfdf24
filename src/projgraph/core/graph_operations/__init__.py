"""Structural analytics over graph snapshots."""

from .components import ComponentAnalysis
from .metrics import DegreeEntry, GraphAnalytics, MetricsCalculator
from .ordering import critical_path, topological_order

__all__ = [
    "ComponentAnalysis",
    "DegreeEntry",
    "GraphAnalytics",
    "MetricsCalculator",
    "critical_path",
    "topological_order",
]
