"""Query engine: paths, neighbourhoods, subgraphs, patterns and filters."""

from .engine import PatternMatch, QueryEngine, criteria_from_raw
from .filters import UNDEFINED, apply_filters, matches_criteria, matches_criterion, resolve_property
from .requests import GraphQuery, execute_query

__all__ = [
    "UNDEFINED",
    "GraphQuery",
    "PatternMatch",
    "QueryEngine",
    "apply_filters",
    "criteria_from_raw",
    "execute_query",
    "matches_criteria",
    "matches_criterion",
    "resolve_property",
]
