"""
Tagged query requests.

A :class:`GraphQuery` names one query type and its parameters. Dispatch is a
lookup in a handler table; unsupported types and missing parameters raise
InvalidRequestError before any work is done.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..core.enums import QueryType
from ..core.exceptions import InvalidRequestError
from ..core.graph_operations import GraphAnalytics, MetricsCalculator
from ..core.models import GraphFilter, GraphSnapshot
from ..serialization.document import filter_from_dict
from .engine import QueryEngine
from .filters import apply_filters

AnalyticsProvider = Callable[[GraphSnapshot], GraphAnalytics]


@dataclass
class GraphQuery:
    """
    One query request.

    Attributes:
        type (QueryType): Which query to run
        parameters (Dict[str, Any]): Query arguments; camelCase and snake_case
            keys are both accepted (``nodeId``/``node_id``)
        filters (List[GraphFilter]): Filters applied to the snapshot first
        limit (Optional[int]): Maximum number of items of a list result
        offset (int): Items of a list result to skip
    """

    type: QueryType
    parameters: Dict[str, Any] = field(default_factory=dict)
    filters: List[GraphFilter] = field(default_factory=list)
    limit: Optional[int] = None
    offset: int = 0

    def __post_init__(self):
        try:
            self.type = QueryType(self.type)
        except ValueError:
            raise InvalidRequestError(f"Unsupported query type: {self.type!r}") from None
        if not isinstance(self.parameters, Mapping):
            raise InvalidRequestError("query parameters must be a mapping")
        self.parameters = dict(self.parameters)
        try:
            self.filters = [
                filter_from_dict(f) if isinstance(f, Mapping) else f for f in self.filters
            ]
        except (KeyError, TypeError) as e:
            raise InvalidRequestError(f"malformed query filter: {e}") from e
        if self.limit is not None and (not isinstance(self.limit, int) or self.limit < 0):
            raise InvalidRequestError("limit must be a non-negative integer")
        if not isinstance(self.offset, int) or self.offset < 0:
            raise InvalidRequestError("offset must be a non-negative integer")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GraphQuery":
        if not isinstance(data, Mapping) or "type" not in data:
            raise InvalidRequestError("query must be an object with a 'type'")
        return cls(
            type=data["type"],
            parameters=data.get("parameters") or {},
            filters=list(data.get("filters") or []),
            limit=data.get("limit"),
            offset=data.get("offset", 0),
        )

    def param(self, *names: str, default: Any = None, required: bool = True) -> Any:
        """Return the first parameter present under any of ``names``."""
        for name in names:
            if name in self.parameters:
                return self.parameters[name]
        if required:
            raise InvalidRequestError(
                f"{self.type.value} query requires parameter '{names[0]}'"
            )
        return default


def _page(items: List[Any], query: GraphQuery) -> List[Any]:
    end = None if query.limit is None else query.offset + query.limit
    return items[query.offset : end]


def _path(engine: QueryEngine, query: GraphQuery, _analytics: AnalyticsProvider) -> Any:
    return engine.find_path(query.param("source"), query.param("target"))


def _neighbors(engine: QueryEngine, query: GraphQuery, _analytics: AnalyticsProvider) -> Any:
    node_id = query.param("nodeId", "node_id")
    depth = query.param("depth", default=1, required=False)
    return _page(engine.get_neighbors(node_id, depth), query)


def _subgraph(engine: QueryEngine, query: GraphQuery, _analytics: AnalyticsProvider) -> Any:
    return engine.extract_subgraph(query.param("nodeIds", "node_ids"))


def _pattern(engine: QueryEngine, query: GraphQuery, _analytics: AnalyticsProvider) -> Any:
    return _page(engine.find_pattern(query.param("pattern")), query)


def _analytics_query(
    engine: QueryEngine, query: GraphQuery, analytics: AnalyticsProvider
) -> Any:
    return analytics(engine.snapshot)


QUERY_HANDLERS = {
    QueryType.PATH: _path,
    QueryType.NEIGHBORS: _neighbors,
    QueryType.SUBGRAPH: _subgraph,
    QueryType.PATTERN: _pattern,
    QueryType.ANALYTICS: _analytics_query,
}


def _calculate(snapshot: GraphSnapshot) -> GraphAnalytics:
    return MetricsCalculator(snapshot).calculate_metrics()


def execute_query(
    query: Any,
    snapshot: GraphSnapshot,
    analytics: Optional[AnalyticsProvider] = None,
) -> Any:
    """
    Run a query against a snapshot.

    Args:
        query: A GraphQuery or its ``{"type", "parameters", ...}`` mapping
        snapshot: Graph to query
        analytics: Callable computing analytics for a snapshot; the engine
            passes its cached calculation here

    Raises:
        InvalidRequestError: For unsupported types or missing parameters
        ValidationError: For malformed parameter values
    """
    if not isinstance(query, GraphQuery):
        query = GraphQuery.from_dict(query)
    if query.filters:
        snapshot = apply_filters(snapshot, query.filters)
        analytics = _calculate
    handler = QUERY_HANDLERS[query.type]
    return handler(QueryEngine(snapshot), query, analytics or _calculate)
