"""
Filter and view models stored in the graph document.

A filter is a named, activatable set of AND-combined property predicates; a view
bundles a layout, a viewport and references to filters by id. Evaluation lives
in :mod:`projgraph.query.filters`.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..enums import FilterOperator, FilterTarget, LayoutName
from ..exceptions import ValidationError
from .base import coerce_enum, validate_dataclass, validate_identifier
from .metadata import Position


@validate_dataclass
@dataclass
class FilterCriterion:
    """
    One predicate of a filter.

    Attributes:
        property_path (str): Dotted path into the element's document form,
            e.g. ``status`` or ``metadata.priority``
        operator (FilterOperator): Comparison to apply
        value (Any): Value compared against; a list for ``in``/``not-in``
    """

    property_path: str
    operator: FilterOperator
    value: Any = None

    def __post_init__(self):
        validate_identifier("criterion property", self.property_path)
        self.operator = coerce_enum(FilterOperator, self.operator, "operator")


@validate_dataclass
@dataclass
class GraphFilter:
    """
    Named filter over nodes, edges or both.

    Attributes:
        id (str): Identifier referenced by views
        name (str): Display name
        target (FilterTarget): Element collection the criteria apply to
        criteria (List[FilterCriterion]): Predicates, combined with logical AND
        active (bool): Inactive filters are skipped when applied
    """

    id: str
    name: str
    target: FilterTarget = FilterTarget.NODE
    criteria: List[FilterCriterion] = field(default_factory=list)
    active: bool = True

    def __post_init__(self):
        validate_identifier("filter id", self.id)
        self.target = coerce_enum(FilterTarget, self.target, "target")
        self.criteria = [
            FilterCriterion(**criterion) if isinstance(criterion, dict) else criterion
            for criterion in self.criteria
        ]

    @property
    def applies_to_nodes(self) -> bool:
        return self.target in (FilterTarget.NODE, FilterTarget.BOTH)

    @property
    def applies_to_edges(self) -> bool:
        return self.target in (FilterTarget.EDGE, FilterTarget.BOTH)


@validate_dataclass
@dataclass
class GraphView:
    """
    Saved combination of layout, viewport and filters.

    Attributes:
        id (str): Identifier
        name (str): Display name
        layout (LayoutName): Layout algorithm to run
        filters (List[str]): Ids of document filters to apply
        zoom (float): Viewport zoom factor
        center (Position): Viewport centre
        description (Optional[str]): Free-text description
    """

    id: str
    name: str
    layout: LayoutName = LayoutName.HIERARCHICAL
    filters: List[str] = field(default_factory=list)
    zoom: float = 1.0
    center: Position = field(default_factory=Position)
    description: Optional[str] = None

    def __post_init__(self):
        validate_identifier("view id", self.id)
        self.layout = coerce_enum(LayoutName, self.layout, "layout")
        self.center = Position.coerce(self.center)
        if self.zoom <= 0:
            raise ValidationError("zoom must be positive")
