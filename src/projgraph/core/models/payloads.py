"""
Kind-specific node payloads.

A node's payload is the domain object it represents. Payloads form a closed
union keyed by NodeKind: each kind has exactly one payload class, and kind
specific code can rely on the payload's fields without inspecting it at runtime.
Keys the payload class does not declare are kept in ``extra`` so documents
round-trip without loss.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Type, Union

from ..enums import NodeKind
from ..exceptions import ValidationError
from .base import validate_dataclass


@validate_dataclass
@dataclass
class RequirementPayload:
    """Requirements document (PRD) a project is derived from."""

    title: str = ""
    description: str = ""
    deliverable_ids: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)


@validate_dataclass
@dataclass
class DeliverablePayload:
    """A deliverable declared by a requirements document."""

    title: str = ""
    description: str = ""
    category: str = ""
    estimated_hours: float = 0.0
    dependencies: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)


@validate_dataclass
@dataclass
class TaskPayload:
    """A unit of work belonging to a deliverable."""

    title: str = ""
    description: str = ""
    assignee: Optional[str] = None
    estimated_hours: float = 0.0
    dependencies: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)


@validate_dataclass
@dataclass
class SubtaskPayload:
    """A checklist item belonging to a task."""

    title: str = ""
    completed: bool = False
    estimated_minutes: float = 0.0
    extra: Dict[str, Any] = field(default_factory=dict)


@validate_dataclass
@dataclass
class MilestonePayload:
    """A dated checkpoint."""

    title: str = ""
    due_date: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@validate_dataclass
@dataclass
class DependencyPayload:
    """An explicit dependency marker between pieces of work."""

    description: str = ""
    blocking: bool = True
    extra: Dict[str, Any] = field(default_factory=dict)


@validate_dataclass
@dataclass
class AgentPayload:
    """A person or automated agent work can be assigned to."""

    name: str = ""
    role: str = ""
    expertise: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


@validate_dataclass
@dataclass
class GenericPayload:
    """Payload of commit, branch, test and feature nodes."""

    extra: Dict[str, Any] = field(default_factory=dict)


NodePayload = Union[
    RequirementPayload,
    DeliverablePayload,
    TaskPayload,
    SubtaskPayload,
    MilestonePayload,
    DependencyPayload,
    AgentPayload,
    GenericPayload,
]

PAYLOAD_TYPES: Dict[NodeKind, Type] = {
    NodeKind.REQUIREMENT: RequirementPayload,
    NodeKind.DELIVERABLE: DeliverablePayload,
    NodeKind.TASK: TaskPayload,
    NodeKind.SUBTASK: SubtaskPayload,
    NodeKind.MILESTONE: MilestonePayload,
    NodeKind.DEPENDENCY: DependencyPayload,
    NodeKind.AGENT: AgentPayload,
    NodeKind.COMMIT: GenericPayload,
    NodeKind.BRANCH: GenericPayload,
    NodeKind.TEST: GenericPayload,
    NodeKind.FEATURE: GenericPayload,
}


def default_payload(kind: NodeKind) -> NodePayload:
    """Return an empty payload for a node kind."""
    return PAYLOAD_TYPES[kind]()


def payload_from_dict(kind: NodeKind, data: Dict[str, Any]) -> NodePayload:
    """
    Build the payload registered for ``kind`` from a mapping.

    Declared fields are passed to the payload constructor; everything else is
    collected in ``extra``.
    """
    if not isinstance(data, dict):
        raise ValidationError(f"payload for {kind.value} node must be an object")
    payload_type = PAYLOAD_TYPES[kind]
    declared = {f.name for f in fields(payload_type)} - {"extra"}
    known = {key: value for key, value in data.items() if key in declared}
    extra = dict(data.get("extra") or {})
    extra.update({key: value for key, value in data.items() if key not in declared | {"extra"}})
    return payload_type(**known, extra=extra)


def payload_to_dict(payload: NodePayload) -> Dict[str, Any]:
    """Flatten a payload to a mapping, merging ``extra`` back in."""
    data = {f.name: getattr(payload, f.name) for f in fields(payload) if f.name != "extra"}
    data = {key: list(value) if isinstance(value, list) else value for key, value in data.items()}
    for key, value in payload.extra.items():
        data.setdefault(key, value)
    return data


def check_payload(kind: NodeKind, payload: Any) -> None:
    """Ensure a payload is an instance of the class registered for ``kind``."""
    expected = PAYLOAD_TYPES[kind]
    if not isinstance(payload, expected):
        raise ValidationError(
            f"{kind.value} node requires {expected.__name__}, got {type(payload).__name__}"
        )
