"""
Core domain models base module for the project graph.

This module provides the validation helpers shared by the node, edge, metadata
and document models.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ...utils.validation import RangeRule, RequiredRule, validate_dataclass
from ..exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def validate_identifier(name: str, value: Any) -> None:
    """Validate that an identifier is a non-empty string."""
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string, got {type(value).__name__}")
    RequiredRule(f"{name} must be a non-empty string").check(value)


def validate_date_order(created_at: datetime, updated_at: datetime) -> None:
    """Validate that updated_at is not before created_at."""
    if updated_at < created_at:
        raise ValidationError("updated_at cannot be before created_at")


def validate_range(
    name: str,
    value: Optional[float],
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> None:
    """Validate that an optional numeric value falls within a range."""
    RangeRule(
        min_value,
        max_value,
        f"{name} value {value!r} must be between {min_value} and {max_value}",
    ).check(value)


def coerce_enum(enum_class: Type[E], value: Any, name: str) -> E:
    """Convert a raw value to a member of ``enum_class``."""
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_class)
        raise ValidationError(f"{name} must be one of: {allowed}; got {value!r}") from None


def coerce_optional_enum(enum_class: Type[E], value: Any, name: str) -> Optional[E]:
    """Convert a raw value to an enum member, passing None through."""
    if value is None:
        return None
    return coerce_enum(enum_class, value, name)


__all__ = [
    "validate_dataclass",
    "validate_identifier",
    "validate_date_order",
    "validate_range",
    "coerce_enum",
    "coerce_optional_enum",
]
