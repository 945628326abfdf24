"""
Validation package for the project graph engine.

This package provides validation rules and runtime dataclass type checking used
by the data model.
"""

from .base import (
    DataclassRule,
    RangeRule,
    RequiredRule,
    ValidationResult,
    ValidationRule,
    validate_dataclass,
)
from .schema import SchemaValidator

__all__ = [
    "ValidationResult",
    "ValidationRule",
    "RequiredRule",
    "RangeRule",
    "DataclassRule",
    "validate_dataclass",
    "SchemaValidator",
]
