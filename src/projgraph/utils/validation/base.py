"""
Base validation components for the project graph models.

This module provides the small rule hierarchy used by the data model and the
`validate_dataclass` decorator that adds runtime type checking to the model
dataclasses. Failures surface as ValidationError so that ingest code can reject
malformed descriptors before anything reaches the graph store.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Optional,
    Type,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from ...core.exceptions import ValidationError


@dataclass
class ValidationResult:
    """
    Outcome of checking a value against a set of rules.

    Attributes:
        is_valid (bool): Whether every rule passed
        errors (List[str]): Messages of the rules that failed
    """

    is_valid: bool
    errors: List[str]

    def raise_for_errors(self) -> None:
        """Raise ValidationError carrying every collected message."""
        if not self.is_valid:
            raise ValidationError("; ".join(self.errors))


class ValidationRule:
    """
    Base class for all validation rules.

    Attributes:
        error_message (str): Message to report when validation fails
    """

    def __init__(self, error_message: str):
        self.error_message = error_message

    def validate(self, value: Any) -> bool:
        """
        Validate a value against the rule.

        Raises:
            NotImplementedError: If the subclass doesn't implement this method
        """
        raise NotImplementedError("Validation rules must implement validate()")

    def check(self, value: Any) -> None:
        """Validate a value and raise ValidationError on failure."""
        if not self.validate(value):
            raise ValidationError(self.error_message)


class RequiredRule(ValidationRule):
    """
    Rule for validating required fields.

    A value passes when it is not None and, for strings, not blank.
    """

    def validate(self, value: Any) -> bool:
        if isinstance(value, str):
            return bool(value.strip())
        return value is not None


class RangeRule(ValidationRule):
    """
    Rule for validating numeric ranges.

    Either bound can be None to create an open-ended range. None values pass,
    optional metadata fields use this rule.
    """

    def __init__(
        self,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        error_message: str = "",
    ):
        super().__init__(error_message)
        self.min_value = min_value
        self.max_value = max_value

    def validate(self, value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if self.min_value is not None and value < self.min_value:
            return False
        if self.max_value is not None and value > self.max_value:
            return False
        return True


class DataclassRule(ValidationRule):
    """
    Rule for validating dataclass fields against their type hints.

    Nested dataclasses are expected to validate themselves on construction, so
    this rule only checks the declared type of each field value.
    """

    _hint_cache: Dict[type, Dict[str, Any]] = {}

    def __init__(self, dataclass_type: Type, error_message: str = ""):
        super().__init__(error_message or f"Invalid field types in {dataclass_type.__name__}")
        self.dataclass_type = dataclass_type
        if dataclass_type not in self._hint_cache:
            self._hint_cache[dataclass_type] = get_type_hints(dataclass_type)
        self.type_hints = self._hint_cache[dataclass_type]

    def _validate_type(self, value: Any, expected_type: Any) -> bool:
        """Validate a value against its expected type."""
        if expected_type is Any:
            return True

        origin = get_origin(expected_type)

        if origin is Union:
            return any(self._validate_type(value, arg) for arg in get_args(expected_type))

        if expected_type is type(None):
            return value is None

        if value is None:
            return False

        if expected_type is float:
            return isinstance(value, (int, float)) and not isinstance(value, bool)

        if expected_type is datetime:
            return isinstance(value, datetime)

        if isinstance(expected_type, type) and issubclass(expected_type, Enum):
            return isinstance(value, expected_type)

        if origin is list:
            if not isinstance(value, list):
                return False
            args = get_args(expected_type)
            if not args:
                return True
            return all(self._validate_type(item, args[0]) for item in value)

        if origin is dict:
            if not isinstance(value, dict):
                return False
            args = get_args(expected_type)
            if len(args) != 2:
                return True
            key_type, val_type = args
            return all(
                self._validate_type(k, key_type) and self._validate_type(v, val_type)
                for k, v in value.items()
            )

        if origin is tuple:
            if not isinstance(value, tuple):
                return False
            args = get_args(expected_type)
            if len(args) == 2 and args[1] is Ellipsis:
                return all(self._validate_type(item, args[0]) for item in value)
            if args and len(args) != len(value):
                return False
            return all(self._validate_type(val, typ) for val, typ in zip(value, args))

        if origin is not None:
            try:
                return isinstance(value, origin)
            except TypeError:
                return True

        try:
            return isinstance(value, expected_type)
        except TypeError:
            return True

    def invalid_fields(self, value: Any) -> List[str]:
        """Return the names of fields whose values do not match their hints."""
        return [
            field_name
            for field_name, field_type in self.type_hints.items()
            if not self._validate_type(getattr(value, field_name), field_type)
        ]

    def validate(self, value: Any) -> bool:
        if not isinstance(value, self.dataclass_type):
            return False
        return not self.invalid_fields(value)


def validate_dataclass(cls: Type[Any]) -> Type[Any]:
    """
    Decorator that adds runtime type checking to dataclass fields.

    The class's own ``__post_init__`` runs first (it may normalise values, for
    example coerce strings to enums), then every field is checked against its
    type hint.

    Example:
        >>> @validate_dataclass
        ... @dataclass
        ... class Example:
        ...     name: str
        ...     count: int
    """
    original_post_init = getattr(cls, "__post_init__", None)

    def validated_post_init(self):
        if original_post_init:
            original_post_init(self)

        bad_fields = DataclassRule(cls).invalid_fields(self)
        if bad_fields:
            raise ValidationError(
                f"Invalid field types in {cls.__name__}: {', '.join(bad_fields)}"
            )

    cls.__post_init__ = validated_post_init
    return cls
