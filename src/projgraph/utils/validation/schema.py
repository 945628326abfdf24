"""
Schema validation components for the project graph.

This module provides JSON schema based validation for raw documents before
they are turned into models: imported graph documents are checked against the
document schema, render events against the schema registered for their type.
"""

from typing import Any, Dict, Hashable, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError

from ...core.exceptions import ConfigurationError
from .base import ValidationResult


class SchemaValidator:
    """
    JSON Schema-based validator keyed by an arbitrary tag.

    Attributes:
        schemas (Dict[Hashable, Dict[str, Any]]): Registered schemas by key
    """

    def __init__(self, schemas: Optional[Dict[Hashable, Dict[str, Any]]] = None):
        self.schemas: Dict[Hashable, Dict[str, Any]] = {}
        self._validators: Dict[Hashable, Draft7Validator] = {}
        for key, schema in (schemas or {}).items():
            self.register_schema(key, schema)

    def register_schema(self, key: Hashable, schema: Dict[str, Any]) -> None:
        """
        Register a JSON schema under ``key``.

        Raises:
            ConfigurationError: If the schema itself is invalid
        """
        try:
            Draft7Validator.check_schema(schema)
        except SchemaError as e:
            raise ConfigurationError(f"Invalid schema for {key!r}: {e.message}") from e
        self.schemas[key] = schema
        self._validators[key] = Draft7Validator(schema)

    def has_schema(self, key: Hashable) -> bool:
        return key in self._validators

    def validate(self, key: Hashable, instance: Any) -> ValidationResult:
        """
        Validate ``instance`` against the schema registered for ``key``.

        Keys without a registered schema accept any instance. Every violation is
        reported, each prefixed with the JSON path where it occurred.
        """
        validator = self._validators.get(key)
        if validator is None:
            return ValidationResult(is_valid=True, errors=[])

        errors = []
        ordered = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
        for error in ordered:
            location = "/".join(str(part) for part in error.path) or "<root>"
            errors.append(f"{location}: {error.message}")
        return ValidationResult(is_valid=not errors, errors=errors)
