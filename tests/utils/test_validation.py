"""Tests for validation rules and schema validation."""

from dataclasses import dataclass
from typing import List, Optional

import pytest

from projgraph.core.exceptions import ConfigurationError, ValidationError
from projgraph.utils.validation import (
    RangeRule,
    RequiredRule,
    SchemaValidator,
    ValidationResult,
    validate_dataclass,
)


@validate_dataclass
@dataclass
class Sample:
    name: str
    count: int = 0
    ratio: float = 0.0
    tags: List[str] = None
    note: Optional[str] = None

    def __post_init__(self):
        if self.tags is None:
            self.tags = []


def test_validate_dataclass_accepts_valid_fields():
    sample = Sample(name="x", count=2, ratio=1, tags=["a"])
    assert sample.ratio == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": 1},
        {"name": "x", "count": "2"},
        {"name": "x", "ratio": True},
        {"name": "x", "tags": ["a", 1]},
        {"name": "x", "note": 5},
    ],
)
def test_validate_dataclass_rejects_wrong_types(kwargs):
    with pytest.raises(ValidationError):
        Sample(**kwargs)


def test_rules():
    assert not RequiredRule("required").validate("  ")
    assert RequiredRule("required").validate(0)
    rule = RangeRule(0, 1, "out of range")
    assert rule.validate(None)
    assert rule.validate(0.5)
    assert not rule.validate(2)
    assert not rule.validate(True)
    with pytest.raises(ValidationError):
        rule.check(-1)


def test_validation_result_raise_for_errors():
    ValidationResult(is_valid=True, errors=[]).raise_for_errors()
    with pytest.raises(ValidationError) as exc_info:
        ValidationResult(is_valid=False, errors=["a", "b"]).raise_for_errors()
    assert "a; b" in str(exc_info.value)


def test_schema_validator_reports_every_error():
    validator = SchemaValidator(
        {
            "item": {
                "type": "object",
                "required": ["id"],
                "properties": {"id": {"type": "string"}, "size": {"type": "integer"}},
            }
        }
    )
    result = validator.validate("item", {"size": "big"})
    assert not result.is_valid
    assert len(result.errors) == 2
    assert any(error.startswith("size:") for error in result.errors)
    assert validator.validate("item", {"id": "a"}).is_valid


def test_schema_validator_unknown_key_accepts_anything():
    validator = SchemaValidator()
    assert not validator.has_schema("missing")
    assert validator.validate("missing", 42).is_valid


def test_invalid_schema_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        SchemaValidator().register_schema("bad", {"type": "not-a-type"})
