"""Validation of STAC documents against their resolved JSON-Schemas.

This module provides the public API for validating documents:
- Validator: fetches, compiles and checks every resolved schema
- is_valid(): boolean verdict, stopping at the first failing schema
- validate_verbose(): ValidationReport with every violation
- JsonSchemaEngine: the jsonschema-backed compile/check capability
"""

from __future__ import annotations

from stacval.validation.results import (
    TEMPORAL_RANGE_CHECK,
    SchemaCheck,
    SchemaViolation,
    ValidationReport,
)
from stacval.validation.schema import CompiledSchema, JsonSchemaEngine, build_registry
from stacval.validation.validator import Validator, is_valid, validate_verbose

__all__ = [
    "TEMPORAL_RANGE_CHECK",
    "CompiledSchema",
    "JsonSchemaEngine",
    "SchemaCheck",
    "SchemaViolation",
    "ValidationReport",
    "Validator",
    "build_registry",
    "is_valid",
    "validate_verbose",
]
