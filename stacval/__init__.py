"""stacval - Decode, round-trip and validate STAC documents."""

from stacval.errors import (
    DecodeError,
    SchemaCompilationError,
    SchemaFetchError,
    StacvalError,
    VersionParseError,
)
from stacval.io import from_json, read_document
from stacval.models import Catalog, Collection, Item, ItemCollection, StacObject, StacType
from stacval.schema import resolve, resolve_schema_locations
from stacval.validation import ValidationReport, Validator, is_valid, validate_verbose

__all__ = [
    "Catalog",
    "Collection",
    "DecodeError",
    "Item",
    "ItemCollection",
    "SchemaCompilationError",
    "SchemaFetchError",
    "StacObject",
    "StacType",
    "StacvalError",
    "ValidationReport",
    "Validator",
    "VersionParseError",
    "from_json",
    "is_valid",
    "read_document",
    "resolve",
    "resolve_schema_locations",
    "validate_verbose",
]
