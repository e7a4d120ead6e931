"""Open Record support: explicit field capture for lossless round-trips.

Every typed STAC struct keeps an ``extra_fields`` dict holding all keys it
does not model. Decoding is an explicit three-step process:

1. The source object is copied into a working map.
2. Each declared field is taken out of the map by its wire name and
   type-checked.
3. Whatever is left over becomes the struct's Open Record.

Encoding is the inverse merge: declared fields first, then every captured
key that was not already emitted.

Field policies:
    required: Missing or wrongly typed raises DecodeError.
    optional: Absent yields None. An explicit null or a value of the wrong
        JSON type is *not* consumed, so it stays verbatim in the Open Record.
        The JSON-Schema check reports it later instead of the decoder.
    literal: Must equal a fixed value (the "type" discriminator).

Example:
    reader = FieldReader(data, "Link")
    href = reader.required("href", str)
    title = reader.optional("title", str)
    link = Link(href=href, title=title, extra_fields=reader.remainder())
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from stacval.errors import DecodeError

T = TypeVar("T")

# JSON type predicates keyed by a short name used in error messages
Check = Callable[[Any], bool]


def is_string(value: Any) -> bool:
    """True for JSON strings."""
    return isinstance(value, str)


def is_number(value: Any) -> bool:
    """True for JSON numbers (bool is not a number on the wire)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    """True for JSON integers."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_object(value: Any) -> bool:
    """True for JSON objects."""
    return isinstance(value, Mapping)


def is_array(value: Any) -> bool:
    """True for JSON arrays."""
    return isinstance(value, list)


def array_of(check: Check) -> Check:
    """Build a predicate for a JSON array whose every element passes ``check``."""

    def _check(value: Any) -> bool:
        return isinstance(value, list) and all(check(v) for v in value)

    return _check


_TYPE_NAMES: dict[Check, str] = {
    is_string: "string",
    is_number: "number",
    is_integer: "integer",
    is_object: "object",
    is_array: "array",
}


def _describe(check: Check) -> str:
    return _TYPE_NAMES.get(check, "value of the expected shape")


class FieldReader:
    """Consumes declared fields from a JSON object, leaving the rest.

    Several readers may not share one source, but several fragment
    types may share one reader (e.g. Item properties are read by the
    common metadata and every extension property group in turn).
    """

    def __init__(self, data: Any, owner: str) -> None:
        if not isinstance(data, Mapping):
            raise DecodeError(owner, f"expected a JSON object, got {type(data).__name__}")
        self.owner = owner
        self._remaining: dict[str, Any] = dict(data)

    def has(self, name: str) -> bool:
        """Whether ``name`` is still unconsumed in the source."""
        return name in self._remaining

    def required(self, name: str, check: Check) -> Any:
        """Take a required, non-null field."""
        if name not in self._remaining:
            raise DecodeError(self.owner, "required field is missing", name)
        value = self._remaining[name]
        if not check(value):
            raise DecodeError(
                self.owner,
                f"expected {_describe(check)}, got {_json_type(value)}",
                name,
            )
        del self._remaining[name]
        return value

    def required_nullable(self, name: str, check: Check) -> Any:
        """Take a required field whose value may be JSON null."""
        if name in self._remaining and self._remaining[name] is None:
            del self._remaining[name]
            return None
        return self.required(name, check)

    def literal(self, name: str, expected: str) -> str:
        """Take a required string field that must equal ``expected``."""
        value = self.required(name, is_string)
        if value != expected:
            raise DecodeError(self.owner, f"expected '{expected}', got '{value}'", name)
        return value

    def optional(self, name: str, check: Check) -> Any | None:
        """Take an optional field if present, non-null and well typed.

        Anything else is left in place for the Open Record.
        """
        value = self._remaining.get(name)
        if value is None or not check(value):
            return None
        del self._remaining[name]
        return value

    def optional_as(self, name: str, check: Check, convert: Callable[[Any], T]) -> T | None:
        """Take an optional field and convert it, e.g. into a nested struct."""
        value = self.optional(name, check)
        if value is None:
            return None
        return convert(value)

    def remainder(self) -> dict[str, Any]:
        """Return the Open Record: every key not consumed so far."""
        return dict(self._remaining)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


def put_optional(result: dict[str, Any], name: str, value: Any | None) -> None:
    """Emit ``value`` under ``name`` unless it is the absent sentinel (None)."""
    if value is not None:
        result[name] = value


def merge_extra(result: dict[str, Any], extra_fields: Mapping[str, Any]) -> dict[str, Any]:
    """Re-emit captured Open Record keys after the declared fields."""
    for key, value in extra_fields.items():
        if key not in result:
            result[key] = value
    return result
