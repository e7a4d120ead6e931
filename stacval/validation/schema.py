"""JSON-Schema capability backed by jsonschema and referencing.

compile() turns fetched bytes into a ready validator; check() runs it
against an instance. ``$ref``s to other documents are resolved through a
referencing.Registry whose retrieve hook is supplied by the caller, so
every schema byte, remote refs included, goes through one fetcher.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError as JsonSchemaMetaError
from jsonschema.exceptions import ValidationError
from jsonschema.protocols import Validator as JsonSchemaValidator
from jsonschema.validators import validator_for
from referencing import Registry, Resource
from referencing.exceptions import Unresolvable
from referencing.jsonschema import DRAFT7

from stacval.errors import SchemaCompilationError, SchemaFetchError, StacvalError
from stacval.validation.results import SchemaViolation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledSchema:
    """A schema ready to check instances.

    Attributes:
        uri: Location the schema was fetched from.
        validator: jsonschema validator bound to the schema and registry.
    """

    uri: str
    validator: JsonSchemaValidator


def load_schema_json(uri: str, raw: bytes) -> dict[str, Any]:
    """Decode fetched bytes into a schema object.

    Raises:
        SchemaCompilationError: If the bytes are not a JSON object.
    """
    try:
        contents = json.loads(raw)
    except (UnicodeDecodeError, ValueError) as e:
        raise SchemaCompilationError(uri, f"not valid JSON ({e})") from e
    if not isinstance(contents, dict):
        raise SchemaCompilationError(uri, f"expected a JSON object, got {type(contents).__name__}")
    return contents


def build_registry(retrieve: Callable[[str], bytes]) -> Registry:
    """Create a registry that loads unknown ``$ref`` targets with ``retrieve``.

    Args:
        retrieve: Returns the raw bytes of a schema URI. Exceptions it
            raises are recovered from the resolution error in check().
    """

    def _retrieve(uri: str) -> Resource:
        contents = load_schema_json(uri, retrieve(uri))
        return Resource.from_contents(contents, default_specification=DRAFT7)

    return Registry(retrieve=_retrieve)


def _json_pointer(parts: Iterable[Any]) -> str:
    return "".join("/" + str(part).replace("~", "~0").replace("/", "~1") for part in parts)


def _path_key(error: ValidationError) -> tuple[tuple[int, int, str], ...]:
    # Array indices sort numerically and before property names
    return tuple(
        (0, part, "") if isinstance(part, int) else (1, 0, str(part))
        for part in error.absolute_path
    )


def _unwrap_resolution_error(error: BaseException) -> StacvalError | None:
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        if isinstance(current, StacvalError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


class JsonSchemaEngine:
    """Compiles and checks JSON-Schemas.

    The draft is taken from each schema's ``$schema``; schemas without one
    are treated as Draft 7, the draft STAC schemas are written in.
    """

    def __init__(self, default_validator: type[JsonSchemaValidator] = Draft7Validator) -> None:
        self.default_validator = default_validator

    def compile(self, uri: str, raw: bytes, registry: Registry | None = None) -> CompiledSchema:
        """Build a validator for a fetched schema document.

        Args:
            uri: Location the bytes were fetched from; used as base URI for
                relative ``$ref``s when the schema declares no ``$id``.
            raw: Fetched bytes.
            registry: Registry for resolving references to other documents.

        Returns:
            CompiledSchema.

        Raises:
            SchemaCompilationError: If the bytes are not JSON or not a valid
                schema for its draft.
        """
        contents = load_schema_json(uri, raw)

        validator_class = validator_for(contents, default=self.default_validator)
        try:
            validator_class.check_schema(contents)
        except JsonSchemaMetaError as e:
            raise SchemaCompilationError(uri, e.message) from e

        resource = Resource.from_contents(contents, default_specification=DRAFT7)
        registry = (registry if registry is not None else Registry()).with_resource(uri, resource)
        # Base is the fetch location unless the schema declares an $id its
        # draft honours (Draft 7 ignores $id next to a root $ref).
        resolver = registry.resolver(base_uri=uri).in_subresource(resource)
        logger.debug("Compiled %s as %s", uri, validator_class.__name__)
        return CompiledSchema(
            uri=uri,
            validator=validator_class(contents, registry=registry, _resolver=resolver),
        )

    def check(
        self,
        compiled: CompiledSchema,
        instance: Any,
        *,
        first_only: bool = False,
    ) -> list[SchemaViolation]:
        """Check an instance against a compiled schema.

        Args:
            compiled: Schema from compile().
            instance: JSON-compatible instance.
            first_only: Stop after the first violation.

        Returns:
            Violations ordered by instance path (empty when valid).

        Raises:
            SchemaFetchError: If a referenced schema cannot be retrieved.
            SchemaCompilationError: If a referenced schema is not JSON.
            DeadlineExceededError: If retrieval ran past the deadline.
            ValidationCancelledError: If retrieval was cancelled.
        """
        errors = compiled.validator.iter_errors(instance)
        try:
            if first_only:
                first = next(errors, None)
                found = [] if first is None else [first]
            else:
                found = sorted(errors, key=_path_key)
        except Unresolvable as e:
            cause = _unwrap_resolution_error(e)
            if cause is not None:
                raise cause
            raise SchemaFetchError(getattr(e, "ref", compiled.uri), str(e)) from e

        return [
            SchemaViolation(
                schema_uri=compiled.uri,
                instance_path=_json_pointer(error.absolute_path),
                message=error.message,
                keyword=str(error.validator) if error.validator is not None else None,
                schema_path=_json_pointer(error.absolute_schema_path),
            )
            for error in found
        ]
