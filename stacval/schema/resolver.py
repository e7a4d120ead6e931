"""Schema Resolver: the ordered list of schema locations for a STAC document.

Resolution is pure. It reads the declared version, type and extensions of
the document, consults the Version Policy and performs no I/O. The same
document always resolves to the same list, in the same order, with
duplicate extension entries preserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from stacval.models.stac_object import StacDocument, StacObject, StacType
from stacval.schema.policy import EXTENSION_SCHEMAS, ExtensionAddressing, policy_for

logger = logging.getLogger(__name__)

CORE_SCHEMA_PATHS: dict[StacType, str] = {
    StacType.CATALOG: "catalog-spec/json-schema/catalog.json",
    StacType.COLLECTION: "collection-spec/json-schema/collection.json",
    StacType.ITEM: "item-spec/json-schema/item.json",
}


class SkipReason(Enum):
    """Why a declared extension contributed no schema location."""

    UNSUPPORTED = "unsupported"
    """The identifier is not in the identifier table."""

    NOT_APPLICABLE = "not_applicable"
    """The identifier's schema does not validate this document type."""


@dataclass(frozen=True)
class SkippedExtension:
    """A declared extension that was dropped from the schema set.

    Attributes:
        extension: The declared entry, as written.
        reason: Why it was dropped.
    """

    extension: str
    reason: SkipReason

    def to_dict(self) -> dict[str, str]:
        """Convert to JSON-serializable dict."""
        return {"extension": self.extension, "reason": self.reason.value}


@dataclass(frozen=True)
class SchemaResolution:
    """Result of resolving a document's schemas.

    Attributes:
        locations: Schema URIs to validate against. Entry 0 is the core schema.
        skipped: Declared extensions that produced no location.
    """

    locations: list[str]
    skipped: list[SkippedExtension] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        """Convert to JSON-serializable dict."""
        return {
            "locations": list(self.locations),
            "skipped": [entry.to_dict() for entry in self.skipped],
        }


def resolve(document: StacDocument | StacObject) -> SchemaResolution:
    """Resolve every schema a document must validate against.

    Args:
        document: A Catalog, Collection or Item, or a StacObject wrapping one.

    Returns:
        SchemaResolution whose locations start with the core schema followed
        by one entry per usable declared extension, in declaration order.

    Raises:
        VersionParseError: If the declared stac_version is malformed. No
            partial result is produced.
    """
    obj = StacObject.of(document)
    policy = policy_for(obj.version())

    locations = [f"{policy.root}/{CORE_SCHEMA_PATHS[obj.declared_type]}"]
    skipped: list[SkippedExtension] = []

    for extension in obj.declared_extensions:
        if policy.addressing is ExtensionAddressing.URI:
            locations.append(extension)
            continue

        schema = EXTENSION_SCHEMAS.get(extension)
        if schema is None:
            logger.warning(
                "Skipping unsupported extension identifier %r on %s %r",
                extension,
                obj.declared_type.value,
                obj.id,
            )
            skipped.append(SkippedExtension(extension, SkipReason.UNSUPPORTED))
        elif obj.declared_type not in schema.applies_to:
            logger.debug(
                "Extension %r has no schema for %s %r",
                extension,
                obj.declared_type.value,
                obj.id,
            )
            skipped.append(SkippedExtension(extension, SkipReason.NOT_APPLICABLE))
        else:
            locations.append(f"{policy.root}/{schema.path}")

    return SchemaResolution(locations=locations, skipped=skipped)


def resolve_schema_locations(document: StacDocument | StacObject) -> list[str]:
    """Return just the schema locations for a document.

    See resolve() for ordering and error behavior.
    """
    return resolve(document).locations
