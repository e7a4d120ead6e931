"""Catalog dataclass for STAC Catalog documents.

A Catalog is a pure navigation node: it links to child catalogs,
collections and items and carries no geometry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stacval.models.common import Link, read_links, select_links
from stacval.models.record import (
    FieldReader,
    array_of,
    is_object,
    is_string,
    merge_extra,
    put_optional,
)

CATALOG_TYPE = "Catalog"


@dataclass(frozen=True)
class Catalog:
    """STAC Catalog document.

    Attributes:
        id: Catalog identifier.
        description: Catalog description (required by STAC).
        stac_version: Declared STAC spec version, kept as written.
        type: Always "Catalog".
        stac_extensions: Declared extension identifiers or schema URIs.
        title: Human-readable title (optional).
        summaries: Summaries of the catalog's contents (optional).
        links: STAC links (optional).
        extra_fields: Unmodeled keys, re-emitted verbatim.
    """

    id: str
    description: str
    stac_version: str
    type: str = field(default=CATALOG_TYPE, init=False)
    stac_extensions: list[str] | None = None
    title: str | None = None
    summaries: dict[str, Any] | None = None
    links: list[Link] | None = None
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def links_of_rel(self, rel: str) -> list[Link]:
        """Return the links whose rel is ``rel``, in document order."""
        return select_links(self.links, rel)

    def first_link_of_rel(self, rel: str) -> Link | None:
        """Return the first link whose rel is ``rel``, or None."""
        return next(iter(self.links_of_rel(rel)), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict.

        Returns:
            Dict with declared fields first, then the Open Record.
        """
        result: dict[str, Any] = {
            "type": self.type,
            "stac_version": self.stac_version,
        }
        put_optional(result, "stac_extensions", self.stac_extensions)
        result["id"] = self.id
        put_optional(result, "title", self.title)
        result["description"] = self.description
        put_optional(result, "summaries", self.summaries)
        if self.links is not None:
            result["links"] = [link.to_dict() for link in self.links]
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> Catalog:
        """Create Catalog from dict.

        Args:
            data: Decoded JSON object.

        Returns:
            Catalog instance.

        Raises:
            DecodeError: If a required field is missing or type is not "Catalog".
        """
        reader = FieldReader(data, "Catalog")
        reader.literal("type", CATALOG_TYPE)
        return cls(
            stac_version=reader.required("stac_version", is_string),
            stac_extensions=reader.optional("stac_extensions", array_of(is_string)),
            id=reader.required("id", is_string),
            title=reader.optional("title", is_string),
            description=reader.required("description", is_string),
            summaries=reader.optional("summaries", is_object),
            links=reader.optional_as("links", array_of(is_object), read_links),
            extra_fields=reader.remainder(),
        )
