"""Collection dataclass for STAC Collection documents.

A Collection extends the Catalog fields with a license, a spatial and
temporal extent, and optional keywords, providers and assets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stacval.models.common import (
    Asset,
    Link,
    Provider,
    read_assets,
    read_links,
    select_links,
)
from stacval.models.extensions import ScientificProperties
from stacval.models.record import (
    FieldReader,
    array_of,
    is_number,
    is_object,
    is_string,
    merge_extra,
    put_optional,
)

COLLECTION_TYPE = "Collection"


def _is_interval_bound(value: Any) -> bool:
    return value is None or isinstance(value, str)


def _is_interval(value: Any) -> bool:
    return isinstance(value, list) and all(_is_interval_bound(v) for v in value)


@dataclass(frozen=True)
class SpatialExtent:
    """Spatial extent with bounding boxes.

    Attributes:
        bbox: Bounding boxes, each [west, south, east, north] or the 3D form.
        extra_fields: Unmodeled keys.
    """

    bbox: list[list[float]]
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return merge_extra({"bbox": self.bbox}, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> SpatialExtent:
        """Create SpatialExtent from dict."""
        reader = FieldReader(data, "SpatialExtent")
        return cls(
            bbox=reader.required("bbox", array_of(array_of(is_number))),
            extra_fields=reader.remainder(),
        )


@dataclass(frozen=True)
class TemporalExtent:
    """Temporal extent with intervals.

    Attributes:
        interval: Intervals, each [start, end] with RFC 3339 strings or null.
        extra_fields: Unmodeled keys.
    """

    interval: list[list[str | None]]
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return merge_extra({"interval": self.interval}, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> TemporalExtent:
        """Create TemporalExtent from dict."""
        reader = FieldReader(data, "TemporalExtent")
        return cls(
            interval=reader.required("interval", array_of(_is_interval)),
            extra_fields=reader.remainder(),
        )


@dataclass(frozen=True)
class Extent:
    """Spatial and temporal extent."""

    spatial: SpatialExtent
    temporal: TemporalExtent
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {
            "spatial": self.spatial.to_dict(),
            "temporal": self.temporal.to_dict(),
        }
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> Extent:
        """Create Extent from dict."""
        reader = FieldReader(data, "Extent")
        return cls(
            spatial=SpatialExtent.from_dict(reader.required("spatial", is_object)),
            temporal=TemporalExtent.from_dict(reader.required("temporal", is_object)),
            extra_fields=reader.remainder(),
        )


@dataclass(frozen=True)
class Collection:
    """STAC Collection document.

    Attributes:
        id: Collection identifier.
        description: Collection description (required by STAC).
        license: SPDX license identifier, "various" or "proprietary".
        extent: Spatial and temporal extent.
        stac_version: Declared STAC spec version, kept as written.
        type: Always "Collection".
        stac_extensions: Declared extension identifiers or schema URIs.
        title: Human-readable title (optional).
        keywords: Search keywords.
        providers: Data providers.
        summaries: Aggregated metadata.
        links: STAC links.
        assets: Collection-level assets keyed by asset name.
        sci: Scientific extension fields at the collection's top level.
        extra_fields: Unmodeled keys, re-emitted verbatim.
    """

    id: str
    description: str
    license: str
    extent: Extent
    stac_version: str
    type: str = field(default=COLLECTION_TYPE, init=False)
    stac_extensions: list[str] | None = None
    title: str | None = None
    keywords: list[str] | None = None
    providers: list[Provider] | None = None
    summaries: dict[str, Any] | None = None
    links: list[Link] | None = None
    assets: dict[str, Asset] | None = None
    sci: ScientificProperties = field(default_factory=ScientificProperties)
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def links_of_rel(self, rel: str) -> list[Link]:
        """Return the links whose rel is ``rel``, in document order."""
        return select_links(self.links, rel)

    def first_link_of_rel(self, rel: str) -> Link | None:
        """Return the first link whose rel is ``rel``, or None."""
        return next(iter(self.links_of_rel(rel)), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {
            "type": self.type,
            "stac_version": self.stac_version,
        }
        put_optional(result, "stac_extensions", self.stac_extensions)
        result["id"] = self.id
        put_optional(result, "title", self.title)
        result["description"] = self.description
        put_optional(result, "keywords", self.keywords)
        result["license"] = self.license
        if self.providers is not None:
            result["providers"] = [p.to_dict() for p in self.providers]
        result["extent"] = self.extent.to_dict()
        put_optional(result, "summaries", self.summaries)
        if self.links is not None:
            result["links"] = [link.to_dict() for link in self.links]
        if self.assets is not None:
            result["assets"] = {name: asset.to_dict() for name, asset in self.assets.items()}
        self.sci.write(result)
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> Collection:
        """Create Collection from dict.

        Raises:
            DecodeError: If a required field is missing or type is not "Collection".
        """
        reader = FieldReader(data, "Collection")
        reader.literal("type", COLLECTION_TYPE)
        return cls(
            stac_version=reader.required("stac_version", is_string),
            stac_extensions=reader.optional("stac_extensions", array_of(is_string)),
            id=reader.required("id", is_string),
            title=reader.optional("title", is_string),
            description=reader.required("description", is_string),
            keywords=reader.optional("keywords", array_of(is_string)),
            license=reader.required("license", is_string),
            providers=reader.optional_as(
                "providers", array_of(is_object), lambda v: [Provider.from_dict(p) for p in v]
            ),
            extent=Extent.from_dict(reader.required("extent", is_object)),
            summaries=reader.optional("summaries", is_object),
            links=reader.optional_as("links", array_of(is_object), read_links),
            assets=reader.optional_as("assets", is_object, read_assets),
            sci=ScientificProperties.read(reader),
            extra_fields=reader.remainder(),
        )
