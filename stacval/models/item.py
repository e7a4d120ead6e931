"""Item dataclass for STAC Item documents.

An Item is a GeoJSON Feature describing one concrete asset instance.
Its ``properties`` object combines Common Metadata, extension properties
and an Open Record of everything else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stacval.models.common import (
    Asset,
    CommonMetadata,
    Link,
    read_assets,
    read_links,
    select_links,
)
from stacval.models.extensions import (
    EoProperties,
    ProjectionProperties,
    ScientificProperties,
    ViewProperties,
)
from stacval.models.record import (
    FieldReader,
    array_of,
    is_number,
    is_object,
    is_string,
    merge_extra,
    put_optional,
)

ITEM_TYPE = "Feature"


@dataclass(frozen=True)
class ItemProperties:
    """The ``properties`` object of an Item.

    Attributes:
        common: Common Metadata (title, datetime, platform, ...).
        eo: Electro-Optical extension fields.
        proj: Projection extension fields.
        sci: Scientific extension fields.
        view: View Geometry extension fields.
        extra_fields: Every other property, re-emitted verbatim.
    """

    common: CommonMetadata = field(default_factory=CommonMetadata)
    eo: EoProperties = field(default_factory=EoProperties)
    proj: ProjectionProperties = field(default_factory=ProjectionProperties)
    sci: ScientificProperties = field(default_factory=ScientificProperties)
    view: ViewProperties = field(default_factory=ViewProperties)
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {}
        self.common.write(result)
        self.eo.write(result)
        self.proj.write(result)
        self.sci.write(result)
        self.view.write(result)
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> ItemProperties:
        """Create ItemProperties from dict."""
        reader = FieldReader(data, "Item.properties")
        return cls(
            common=CommonMetadata.read(reader),
            eo=EoProperties.read(reader),
            proj=ProjectionProperties.read(reader),
            sci=ScientificProperties.read(reader),
            view=ViewProperties.read(reader),
            extra_fields=reader.remainder(),
        )


@dataclass(frozen=True)
class Item:
    """STAC Item document.

    Attributes:
        id: Item identifier, unique within its collection.
        geometry: GeoJSON geometry, or None for items without a footprint.
        bbox: Bounding box; required when geometry is not None.
        properties: Item properties.
        links: STAC links.
        assets: Asset references keyed by asset name.
        stac_version: Declared STAC spec version, kept as written.
        type: Always "Feature".
        stac_extensions: Declared extension identifiers or schema URIs.
        collection: Parent collection id (optional).
        extra_fields: Unmodeled keys, re-emitted verbatim.
    """

    id: str
    geometry: dict[str, Any] | None
    bbox: list[float] | None
    properties: ItemProperties
    links: list[Link]
    assets: dict[str, Asset]
    stac_version: str
    type: str = field(default=ITEM_TYPE, init=False)
    stac_extensions: list[str] | None = None
    collection: str | None = None
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
        result["geometry"] = self.geometry
        put_optional(result, "bbox", self.bbox)
        result["properties"] = self.properties.to_dict()
        result["links"] = [link.to_dict() for link in self.links]
        result["assets"] = {name: asset.to_dict() for name, asset in self.assets.items()}
        put_optional(result, "collection", self.collection)
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> Item:
        """Create Item from dict.

        Raises:
            DecodeError: If a required field is missing, type is not "Feature",
                or bbox is missing while geometry is set.
        """
        reader = FieldReader(data, "Item")
        reader.literal("type", ITEM_TYPE)
        stac_version = reader.required("stac_version", is_string)
        stac_extensions = reader.optional("stac_extensions", array_of(is_string))
        item_id = reader.required("id", is_string)
        geometry = reader.required_nullable("geometry", is_object)
        if geometry is not None:
            bbox = reader.required("bbox", array_of(is_number))
        else:
            bbox = reader.optional("bbox", array_of(is_number))

        return cls(
            stac_version=stac_version,
            stac_extensions=stac_extensions,
            id=item_id,
            geometry=geometry,
            bbox=bbox,
            properties=ItemProperties.from_dict(reader.required("properties", is_object)),
            links=read_links(reader.required("links", array_of(is_object))),
            assets=read_assets(reader.required("assets", is_object)),
            collection=reader.optional("collection", is_string),
            extra_fields=reader.remainder(),
        )
