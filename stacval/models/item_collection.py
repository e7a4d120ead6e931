"""ItemCollection dataclass for GeoJSON FeatureCollections of STAC Items.

Search endpoints and static exports return Items wrapped in a
FeatureCollection. There is no core schema for the wrapper, so it is
validated feature by feature.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stacval.models.common import Link, read_links
from stacval.models.item import Item
from stacval.models.record import (
    FieldReader,
    array_of,
    is_object,
    is_string,
    merge_extra,
    put_optional,
)

ITEM_COLLECTION_TYPE = "FeatureCollection"


@dataclass(frozen=True)
class ItemCollection:
    """A FeatureCollection of STAC Items.

    Attributes:
        features: Decoded Items in source order.
        type: Always "FeatureCollection".
        stac_version: Declared STAC version of the wrapper (optional).
        stac_extensions: Declared extensions of the wrapper (optional).
        links: Links such as "next" pages (optional).
        extra_fields: Unmodeled keys (e.g., "context", "numberMatched").
    """

    features: list[Item]
    type: str = field(default=ITEM_COLLECTION_TYPE, init=False)
    stac_version: str | None = None
    stac_extensions: list[str] | None = None
    links: list[Link] | None = None
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {"type": self.type}
        put_optional(result, "stac_version", self.stac_version)
        put_optional(result, "stac_extensions", self.stac_extensions)
        result["features"] = [item.to_dict() for item in self.features]
        if self.links is not None:
            result["links"] = [link.to_dict() for link in self.links]
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> ItemCollection:
        """Create ItemCollection from dict.

        Raises:
            DecodeError: If type is not "FeatureCollection", features is
                missing, or any feature fails to decode as an Item.
        """
        reader = FieldReader(data, "ItemCollection")
        reader.literal("type", ITEM_COLLECTION_TYPE)
        return cls(
            stac_version=reader.optional("stac_version", is_string),
            stac_extensions=reader.optional("stac_extensions", array_of(is_string)),
            features=[Item.from_dict(f) for f in reader.required("features", array_of(is_object))],
            links=reader.optional_as("links", array_of(is_object), read_links),
            extra_fields=reader.remainder(),
        )
