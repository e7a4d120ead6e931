"""The polymorphic STAC Object: a tagged variant over Catalog, Collection and Item.

Schema resolution needs the same three facts from every document: its
declared spec version, its declared type and its declared extensions.
StacObject exposes them uniformly. It references the document it was
built from and owns nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from stacval.errors import DecodeError
from stacval.models.catalog import Catalog
from stacval.models.collection import Collection
from stacval.models.item import Item
from stacval.models.item_collection import ITEM_COLLECTION_TYPE, ItemCollection

if TYPE_CHECKING:
    from stacval.schema.version import SemVer

StacDocument = Union[Catalog, Collection, Item]


class StacType(Enum):
    """Document types that have a core schema.

    Values are the wire values of the "type" discriminator.
    """

    CATALOG = "Catalog"
    COLLECTION = "Collection"
    ITEM = "Feature"


_KIND_BY_CLASS: dict[type, StacType] = {
    Catalog: StacType.CATALOG,
    Collection: StacType.COLLECTION,
    Item: StacType.ITEM,
}


@dataclass(frozen=True, eq=False)
class StacObject:
    """Uniform, read-only view over exactly one STAC document.

    Build one with StacObject.of(); the tag is derived from the concrete
    document class.

    Attributes:
        kind: Which variant the document is.
        document: The Catalog, Collection or Item being viewed.
    """

    kind: StacType
    document: StacDocument

    @classmethod
    def of(cls, document: StacDocument | StacObject) -> StacObject:
        """Wrap a document (an existing StacObject is returned unchanged).

        Raises:
            TypeError: If ``document`` is not a Catalog, Collection or Item.
        """
        if isinstance(document, StacObject):
            return document
        kind = _KIND_BY_CLASS.get(type(document))
        if kind is None:
            raise TypeError(
                f"Expected Catalog, Collection or Item, got {type(document).__name__}"
            )
        return cls(kind=kind, document=document)

    @property
    def stac_version(self) -> str:
        """The declared spec version string, as written."""
        return self.document.stac_version

    def version(self) -> SemVer:
        """Parse the declared spec version.

        Raises:
            VersionParseError: If stac_version is not a semantic version.
        """
        from stacval.schema.version import parse_version

        return parse_version(self.document.stac_version)

    @property
    def declared_type(self) -> StacType:
        """The document variant."""
        return self.kind

    @property
    def declared_extensions(self) -> tuple[str, ...]:
        """Declared extension entries in declaration order (duplicates kept)."""
        return tuple(self.document.stac_extensions or ())

    @property
    def id(self) -> str:
        """The document id."""
        return self.document.id

    def to_instance(self) -> dict[str, Any]:
        """Serialize the document to the JSON instance checked by schemas."""
        return self.document.to_dict()


def decode_document(data: Any) -> Catalog | Collection | Item | ItemCollection:
    """Decode a JSON object into the variant named by its "type" field.

    Args:
        data: Decoded JSON object.

    Returns:
        Catalog, Collection, Item or ItemCollection.

    Raises:
        DecodeError: If data is not an object, has no string "type", or
            names an unknown type.
    """
    if not isinstance(data, dict):
        raise DecodeError("STAC document", f"expected a JSON object, got {type(data).__name__}")
    stac_type = data.get("type")
    if stac_type == StacType.CATALOG.value:
        return Catalog.from_dict(data)
    if stac_type == StacType.COLLECTION.value:
        return Collection.from_dict(data)
    if stac_type == StacType.ITEM.value:
        return Item.from_dict(data)
    if stac_type == ITEM_COLLECTION_TYPE:
        return ItemCollection.from_dict(data)
    raise DecodeError("STAC document", f"unknown or missing type {stac_type!r}", "type")
