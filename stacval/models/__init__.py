"""Data models for STAC documents.

Models are frozen dataclasses decoded from wire JSON with from_dict() and
encoded back with to_dict(). Every model keeps unrecognized keys in
``extra_fields`` so documents round-trip without loss.
"""

from __future__ import annotations

from stacval.models.catalog import Catalog
from stacval.models.collection import Collection, Extent, SpatialExtent, TemporalExtent
from stacval.models.common import PROVIDER_ROLES, Asset, CommonMetadata, Link, Provider
from stacval.models.extensions import (
    Band,
    EoProperties,
    ProjectionProperties,
    Publication,
    ScientificProperties,
    ViewProperties,
)
from stacval.models.item import Item, ItemProperties
from stacval.models.item_collection import ItemCollection
from stacval.models.stac_object import StacDocument, StacObject, StacType, decode_document

__all__ = [
    # Documents
    "Catalog",
    "Collection",
    "Item",
    "ItemCollection",
    "StacDocument",
    "StacObject",
    "StacType",
    "decode_document",
    # Fragments
    "Asset",
    "CommonMetadata",
    "Extent",
    "ItemProperties",
    "Link",
    "PROVIDER_ROLES",
    "Provider",
    "SpatialExtent",
    "TemporalExtent",
    # Extensions
    "Band",
    "EoProperties",
    "ProjectionProperties",
    "Publication",
    "ScientificProperties",
    "ViewProperties",
]
