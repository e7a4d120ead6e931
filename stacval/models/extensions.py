"""Typed views over namespaced extension properties.

Extension fields live next to core fields under a colon-delimited prefix
("eo:cloud_cover", "proj:epsg", "sci:doi", "view:azimuth"). Each group
reads its own prefixed keys from the owner's shared FieldReader.

All groups are lenient: a value of the wrong JSON type is left in the
owner's Open Record rather than failing the decode, so the extension's
JSON-Schema reports it during validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stacval.models.record import (
    FieldReader,
    array_of,
    is_integer,
    is_number,
    is_object,
    is_string,
    merge_extra,
    put_optional,
)


@dataclass(frozen=True)
class Band:
    """A spectral band from ``eo:bands``."""

    name: str | None = None
    common_name: str | None = None
    description: str | None = None
    center_wavelength: float | None = None
    full_width_half_max: float | None = None
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {}
        put_optional(result, "name", self.name)
        put_optional(result, "common_name", self.common_name)
        put_optional(result, "description", self.description)
        put_optional(result, "center_wavelength", self.center_wavelength)
        put_optional(result, "full_width_half_max", self.full_width_half_max)
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> Band:
        """Create Band from dict."""
        reader = FieldReader(data, "Band")
        return cls(
            name=reader.optional("name", is_string),
            common_name=reader.optional("common_name", is_string),
            description=reader.optional("description", is_string),
            center_wavelength=reader.optional("center_wavelength", is_number),
            full_width_half_max=reader.optional("full_width_half_max", is_number),
            extra_fields=reader.remainder(),
        )


@dataclass(frozen=True)
class EoProperties:
    """Electro-Optical extension fields."""

    bands: list[Band] | None = None
    cloud_cover: float | None = None

    @classmethod
    def read(cls, reader: FieldReader) -> EoProperties:
        """Consume ``eo:`` fields from a shared reader."""
        return cls(
            bands=reader.optional_as(
                "eo:bands", array_of(is_object), lambda v: [Band.from_dict(b) for b in v]
            ),
            cloud_cover=reader.optional("eo:cloud_cover", is_number),
        )

    def write(self, result: dict[str, Any]) -> None:
        """Emit ``eo:`` fields into ``result``."""
        if self.bands is not None:
            result["eo:bands"] = [b.to_dict() for b in self.bands]
        put_optional(result, "eo:cloud_cover", self.cloud_cover)


@dataclass(frozen=True)
class ProjectionProperties:
    """Projection extension fields."""

    epsg: int | None = None
    wkt2: str | None = None
    projjson: dict[str, Any] | None = None
    geometry: dict[str, Any] | None = None
    bbox: list[float] | None = None
    centroid: dict[str, Any] | None = None
    shape: list[int] | None = None
    transform: list[float] | None = None

    @classmethod
    def read(cls, reader: FieldReader) -> ProjectionProperties:
        """Consume ``proj:`` fields from a shared reader."""
        return cls(
            epsg=reader.optional("proj:epsg", is_integer),
            wkt2=reader.optional("proj:wkt2", is_string),
            projjson=reader.optional("proj:projjson", is_object),
            geometry=reader.optional("proj:geometry", is_object),
            bbox=reader.optional("proj:bbox", array_of(is_number)),
            centroid=reader.optional("proj:centroid", is_object),
            shape=reader.optional("proj:shape", array_of(is_integer)),
            transform=reader.optional("proj:transform", array_of(is_number)),
        )

    def write(self, result: dict[str, Any]) -> None:
        """Emit ``proj:`` fields into ``result``."""
        put_optional(result, "proj:epsg", self.epsg)
        put_optional(result, "proj:wkt2", self.wkt2)
        put_optional(result, "proj:projjson", self.projjson)
        put_optional(result, "proj:geometry", self.geometry)
        put_optional(result, "proj:bbox", self.bbox)
        put_optional(result, "proj:centroid", self.centroid)
        put_optional(result, "proj:shape", self.shape)
        put_optional(result, "proj:transform", self.transform)


@dataclass(frozen=True)
class Publication:
    """A publication referenced by ``sci:publications``."""

    doi: str | None = None
    citation: str | None = None
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {}
        put_optional(result, "doi", self.doi)
        put_optional(result, "citation", self.citation)
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> Publication:
        """Create Publication from dict."""
        reader = FieldReader(data, "Publication")
        return cls(
            doi=reader.optional("doi", is_string),
            citation=reader.optional("citation", is_string),
            extra_fields=reader.remainder(),
        )


@dataclass(frozen=True)
class ScientificProperties:
    """Scientific extension fields (Items and Collections)."""

    doi: str | None = None
    citation: str | None = None
    publications: list[Publication] | None = None

    @classmethod
    def read(cls, reader: FieldReader) -> ScientificProperties:
        """Consume ``sci:`` fields from a shared reader."""
        return cls(
            doi=reader.optional("sci:doi", is_string),
            citation=reader.optional("sci:citation", is_string),
            publications=reader.optional_as(
                "sci:publications",
                array_of(is_object),
                lambda v: [Publication.from_dict(p) for p in v],
            ),
        )

    def write(self, result: dict[str, Any]) -> None:
        """Emit ``sci:`` fields into ``result``."""
        put_optional(result, "sci:doi", self.doi)
        put_optional(result, "sci:citation", self.citation)
        if self.publications is not None:
            result["sci:publications"] = [p.to_dict() for p in self.publications]


@dataclass(frozen=True)
class ViewProperties:
    """View Geometry extension fields, all angles in degrees."""

    off_nadir: float | None = None
    incidence_angle: float | None = None
    azimuth: float | None = None
    sun_azimuth: float | None = None
    sun_elevation: float | None = None

    @classmethod
    def read(cls, reader: FieldReader) -> ViewProperties:
        """Consume ``view:`` fields from a shared reader."""
        return cls(
            off_nadir=reader.optional("view:off_nadir", is_number),
            incidence_angle=reader.optional("view:incidence_angle", is_number),
            azimuth=reader.optional("view:azimuth", is_number),
            sun_azimuth=reader.optional("view:sun_azimuth", is_number),
            sun_elevation=reader.optional("view:sun_elevation", is_number),
        )

    def write(self, result: dict[str, Any]) -> None:
        """Emit ``view:`` fields into ``result``."""
        put_optional(result, "view:off_nadir", self.off_nadir)
        put_optional(result, "view:incidence_angle", self.incidence_angle)
        put_optional(result, "view:azimuth", self.azimuth)
        put_optional(result, "view:sun_azimuth", self.sun_azimuth)
        put_optional(result, "view:sun_elevation", self.sun_elevation)
