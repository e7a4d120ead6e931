"""Shared STAC fragments: Link, Asset, Provider and Common Metadata.

These fragments are owned by the document that declares them. Each one
keeps its unmodeled keys in ``extra_fields`` so a decode/encode cycle
reproduces the source object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stacval.errors import TemporalRangeError
from stacval.models.record import (
    FieldReader,
    array_of,
    is_number,
    is_object,
    is_string,
    merge_extra,
    put_optional,
)

# Provider roles allowed by the STAC Provider Object
PROVIDER_ROLES: frozenset[str] = frozenset({"licensor", "producer", "processor", "host"})


def _is_provider_role(value: Any) -> bool:
    return isinstance(value, str) and value in PROVIDER_ROLES


@dataclass(frozen=True)
class Link:
    """A STAC link object.

    Attributes:
        href: Link URL or relative path.
        rel: Link relationship (e.g., "self", "root", "child", "item").
        type: Media type of linked resource (optional).
        title: Human-readable link title (optional).
        extra_fields: Unmodeled keys, re-emitted verbatim.
    """

    href: str
    rel: str
    type: str | None = None
    title: str | None = None
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict.

        Returns:
            Dict with non-None fields and the Open Record.
        """
        result: dict[str, Any] = {
            "href": self.href,
            "rel": self.rel,
        }
        put_optional(result, "type", self.type)
        put_optional(result, "title", self.title)
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> Link:
        """Create Link from dict.

        Raises:
            DecodeError: If href or rel is missing or not a string.
        """
        reader = FieldReader(data, "Link")
        return cls(
            href=reader.required("href", is_string),
            rel=reader.required("rel", is_string),
            type=reader.optional("type", is_string),
            title=reader.optional("title", is_string),
            extra_fields=reader.remainder(),
        )


@dataclass(frozen=True)
class Asset:
    """A STAC asset (file reference) owned by an Item or Collection.

    Attributes:
        href: Asset URL or relative path.
        title: Display title.
        description: Longer description of the asset.
        type: Media type (e.g., "image/tiff; application=geotiff").
        roles: Asset roles (e.g., ["data"], ["thumbnail"]).
        extra_fields: Unmodeled keys, including extension fields such
            as "eo:bands" on the asset.
    """

    href: str
    title: str | None = None
    description: str | None = None
    type: str | None = None
    roles: list[str] | None = None
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {"href": self.href}
        put_optional(result, "title", self.title)
        put_optional(result, "description", self.description)
        put_optional(result, "type", self.type)
        put_optional(result, "roles", self.roles)
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> Asset:
        """Create Asset from dict."""
        reader = FieldReader(data, "Asset")
        return cls(
            href=reader.required("href", is_string),
            title=reader.optional("title", is_string),
            description=reader.optional("description", is_string),
            type=reader.optional("type", is_string),
            roles=reader.optional("roles", array_of(is_string)),
            extra_fields=reader.remainder(),
        )


@dataclass(frozen=True)
class Provider:
    """A data provider.

    Attributes:
        name: Provider name.
        description: Processing details, hosting details or contact information.
        roles: Provider roles (licensor, producer, processor, host).
        url: Provider homepage.
        extra_fields: Unmodeled keys.
    """

    name: str
    description: str | None = None
    roles: list[str] | None = None
    url: str | None = None
    extra_fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        result: dict[str, Any] = {"name": self.name}
        put_optional(result, "description", self.description)
        put_optional(result, "roles", self.roles)
        put_optional(result, "url", self.url)
        return merge_extra(result, self.extra_fields)

    @classmethod
    def from_dict(cls, data: Any) -> Provider:
        """Create Provider from dict.

        A roles list containing anything outside PROVIDER_ROLES is kept
        raw in extra_fields so schema validation can report it.
        """
        reader = FieldReader(data, "Provider")
        return cls(
            name=reader.required("name", is_string),
            description=reader.optional("description", is_string),
            roles=reader.optional("roles", array_of(_is_provider_role)),
            url=reader.optional("url", is_string),
            extra_fields=reader.remainder(),
        )


def _providers(value: list[Any]) -> list[Provider]:
    return [Provider.from_dict(p) for p in value]


@dataclass(frozen=True)
class CommonMetadata:
    """Attributes from the STAC Common Metadata spec.

    Common metadata is flattened into the object that uses it (Item
    properties), so it has no Open Record of its own: it reads from and
    writes to the owner's reader and dict.

    Instants are kept as the RFC 3339 strings found on the wire.
    """

    title: str | None = None
    description: str | None = None
    datetime: str | None = None
    created: str | None = None
    updated: str | None = None
    start_datetime: str | None = None
    end_datetime: str | None = None
    license: str | None = None
    providers: list[Provider] | None = None
    platform: str | None = None
    instruments: list[str] | None = None
    constellation: str | None = None
    mission: str | None = None
    gsd: float | None = None

    @classmethod
    def read(cls, reader: FieldReader) -> CommonMetadata:
        """Consume the common metadata fields from a shared reader."""
        return cls(
            title=reader.optional("title", is_string),
            description=reader.optional("description", is_string),
            datetime=reader.optional("datetime", is_string),
            created=reader.optional("created", is_string),
            updated=reader.optional("updated", is_string),
            start_datetime=reader.optional("start_datetime", is_string),
            end_datetime=reader.optional("end_datetime", is_string),
            license=reader.optional("license", is_string),
            providers=reader.optional_as("providers", array_of(is_object), _providers),
            platform=reader.optional("platform", is_string),
            instruments=reader.optional("instruments", array_of(is_string)),
            constellation=reader.optional("constellation", is_string),
            mission=reader.optional("mission", is_string),
            gsd=reader.optional("gsd", is_number),
        )

    def write(self, result: dict[str, Any]) -> None:
        """Emit the non-None common metadata fields into ``result``."""
        put_optional(result, "title", self.title)
        put_optional(result, "description", self.description)
        put_optional(result, "datetime", self.datetime)
        put_optional(result, "created", self.created)
        put_optional(result, "updated", self.updated)
        put_optional(result, "start_datetime", self.start_datetime)
        put_optional(result, "end_datetime", self.end_datetime)
        put_optional(result, "license", self.license)
        if self.providers is not None:
            result["providers"] = [p.to_dict() for p in self.providers]
        put_optional(result, "platform", self.platform)
        put_optional(result, "instruments", self.instruments)
        put_optional(result, "constellation", self.constellation)
        put_optional(result, "mission", self.mission)
        put_optional(result, "gsd", self.gsd)

    def temporal_range_problem(self) -> str | None:
        """Describe a broken temporal range, or return None if it is complete.

        A single ``datetime`` is enough. Without it, both
        ``start_datetime`` and ``end_datetime`` are required.
        """
        if self.datetime is not None:
            return None
        missing = [
            name
            for name, value in (
                ("start_datetime", self.start_datetime),
                ("end_datetime", self.end_datetime),
            )
            if value is None
        ]
        if not missing:
            return None
        verb = "is" if len(missing) == 1 else "are"
        return f"datetime is null or absent and {' and '.join(missing)} {verb} missing"

    def check_temporal_range(self) -> None:
        """Raise TemporalRangeError if the temporal range is incomplete."""
        problem = self.temporal_range_problem()
        if problem is not None:
            raise TemporalRangeError(problem)


def read_links(value: list[Any]) -> list[Link]:
    """Decode a JSON array of link objects."""
    return [Link.from_dict(link) for link in value]


def select_links(links: list[Link] | None, rel: str) -> list[Link]:
    """Return the links whose rel is ``rel``, in document order."""
    return [link for link in links or [] if link.rel == rel]


def read_assets(value: dict[str, Any]) -> dict[str, Asset]:
    """Decode a JSON object of assets keyed by asset name."""
    return {name: Asset.from_dict(asset) for name, asset in value.items()}
