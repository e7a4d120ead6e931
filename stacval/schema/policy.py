"""Version Policy: which schema root and extension addressing a STAC version uses.

The upstream spec changed how it publishes schemas twice:

- 1.0.0-beta.1 moved schemas from the GitHub repository to
  schemas.stacspec.org.
- 1.0.0-rc.2 changed ``stac_extensions`` from short identifiers ("eo")
  to full schema URIs.

Both discontinuities live in the tables below. Each table is an ordered
list of (minimum version, value) rows; the first row whose minimum is
satisfied wins. A new spec convention is a new row, not a new branch in
calling code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from stacval.models.stac_object import StacType
from stacval.schema.version import SemVer, parse_version

GITHUB_SPEC_REPOSITORY = "radiantearth/stac-spec"

T = TypeVar("T")


class ExtensionAddressing(Enum):
    """How entries of ``stac_extensions`` name their schemas."""

    URI = "uri"
    """Each entry is a complete schema URI, used verbatim."""

    IDENTIFIER = "identifier"
    """Each entry is a short identifier mapped through EXTENSION_SCHEMAS."""


@dataclass(frozen=True)
class ExtensionSchema:
    """Location of an extension schema relative to the schema root.

    Attributes:
        path: Path below the version root.
        applies_to: Document types the extension schema validates.
    """

    path: str
    applies_to: frozenset[StacType]


@dataclass(frozen=True)
class VersionPolicy:
    """Everything the resolver needs to know about a spec version.

    Attributes:
        root: Schema root URL for the version, without trailing slash.
        addressing: How declared extensions are turned into locations.
    """

    root: str
    addressing: ExtensionAddressing


# Ordered (minimum version, root template) rows; the last row has no minimum
SCHEMA_ROOTS: list[tuple[SemVer | None, str]] = [
    (parse_version("1.0.0-beta.1"), "https://schemas.stacspec.org/v{version}"),
    (None, f"https://raw.githubusercontent.com/{GITHUB_SPEC_REPOSITORY}/v{{version}}"),
]

EXTENSION_ADDRESSING: list[tuple[SemVer | None, ExtensionAddressing]] = [
    (parse_version("1.0.0-rc.2"), ExtensionAddressing.URI),
    (None, ExtensionAddressing.IDENTIFIER),
]

EXTENSION_SCHEMAS: dict[str, ExtensionSchema] = {
    "eo": ExtensionSchema(
        path="extensions/eo/json-schema/schema.json",
        applies_to=frozenset({StacType.ITEM}),
    ),
    "projection": ExtensionSchema(
        path="extensions/projection/json-schema/schema.json",
        applies_to=frozenset({StacType.ITEM}),
    ),
    "scientific": ExtensionSchema(
        path="extensions/scientific/json-schema/schema.json",
        applies_to=frozenset({StacType.ITEM, StacType.COLLECTION}),
    ),
    "view": ExtensionSchema(
        path="extensions/view/json-schema/schema.json",
        applies_to=frozenset({StacType.ITEM}),
    ),
}


def _first_match(rows: list[tuple[SemVer | None, T]], version: SemVer) -> T:
    for minimum, value in rows:
        if minimum is None or version >= minimum:
            return value
    raise LookupError(f"No policy row matches version {version}")


def schema_root(version: SemVer) -> str:
    """Return the schema root URL for a spec version.

    Args:
        version: Parsed stac_version.

    Returns:
        Root URL without trailing slash, e.g.
        "https://schemas.stacspec.org/v1.0.0".
    """
    return _first_match(SCHEMA_ROOTS, version).format(version=version)


def extension_addressing(version: SemVer) -> ExtensionAddressing:
    """Return how a spec version addresses extension schemas."""
    return _first_match(EXTENSION_ADDRESSING, version)


def policy_for(version: SemVer) -> VersionPolicy:
    """Return the complete Version Policy for a spec version."""
    return VersionPolicy(root=schema_root(version), addressing=extension_addressing(version))
