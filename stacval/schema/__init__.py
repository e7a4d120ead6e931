"""Schema resolution for STAC documents.

This module maps a document to the JSON-Schema locations that must
validate it:
- version: SemVer parsing and precedence
- policy: schema roots and extension addressing per spec version
- resolver: ordered schema locations for a document
"""

from __future__ import annotations

from stacval.schema.policy import (
    EXTENSION_ADDRESSING,
    EXTENSION_SCHEMAS,
    SCHEMA_ROOTS,
    ExtensionAddressing,
    ExtensionSchema,
    VersionPolicy,
    extension_addressing,
    policy_for,
    schema_root,
)
from stacval.schema.resolver import (
    CORE_SCHEMA_PATHS,
    SchemaResolution,
    SkippedExtension,
    SkipReason,
    resolve,
    resolve_schema_locations,
)
from stacval.schema.version import SemVer, parse_version

__all__: list[str] = [
    # Version
    "SemVer",
    "parse_version",
    # Policy
    "EXTENSION_ADDRESSING",
    "EXTENSION_SCHEMAS",
    "SCHEMA_ROOTS",
    "ExtensionAddressing",
    "ExtensionSchema",
    "VersionPolicy",
    "extension_addressing",
    "policy_for",
    "schema_root",
    # Resolver
    "CORE_SCHEMA_PATHS",
    "SchemaResolution",
    "SkipReason",
    "SkippedExtension",
    "resolve",
    "resolve_schema_locations",
]
