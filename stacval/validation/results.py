"""Validation result data structures.

These classes capture the outcome of checking a document against each of
its schemas and aggregate them into a report for CLI display and JSON
export. A failed check is a normal result, never an exception.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stacval.models.stac_object import StacType
from stacval.schema.resolver import SkippedExtension

# Pseudo-location for the Common Metadata datetime / start+end precheck
TEMPORAL_RANGE_CHECK = "stacval:temporal-range"


@dataclass(frozen=True)
class SchemaViolation:
    """One reason an instance does not conform to a schema.

    Attributes:
        schema_uri: Location of the schema that reported the violation.
        instance_path: JSON Pointer to the offending value ("" is the root).
        message: Human-readable description.
        keyword: Schema keyword that failed (e.g. "type", "required").
        schema_path: JSON Pointer to the failing keyword inside the schema.
    """

    schema_uri: str
    instance_path: str
    message: str
    keyword: str | None = None
    schema_path: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        d: dict[str, Any] = {
            "schema_uri": self.schema_uri,
            "instance_path": self.instance_path,
            "message": self.message,
        }
        if self.keyword is not None:
            d["keyword"] = self.keyword
        if self.schema_path:
            d["schema_path"] = self.schema_path
        return d


@dataclass(frozen=True)
class SchemaCheck:
    """Outcome of checking the instance against one schema location.

    Attributes:
        location: Schema URI, or TEMPORAL_RANGE_CHECK for the precheck.
        violations: Violations reported by that schema, ordered by path.
    """

    location: str
    violations: list[SchemaViolation] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """True if the schema reported no violation."""
        return not self.violations

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "location": self.location,
            "passed": self.passed,
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass
class ValidationReport:
    """Aggregate of every schema check run for one document.

    Attributes:
        document_id: The validated document's id.
        document_type: The validated document's type.
        checks: One entry per schema checked, in schema location order.
        skipped: Declared extensions that contributed no schema.
    """

    document_id: str
    document_type: StacType
    checks: list[SchemaCheck] = field(default_factory=list)
    skipped: list[SkippedExtension] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """True if every check passed."""
        return all(check.passed for check in self.checks)

    @property
    def violations(self) -> list[SchemaViolation]:
        """Every violation, ordered by schema location."""
        return [v for check in self.checks for v in check.violations]

    @property
    def failed_locations(self) -> list[str]:
        """Locations of the checks that failed."""
        return [check.location for check in self.checks if not check.passed]

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict for --json output."""
        return {
            "id": self.document_id,
            "type": self.document_type.value,
            "passed": self.passed,
            "error_count": len(self.violations),
            "checks": [check.to_dict() for check in self.checks],
            "skipped": [entry.to_dict() for entry in self.skipped],
        }
