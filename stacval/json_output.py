"""JSON output for ``--format json`` / ``--json``.

Every stacval command prints one envelope:

    {
        "success": true|false,
        "command": "validate",
        "data": { ... },
        "errors": [ ... ]  # Only present when success=false
    }

An error entry names the exception type (or "ValidationFailed" for a
document that was checked and found invalid), its message, and for stacval
errors the STACVAL-* code plus the context the error was raised with, such
as the schema URI and HTTP status of a failed fetch.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stacval.errors import StacvalError

if TYPE_CHECKING:
    from stacval.validation.results import ValidationReport

VALIDATION_FAILED = "ValidationFailed"


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return str(value)


@dataclass
class ErrorDetail:
    """One entry of the envelope's errors array.

    Attributes:
        type: Exception class name, or "ValidationFailed".
        message: Human-readable description.
        code: STACVAL-* code for stacval errors.
        context: Details the error was raised with; unset values are dropped.
    """

    type: str
    message: str
    code: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type, "message": self.message}
        if self.code is not None:
            d["code"] = self.code
        if self.context:
            d["context"] = self.context
        return d

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorDetail:
        """Describe a fatal error, keeping the code and context of stacval errors."""
        if isinstance(exc, StacvalError):
            context = {k: _json_safe(v) for k, v in exc.context.items() if v is not None}
            return cls(type=type(exc).__name__, message=exc.message, code=exc.code, context=context)
        return cls(type=type(exc).__name__, message=str(exc))

    @classmethod
    def from_report(cls, report: ValidationReport) -> ErrorDetail:
        """Describe a document that failed validation."""
        return cls(
            type=VALIDATION_FAILED,
            message=f"{report.document_type.value} '{report.document_id}' is invalid",
            context={"failed_locations": report.failed_locations},
        )


@dataclass
class OutputEnvelope:
    """Wrapper printed by every command in JSON mode.

    Attributes:
        success: False when the command failed or a document was invalid.
        command: Command name ("validate", "schemas", "config_list").
        data: Command payload (partial on failure).
        errors: Error entries; None on success.
    """

    success: bool
    command: str
    data: dict[str, Any] | None
    errors: list[ErrorDetail] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dict, leaving out "errors" on success."""
        result: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "data": self.data,
        }
        if self.errors is not None:
            result["errors"] = [e.to_dict() for e in self.errors]
        return result

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def success_envelope(command: str, data: dict[str, Any]) -> OutputEnvelope:
    return OutputEnvelope(success=True, command=command, data=data)


def error_envelope(
    command: str,
    errors: list[ErrorDetail],
    *,
    data: dict[str, Any] | None = None,
) -> OutputEnvelope:
    """Build a failure envelope.

    Args:
        command: Command name.
        errors: What went wrong.
        data: Partial results, e.g. the reports of every checked document.
    """
    return OutputEnvelope(
        success=False,
        command=command,
        data=data if data is not None else {},
        errors=errors,
    )
