"""Structured error codes for stacval.

All errors follow the format STACVAL-{category}{number}:
- STACVAL-DEC*: Decode errors (wire JSON to typed documents)
- STACVAL-VER*: Version errors
- STACVAL-SCH*: Schema fetch and compilation errors
- STACVAL-VAL*: Validation precondition errors
- STACVAL-RUN*: Deadline and cancellation errors
- STACVAL-CFG*: Configuration errors

A document that fails one or more schemas is not an error. Validation
failures are returned as values (see stacval.validation.results).
"""

from __future__ import annotations

from typing import Any


class StacvalError(Exception):
    """Base class for all stacval errors.

    All errors have:
    - code: Structured error code (e.g., STACVAL-DEC001)
    - message: Human-readable error message
    """

    code: str = "STACVAL-000"

    # Reserved attribute names that cannot be overwritten by context
    _RESERVED_ATTRS = frozenset({"code", "message", "context", "args"})

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize a stacval error.

        Args:
            message: Human-readable error message.
            **context: Additional context stored as error attributes.
                Reserved keys (code, message, context, args) are ignored.
        """
        self.message = message
        self.context = context
        for key, value in context.items():
            if key not in self._RESERVED_ATTRS:
                setattr(self, key, value)
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# Decode Errors (STACVAL-DEC*)
class DecodeError(StacvalError):
    """Raised when wire JSON cannot be decoded into a typed document.

    Error code: STACVAL-DEC001

    Covers malformed JSON, a non-object where an object is required,
    a missing or wrongly-typed required field, and a discriminator
    ("type") that does not match the document variant.
    """

    code = "STACVAL-DEC001"

    def __init__(self, owner: str, reason: str, field: str | None = None) -> None:
        where = f"{owner}.{field}" if field else owner
        super().__init__(f"Cannot decode {where}: {reason}", owner=owner, field=field, reason=reason)


# Version Errors (STACVAL-VER*)
class VersionParseError(StacvalError):
    """Raised when a stac_version string is not a valid semantic version.

    Error code: STACVAL-VER001
    """

    code = "STACVAL-VER001"

    def __init__(self, version: str) -> None:
        super().__init__(f"Invalid semantic version: '{version}'", version=version)


# Schema Errors (STACVAL-SCH*)
class SchemaError(StacvalError):
    """Base class for schema fetch and compilation errors."""

    code = "STACVAL-SCH000"


class SchemaFetchError(SchemaError):
    """Raised when a schema document cannot be fetched.

    Error code: STACVAL-SCH001
    """

    code = "STACVAL-SCH001"

    def __init__(self, uri: str, reason: str, status_code: int | None = None) -> None:
        super().__init__(
            f"Cannot fetch schema {uri}: {reason}",
            uri=uri,
            reason=reason,
            status_code=status_code,
        )


class SchemaCompilationError(SchemaError):
    """Raised when fetched bytes are not a usable JSON-Schema document.

    Error code: STACVAL-SCH002
    """

    code = "STACVAL-SCH002"

    def __init__(self, uri: str, reason: str) -> None:
        super().__init__(f"Cannot compile schema {uri}: {reason}", uri=uri, reason=reason)


# Validation Errors (STACVAL-VAL*)
class TemporalRangeError(StacvalError):
    """Raised when an object has neither datetime nor a complete start/end pair.

    Error code: STACVAL-VAL001
    """

    code = "STACVAL-VAL001"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid temporal range: {reason}", reason=reason)


# Runtime Errors (STACVAL-RUN*)
class DeadlineExceededError(StacvalError):
    """Raised when a validation call runs past its deadline.

    Error code: STACVAL-RUN001
    """

    code = "STACVAL-RUN001"

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Deadline of {timeout:g}s exceeded", timeout=timeout)


class ValidationCancelledError(StacvalError):
    """Raised when a validation call is cancelled by the caller.

    Error code: STACVAL-RUN002
    """

    code = "STACVAL-RUN002"

    def __init__(self) -> None:
        super().__init__("Validation cancelled")


# Configuration Errors (STACVAL-CFG*)
class ConfigError(StacvalError):
    """Base class for configuration-related errors."""

    code = "STACVAL-CFG000"


class ConfigParseError(ConfigError):
    """Raised when a configuration file cannot be parsed.

    Error code: STACVAL-CFG001
    """

    code = "STACVAL-CFG001"

    def __init__(self, path: str, parse_error: str) -> None:
        super().__init__(
            f"Failed to parse config file {path}: {parse_error}",
            path=path,
            parse_error=parse_error,
        )


class ConfigInvalidStructureError(ConfigError):
    """Raised when a configuration file or value has an invalid structure.

    Error code: STACVAL-CFG002
    """

    code = "STACVAL-CFG002"

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(
            f"Invalid config in {path}: {detail}",
            path=path,
            detail=detail,
        )
