"""Standardized terminal output utilities.

All user-facing CLI messages go through these functions for consistent
formatting:

    from stacval.output import success, info, warn, error, detail

    success("item.json is valid (2 schemas)")
    info("https://schemas.stacspec.org/v1.0.0/item-spec/json-schema/item.json")
    warn("Skipping unsupported extension 'sat'")
    error("/properties/eo:cloud_cover: 'high' is not of type 'number'")
    detail("checked against 2 schemas")

Warnings and errors go to stderr; everything else to stdout.
"""

from __future__ import annotations

import sys
from typing import TextIO

import click

# ANSI color codes via click's style system
_STYLES = {
    "success": {"fg": "green"},
    "info": {"fg": "blue"},
    "warn": {"fg": "yellow"},
    "error": {"fg": "red"},
    "detail": {"fg": "bright_black"},  # Dimmed/gray
}

_PREFIXES = {
    "success": "✓",  # checkmark
    "info": "→",  # arrow
    "warn": "⚠",  # warning
    "error": "✗",  # X
    "detail": " ",  # space (no prefix, just indent)
}


def _output(message: str, style: str, *, file: TextIO | None = None, indent: int = 0) -> None:
    """Write one styled line.

    Args:
        message: The message to display.
        style: The style name (success, error, info, warn, detail).
        file: File to write to.
        indent: Number of leading spaces, for nesting under a parent line.
    """
    fg_color = _STYLES[style]["fg"]
    styled_prefix = click.style(_PREFIXES[style], fg=fg_color)
    styled_message = click.style(message, fg=fg_color)
    click.echo(f"{' ' * indent}{styled_prefix} {styled_message}", file=file)


def success(message: str, *, file: TextIO | None = None, indent: int = 0) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("item.json is valid")
        ✓ item.json is valid
    """
    _output(message, "success", file=file, indent=indent)


def info(message: str, *, file: TextIO | None = None, indent: int = 0) -> None:
    """Print an info message with blue arrow."""
    _output(message, "info", file=file, indent=indent)


def warn(message: str, *, file: TextIO | None = None, indent: int = 0) -> None:
    """Print a warning message with yellow warning symbol (default: stderr)."""
    _output(message, "warn", file=file or sys.stderr, indent=indent)


def error(message: str, *, file: TextIO | None = None, indent: int = 0) -> None:
    """Print an error message with red X (default: stderr).

    Example:
        >>> error("Cannot fetch schema")
        ✗ Cannot fetch schema
    """
    _output(message, "error", file=file or sys.stderr, indent=indent)


def detail(message: str, *, file: TextIO | None = None, indent: int = 0) -> None:
    """Print a detail message in dimmed text."""
    _output(message, "detail", file=file, indent=indent)
