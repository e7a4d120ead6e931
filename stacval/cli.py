"""stacval CLI - validate STAC documents from the command line.

The CLI is a thin wrapper around the Python API (see stacval.validation).
All business logic lives in the library; the CLI handles user interaction.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, NoReturn

import click

from stacval.config import list_settings, load_settings
from stacval.errors import DecodeError, StacvalError
from stacval.fetch import DEFAULT_TIMEOUT, HttpSchemaFetcher
from stacval.io import read_document
from stacval.json_output import ErrorDetail, error_envelope, success_envelope
from stacval.models.item_collection import ItemCollection
from stacval.models.stac_object import StacDocument
from stacval.output import detail, error, info, success, warn
from stacval.schema.resolver import SkipReason, resolve
from stacval.validation import ValidationReport, Validator


def should_output_json(ctx: click.Context, json_flag: bool = False) -> bool:
    """Determine if JSON output should be used.

    Checks both the global --format option and the per-command --json flag.

    Args:
        ctx: Click context containing the format preference.
        json_flag: Per-command --json flag value.

    Returns:
        True if JSON output should be used, False for text output.
    """
    obj = ctx.find_root().obj or {}
    return obj.get("format", "text") == "json" or json_flag


def output_json_envelope(envelope: Any) -> None:
    """Output a JSON envelope to stdout."""
    click.echo(envelope.to_json())


def _config_path(ctx: click.Context) -> Path | None:
    obj = ctx.find_root().obj or {}
    path: Path | None = obj.get("config_path")
    return path


def _fail(command: str, err: BaseException, use_json: bool) -> NoReturn:
    """Report a fatal error and exit with status 1."""
    if use_json:
        output_json_envelope(error_envelope(command, [ErrorDetail.from_exception(err)]))
    else:
        message = err.message if isinstance(err, StacvalError) else str(err)
        error(message)
    raise SystemExit(1) from err


def _documents(path: Path) -> list[StacDocument]:
    """Read PATH as a list of validatable documents (features of a FeatureCollection).

    Raises:
        DecodeError: If PATH is not a document, or is a FeatureCollection
            with no features.
        OSError: If PATH cannot be read.
    """
    document = read_document(path)
    if isinstance(document, ItemCollection):
        if not document.features:
            raise DecodeError("FeatureCollection", f"no features in {path}", field="features")
        return list(document.features)
    return [document]


@click.group()
@click.version_option(package_name="stacval")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format (json for machine parsing, text for humans).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: .stacval.yaml in the working directory).",
)
@click.pass_context
def cli(ctx: click.Context, output_format: str, config_path: Path | None) -> None:
    """stacval - Validate STAC documents against their JSON-Schemas."""
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format
    ctx.obj["config_path"] = config_path


# ─────────────────────────────────────────────────────────────────────────────
# Validate command
# ─────────────────────────────────────────────────────────────────────────────


def _print_report(label: str, report: ValidationReport) -> None:
    """Print one document's verbose report."""
    checked = len(report.checks)
    if report.passed:
        success(f"{label} is valid ({checked} schema{'s' if checked != 1 else ''})")
    else:
        count = len(report.violations)
        error(f"{label} is invalid ({count} violation{'s' if count != 1 else ''})")

    for check in report.checks:
        if check.passed:
            detail(check.location, indent=2)
            continue
        for violation in check.violations:
            where = violation.instance_path or "/"
            error(f"{where}: {violation.message}", indent=2)
            detail(violation.schema_uri, indent=4)

    for skipped in report.skipped:
        if skipped.reason is SkipReason.UNSUPPORTED:
            warn(f"Skipped unsupported extension '{skipped.extension}'", indent=2)
        else:
            detail(f"No {report.document_type.value} schema for '{skipped.extension}'", indent=2)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.option(
    "--verbose", "-v", is_flag=True, help="Check every schema and list every violation"
)
@click.option("--timeout", type=float, default=None, help="Seconds allowed per document.")
@click.option(
    "--workers", type=int, default=None, help="Schemas checked concurrently per document."
)
@click.option(
    "--strict-temporal/--no-strict-temporal",
    default=None,
    help="Require datetime or start_datetime/end_datetime on Items (default: on).",
)
@click.pass_context
def validate(
    ctx: click.Context,
    path: Path,
    json_output: bool,
    verbose: bool,
    timeout: float | None,
    workers: int | None,
    strict_temporal: bool | None,
) -> None:
    """Validate a STAC Catalog, Collection, Item or ItemCollection.

    PATH is a JSON file. FeatureCollections are validated feature by feature.

    Examples:

        stacval validate item.json

        stacval validate collection.json --verbose --timeout 30
    """
    use_json = should_output_json(ctx, json_output)

    try:
        settings = load_settings(
            config_path=_config_path(ctx),
            timeout=timeout,
            max_workers=workers,
            strict_temporal=strict_temporal,
        )
        documents = _documents(path)
        with HttpSchemaFetcher(
            timeout=settings.timeout or DEFAULT_TIMEOUT,
            user_agent=settings.user_agent,
        ) as fetcher:
            validator = Validator(
                fetcher,
                max_workers=settings.max_workers,
                strict_temporal=settings.strict_temporal,
                timeout=settings.timeout,
            )
            if verbose or use_json:
                reports = [validator.validate_verbose(document) for document in documents]
                verdicts = [report.passed for report in reports]
            else:
                reports = []
                verdicts = [validator.is_valid(document) for document in documents]
    except (StacvalError, OSError) as err:
        _fail("validate", err, use_json)

    passed = all(verdicts)
    if use_json:
        data = {
            "path": str(path),
            "passed": passed,
            "documents": [report.to_dict() for report in reports],
        }
        if passed:
            output_json_envelope(success_envelope("validate", data))
        else:
            failed = [ErrorDetail.from_report(report) for report in reports if not report.passed]
            output_json_envelope(error_envelope("validate", failed, data=data))
    elif verbose:
        for report in reports:
            _print_report(f"{report.document_type.value} '{report.document_id}'", report)
    else:
        for document, valid in zip(documents, verdicts):
            label = f"{document.type} '{document.id}'"
            if valid:
                success(f"{label} is valid")
            else:
                error(f"{label} is invalid (run with --verbose for details)")

    if not passed:
        raise SystemExit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Schemas command
# ─────────────────────────────────────────────────────────────────────────────


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON")
@click.pass_context
def schemas(ctx: click.Context, path: Path, json_output: bool) -> None:
    """List the schemas a STAC document is validated against.

    Nothing is fetched: this only shows what `stacval validate` would check.
    """
    use_json = should_output_json(ctx, json_output)

    try:
        resolutions = [(document, resolve(document)) for document in _documents(path)]
    except (StacvalError, OSError) as err:
        _fail("schemas", err, use_json)

    if use_json:
        data = {
            "path": str(path),
            "documents": [
                {"id": document.id, "type": document.type, **resolution.to_dict()}
                for document, resolution in resolutions
            ],
        }
        output_json_envelope(success_envelope("schemas", data))
        return

    for document, resolution in resolutions:
        info(f"{document.type} '{document.id}'")
        for location in resolution.locations:
            detail(location, indent=2)
        for skipped in resolution.skipped:
            warn(f"{skipped.extension}: {skipped.reason.value}", indent=2)


# ─────────────────────────────────────────────────────────────────────────────
# Config commands
# ─────────────────────────────────────────────────────────────────────────────


@cli.group()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Inspect stacval configuration."""
    ctx.ensure_object(dict)


@config.command("list")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_list(ctx: click.Context, json_output: bool) -> None:
    """Show effective settings and where each value comes from.

    Precedence: CLI option > STACVAL_<KEY> environment variable > config
    file > built-in default.
    """
    use_json = should_output_json(ctx, json_output)

    try:
        settings = list_settings(_config_path(ctx))
    except StacvalError as err:
        _fail("config_list", err, use_json)

    if use_json:
        output_json_envelope(success_envelope("config_list", {"settings": settings}))
        return

    for key, entry in settings.items():
        info(f"{key}: {entry['value']}")
        detail(f"source: {entry['source']}", indent=2)


if __name__ == "__main__":
    cli()
