"""Validator: check a STAC document against every schema it resolves to.

For each resolved location, in order, the validator fetches the schema,
compiles it once and checks the serialized document against it.

- is_valid() stops at the first schema that reports a violation.
- validate_verbose() checks every schema and collects every violation.

Fatal conditions (malformed stac_version, unreachable or invalid schema,
deadline, cancellation) propagate as exceptions and abort the call.
Nothing is retried.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any

from stacval.deadline import Deadline
from stacval.fetch import HttpSchemaFetcher, SchemaFetcher
from stacval.models.item import Item
from stacval.models.stac_object import StacDocument, StacObject
from stacval.schema.resolver import resolve
from stacval.validation.results import (
    TEMPORAL_RANGE_CHECK,
    SchemaCheck,
    SchemaViolation,
    ValidationReport,
)
from stacval.validation.schema import CompiledSchema, JsonSchemaEngine, build_registry

logger = logging.getLogger(__name__)


class _CallContext:
    """Per-call state: fetched bytes and compiled schemas keyed by URI.

    Lives for one is_valid / validate_verbose call only. Each URI is
    fetched and compiled at most once per call, even when several workers
    ask for it at the same time.
    """

    def __init__(self, fetcher: SchemaFetcher, engine: JsonSchemaEngine, deadline: Deadline) -> None:
        self.fetcher = fetcher
        self.engine = engine
        self.deadline = deadline
        self.registry = build_registry(self.fetch)
        self._lock = threading.Lock()
        self._uri_locks: dict[str, threading.Lock] = {}
        self._raw: dict[str, bytes] = {}
        self._compiled: dict[str, CompiledSchema] = {}

    def _lock_for(self, uri: str) -> threading.Lock:
        with self._lock:
            return self._uri_locks.setdefault(uri, threading.Lock())

    def fetch(self, uri: str) -> bytes:
        with self._lock_for(uri):
            if uri not in self._raw:
                timeout = self.deadline.remaining()
                self._raw[uri] = self.fetcher.fetch(uri, timeout=timeout)
            return self._raw[uri]

    def compiled(self, uri: str) -> CompiledSchema:
        raw = self.fetch(uri)
        with self._lock_for(uri):
            if uri not in self._compiled:
                self.deadline.check()
                self._compiled[uri] = self.engine.compile(uri, raw, self.registry)
            return self._compiled[uri]


class Validator:
    """Validates STAC documents against their resolved JSON-Schemas.

    Args:
        fetcher: Source of schema bytes. Defaults to HttpSchemaFetcher.
        engine: JSON-Schema engine. Defaults to JsonSchemaEngine.
        max_workers: Schemas checked concurrently. 1 checks sequentially.
        strict_temporal: Report Items whose properties have neither
            datetime nor both start_datetime and end_datetime.
        timeout: Default seconds allowed per call when no deadline is given.

    Use it as a context manager (or call close()) to release the default
    fetcher's HTTP client.

    Example:
        >>> with Validator(max_workers=4) as validator:
        ...     validator.is_valid(item)
        True
    """

    def __init__(
        self,
        fetcher: SchemaFetcher | None = None,
        *,
        engine: JsonSchemaEngine | None = None,
        max_workers: int = 1,
        strict_temporal: bool = True,
        timeout: float | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self._owned_fetcher: HttpSchemaFetcher | None = None
        if fetcher is None:
            fetcher = self._owned_fetcher = HttpSchemaFetcher()
        self.fetcher: SchemaFetcher = fetcher
        self.engine = engine if engine is not None else JsonSchemaEngine()
        self.max_workers = max_workers
        self.strict_temporal = strict_temporal
        self.timeout = timeout

    def close(self) -> None:
        """Close the default fetcher if this validator created it."""
        if self._owned_fetcher is not None:
            self._owned_fetcher.close()

    def __enter__(self) -> Validator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def is_valid(
        self,
        document: StacDocument | StacObject,
        *,
        deadline: Deadline | None = None,
    ) -> bool:
        """Return True if the document conforms to every resolved schema.

        Stops at the first schema that reports a violation.

        Args:
            document: Catalog, Collection or Item (or a StacObject).
            deadline: Deadline and cancel signal for this call. Defaults to
                a deadline built from the validator's timeout.

        Raises:
            VersionParseError: If stac_version is malformed.
            SchemaFetchError: If a schema cannot be fetched.
            SchemaCompilationError: If a schema is not a valid JSON-Schema.
            DeadlineExceededError: If the deadline passes.
            ValidationCancelledError: If the call is cancelled.
        """
        return self._run(document, deadline, fail_fast=True).passed

    def validate_verbose(
        self,
        document: StacDocument | StacObject,
        *,
        deadline: Deadline | None = None,
    ) -> ValidationReport:
        """Check every resolved schema and collect every violation.

        Takes the same arguments and raises the same errors as is_valid().

        Returns:
            ValidationReport whose checks follow schema location order.
        """
        return self._run(document, deadline, fail_fast=False)

    def _run(
        self,
        document: StacDocument | StacObject,
        deadline: Deadline | None,
        *,
        fail_fast: bool,
    ) -> ValidationReport:
        obj = StacObject.of(document)
        deadline = deadline if deadline is not None else Deadline(self.timeout)
        deadline.check()

        resolution = resolve(obj)
        report = ValidationReport(
            document_id=obj.id,
            document_type=obj.declared_type,
            skipped=list(resolution.skipped),
        )
        logger.debug(
            "Validating %s %r against %d schema(s)",
            obj.declared_type.value,
            obj.id,
            len(resolution.locations),
        )

        if self.strict_temporal:
            temporal = _temporal_range_check(obj)
            if temporal is not None:
                report.checks.append(temporal)
                if fail_fast:
                    return report

        context = _CallContext(self.fetcher, self.engine, deadline)
        instance = obj.to_instance()
        if self.max_workers == 1 or len(resolution.locations) == 1:
            report.checks.extend(
                self._check_sequential(resolution.locations, instance, context, fail_fast)
            )
        else:
            report.checks.extend(
                self._check_parallel(resolution.locations, instance, context, fail_fast)
            )
        return report

    def _check_one(
        self,
        location: str,
        instance: dict[str, Any],
        context: _CallContext,
        first_only: bool,
    ) -> SchemaCheck:
        context.deadline.check()
        compiled = context.compiled(location)
        violations = self.engine.check(compiled, instance, first_only=first_only)
        logger.debug("%s: %d violation(s)", location, len(violations))
        return SchemaCheck(location=location, violations=violations)

    def _check_sequential(
        self,
        locations: list[str],
        instance: dict[str, Any],
        context: _CallContext,
        fail_fast: bool,
    ) -> list[SchemaCheck]:
        checks: list[SchemaCheck] = []
        for location in locations:
            check = self._check_one(location, instance, context, fail_fast)
            checks.append(check)
            if fail_fast and not check.passed:
                break
        return checks

    def _check_parallel(
        self,
        locations: list[str],
        instance: dict[str, Any],
        context: _CallContext,
        fail_fast: bool,
    ) -> list[SchemaCheck]:
        """Check locations on a thread pool.

        Results are keyed by location index, so the returned order matches
        ``locations`` regardless of completion order.
        """
        completed: dict[int, SchemaCheck] = {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            pending: dict[Future[SchemaCheck], int] = {}
            work = iter(enumerate(locations))

            def submit_next() -> None:
                for index, location in work:
                    future = executor.submit(
                        self._check_one, location, instance, context, fail_fast
                    )
                    pending[future] = index
                    return

            # Submit incrementally so fail-fast can stop before starting more work
            for _ in range(self.max_workers):
                submit_next()

            try:
                while pending:
                    done = next(iter(as_completed(pending)))
                    index = pending.pop(done)
                    check = done.result()
                    completed[index] = check

                    if fail_fast and not check.passed:
                        break
                    submit_next()
            finally:
                # Note: cancel() only stops futures that have not started;
                # running checks finish before the executor shuts down.
                for pending_future in pending:
                    pending_future.cancel()

        return [completed[index] for index in sorted(completed)]


def _temporal_range_check(obj: StacObject) -> SchemaCheck | None:
    document = obj.document
    if not isinstance(document, Item):
        return None
    problem = document.properties.common.temporal_range_problem()
    if problem is None:
        return None
    return SchemaCheck(
        location=TEMPORAL_RANGE_CHECK,
        violations=[
            SchemaViolation(
                schema_uri=TEMPORAL_RANGE_CHECK,
                instance_path="/properties",
                message=problem,
                keyword="required",
            )
        ],
    )


def is_valid(document: StacDocument | StacObject, **kwargs: Any) -> bool:
    """Validate with a default Validator; see Validator.is_valid().

    Keyword arguments other than ``deadline`` configure the Validator.
    """
    deadline = kwargs.pop("deadline", None)
    with Validator(**kwargs) as validator:
        return validator.is_valid(document, deadline=deadline)


def validate_verbose(document: StacDocument | StacObject, **kwargs: Any) -> ValidationReport:
    """Validate with a default Validator; see Validator.validate_verbose().

    Keyword arguments other than ``deadline`` configure the Validator.
    """
    deadline = kwargs.pop("deadline", None)
    with Validator(**kwargs) as validator:
        return validator.validate_verbose(document, deadline=deadline)
