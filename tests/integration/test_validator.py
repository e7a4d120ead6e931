"""Integration tests for Validator: resolution, fetching, compiling and checking.

Schemas are served in-process by FakeSchemaFetcher (see conftest.py), so
these tests exercise the real jsonschema/referencing stack end to end
without network access.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from conftest import (
    CATALOG_SCHEMA_URI,
    COLLECTION_SCHEMA_URI,
    EO_SCHEMA_URI,
    ITEM_BASICS_URI,
    ITEM_SCHEMA_URI,
    RC1_EO_SCHEMA_URI,
    RC1_ITEM_SCHEMA_URI,
    SCI_SCHEMA_URI,
    VIEW_SCHEMA_URI,
    FakeSchemaFetcher,
)

from stacval import is_valid, validate_verbose
from stacval.deadline import Deadline
from stacval.errors import (
    DeadlineExceededError,
    SchemaCompilationError,
    SchemaFetchError,
    ValidationCancelledError,
    VersionParseError,
)
from stacval.fetch import HttpSchemaFetcher
from stacval.models import Catalog, Collection, Item, ItemCollection, StacObject, StacType
from stacval.schema import SkippedExtension, SkipReason
from stacval.validation import TEMPORAL_RANGE_CHECK, Validator

MakeFetcher = Callable[..., FakeSchemaFetcher]


class _CancellingFetcher:
    """Serves schemas and cancels the deadline after the first fetch."""

    def __init__(self, inner: FakeSchemaFetcher, deadline: Deadline) -> None:
        self.inner = inner
        self.deadline = deadline

    def fetch(self, uri: str, *, timeout: float | None = None) -> bytes:
        body = self.inner.fetch(uri, timeout=timeout)
        self.deadline.cancel()
        return body


class _SlowFetcher:
    """Serves schemas after a delay."""

    def __init__(self, inner: FakeSchemaFetcher, delay: float) -> None:
        self.inner = inner
        self.delay = delay

    def fetch(self, uri: str, *, timeout: float | None = None) -> bytes:
        time.sleep(self.delay)
        return self.inner.fetch(uri, timeout=timeout)


class _GatedFetcher:
    """Holds fetches of the gated URIs for ``hold`` seconds."""

    def __init__(self, inner: FakeSchemaFetcher, gated: set[str], hold: float) -> None:
        self.inner = inner
        self.gated = gated
        self.hold = hold

    def fetch(self, uri: str, *, timeout: float | None = None) -> bytes:
        if uri in self.gated:
            time.sleep(self.hold)
        return self.inner.fetch(uri, timeout=timeout)


class TestValidDocuments:
    """Conforming documents pass against every resolved schema."""

    @pytest.mark.integration
    def test_item(self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher) -> None:
        validator = Validator(fake_fetcher)

        assert validator.is_valid(Item.from_dict(item_dict))
        assert set(fake_fetcher.calls) == {
            ITEM_SCHEMA_URI,
            ITEM_BASICS_URI,
            EO_SCHEMA_URI,
            VIEW_SCHEMA_URI,
        }

    @pytest.mark.integration
    def test_item_report(self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher) -> None:
        report = Validator(fake_fetcher).validate_verbose(Item.from_dict(item_dict))

        assert report.passed
        assert report.document_id == "S2B_33SVB_20210221_0_L2A"
        assert report.document_type is StacType.ITEM
        assert [check.location for check in report.checks] == [
            ITEM_SCHEMA_URI,
            EO_SCHEMA_URI,
            VIEW_SCHEMA_URI,
        ]

    @pytest.mark.integration
    def test_collection(
        self, collection_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        report = Validator(fake_fetcher).validate_verbose(Collection.from_dict(collection_dict))

        assert report.passed
        assert [check.location for check in report.checks] == [
            COLLECTION_SCHEMA_URI,
            SCI_SCHEMA_URI,
        ]

    @pytest.mark.integration
    def test_catalog(self, catalog_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher) -> None:
        assert Validator(fake_fetcher).is_valid(Catalog.from_dict(catalog_dict))
        assert fake_fetcher.calls == [CATALOG_SCHEMA_URI]

    @pytest.mark.integration
    def test_rc1_item_uses_identifier_schemas(
        self, rc1_item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        assert Validator(fake_fetcher).is_valid(Item.from_dict(rc1_item_dict))
        assert fake_fetcher.calls == [RC1_ITEM_SCHEMA_URI, RC1_EO_SCHEMA_URI]

    @pytest.mark.integration
    def test_item_collection_features(
        self, item_collection_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        validator = Validator(fake_fetcher)
        features = ItemCollection.from_dict(item_collection_dict).features

        assert all(validator.is_valid(feature) for feature in features)

    @pytest.mark.integration
    def test_accepts_stac_object(
        self, catalog_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        obj = StacObject.of(Catalog.from_dict(catalog_dict))

        assert Validator(fake_fetcher).is_valid(obj)

    @pytest.mark.integration
    def test_module_level_functions(
        self, catalog_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        catalog = Catalog.from_dict(catalog_dict)

        assert is_valid(catalog, fetcher=fake_fetcher, deadline=Deadline(60))
        assert validate_verbose(catalog, fetcher=fake_fetcher, max_workers=2).passed


class TestInvalidDocuments:
    """Violations are reported as values, never raised."""

    @pytest.mark.integration
    def test_ill_typed_extension_field(
        self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        item_dict["properties"]["eo:cloud_cover"] = "high"
        item = Item.from_dict(item_dict)

        assert not Validator(fake_fetcher).is_valid(item)

        report = Validator(fake_fetcher).validate_verbose(item)
        assert report.failed_locations == [EO_SCHEMA_URI]
        [violation] = report.violations
        assert violation.instance_path == "/properties/eo:cloud_cover"
        assert violation.keyword == "type"

    @pytest.mark.integration
    def test_fail_fast_stops_at_first_failing_schema(
        self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        item_dict["id"] = ""
        item_dict["properties"]["eo:cloud_cover"] = "high"

        assert not Validator(fake_fetcher).is_valid(Item.from_dict(item_dict))
        assert EO_SCHEMA_URI not in fake_fetcher.calls
        assert VIEW_SCHEMA_URI not in fake_fetcher.calls

    @pytest.mark.integration
    def test_verbose_collects_every_schema(
        self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        item_dict["id"] = ""
        item_dict["properties"]["eo:cloud_cover"] = "high"
        item_dict["properties"]["view:off_nadir"] = 120

        report = Validator(fake_fetcher).validate_verbose(Item.from_dict(item_dict))

        assert report.failed_locations == [ITEM_SCHEMA_URI, EO_SCHEMA_URI, VIEW_SCHEMA_URI]
        assert [v.instance_path for v in report.violations] == [
            "/id",
            "/properties/eo:cloud_cover",
            "/properties/view:off_nadir",
        ]

    @pytest.mark.integration
    def test_violation_behind_ref(
        self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        item_dict["properties"]["gsd"] = 0

        report = Validator(fake_fetcher).validate_verbose(Item.from_dict(item_dict))

        [violation] = report.violations
        assert violation.schema_uri == ITEM_SCHEMA_URI
        assert violation.instance_path == "/properties/gsd"

    @pytest.mark.integration
    def test_collection_extension_violation(
        self, collection_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        collection_dict["sci:doi"] = "not-a-doi"

        report = Validator(fake_fetcher).validate_verbose(Collection.from_dict(collection_dict))

        assert report.failed_locations == [SCI_SCHEMA_URI]

    @pytest.mark.integration
    def test_skipped_extensions_reported(
        self, rc1_item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        rc1_item_dict["stac_extensions"] = ["sat", "eo"]

        report = Validator(fake_fetcher).validate_verbose(Item.from_dict(rc1_item_dict))

        assert report.passed
        assert report.skipped == [SkippedExtension("sat", SkipReason.UNSUPPORTED)]


class TestTemporalRange:
    """Items need datetime or both start_datetime and end_datetime."""

    @pytest.fixture
    def undated_item(self, rc1_item_dict: dict[str, Any]) -> Item:
        rc1_item_dict["properties"]["datetime"] = None
        rc1_item_dict["properties"]["start_datetime"] = "2021-01-01T00:00:00Z"
        return Item.from_dict(rc1_item_dict)

    @pytest.mark.integration
    def test_strict_fails_before_fetching(
        self, undated_item: Item, fake_fetcher: FakeSchemaFetcher
    ) -> None:
        assert not Validator(fake_fetcher).is_valid(undated_item)
        assert fake_fetcher.calls == []

    @pytest.mark.integration
    def test_strict_report_lists_precheck_first(
        self, undated_item: Item, fake_fetcher: FakeSchemaFetcher
    ) -> None:
        report = Validator(fake_fetcher).validate_verbose(undated_item)

        assert [check.location for check in report.checks] == [
            TEMPORAL_RANGE_CHECK,
            RC1_ITEM_SCHEMA_URI,
            RC1_EO_SCHEMA_URI,
        ]
        assert report.failed_locations == [TEMPORAL_RANGE_CHECK]
        assert "end_datetime is missing" in report.violations[0].message

    @pytest.mark.integration
    def test_lenient(self, undated_item: Item, fake_fetcher: FakeSchemaFetcher) -> None:
        assert Validator(fake_fetcher, strict_temporal=False).is_valid(undated_item)

    @pytest.mark.integration
    def test_start_and_end_pass(
        self, item_collection_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        second = ItemCollection.from_dict(item_collection_dict).features[1]

        assert Validator(fake_fetcher).is_valid(second)


class TestConcurrency:
    """Parallel checking produces the same results as sequential checking."""

    @pytest.mark.integration
    def test_same_report_as_sequential(
        self, item_dict: dict[str, Any], make_fetcher: MakeFetcher
    ) -> None:
        item_dict["id"] = ""
        item_dict["properties"]["view:off_nadir"] = 120
        item = Item.from_dict(item_dict)

        sequential = Validator(make_fetcher()).validate_verbose(item)
        parallel = Validator(make_fetcher(), max_workers=3).validate_verbose(item)

        assert parallel.to_dict() == sequential.to_dict()

    @pytest.mark.integration
    def test_parallel_fail_fast(
        self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        item_dict["properties"]["eo:cloud_cover"] = "high"

        assert not Validator(fake_fetcher, max_workers=2).is_valid(Item.from_dict(item_dict))

    @pytest.mark.integration
    def test_parallel_fail_fast_submits_no_new_checks(
        self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        """The core schema fails while eo is held; view is never started."""
        item_dict["id"] = ""
        fetcher = _GatedFetcher(fake_fetcher, gated={EO_SCHEMA_URI}, hold=0.5)

        assert not Validator(fetcher, max_workers=2).is_valid(Item.from_dict(item_dict))

        # eo was already running, so it finishes; view was never submitted
        assert EO_SCHEMA_URI in fake_fetcher.calls
        assert VIEW_SCHEMA_URI not in fake_fetcher.calls

    @pytest.mark.integration
    def test_each_schema_fetched_once_per_call(
        self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        item_dict["stac_extensions"].append(EO_SCHEMA_URI)
        item = Item.from_dict(item_dict)

        report = Validator(fake_fetcher, max_workers=4).validate_verbose(item)

        assert [check.location for check in report.checks].count(EO_SCHEMA_URI) == 2
        assert fake_fetcher.calls.count(EO_SCHEMA_URI) == 1

    @pytest.mark.integration
    def test_nothing_cached_across_calls(
        self, catalog_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        validator = Validator(fake_fetcher)
        catalog = Catalog.from_dict(catalog_dict)

        validator.is_valid(catalog)
        validator.is_valid(catalog)

        assert fake_fetcher.calls == [CATALOG_SCHEMA_URI, CATALOG_SCHEMA_URI]

    @pytest.mark.integration
    def test_shared_validator_across_threads(
        self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        validator = Validator(fake_fetcher, max_workers=2)
        item = Item.from_dict(item_dict)
        results: list[bool] = []

        threads = [
            threading.Thread(target=lambda: results.append(validator.is_valid(item)))
            for _ in range(4)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [True, True, True, True]

    @pytest.mark.integration
    def test_rejects_zero_workers(self, fake_fetcher: FakeSchemaFetcher) -> None:
        with pytest.raises(ValueError, match="max_workers"):
            Validator(fake_fetcher, max_workers=0)


class _ClosableFetcher:
    """Wraps a fetcher and records close()."""

    def __init__(self, inner: FakeSchemaFetcher) -> None:
        self.inner = inner
        self.closed = False

    def fetch(self, uri: str, *, timeout: float | None = None) -> bytes:
        return self.inner.fetch(uri, timeout=timeout)

    def close(self) -> None:
        self.closed = True


class TestLifecycle:
    """A Validator closes only the fetcher it created itself."""

    @pytest.mark.integration
    def test_closes_default_fetcher(self) -> None:
        with Validator() as validator:
            fetcher = validator.fetcher

        assert isinstance(fetcher, HttpSchemaFetcher)
        assert fetcher._client.is_closed

    @pytest.mark.integration
    def test_leaves_caller_fetcher_open(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        with Validator(HttpSchemaFetcher(client=client)):
            pass

        assert not client.is_closed
        client.close()

    @pytest.mark.integration
    def test_module_functions_close_their_validator(
        self,
        catalog_dict: dict[str, Any],
        fake_fetcher: FakeSchemaFetcher,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        created: list[_ClosableFetcher] = []

        def factory() -> _ClosableFetcher:
            created.append(_ClosableFetcher(fake_fetcher))
            return created[-1]

        monkeypatch.setattr("stacval.validation.validator.HttpSchemaFetcher", factory)
        catalog = Catalog.from_dict(catalog_dict)

        assert is_valid(catalog)
        assert validate_verbose(catalog).passed
        assert [fetcher.closed for fetcher in created] == [True, True]


class TestFatalErrors:
    """Fetch, compile, version, deadline and cancel failures abort the call."""

    @pytest.mark.integration
    def test_malformed_version(
        self, catalog_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        catalog_dict["stac_version"] = "1.0"

        with pytest.raises(VersionParseError):
            Validator(fake_fetcher).is_valid(Catalog.from_dict(catalog_dict))
        assert fake_fetcher.calls == []

    @pytest.mark.integration
    @pytest.mark.parametrize("max_workers", [1, 3])
    def test_missing_extension_schema(
        self, item_dict: dict[str, Any], make_fetcher: MakeFetcher, max_workers: int
    ) -> None:
        fetcher = make_fetcher({VIEW_SCHEMA_URI: None})

        with pytest.raises(SchemaFetchError) as exc_info:
            Validator(fetcher, max_workers=max_workers).validate_verbose(Item.from_dict(item_dict))

        assert exc_info.value.uri == VIEW_SCHEMA_URI
        assert exc_info.value.status_code == 404

    @pytest.mark.integration
    def test_malformed_extension_url(
        self, item_dict: dict[str, Any], schema_documents: dict[str, Any]
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = schema_documents.get(str(request.url))
            return httpx.Response(404) if body is None else httpx.Response(200, json=body)

        item_dict["stac_extensions"] = ["http://[::1"]
        client = httpx.Client(transport=httpx.MockTransport(handler))

        with pytest.raises(SchemaFetchError) as exc_info:
            Validator(HttpSchemaFetcher(client=client)).validate_verbose(Item.from_dict(item_dict))

        assert exc_info.value.uri == "http://[::1"

    @pytest.mark.integration
    def test_missing_referenced_schema(
        self, item_dict: dict[str, Any], make_fetcher: MakeFetcher
    ) -> None:
        fetcher = make_fetcher({ITEM_BASICS_URI: None})

        with pytest.raises(SchemaFetchError) as exc_info:
            Validator(fetcher).is_valid(Item.from_dict(item_dict))

        assert exc_info.value.uri == ITEM_BASICS_URI

    @pytest.mark.integration
    def test_schema_is_not_json(self, item_dict: dict[str, Any], make_fetcher: MakeFetcher) -> None:
        fetcher = make_fetcher({EO_SCHEMA_URI: b"<html>Moved</html>"})

        with pytest.raises(SchemaCompilationError) as exc_info:
            Validator(fetcher).is_valid(Item.from_dict(item_dict))

        assert exc_info.value.uri == EO_SCHEMA_URI

    @pytest.mark.integration
    def test_schema_is_not_a_schema(
        self, catalog_dict: dict[str, Any], make_fetcher: MakeFetcher
    ) -> None:
        fetcher = make_fetcher({CATALOG_SCHEMA_URI: {"type": "catalog"}})

        with pytest.raises(SchemaCompilationError):
            Validator(fetcher).is_valid(Catalog.from_dict(catalog_dict))

    @pytest.mark.integration
    def test_expired_deadline(
        self, catalog_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        with pytest.raises(DeadlineExceededError):
            Validator(fake_fetcher).is_valid(Catalog.from_dict(catalog_dict), deadline=Deadline(0))
        assert fake_fetcher.calls == []

    @pytest.mark.integration
    def test_deadline_passes_during_fetch(
        self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        validator = Validator(_SlowFetcher(fake_fetcher, delay=0.05), timeout=0.01)

        with pytest.raises(DeadlineExceededError):
            validator.is_valid(Item.from_dict(item_dict))

    @pytest.mark.integration
    def test_cancel_mid_call(self, item_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher) -> None:
        deadline = Deadline()
        validator = Validator(_CancellingFetcher(fake_fetcher, deadline))

        with pytest.raises(ValidationCancelledError):
            validator.validate_verbose(Item.from_dict(item_dict), deadline=deadline)
        assert fake_fetcher.calls == [ITEM_SCHEMA_URI]

    @pytest.mark.integration
    def test_remaining_time_passed_to_fetcher(
        self, catalog_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        Validator(fake_fetcher, timeout=30).is_valid(Catalog.from_dict(catalog_dict))

        [timeout] = fake_fetcher.timeouts
        assert timeout is not None
        assert 0 < timeout <= 30

    @pytest.mark.integration
    def test_no_deadline_means_fetcher_default(
        self, catalog_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        Validator(fake_fetcher).is_valid(Catalog.from_dict(catalog_dict))

        assert fake_fetcher.timeouts == [None]

    @pytest.mark.integration
    def test_item_collection_is_not_validatable(
        self, item_collection_dict: dict[str, Any], fake_fetcher: FakeSchemaFetcher
    ) -> None:
        item_collection = ItemCollection.from_dict(item_collection_dict)

        with pytest.raises(TypeError):
            Validator(fake_fetcher).is_valid(item_collection)  # type: ignore[arg-type]
