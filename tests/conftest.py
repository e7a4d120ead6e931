"""Shared pytest fixtures for stacval tests."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from stacval.errors import SchemaFetchError

ROOT_1_0_0 = "https://schemas.stacspec.org/v1.0.0"
ROOT_RC1 = "https://schemas.stacspec.org/v1.0.0-rc.1"

ITEM_SCHEMA_URI = f"{ROOT_1_0_0}/item-spec/json-schema/item.json"
ITEM_BASICS_URI = f"{ROOT_1_0_0}/item-spec/json-schema/basics.json"
COLLECTION_SCHEMA_URI = f"{ROOT_1_0_0}/collection-spec/json-schema/collection.json"
CATALOG_SCHEMA_URI = f"{ROOT_1_0_0}/catalog-spec/json-schema/catalog.json"
EO_SCHEMA_URI = "https://stac-extensions.github.io/eo/v1.0.0/schema.json"
VIEW_SCHEMA_URI = "https://stac-extensions.github.io/view/v1.0.0/schema.json"
SCI_SCHEMA_URI = "https://stac-extensions.github.io/scientific/v1.0.0/schema.json"
RC1_ITEM_SCHEMA_URI = f"{ROOT_RC1}/item-spec/json-schema/item.json"
RC1_EO_SCHEMA_URI = f"{ROOT_RC1}/extensions/eo/json-schema/schema.json"

DRAFT_07 = "http://json-schema.org/draft-07/schema#"


def _item_schema(schema_id: str) -> dict[str, Any]:
    """Reduced STAC Item core schema; properties are checked through a $ref."""
    return {
        "$schema": DRAFT_07,
        "$id": f"{schema_id}#",
        "title": "STAC Item",
        "type": "object",
        "required": ["stac_version", "type", "id", "geometry", "properties", "links", "assets"],
        "properties": {
            "type": {"const": "Feature"},
            "stac_version": {"type": "string"},
            "stac_extensions": {"type": "array", "uniqueItems": True, "items": {"type": "string"}},
            "id": {"type": "string", "minLength": 1},
            "geometry": {"oneOf": [{"type": "null"}, {"type": "object"}]},
            "bbox": {"type": "array", "minItems": 4, "items": {"type": "number"}},
            "properties": {"$ref": "basics.json"},
            "links": {"type": "array", "items": {"type": "object", "required": ["rel", "href"]}},
            "assets": {"type": "object"},
        },
    }


BASICS_SCHEMA: dict[str, Any] = {
    "$schema": DRAFT_07,
    "$id": f"{ITEM_BASICS_URI}#",
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "datetime": {"type": ["string", "null"]},
        "gsd": {"type": "number", "exclusiveMinimum": 0},
        "instruments": {"type": "array", "items": {"type": "string"}},
    },
}

# Reduced copy of the published eo v1.0.0 schema
EO_SCHEMA: dict[str, Any] = {
    "$schema": DRAFT_07,
    "$id": f"{EO_SCHEMA_URI}#",
    "title": "EO Extension",
    "type": "object",
    "required": ["stac_extensions"],
    "properties": {
        "stac_extensions": {"type": "array", "contains": {"const": EO_SCHEMA_URI}},
        "properties": {
            "type": "object",
            "properties": {
                "eo:cloud_cover": {"type": "number", "minimum": 0, "maximum": 100},
                "eo:bands": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "common_name": {"type": "string"},
                            "center_wavelength": {"type": "number"},
                            "full_width_half_max": {"type": "number"},
                        },
                    },
                },
            },
        },
    },
}

VIEW_SCHEMA: dict[str, Any] = {
    "$schema": DRAFT_07,
    "$id": f"{VIEW_SCHEMA_URI}#",
    "type": "object",
    "properties": {
        "properties": {
            "type": "object",
            "properties": {
                "view:off_nadir": {"type": "number", "minimum": 0, "maximum": 90},
                "view:sun_elevation": {"type": "number", "minimum": -90, "maximum": 90},
            },
        }
    },
}

COLLECTION_SCHEMA: dict[str, Any] = {
    "$schema": DRAFT_07,
    "$id": f"{COLLECTION_SCHEMA_URI}#",
    "type": "object",
    "required": ["stac_version", "type", "id", "description", "license", "extent", "links"],
    "properties": {
        "type": {"const": "Collection"},
        "license": {"type": "string", "pattern": "^[\\w\\-\\.\\+]+$"},
        "extent": {"type": "object", "required": ["spatial", "temporal"]},
    },
}

SCI_SCHEMA: dict[str, Any] = {
    "$schema": DRAFT_07,
    "$id": f"{SCI_SCHEMA_URI}#",
    "type": "object",
    "properties": {"sci:doi": {"type": "string", "pattern": "^10\\.[^\\s]+$"}},
}

CATALOG_SCHEMA: dict[str, Any] = {
    "$schema": DRAFT_07,
    "$id": f"{CATALOG_SCHEMA_URI}#",
    "type": "object",
    "required": ["stac_version", "type", "id", "description", "links"],
    "properties": {"type": {"const": "Catalog"}},
}

# Old layout: no $id, so relative refs resolve against the fetch location
RC1_EO_SCHEMA: dict[str, Any] = {
    "$schema": DRAFT_07,
    "type": "object",
    "properties": {
        "properties": {
            "type": "object",
            "properties": {"eo:cloud_cover": {"type": "number"}},
        }
    },
}


class FakeSchemaFetcher:
    """In-memory SchemaFetcher that records every fetch.

    Unknown URIs fail the way a 404 from the schema host would.
    """

    def __init__(self, documents: dict[str, Any]) -> None:
        self.documents = {
            uri: body if isinstance(body, bytes) else json.dumps(body).encode()
            for uri, body in documents.items()
        }
        self.calls: list[str] = []
        self.timeouts: list[float | None] = []
        self._lock = threading.Lock()

    def fetch(self, uri: str, *, timeout: float | None = None) -> bytes:
        with self._lock:
            self.calls.append(uri)
            self.timeouts.append(timeout)
        if uri not in self.documents:
            raise SchemaFetchError(uri, "HTTP 404 Not Found", status_code=404)
        return self.documents[uri]


# =============================================================================
# Fixture Directory Access
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def stac_dir(fixtures_dir: Path) -> Path:
    """Return the directory holding STAC document fixtures."""
    return fixtures_dir / "stac"


def _load(path: Path) -> dict[str, Any]:
    data: dict[str, Any] = json.loads(path.read_text())
    return data


@pytest.fixture
def item_dict(stac_dir: Path) -> dict[str, Any]:
    """A 1.0.0 Item using the eo and view extensions (by URI)."""
    return _load(stac_dir / "item.json")


@pytest.fixture
def rc1_item_dict(stac_dir: Path) -> dict[str, Any]:
    """A 1.0.0-rc.1 Item declaring the eo extension by identifier."""
    return _load(stac_dir / "item_rc1_eo.json")


@pytest.fixture
def collection_dict(stac_dir: Path) -> dict[str, Any]:
    """A 1.0.0 Collection using the scientific extension."""
    return _load(stac_dir / "collection.json")


@pytest.fixture
def catalog_dict(stac_dir: Path) -> dict[str, Any]:
    """A 1.0.0 Catalog with an unmodeled conformsTo field."""
    return _load(stac_dir / "catalog.json")


@pytest.fixture
def item_collection_dict(stac_dir: Path) -> dict[str, Any]:
    """A FeatureCollection of two Items."""
    return _load(stac_dir / "item_collection.json")


# =============================================================================
# Schema Fixtures
# =============================================================================


@pytest.fixture
def schema_documents() -> dict[str, Any]:
    """Every schema the fixture documents resolve to, keyed by URI."""
    return {
        ITEM_SCHEMA_URI: _item_schema(ITEM_SCHEMA_URI),
        ITEM_BASICS_URI: BASICS_SCHEMA,
        EO_SCHEMA_URI: EO_SCHEMA,
        VIEW_SCHEMA_URI: VIEW_SCHEMA,
        COLLECTION_SCHEMA_URI: COLLECTION_SCHEMA,
        SCI_SCHEMA_URI: SCI_SCHEMA,
        CATALOG_SCHEMA_URI: CATALOG_SCHEMA,
        RC1_ITEM_SCHEMA_URI: {
            "$schema": DRAFT_07,
            "type": "object",
            "required": ["id", "properties"],
        },
        RC1_EO_SCHEMA_URI: RC1_EO_SCHEMA,
    }


@pytest.fixture
def fake_fetcher(schema_documents: dict[str, Any]) -> FakeSchemaFetcher:
    """A fetcher serving the reduced fixture schemas."""
    return FakeSchemaFetcher(schema_documents)


@pytest.fixture
def make_fetcher(schema_documents: dict[str, Any]) -> Callable[..., FakeSchemaFetcher]:
    """Factory for fetchers serving the fixture schemas plus overrides.

    Pass ``None`` as a value to remove a schema (it then fetches as a 404).
    """

    def _make_from(overrides: dict[str, Any] | None = None) -> FakeSchemaFetcher:
        documents = dict(schema_documents)
        for uri, body in (overrides or {}).items():
            if body is None:
                documents.pop(uri, None)
            else:
                documents[uri] = body
        return FakeSchemaFetcher(documents)

    return _make_from
