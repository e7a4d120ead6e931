"""Reading STAC documents from JSON text and files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from stacval.errors import DecodeError
from stacval.models.catalog import Catalog
from stacval.models.collection import Collection
from stacval.models.item import Item
from stacval.models.item_collection import ItemCollection
from stacval.models.stac_object import decode_document

logger = logging.getLogger(__name__)


def parse_json(text: str | bytes, source: str = "STAC document") -> Any:
    """Parse JSON text.

    Args:
        text: JSON text or UTF-8 bytes.
        source: Name used in error messages (e.g. the file path).

    Raises:
        DecodeError: If the text is not valid JSON.
    """
    try:
        return json.loads(text)
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(source, f"malformed JSON ({e})") from e


def from_json(
    text: str | bytes, source: str = "STAC document"
) -> Catalog | Collection | Item | ItemCollection:
    """Decode a STAC document from JSON text.

    Args:
        text: JSON text or UTF-8 bytes.
        source: Name used in error messages.

    Returns:
        The document variant named by its "type" field.

    Raises:
        DecodeError: If the text is not JSON or not a decodable document.
    """
    return decode_document(parse_json(text, source))


def read_document(path: Path) -> Catalog | Collection | Item | ItemCollection:
    """Read and decode a STAC document from a file.

    Args:
        path: JSON file.

    Returns:
        The decoded document.

    Raises:
        OSError: If the file cannot be read (FileNotFoundError when missing).
        DecodeError: If the file is not a decodable document.
    """
    logger.debug("Reading %s", path)
    return from_json(path.read_bytes(), source=str(path))


def to_json(
    document: Catalog | Collection | Item | ItemCollection, *, indent: int | None = 2
) -> str:
    """Encode a document to JSON text, unrecognized fields included."""
    return json.dumps(document.to_dict(), indent=indent)
