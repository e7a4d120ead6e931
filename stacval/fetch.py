"""Fetching schema documents.

The validator depends only on the SchemaFetcher protocol. HttpSchemaFetcher
is the default implementation, built on httpx. Tests and offline callers
pass their own fetcher (for example, one serving schemas from disk).

Every failure, malformed URLs and non-2xx statuses included, becomes a
SchemaFetchError. Nothing is retried here.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import httpx

from stacval.errors import SchemaFetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "stacval/0.1.0"
DEFAULT_TIMEOUT = 30.0


@runtime_checkable
class SchemaFetcher(Protocol):
    """Anything that can return the raw bytes behind a schema URI."""

    def fetch(self, uri: str, *, timeout: float | None = None) -> bytes:
        """Return the document at ``uri``.

        Args:
            uri: Absolute schema URI.
            timeout: Seconds allowed for this fetch, or None for the
                fetcher's default.

        Raises:
            SchemaFetchError: If the document cannot be retrieved.
        """
        ...


class HttpSchemaFetcher:
    """SchemaFetcher over HTTP(S) using an httpx.Client.

    Args:
        timeout: Default per-request timeout in seconds.
        user_agent: User-Agent header sent with every request.
        client: Pre-built client to use instead of creating one (its
            headers and transport are used as-is).
    """

    def __init__(
        self,
        timeout: float | None = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.Client | None = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    def fetch(self, uri: str, *, timeout: float | None = None) -> bytes:
        """Fetch a schema document.

        Args:
            uri: Schema URL.
            timeout: Overrides the default timeout for this request.

        Returns:
            Response body.

        Raises:
            SchemaFetchError: On an invalid URL, timeout, transport error or
                non-2xx status.
        """
        request_timeout = httpx.Timeout(timeout) if timeout is not None else httpx.USE_CLIENT_DEFAULT
        logger.debug("Fetching schema %s", uri)
        try:
            response = self._client.get(uri, timeout=request_timeout)
        except httpx.TimeoutException as e:
            raise SchemaFetchError(uri, "timeout") from e
        except httpx.HTTPError as e:
            raise SchemaFetchError(uri, str(e) or type(e).__name__) from e
        except httpx.InvalidURL as e:
            raise SchemaFetchError(uri, f"invalid URL ({e})") from e

        if not response.is_success:
            raise SchemaFetchError(
                uri,
                f"HTTP {response.status_code} {response.reason_phrase}".rstrip(),
                status_code=response.status_code,
            )
        return response.content

    def close(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpSchemaFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
