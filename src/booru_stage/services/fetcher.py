"""Outbound download of remote post content."""
from __future__ import annotations

import logging
from typing import Protocol

import httpx

from booru_stage.core.settings import Settings, settings
from booru_stage.services.errors import ContentTooLargeError, FetchError

logger = logging.getLogger(__name__)

__all__ = ["Fetcher", "HttpFetcher"]


class Fetcher(Protocol):
    """Blocking download collaborator used by content ingestion."""

    def download(self, url: str) -> bytes: ...


class HttpFetcher:
    """Download content over HTTP(S) with httpx.

    The body is streamed and abandoned as soon as it grows past
    ``max_post_size``; nothing larger than an acceptable upload is buffered.
    """

    def __init__(
        self,
        config: Settings = settings,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._max_bytes = config.max_post_size
        self._client = httpx.Client(
            timeout=config.fetch_timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )

    def download(self, url: str) -> bytes:
        """Return the body served at ``url``.

        Raises:
            FetchError: On transport failures or a non-success status.
            ContentTooLargeError: If the body exceeds the maximum post size.
        """
        logger.debug("Downloading %s", url)
        chunks: list[bytes] = []
        received = 0
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                for chunk in response.iter_bytes():
                    received += len(chunk)
                    if received > self._max_bytes:
                        raise ContentTooLargeError(received, self._max_bytes)
                    chunks.append(chunk)
        except httpx.HTTPStatusError as err:
            raise FetchError(url, f"HTTP {err.response.status_code}") from err
        except httpx.HTTPError as err:
            raise FetchError(url, str(err) or type(err).__name__) from err
        return b"".join(chunks)

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()
