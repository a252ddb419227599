"""Asynchronous download client over :mod:`httpx`.

:class:`Downloader` performs exactly one GET request per call with no custom
headers and no retry. Network-level failures are re-raised as
:class:`~fetchcache.exceptions.ConnectionError_` chained to the original
:mod:`httpx` exception.

By default any completed response counts as success, whatever its status.
With ``raise_for_status`` enabled, non-2xx statuses raise
:class:`~fetchcache.exceptions.NotFoundError` (404) or
:class:`~fetchcache.exceptions.HTTPStatusError` (anything else).
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from fetchcache.exceptions import ConnectionError_, HTTPStatusError, NotFoundError
from fetchcache.models import CacheConfig

logger = logging.getLogger(__name__)


class Downloader:
    """Fetch remote resources as bytes or decoded text.

    Args:
        config: Status-check settings. Timeouts are httpx defaults and
            redirects are followed.
        client: Optional pre-built :class:`httpx.AsyncClient`. When given,
            the downloader does not close it; the caller owns it. Tests pass
            a client backed by :class:`httpx.MockTransport`.

    Example::

        async with Downloader(CacheConfig()) as downloader:
            data = await downloader.fetch_bytes("https://example.com/a.mp3")
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._config = config or CacheConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)

    async def __aenter__(self) -> Downloader:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this downloader created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------ #
    # Public fetch methods
    # ------------------------------------------------------------------ #

    async def fetch_bytes(self, url: str) -> bytes:
        """GET *url* and return the full response body.

        Raises:
            ConnectionError_: On network / timeout errors.
            NotFoundError: On 404 when ``raise_for_status`` is enabled.
            HTTPStatusError: On any other non-2xx status when
                ``raise_for_status`` is enabled.
        """
        response = await self._get(url)
        return response.content

    async def fetch_text(self, url: str) -> str:
        """GET *url* and return the body decoded as UTF-8."""
        response = await self._get(url)
        return response.content.decode("utf-8")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _get(self, url: str) -> httpx.Response:
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url)
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Download of {url} failed: {exc}") from exc

        logger.debug("GET %s -> %s (%d bytes)", url, response.status_code, len(response.content))
        if self._config.raise_for_status:
            self._check_status(url, response)
        return response

    def _check_status(self, url: str, response: httpx.Response) -> None:
        """Raise a typed exception for a non-2xx status."""
        status = response.status_code
        if 200 <= status < 300:
            return
        message = f"HTTP {status} for {url}"
        if status == 404:
            raise NotFoundError(message)
        raise HTTPStatusError(message, status_code=status)
