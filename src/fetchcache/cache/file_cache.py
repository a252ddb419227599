"""Get-or-download file cache.

:class:`FileCache` owns one flat cache directory nested inside an
application-private storage root. An entry is identified only by its file
name: no source URL, timestamp, or validator is stored, so two URLs mapped to
the same name overwrite each other, and a hit never goes back to the network
to check freshness.

A miss downloads the resource through :class:`~fetchcache.client.Downloader`
and, depending on the call's options, either writes the bytes to disk or
returns the body decoded as text without writing anything:

=====================  ===========  ==================================
``cache_enabled``      ``is_file``  result on miss
=====================  ===========  ==================================
``None`` / ``True``    any          bytes written, :class:`CachedFile`
``False``              ``True``     bytes written, :class:`CachedFile`
``False``              ``None`` /   body decoded as UTF-8,
                       ``False``    :class:`TransientText`
=====================  ===========  ==================================

There is no locking: concurrent misses for the same name each download and
write, and the last write wins. A write interrupted by an error or by
cancellation can leave a partial file behind.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from fetchcache.client import Downloader
from fetchcache.models import (
    CachedFile,
    CacheConfig,
    CacheResult,
    FetchOptions,
    GlobalConfig,
    TransientText,
)

logger = logging.getLogger(__name__)

_LOG_TAG = "[FileCache]"


class FileCache:
    """Disk cache for remote files keyed by file name.

    Construct one instance at application start and pass it to the code that
    needs it; every holder then sees the same cache directory.

    Args:
        root: Application-private storage root. The cache directory is
            ``root / folder_name`` and is created by the first write.
        folder_name: Name of the cache subdirectory.
        downloader: Client used on a miss. When ``None``, a
            :class:`~fetchcache.client.Downloader` is created from *config*
            and closed by :meth:`aclose`.
        config: Download settings used when *downloader* is ``None``.
        client: Optional :class:`httpx.AsyncClient` for the downloader
            created when *downloader* is ``None``.

    Raises:
        ValueError: If *downloader* is combined with *config* or *client*;
            those only configure a downloader this cache creates itself.

    Example::

        async with FileCache(get_data_dir()) as cache:
            result = await cache.get_or_download(
                "https://example.com/file.mp3", "file.mp3"
            )
            if result.persisted:
                play(result.path)
    """

    def __init__(
        self,
        root: str | Path,
        folder_name: str = "cached_files",
        downloader: Optional[Downloader] = None,
        config: Optional[CacheConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if downloader is not None and (config is not None or client is not None):
            raise ValueError("Pass either a downloader or config/client, not both")
        self._root = Path(root)
        self._folder_name = folder_name
        self._owns_downloader = downloader is None
        self._downloader = downloader or Downloader(config, client=client)

    @classmethod
    def from_config(
        cls,
        config: GlobalConfig,
        client: Optional[httpx.AsyncClient] = None,
    ) -> FileCache:
        """Build a cache from the effective global configuration.

        Args:
            config: Resolved configuration; ``config.cache`` selects the
                storage root, folder name, and download settings.
            client: Optional :class:`httpx.AsyncClient` for the downloader.

        Raises:
            OSError: If the storage root cannot be created. The failure is
                logged before it propagates.
        """
        from fetchcache.config import get_storage_root

        try:
            root = get_storage_root(config)
        except Exception as exc:
            logger.error("%s %s", _LOG_TAG, exc)
            raise
        return cls(
            root,
            folder_name=config.cache.folder_name,
            config=config.cache,
            client=client,
        )

    async def __aenter__(self) -> FileCache:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the downloader if this cache created it."""
        if self._owns_downloader:
            await self._downloader.aclose()

    # ------------------------------------------------------------------ #
    # Paths
    # ------------------------------------------------------------------ #

    @property
    def cache_dir(self) -> Path:
        """The directory holding every cache entry."""
        return self._root / self._folder_name

    def resolve_path(self, name: str) -> Path:
        """Return ``<root>/<folder_name>/<name>`` without touching the disk."""
        return self.cache_dir / name

    # ------------------------------------------------------------------ #
    # Fetch
    # ------------------------------------------------------------------ #

    async def get_or_download(
        self,
        url: str,
        name: str,
        cache_enabled: Optional[bool] = None,
        is_file: Optional[bool] = None,
    ) -> CacheResult:
        """Return the cached file for *name*, downloading *url* on a miss.

        A hit makes no network request. On a miss the response is written
        to disk unless ``cache_enabled`` is ``False`` and ``is_file`` is not
        ``True``, in which case the body is decoded and returned in memory.

        Args:
            url: Resource to fetch on a miss.
            name: Cache key and destination file name. Must be a plain,
                filesystem-safe file name.
            cache_enabled: ``False`` skips persisting on a miss (unless
                ``is_file`` is ``True``). ``None`` behaves like ``True``.
            is_file: Only consulted when ``cache_enabled`` is ``False``.
                ``True`` writes the bytes anyway; ``None`` or ``False``
                returns decoded text.

        Returns:
            A :class:`~fetchcache.models.CachedFile` when a file exists at
            the resolved path on return, or a
            :class:`~fetchcache.models.TransientText` when nothing was
            written.

        Raises:
            ConnectionError_: On network failure.
            NotFoundError: On HTTP 404 with ``raise_for_status`` enabled.
            HTTPStatusError: On other non-2xx statuses with
                ``raise_for_status`` enabled.
            OSError: On filesystem failure.
        """
        options = FetchOptions(cache_enabled=cache_enabled, is_file=is_file)
        try:
            path = self.resolve_path(name)

            if await asyncio.to_thread(path.is_file):
                logger.debug("%s hit %s", _LOG_TAG, name)
                return CachedFile(path=path)

            logger.debug("%s miss %s, fetching %s", _LOG_TAG, name, url)
            if options.should_persist:
                data = await self._downloader.fetch_bytes(url)
                await asyncio.to_thread(_write_bytes, path, data)
                logger.debug("%s stored %s (%d bytes)", _LOG_TAG, name, len(data))
                return CachedFile(path=path)

            text = await self._downloader.fetch_text(url)
            return TransientText(text=text)
        except Exception as exc:
            logger.error("%s %s", _LOG_TAG, exc)
            raise

    # ------------------------------------------------------------------ #
    # Inspection and removal
    # ------------------------------------------------------------------ #

    async def exists(self, name: str) -> bool:
        """Report whether a cached file named *name* is present.

        Only regular files count, so ``exists`` is true exactly when
        :meth:`get_or_download` would serve a hit.
        """
        return await asyncio.to_thread(self.resolve_path(name).is_file)

    async def delete(self, name: str) -> None:
        """Remove the entry named *name*. A missing entry is not an error."""
        path = self.resolve_path(name)
        if await asyncio.to_thread(path.exists):
            await asyncio.to_thread(_remove, path)
            logger.debug("%s deleted %s", _LOG_TAG, name)

    async def delete_all(self) -> None:
        """Remove every entry directly under the cache directory.

        Raises:
            FileNotFoundError: If the cache directory does not exist yet.
            OSError: If an entry cannot be removed (for example a
                non-empty subdirectory).
        """
        entries = await asyncio.to_thread(lambda: list(self.cache_dir.iterdir()))
        for entry in entries:
            await asyncio.to_thread(_remove, entry)
        logger.debug("%s cleared %d entries", _LOG_TAG, len(entries))

    async def entries(self) -> list[str]:
        """Return the sorted names of all cached entries.

        An absent cache directory yields an empty list.
        """

        def _list() -> list[str]:
            if not self.cache_dir.is_dir():
                return []
            return sorted(p.name for p in self.cache_dir.iterdir())

        return await asyncio.to_thread(_list)


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        path.rmdir()
    else:
        path.unlink()
