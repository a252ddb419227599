"""Async download client used by :class:`~fetchcache.cache.FileCache`.

:class:`Downloader` issues a single unauthenticated GET per call through
:class:`httpx.AsyncClient` and maps transport failures onto the
:mod:`fetchcache.exceptions` hierarchy.
"""

from fetchcache.client.downloader import Downloader

__all__ = ["Downloader"]
