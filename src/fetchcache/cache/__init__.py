"""Single-directory disk cache for remotely fetched files.

This package provides :class:`FileCache`, which returns a cached local copy
of a remote resource when one exists and downloads and stores it otherwise.
Entries are keyed by a caller-supplied file name and live flat under
``<storage root>/<folder_name>/``.
"""

from fetchcache.cache.file_cache import FileCache

__all__ = ["FileCache"]
