"""Canonical Pydantic models shared across all fetchcache modules.

The models fall into two groups:

**Result models** -- returned by :meth:`~fetchcache.cache.FileCache.get_or_download`:
    :class:`CachedFile` and :class:`TransientText`, joined in the
    :data:`CacheResult` union and discriminated by ``persisted``.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CacheConfig`, :class:`OutputConfig`, and :class:`GlobalConfig`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Fetch results ---


class CachedFile(BaseModel):
    """A cache entry that exists on disk at the time it is returned.

    Produced on a cache hit and on every miss that wrote the downloaded
    bytes to disk.
    """

    model_config = ConfigDict(frozen=True)

    persisted: Literal[True] = True
    path: Path

    @property
    def value(self) -> Path:
        """The path of the cached file."""
        return self.path


class TransientText(BaseModel):
    """A decoded response body held only in memory. Nothing was written."""

    model_config = ConfigDict(frozen=True)

    persisted: Literal[False] = False
    text: str

    @property
    def value(self) -> str:
        """The decoded response body."""
        return self.text


CacheResult = Union[CachedFile, TransientText]
"""Result of a fetch: a :class:`CachedFile` or a :class:`TransientText`."""


class FetchOptions(BaseModel):
    """Options for a single fetch.

    ``None`` means the caller did not specify the flag. An unspecified
    ``cache_enabled`` behaves like ``True``; an unspecified ``is_file``
    behaves like ``False``.
    """

    cache_enabled: Optional[bool] = None
    is_file: Optional[bool] = None

    @property
    def should_persist(self) -> bool:
        """Whether a miss must write the downloaded bytes to disk."""
        if self.cache_enabled is None or self.cache_enabled:
            return True
        return bool(self.is_file)


# --- Configuration ---


class CacheConfig(BaseModel):
    """Cache location and download settings stored in :class:`GlobalConfig`."""

    root: Optional[str] = Field(
        default=None,
        description="Storage root; defaults to the platform data directory",
    )
    folder_name: str = Field(
        default="cached_files", description="Cache subdirectory under the root"
    )
    raise_for_status: bool = Field(
        default=False,
        description="Treat non-2xx download responses as errors",
    )


class OutputConfig(BaseModel):
    """Output formatting preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/fetchcache/config.json``.

    Loaded and saved by :func:`~fetchcache.config.load_global_config` and
    :func:`~fetchcache.config.save_global_config`. Values here have the
    lowest precedence and can be overridden by environment variables or CLI
    flags. See :func:`~fetchcache.config.resolve_config`.
    """

    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
