"""fetchcache -- a single-directory disk cache for remotely fetched files.

Given a URL and a logical file name, :class:`~fetchcache.cache.FileCache`
returns the cached local copy when one exists, otherwise downloads the
resource, stores it and returns it. Entries can also be checked, deleted
one at a time, or cleared in bulk.

Typical usage::

    from fetchcache.cache import FileCache

    async with FileCache.from_config(config) as cache:
        result = await cache.get_or_download(
            "https://example.com/file.mp3", "file.mp3"
        )
        print(result.value)

Modules:
    app: Typer application and CLI entry point.
    cache: The :class:`FileCache` component.
    client: Async download client over :mod:`httpx`.
    models: Pydantic models (results, options, configuration).
    config: XDG-aware configuration and storage-root resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
