"""Exception hierarchy for fetchcache.

All exceptions inherit from :class:`FetchCacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`fetchcache.exit_codes`.
The top-level error handler in :func:`fetchcache.app.main` catches
``FetchCacheError`` and exits with the appropriate code.

Filesystem failures inside :class:`~fetchcache.cache.FileCache` are *not*
wrapped: the original :class:`OSError` reaches the caller. Only the CLI
translates them into :class:`StorageError`.

Subclass hierarchy::

    FetchCacheError (exit 1)
    +-- NotFoundError       (exit 4)
    +-- HTTPStatusError     (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- StorageError        (exit 8)
    +-- ConfigError         (exit 1)
"""

from fetchcache.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_HTTP_ERROR,
    EXIT_NOT_FOUND,
    EXIT_STORAGE_ERROR,
)


class FetchCacheError(Exception):
    """Base exception for all fetchcache errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class NotFoundError(FetchCacheError):
    """Raised when a cache entry is missing or the server returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class HTTPStatusError(FetchCacheError):
    """Raised for a non-2xx download response when status checking is enabled.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status returned by the server.
    """

    exit_code = EXIT_HTTP_ERROR

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class ConnectionError_(FetchCacheError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class StorageError(FetchCacheError):
    """Raised by the CLI when the cache directory cannot be read or written."""

    exit_code = EXIT_STORAGE_ERROR


class ConfigError(FetchCacheError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
