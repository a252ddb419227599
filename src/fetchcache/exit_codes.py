"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~fetchcache.exceptions.FetchCacheError` subclass.

Example::

    $ fetchcache exists report.pdf
    false
    $ echo $?
    4   # EXIT_NOT_FOUND -- no cached entry with that name
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""A command was given an unknown config key or an invalid value."""

EXIT_NOT_FOUND = 4
"""The requested entry or remote resource was not found."""

EXIT_HTTP_ERROR = 5
"""The remote server answered with a non-success HTTP status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_STORAGE_ERROR = 8
"""Reading or writing the cache directory failed."""
