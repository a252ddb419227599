"""Typer application and CLI entry point for fetchcache.

The CLI is a thin shell over :class:`~fetchcache.cache.FileCache`: every
command resolves the effective configuration, builds one cache instance, runs
a single cache operation, and prints the result.

Commands::

    fetchcache get URL NAME [--no-cache] [--file]
    fetchcache path NAME
    fetchcache exists NAME
    fetchcache list
    fetchcache delete NAME
    fetchcache clear
    fetchcache config show | set KEY VALUE | reset

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under the
data directory.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from fetchcache import __version__
from fetchcache.commands.config import config_app
from fetchcache.exit_codes import EXIT_GENERIC_FAILURE, EXIT_NOT_FOUND

T = TypeVar("T")

app = typer.Typer(
    name="fetchcache",
    help="Download remote files once and serve them from a local cache.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config", help="View and modify the global configuration.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"fetchcache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    root: Optional[str] = typer.Option(
        None, "--root", help="Storage root containing the cache folder."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print results as JSON (overrides output.format)."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~fetchcache.output.OutputManager`, enables
    debug logging for ``--verbose``, and stores the storage-root override in
    ``ctx.obj`` for the sub-commands. The output format is ``--json`` when
    given, otherwise the ``output.format`` setting from the config file.
    """
    from fetchcache.config import load_global_config
    from fetchcache.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    else:
        fmt = OutputFormat(load_global_config().output.format)
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    if verbose:
        _setup_logging(no_color)

    ctx.ensure_object(dict)
    ctx.obj["root"] = root


def _setup_logging(no_color: bool) -> None:
    """Route the package's debug logs to stderr through Rich."""
    from rich.console import Console
    from rich.logging import RichHandler

    handler = RichHandler(
        console=Console(file=sys.stderr, no_color=no_color, stderr=True),
        show_path=False,
    )
    package_logger = logging.getLogger("fetchcache")
    package_logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(handler)


def _run(ctx: typer.Context, operation: Callable[[Any], Awaitable[T]]) -> T:
    """Build a :class:`FileCache` from the resolved config and run *operation* on it.

    Filesystem failures are re-raised as
    :class:`~fetchcache.exceptions.StorageError` chained to the original
    :class:`OSError`.
    """
    from fetchcache.cache import FileCache
    from fetchcache.config import resolve_config
    from fetchcache.exceptions import StorageError

    config = resolve_config(cli_root=ctx.obj.get("root") if ctx.obj else None)

    async def _go() -> T:
        async with FileCache.from_config(config) as cache:
            return await operation(cache)

    try:
        return asyncio.run(_go())
    except OSError as exc:
        raise StorageError(f"Cache storage error: {exc}") from exc


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("get")
def get_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Resource to download on a cache miss."),
    name: str = typer.Argument(help="Cache entry name (a plain file name)."),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Do not store the download; print the body instead."
    ),
    is_file: bool = typer.Option(
        False, "--file", help="With --no-cache, store the download anyway."
    ),
) -> None:
    """Return the cached file for NAME, downloading URL if it is missing.

    Prints the path of the cached file, or the downloaded text when
    ``--no-cache`` is given without ``--file``. With ``--json`` the result
    is printed as ``{"persisted": ..., "path" | "text": ...}``.

    Example::

        fetchcache get https://example.com/a.mp3 a.mp3
        fetchcache get https://example.com/motd.txt motd.txt --no-cache
    """
    from fetchcache.output import debug, print_result

    result = _run(
        ctx,
        lambda cache: cache.get_or_download(
            url,
            name,
            cache_enabled=False if no_cache else None,
            is_file=True if is_file else None,
        ),
    )
    debug(f"persisted={result.persisted}")
    print_result(str(result.value), result.model_dump(mode="json"))


@app.command("path")
def path_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Cache entry name."),
) -> None:
    """Print where the entry NAME is (or would be) stored."""
    from fetchcache.output import print_result

    async def _resolve(cache: Any) -> str:
        return str(cache.resolve_path(name))

    path = _run(ctx, _resolve)
    print_result(path, {"name": name, "path": path})


@app.command("exists")
def exists_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Cache entry name."),
) -> None:
    """Print ``true`` if NAME is cached, ``false`` otherwise (exit code 4)."""
    from fetchcache.output import print_result

    present = _run(ctx, lambda cache: cache.exists(name))
    print_result("true" if present else "false", {"name": name, "exists": present})
    if not present:
        raise typer.Exit(code=EXIT_NOT_FOUND)


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List cached entry names."""
    from fetchcache.output import info, print_table

    names = _run(ctx, lambda cache: cache.entries())
    if not names:
        info("Cache is empty.")
        return
    print_table(["name"], [[n] for n in names], title="Cached files")


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Cache entry name."),
) -> None:
    """Delete the entry NAME. Deleting a missing entry is not an error."""
    from fetchcache.output import success

    _run(ctx, lambda cache: cache.delete(name))
    success(f"Deleted '{name}'.")


@app.command("clear")
def clear_command(ctx: typer.Context) -> None:
    """Delete every cached entry."""
    from fetchcache.output import success

    _run(ctx, lambda cache: cache.delete_all())
    success("Cache cleared.")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from fetchcache.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(exc)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``fetchcache`` console script.

    :class:`~fetchcache.exceptions.FetchCacheError` instances cause a clean
    exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        sys.exit(handle_error(exc))


def handle_error(exc: Exception) -> int:
    """Report *exc* on stderr and return the process exit code for it."""
    from fetchcache.exceptions import FetchCacheError
    from fetchcache.output import error

    if isinstance(exc, FetchCacheError):
        error(str(exc))
        return exc.exit_code

    log_path = _write_crash_log(exc)
    error(f"Unexpected error. Debug log: {log_path}")
    return EXIT_GENERIC_FAILURE
