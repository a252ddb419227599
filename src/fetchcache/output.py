"""CLI output routing for fetchcache.

Command results (cached paths, transient bodies, entry listings, config
dumps) go to **stdout** so they can be piped; every status line, error, and
debug trace goes to **stderr**.

The active :class:`OutputFormat` decides how a result is rendered:

* ``json`` -- one JSON document per command (see :meth:`OutputManager.print_result`).
* ``plain`` -- bare text, tab-separated for tables.
* ``rich`` -- Rich tables on an interactive terminal.
* ``auto`` -- ``rich`` on a colour-capable TTY, otherwise ``plain``.

Colour is switched off by ``--no-color``, ``NO_COLOR`` (any value) and
``TERM=dumb``.

:func:`~fetchcache.app.main_callback` installs one :class:`OutputManager`
per invocation with :func:`set_output`; commands call the module-level
helpers, which forward to it.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormat(str, Enum):
    """Rendering mode for command results."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Render command results on stdout and diagnostics on stderr.

    Args:
        format: Requested format. ``AUTO`` is resolved once, here.
        no_color: Disable colour and Rich markup.
        quiet: Hide :meth:`info` and :meth:`success` messages.
        verbose: Show :meth:`debug` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._format = _resolve_format(format, self._no_color)
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The resolved output format (never ``AUTO``)."""
        return self._format

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write *text* and a newline to stdout, unformatted."""
        print(text, file=sys.stdout, flush=True)

    def print_result(self, text: str, record: dict[str, Any]) -> None:
        """Write a single command result.

        JSON mode serialises *record* as one object; every other mode writes
        *text*, which is what shell pipelines consume.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps(record, ensure_ascii=False))
        else:
            self.print_data(text)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows as a JSON array of objects, tab-separated lines, or a Rich table."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            for row in rows:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(escape(cell) for cell in row))
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._note(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._note(message, style="green")

    def error(self, message: str) -> None:
        """Report an error. Shown even with ``--quiet``."""
        self._note(message, label="Error:", style="bold red")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._note(message, label="[debug]", style="dim")

    def _note(self, message: str, label: str = "", style: str = "") -> None:
        if self._no_color:
            line = f"{label} {message}" if label else message
            print(line, file=sys.stderr, flush=True)
            return

        body = escape(message)
        if label:
            body = f"[{style}]{escape(label)}[/{style}] {body}"
        elif style:
            body = f"[{style}]{body}[/{style}]"
        self._stderr.print(body)


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    if _is_tty() and not no_color:
        return OutputFormat.RICH
    return OutputFormat.PLAIN


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set or ``TERM`` is ``dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager. Tests call this between cases."""
    global _output
    _output = None


def print_result(text: str, record: dict[str, Any]) -> None:
    get_output().print_result(text, record)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
