"""Shared test fixtures for fetchcache.

Provides an in-memory HTTP server backed by :class:`httpx.MockTransport`,
isolated config environments, output-state management, and a CLI runner.
These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import httpx
import pytest

from fetchcache.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When CliRunner redirects those streams during a test,
    the cached references go stale once the test ends.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake HTTP server
# ---------------------------------------------------------------------------


@dataclass
class FakeServer:
    """Programmable responder for :class:`httpx.MockTransport`.

    Every request is recorded in :attr:`requests`. The response is built
    from :attr:`body` and :attr:`status_code` unless :attr:`error` is set,
    in which case that exception is raised instead.
    """

    body: bytes = b"payload"
    status_code: int = 200
    error: Optional[Exception] = None
    requests: list[httpx.Request] = field(default_factory=list)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, content=self.body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def server() -> FakeServer:
    """A fake server answering ``200 b"payload"`` to every request."""
    return FakeServer()


@pytest.fixture
async def http_client(server: FakeServer) -> httpx.AsyncClient:
    """An :class:`httpx.AsyncClient` routed to the fake server."""
    async with httpx.AsyncClient(transport=server.transport()) as client:
        yield client


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Forces XDG path resolution, points XDG_CONFIG_HOME and XDG_DATA_HOME at
    subdirectories of tmp_path, clears FETCHCACHE_ROOT, and changes the
    working directory to tmp_path.

    Returns:
        The tmp_path root directory.
    """
    monkeypatch.setattr("fetchcache.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("FETCHCACHE_ROOT", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless OutputManager for the duration of a test."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def patch_cli_transport(server: FakeServer, monkeypatch: pytest.MonkeyPatch) -> FakeServer:
    """Route every FileCache built by the CLI through the fake server."""
    from fetchcache.cache import FileCache

    original = FileCache.from_config.__func__

    def _from_config(cls, config, client=None):
        return original(
            cls, config, client=httpx.AsyncClient(transport=server.transport())
        )

    monkeypatch.setattr(FileCache, "from_config", classmethod(_from_config))
    return server
