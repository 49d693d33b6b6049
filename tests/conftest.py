"""Shared test fixtures for uwiki_cli.

Provides an isolated config environment, a fake uwiki service built on
:class:`httpx.MockTransport` that records every request it receives, and a
Typer CLI runner.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import parse_qs

import httpx
import pytest

from uwiki_cli.config import ConfigStore
from uwiki_cli.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches Rich consoles bound to the streams active at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG directories at tmp_path and clear UWIKI_* variables.

    Returns:
        The tmp_path root directory.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("uwiki_cli.config._is_xdg_platform", lambda: True)
    for var in ["UWIKI_CLI_CONFIG", "UWIKI_SERVER_ADDRESS"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def config_path(isolated_config: Path) -> Path:
    """Path of a config file inside the isolated environment (not yet written)."""
    return isolated_config / "uwiki.toml"


@pytest.fixture
def write_config(config_path: Path) -> Callable[..., Path]:
    """Return a helper that writes a TOML config file with the given keys."""

    def _write(**values: Any) -> Path:
        ConfigStore(config_path).write_document(values)
        return config_path

    return _write


# ---------------------------------------------------------------------------
# Fake uwiki service
# ---------------------------------------------------------------------------


Handler = Callable[[httpx.Request], httpx.Response]


class FakeWiki:
    """Records requests and answers them with a configurable handler.

    The default handler emulates a service with one account
    (``alice`` / ``correct``) that issues ``tok-123`` and accepts page
    writes carrying that token.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Handler = self._default

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._dispatch)

    def _dispatch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def respond(self, status_code: int = 200, json_body: Optional[Any] = None, text: Optional[str] = None) -> None:
        """Answer every request with a fixed response."""

        def _handler(request: httpx.Request) -> httpx.Response:
            if json_body is not None:
                return httpx.Response(status_code, json=json_body)
            return httpx.Response(status_code, text=text or "")

        self.handler = _handler

    def raise_error(self, exc: Exception) -> None:
        """Raise *exc* for every request."""

        def _handler(request: httpx.Request) -> httpx.Response:
            raise exc

        self.handler = _handler

    @staticmethod
    def form(request: httpx.Request) -> dict[str, str]:
        return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}

    def _default(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/a":
            form = self.form(request)
            if form.get("username") == "alice" and form.get("password") == "correct":
                return httpx.Response(
                    200, json={"success": True, "message": "Logged in", "token": "tok-123"}
                )
            return httpx.Response(401, json={"success": False, "message": "Bad credentials"})
        if request.headers.get("Authorization") != "Bearer tok-123":
            return httpx.Response(401, json={"success": False, "message": "Invalid token"})
        if path.startswith("/s/"):
            return httpx.Response(200, json={"success": True, "message": "Page saved"})
        if path.startswith("/g/"):
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "message": "",
                    "title": "Intro",
                    "body": "Hello",
                    "version": 3,
                },
            )
        if path == "/u":
            body = json.loads(request.content)
            return httpx.Response(
                200, json={"success": True, "message": f"Created user {body['username']}"}
            )
        return httpx.Response(404, json={"success": False, "message": "Not found"})


@pytest.fixture
def wiki() -> FakeWiki:
    return FakeWiki()


# ---------------------------------------------------------------------------
# CLI runner
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
