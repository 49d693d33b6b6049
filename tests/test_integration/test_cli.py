"""End-to-end tests for the uwiki-cli commands.

Each test runs the real Typer app through :class:`typer.testing.CliRunner`.
Requests are routed to the ``wiki`` fixture by pre-seeding ``ctx.obj`` with
its :class:`httpx.MockTransport`.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from uwiki_cli import __version__
from uwiki_cli.app import app
from uwiki_cli.config import ConfigStore


def _invoke(runner, wiki, config_path: Path, *args: str, input=None):
    return runner.invoke(
        app,
        ["--no-color", "-c", str(config_path), *args],
        obj={"transport": wiki.transport},
        input=input,
    )


@pytest.fixture
def credentials_file(write_config) -> Path:
    return write_config(
        server_address="http://wiki.test", username="alice", password="correct"
    )


@pytest.fixture
def token_file(write_config) -> Path:
    return write_config(
        server_address="http://wiki.test",
        username="alice",
        password="correct",
        token="tok-123",
    )


class TestGlobalOptions:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "set-page" in result.output

    def test_config_file_from_env(self, cli_runner, isolated_config: Path, monkeypatch) -> None:
        target = isolated_config / "from-env.toml"
        monkeypatch.setenv("UWIKI_CLI_CONFIG", str(target))
        result = cli_runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0
        assert str(target) in result.output


# ---------------------------------------------------------------------------
# login / logout
# ---------------------------------------------------------------------------


class TestLogin:
    def test_success_stores_token(self, cli_runner, wiki, credentials_file: Path) -> None:
        result = _invoke(cli_runner, wiki, credentials_file, "login")

        assert result.exit_code == 0, result.output
        assert "Logged in to http://wiki.test as alice" in result.output
        assert "tok-123" not in result.output
        assert ConfigStore(credentials_file).load().token == "tok-123"

    def test_bad_password(self, cli_runner, wiki, write_config) -> None:
        path = write_config(username="alice", password="wrong", token="old-token")
        result = _invoke(cli_runner, wiki, path, "login")

        assert result.exit_code == 3
        assert "Bad credentials" in result.output
        assert "previously stored token" in result.output
        assert ConfigStore(path).load().token == "old-token"

    def test_missing_credentials(self, cli_runner, wiki, write_config) -> None:
        path = write_config(server_address="http://wiki.test")
        result = _invoke(cli_runner, wiki, path, "login")

        assert result.exit_code == 2
        assert "username and password" in result.output
        assert wiki.requests == []

    def test_unreachable_service(self, cli_runner, wiki, credentials_file: Path) -> None:
        wiki.raise_error(httpx.ConnectError("connection refused"))
        result = _invoke(cli_runner, wiki, credentials_file, "login")

        assert result.exit_code == 6
        assert "server_address" in result.output

    def test_server_override_is_used_but_not_saved(
        self, cli_runner, wiki, credentials_file: Path
    ) -> None:
        result = _invoke(
            cli_runner, wiki, credentials_file, "--server", "http://other.test:1181", "login"
        )

        assert result.exit_code == 0, result.output
        assert wiki.requests[0].url.host == "other.test"
        document = ConfigStore(credentials_file).read_document()
        assert document["server_address"] == "http://wiki.test"
        assert document["token"] == "tok-123"

    def test_missing_config_file(self, cli_runner, wiki, config_path: Path) -> None:
        result = _invoke(cli_runner, wiki, config_path, "login")

        assert result.exit_code == 1
        assert "No uwiki-cli config file found" in result.output
        assert "config init" in result.output


class TestLogout:
    def test_removes_token(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(cli_runner, wiki, token_file, "logout")

        assert result.exit_code == 0
        assert ConfigStore(token_file).load().token is None
        assert wiki.requests == []

    def test_without_token(self, cli_runner, wiki, credentials_file: Path) -> None:
        result = _invoke(cli_runner, wiki, credentials_file, "logout")
        assert result.exit_code == 0
        assert "No token was stored" in result.output


# ---------------------------------------------------------------------------
# set-page / get-page
# ---------------------------------------------------------------------------


class TestSetPage:
    def test_from_stdin(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(
            cli_runner, wiki, token_file, "set-page", "docs/intro", input="# Intro\n"
        )

        assert result.exit_code == 0, result.output
        assert "Updated page 'docs/intro'" in result.output
        get_request, set_request = wiki.requests
        assert get_request.url.path == "/g/docs/intro"
        assert set_request.url.path == "/s/docs/intro"
        assert wiki.form(set_request) == {
            "body": "# Intro\n",
            "title": "Intro",
            "previous_version": "3",
        }

    def test_from_file_with_title(
        self, cli_runner, wiki, token_file: Path, isolated_config: Path
    ) -> None:
        page = isolated_config / "intro.md"
        page.write_text("From file", encoding="utf-8")
        result = _invoke(
            cli_runner,
            wiki,
            token_file,
            "set-page",
            "docs/intro",
            "--file",
            str(page),
            "--title",
            "Introduction",
            "--previous-version",
            "3",
        )

        assert result.exit_code == 0, result.output
        assert wiki.form(wiki.requests[0]) == {
            "body": "From file",
            "title": "Introduction",
            "previous_version": "3",
        }
        assert len(wiki.requests) == 1

    def test_explicit_title_keeps_fetched_version(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(
            cli_runner, wiki, token_file, "set-page", "docs/intro", "-t", "New", input="x"
        )

        assert result.exit_code == 0, result.output
        assert wiki.form(wiki.requests[-1]) == {
            "body": "x",
            "title": "New",
            "previous_version": "3",
        }

    def test_refuses_without_current_version(self, cli_runner, wiki, token_file: Path) -> None:
        def _handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.startswith("/g/"):
                return httpx.Response(200, json={"success": True, "title": "Intro"})
            return httpx.Response(200, json={"success": True})

        wiki.handler = _handler
        result = _invoke(cli_runner, wiki, token_file, "set-page", "docs/intro", input="x")

        assert result.exit_code == 5
        assert "refusing to write" in result.output
        assert [r.url.path for r in wiki.requests] == ["/g/docs/intro"]

    def test_invalid_utf8_file(
        self, cli_runner, wiki, token_file: Path, isolated_config: Path
    ) -> None:
        page = isolated_config / "bad.md"
        page.write_bytes(b"\xff\xfe bad")
        result = _invoke(
            cli_runner, wiki, token_file, "set-page", "docs/intro", "--file", str(page)
        )

        assert result.exit_code == 2
        assert "not valid UTF-8" in result.output
        assert wiki.requests == []

    def test_invalid_utf8_stdin(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(
            cli_runner, wiki, token_file, "set-page", "docs/intro", input=b"\xff\xfe bad"
        )

        assert result.exit_code == 2
        assert "not valid UTF-8" in result.output
        assert wiki.requests == []

    def test_non_ascii_content_round_trips(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(
            cli_runner, wiki, token_file, "set-page", "docs/intro", input="Café ☕\n"
        )

        assert result.exit_code == 0, result.output
        assert wiki.form(wiki.requests[-1])["body"] == "Café ☕\n"

    def test_reserved_characters_in_slug(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(cli_runner, wiki, token_file, "set-page", "faq?draft", input="x")

        assert result.exit_code == 0, result.output
        assert [r.url.raw_path for r in wiki.requests] == [
            b"/g/faq%3Fdraft",
            b"/s/faq%3Fdraft",
        ]

    def test_unreadable_file(self, cli_runner, wiki, token_file: Path, isolated_config: Path) -> None:
        result = _invoke(
            cli_runner,
            wiki,
            token_file,
            "set-page",
            "docs/intro",
            "--file",
            str(isolated_config / "missing.md"),
        )
        assert result.exit_code == 2
        assert wiki.requests == []

    def test_without_token(self, cli_runner, wiki, credentials_file: Path) -> None:
        result = _invoke(
            cli_runner, wiki, credentials_file, "set-page", "docs/intro", input="x"
        )

        assert result.exit_code == 3
        assert "uwiki-cli login" in result.output
        assert wiki.requests == []

    def test_empty_slug(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(cli_runner, wiki, token_file, "set-page", "  ", input="x")

        assert result.exit_code == 2
        assert wiki.requests == []

    def test_expired_token(self, cli_runner, wiki, write_config) -> None:
        path = write_config(server_address="http://wiki.test", token="expired")
        result = _invoke(cli_runner, wiki, path, "set-page", "docs/intro", input="x")

        assert result.exit_code == 3
        assert "uwiki-cli login" in result.output
        assert len(wiki.requests) == 1

    def test_rejected_slug(self, cli_runner, wiki, token_file: Path) -> None:
        wiki.respond(404, {"success": False, "message": "Invalid slug"})
        result = _invoke(cli_runner, wiki, token_file, "set-page", "bad", input="x")
        assert result.exit_code == 4

    def test_server_error(self, cli_runner, wiki, token_file: Path) -> None:
        wiki.respond(500, {"message": "database locked"})
        result = _invoke(cli_runner, wiki, token_file, "set-page", "docs/intro", input="x")

        assert result.exit_code == 5
        assert "HTTP 500: database locked" in result.output

    def test_timeout(self, cli_runner, wiki, token_file: Path) -> None:
        wiki.raise_error(httpx.ReadTimeout("timed out"))
        result = _invoke(cli_runner, wiki, token_file, "set-page", "docs/intro", input="x")
        assert result.exit_code == 6


class TestGetPage:
    def test_prints_body(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(cli_runner, wiki, token_file, "get-page", "docs/intro")

        assert result.exit_code == 0, result.output
        assert "Hello" in result.output
        assert "Version: 3" in result.output

    def test_without_token(self, cli_runner, wiki, credentials_file: Path) -> None:
        result = _invoke(cli_runner, wiki, credentials_file, "get-page", "docs/intro")
        assert result.exit_code == 3
        assert wiki.requests == []


# ---------------------------------------------------------------------------
# add-user
# ---------------------------------------------------------------------------


class TestAddUser:
    def test_creates_user(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(cli_runner, wiki, token_file, "add-user", "bob", "hunter2")

        assert result.exit_code == 0, result.output
        assert "Created user bob" in result.output

    def test_declined(self, cli_runner, wiki, token_file: Path) -> None:
        wiki.respond(200, {"success": False, "message": "User exists"})
        result = _invoke(cli_runner, wiki, token_file, "add-user", "bob", "hunter2")

        assert result.exit_code == 1
        assert "User exists" in result.output

    def test_rejected_caller(self, cli_runner, wiki, write_config) -> None:
        path = write_config(server_address="http://wiki.test", token="expired")
        result = _invoke(cli_runner, wiki, path, "add-user", "bob", "hunter2")
        assert result.exit_code == 3


# ---------------------------------------------------------------------------
# config group
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_init_writes_file(self, cli_runner, wiki, config_path: Path) -> None:
        result = _invoke(
            cli_runner,
            wiki,
            config_path,
            "config",
            "init",
            "--username",
            "alice",
            "--password",
            "correct",
        )

        assert result.exit_code == 0, result.output
        config = ConfigStore(config_path).load()
        assert config.username == "alice"
        assert config.server_address == "http://localhost:1181"

    def test_init_refuses_to_overwrite(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(
            cli_runner, wiki, token_file, "config", "init", "-u", "bob", "--password", "x"
        )

        assert result.exit_code == 2
        assert "--force" in result.output
        assert ConfigStore(token_file).load().token == "tok-123"

    def test_init_force(self, cli_runner, wiki, token_file: Path) -> None:
        result = _invoke(
            cli_runner,
            wiki,
            token_file,
            "config",
            "init",
            "-u",
            "bob",
            "--password",
            "x",
            "--force",
        )

        assert result.exit_code == 0, result.output
        assert ConfigStore(token_file).load().username == "bob"

    def test_show_masks_secrets(self, cli_runner, wiki, write_config) -> None:
        path = write_config(username="alice", password="correct", token="abcdefghijklmnop")
        result = _invoke(cli_runner, wiki, path, "--json", "config", "show")

        assert result.exit_code == 0, result.output
        assert '"username": "alice"' in result.output
        assert "abcd...op" in result.output
        assert "abcdefghijklmnop" not in result.output
        assert "correct" not in result.output

    def test_path(self, cli_runner, wiki, config_path: Path) -> None:
        result = _invoke(cli_runner, wiki, config_path, "config", "path")
        assert result.exit_code == 0
        assert str(config_path) in result.output
