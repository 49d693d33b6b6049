"""Typer application and CLI entry point for uwiki_cli.

This module wires together the top-level Typer application and registers
the built-in commands (``login``, ``logout``, ``add-user``, ``set-page``,
``get-page`` and the ``config`` group).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Commands report classified errors themselves and exit
with the matching code; anything that still escapes is either a
:class:`~uwiki_cli.exceptions.UwikiError` (classified here) or a crash,
which is written to a log file under the data directory.

See Also:
    :mod:`uwiki_cli.classifier`: Error outcomes and exit codes.
    :mod:`uwiki_cli.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from uwiki_cli import __version__
from uwiki_cli.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="uwiki-cli",
    help="CLI to administer uwiki installations.",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"uwiki-cli {__version__}")
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
    config_file: Optional[Path] = typer.Option(
        None,
        "--config-file",
        "-c",
        help="Configuration file. ~/.config/uwiki-cli/config.toml if not present.",
    ),
    server: Optional[str] = typer.Option(
        None, "--server", "-s", help="Override the configured server address."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~uwiki_cli.output.OutputManager` and stores
    the config location and server override in ``ctx.obj`` for the
    commands. Existing ``ctx.obj`` entries are preserved.
    """
    from uwiki_cli.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )

    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["server"] = server
    ctx.obj["verbose"] = verbose


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from uwiki_cli.commands.auth import add_user_command, login_command, logout_command  # noqa: E402
from uwiki_cli.commands.config import config_app  # noqa: E402
from uwiki_cli.commands.page import get_page_command, set_page_command  # noqa: E402

app.command("login")(login_command)
app.command("logout")(logout_command)
app.command("add-user")(add_user_command)
app.command("set-page")(set_page_command)
app.command("get-page")(get_page_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from uwiki_cli.config import get_data_dir

    logs_dir = get_data_dir()
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``uwiki-cli`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
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
        from uwiki_cli.classifier import classify
        from uwiki_cli.exceptions import UwikiError
        from uwiki_cli.output import error, suggest

        if isinstance(exc, UwikiError):
            classification = classify(exc)
            error(classification.detail)
            if classification.hint:
                suggest(classification.hint)
            sys.exit(classification.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
