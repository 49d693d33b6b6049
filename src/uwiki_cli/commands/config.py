"""Config commands -- create and inspect the config file.

Provides the ``uwiki-cli config`` sub-command group. The config file is a
small TOML document::

    server_address = "http://localhost:1181"
    username = "alice"
    password = "s3cret"
    token = "..."        # written by `uwiki-cli login`
"""

from __future__ import annotations

from typing import Optional

import typer

from uwiki_cli.commands.common import load_config, open_store
from uwiki_cli.config import mask_token
from uwiki_cli.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE
from uwiki_cli.models import DEFAULT_SERVER_ADDRESS
from uwiki_cli.output import error, format_response, print_data, success, suggest


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("init")
def config_init(
    ctx: typer.Context,
    username: str = typer.Option(..., "--username", "-u", prompt=True, help="Login user name."),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, help="Login password."
    ),
    server: str = typer.Option(
        DEFAULT_SERVER_ADDRESS, "--server-address", help="Base URL of the uwiki service."
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file."),
) -> None:
    """Write a new config file.

    Refuses to replace an existing file (and its stored token) unless
    ``--force`` is given.

    Example::

        uwiki-cli config init --username alice --password s3cret
    """
    store = open_store(ctx)
    if store.exists() and not force:
        error(f"Config file already exists at {store.path}")
        suggest("Pass --force to overwrite it.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    try:
        store.write_document(
            {"server_address": server, "username": username, "password": password}
        )
    except OSError as exc:
        error(f"Failed to write {store.path}: {exc}")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None

    success(f"Config written to {store.path}")
    suggest("Log in: uwiki-cli login")


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration with secrets masked."""
    store = open_store(ctx)
    config = load_config(ctx, store)
    data: dict[str, Optional[object]] = {
        "config_file": str(store.path),
        "server_address": config.server_address,
        "username": config.username,
        "password": "****" if config.password else None,
        "token": mask_token(config.token),
        "timeout": config.timeout,
    }
    format_response(data)


@config_app.command("path")
def config_path(ctx: typer.Context) -> None:
    """Print the path of the config file in use."""
    print_data(str(open_store(ctx).path))
