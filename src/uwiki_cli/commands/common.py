"""Helpers shared by the command modules.

Commands read their global options from ``ctx.obj`` (populated by
:func:`~uwiki_cli.app.main_callback`). Tests may pre-seed ``ctx.obj`` with a
``transport`` entry to route requests to an :class:`httpx.MockTransport`.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from uwiki_cli.classifier import classify
from uwiki_cli.client import SessionClient
from uwiki_cli.config import ConfigStore, resolve_config_path
from uwiki_cli.exceptions import UwikiError
from uwiki_cli.models import Config
from uwiki_cli.output import debug, error, suggest


def _options(ctx: typer.Context) -> dict:
    ctx.ensure_object(dict)
    return ctx.obj


def open_store(ctx: typer.Context) -> ConfigStore:
    """Return the config store for the resolved config file path."""
    path = resolve_config_path(_options(ctx).get("config_file"))
    debug(f"Using config file {path}")
    return ConfigStore(path)


def load_config(ctx: typer.Context, store: ConfigStore) -> Config:
    """Load the config, reporting any :class:`ConfigError` and exiting."""
    try:
        return store.load(server_override=_options(ctx).get("server"))
    except UwikiError as exc:
        fail(exc)


def open_session(ctx: typer.Context, config: Config) -> SessionClient:
    """Build (but do not open) the session client for *config*."""
    return SessionClient(
        config.server_address,
        timeout=config.timeout,
        transport=_options(ctx).get("transport"),
    )


def fail(exc: UwikiError) -> NoReturn:
    """Report a classified error on stderr and exit with its code."""
    classification = classify(exc)
    error(classification.detail)
    if classification.hint:
        suggest(classification.hint)
    raise typer.Exit(code=classification.exit_code)
