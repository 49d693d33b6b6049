"""Auth commands -- obtain, drop, and provision credentials.

Provides the ``login``, ``logout`` and ``add-user`` commands. ``login``
reads ``username`` and ``password`` from the config file, exchanges them for
a token, and writes the token back to the same file.

Typical workflow::

    uwiki-cli login                 # store a fresh token
    uwiki-cli add-user bob hunter2  # create another account
    uwiki-cli logout                # forget the stored token
"""

from __future__ import annotations

import typer

from uwiki_cli.auth import AuthManager
from uwiki_cli.commands.common import fail, load_config, open_session, open_store
from uwiki_cli.config import mask_token
from uwiki_cli.exceptions import AuthError, AuthErrorKind, UwikiError
from uwiki_cli.exit_codes import EXIT_GENERIC_FAILURE
from uwiki_cli.output import error, info, success, suggest, warning


def login_command(ctx: typer.Context) -> None:
    """Log in with the configured username and password and store the token.

    Example::

        uwiki-cli login
        uwiki-cli --server http://wiki.internal:1181 login
    """
    store = open_store(ctx)
    config = load_config(ctx, store)

    try:
        with open_session(ctx, config) as session:
            token = AuthManager(session, store).login(config)
    except AuthError as exc:
        if exc.kind is AuthErrorKind.PERSIST_FAILED and exc.token:
            warning(f"Issued token {mask_token(exc.token)} was not saved.")
        fail(exc)

    success(f"Logged in to {config.server_address} as {config.username}.")
    info(f"Token {mask_token(token)} saved to {store.path}")


def logout_command(ctx: typer.Context) -> None:
    """Remove the stored token from the config file.

    No request is sent to the service.
    """
    store = open_store(ctx)
    try:
        removed = store.clear_token()
    except UwikiError as exc:
        fail(exc)
    except OSError as exc:
        error(f"Failed to update {store.path}: {exc}")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None

    if removed:
        success(f"Token removed from {store.path}.")
    else:
        info("No token was stored.")


def add_user_command(
    ctx: typer.Context,
    username: str = typer.Argument(help="Name of the account to create."),
    password: str = typer.Argument(help="Password for the new account."),
) -> None:
    """Create a user account on the service.

    The stored token, if any, authorises the request.

    Example::

        uwiki-cli add-user bob hunter2
    """
    store = open_store(ctx)
    config = load_config(ctx, store)

    try:
        with open_session(ctx, config) as session:
            result = AuthManager(session, store).add_user(config, username, password)
    except UwikiError as exc:
        fail(exc)

    if not result.success:
        error(result.message or f"Service declined to create user '{username}'.")
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)

    success(result.message or f"User '{username}' created.")
    if config.token is None:
        suggest("Run `uwiki-cli login` to store a token for page updates.")
