"""Page commands -- push and fetch page content by slug.

``set-page`` reads the full page text from ``--file`` or standard input
before any request is made. Unless both ``--title`` and
``--previous-version`` are given, it then reads the current page and takes
the missing values from it, so the write names the version it replaces.
``get-page`` prints the current page body to stdout so it can be piped
back into ``set-page``::

    uwiki-cli get-page docs/intro > intro.md
    $EDITOR intro.md
    uwiki-cli set-page docs/intro --file intro.md
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer

from uwiki_cli.commands.common import fail, load_config, open_session, open_store
from uwiki_cli.exceptions import UwikiError
from uwiki_cli.exit_codes import EXIT_INVALID_USAGE
from uwiki_cli.output import error, info, print_data, success


def set_page_command(
    ctx: typer.Context,
    slug: str = typer.Argument(help="Page slug, e.g. docs/intro."),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Read content from this file instead of stdin."
    ),
    title: Optional[str] = typer.Option(
        None, "--title", "-t", help="Page title. Defaults to the current title."
    ),
    previous_version: Optional[int] = typer.Option(
        None,
        "--previous-version",
        help="Version the edit is based on. Defaults to the current version.",
    ),
) -> None:
    """Replace the content of a page.

    The title and base version default to those of the current page.

    Example::

        uwiki-cli set-page docs/intro < intro.md
        uwiki-cli set-page docs/intro --file intro.md --title "Introduction"
    """
    from uwiki_cli.pages import PageUpdater

    store = open_store(ctx)
    config = load_config(ctx, store)

    try:
        # Fail on a missing token or empty slug before waiting on stdin.
        PageUpdater.check(config, slug)
        content = _read_content(file)
        with open_session(ctx, config) as session:
            updater = PageUpdater(session)
            title, previous_version = updater.resolve_base(
                config, slug, title=title, previous_version=previous_version
            )
            updater.set_page(
                config,
                slug,
                content,
                title=title,
                previous_version=previous_version,
            )
    except UwikiError as exc:
        fail(exc)

    success(f"Updated page '{slug.strip()}'.")


def get_page_command(
    ctx: typer.Context,
    slug: str = typer.Argument(help="Page slug, e.g. docs/intro."),
) -> None:
    """Print the body of a page to stdout."""
    from uwiki_cli.pages import PageUpdater

    store = open_store(ctx)
    config = load_config(ctx, store)

    try:
        with open_session(ctx, config) as session:
            page = PageUpdater(session).get_page(config, slug)
    except UwikiError as exc:
        fail(exc)

    if page.title:
        info(f"Title: {page.title}")
    if page.version is not None:
        info(f"Version: {page.version}")
    print_data(page.body or "")


def _read_content(file: Optional[Path]) -> str:
    """Read the whole page text as UTF-8 from *file*, or from stdin when *file* is None."""
    source = str(file) if file is not None else "stdin"
    try:
        if file is None:
            if sys.stdin.isatty():
                info("Reading page content from stdin (Ctrl-D to finish)...")
            raw = sys.stdin.buffer.read()
        else:
            raw = file.read_bytes()
    except OSError as exc:
        error(f"Cannot read {source}: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        error(f"Page content from {source} is not valid UTF-8: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None
