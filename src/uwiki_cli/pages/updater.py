"""Page updater -- authenticated page reads and writes by slug.

:class:`PageUpdater` guards every page operation before any network call:

1. ``config.token`` must be present, otherwise ``NOT_AUTHENTICATED``.
2. The slug must be non-empty after trimming, otherwise ``INVALID_SLUG``.

Transport failures are then translated into
:class:`~uwiki_cli.exceptions.UpdateError`:

=======================  ======================
TransportErrorKind       UpdateErrorKind
=======================  ======================
``UNAUTHORIZED``         ``NOT_AUTHENTICATED``
``NOT_FOUND``            ``SLUG_REJECTED``
anything else            ``SERVICE_UNAVAILABLE``
=======================  ======================

A rejected token and a missing token are the same signal: the user has to
run ``uwiki-cli login`` again. Nothing is retried.

:meth:`PageUpdater.resolve_base` reads the current page so that an edit
carries the title and the version it replaces.
"""

from __future__ import annotations

from typing import Optional

from uwiki_cli.client import SessionClient
from uwiki_cli.exceptions import (
    TransportError,
    TransportErrorKind,
    UpdateError,
    UpdateErrorKind,
)
from uwiki_cli.models import Config, Page, UpdateRequest
from uwiki_cli.output import debug


class PageUpdater:
    """Push and fetch page content with the stored token.

    Args:
        session: An open session client for the configured server.
    """

    def __init__(self, session: SessionClient) -> None:
        self._session = session

    @staticmethod
    def check(config: Config, slug: str) -> tuple[str, str]:
        """Validate the token and slug without touching the network.

        Returns:
            The token and the trimmed slug.

        Raises:
            UpdateError: ``NOT_AUTHENTICATED`` when no token is stored,
                otherwise ``INVALID_SLUG`` for an empty or whitespace-only slug.
        """
        if not config.token:
            raise UpdateError(
                UpdateErrorKind.NOT_AUTHENTICATED,
                "No token stored; log in first",
            )
        clean_slug = (slug or "").strip()
        if not clean_slug:
            raise UpdateError(UpdateErrorKind.INVALID_SLUG, "Page slug must not be empty")
        return config.token, clean_slug

    def set_page(
        self,
        config: Config,
        slug: str,
        content: str,
        title: Optional[str] = None,
        previous_version: Optional[int] = None,
    ) -> None:
        """Replace the content of the page at *slug*.

        Args:
            config: Loaded configuration carrying the token.
            slug: Page identifier such as ``docs/intro``; surrounding
                whitespace is trimmed, nothing else is normalised.
            content: Full page text, already read into memory.
            title: Optional page title.
            previous_version: Optional version the edit is based on.

        Raises:
            UpdateError: See the module docstring for the kinds raised.
        """
        token, clean_slug = self.check(config, slug)
        request = UpdateRequest(
            slug=clean_slug,
            content=content,
            title=title,
            previous_version=previous_version,
        )
        debug(f"Updating page '{clean_slug}' ({len(content)} characters)")
        try:
            self._session.update_page(token, request)
        except TransportError as exc:
            raise _translate(exc, clean_slug) from exc

    def resolve_base(
        self,
        config: Config,
        slug: str,
        title: Optional[str] = None,
        previous_version: Optional[int] = None,
    ) -> tuple[Optional[str], int]:
        """Fill in the title and base version of an edit from the current page.

        When both are given no request is made. Otherwise the page is
        fetched once; an explicit *title* or *previous_version* always wins
        over the fetched value.

        Returns:
            The title to send (``None`` if neither given nor stored) and the
            version the edit is based on.

        Raises:
            UpdateError: Same guards and mapping as :meth:`get_page`, or
                ``SERVICE_UNAVAILABLE`` when the service returns no version.
        """
        if title is not None and previous_version is not None:
            return title, previous_version

        page = self.get_page(config, slug)
        if previous_version is None:
            if page.version is None:
                raise UpdateError(
                    UpdateErrorKind.SERVICE_UNAVAILABLE,
                    f"Service did not return a version for page '{slug.strip()}'; "
                    "refusing to write",
                )
            previous_version = page.version
        if title is None:
            title = page.title
        debug(f"Editing '{slug.strip()}' on top of version {previous_version}")
        return title, previous_version

    def get_page(self, config: Config, slug: str) -> Page:
        """Fetch the page at *slug*.

        Raises:
            UpdateError: Same guards and mapping as :meth:`set_page`.
        """
        token, clean_slug = self.check(config, slug)
        try:
            return self._session.get_page(token, clean_slug)
        except TransportError as exc:
            raise _translate(exc, clean_slug) from exc


def _translate(exc: TransportError, slug: str) -> UpdateError:
    if exc.kind is TransportErrorKind.UNAUTHORIZED:
        return UpdateError(
            UpdateErrorKind.NOT_AUTHENTICATED,
            f"Service rejected the stored token ({exc.describe()})",
            transport=exc,
        )
    if exc.kind is TransportErrorKind.NOT_FOUND:
        return UpdateError(
            UpdateErrorKind.SLUG_REJECTED,
            f"Service rejected page slug '{slug}' ({exc.describe()})",
            transport=exc,
        )
    return UpdateError(
        UpdateErrorKind.SERVICE_UNAVAILABLE, exc.describe(), transport=exc
    )
