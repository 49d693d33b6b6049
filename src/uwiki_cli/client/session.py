"""Synchronous session client for the uwiki HTTP surface.

This module provides :class:`SessionClient`, the only component that talks
to the network. It wraps :class:`httpx.Client` and layers on:

- **Bearer injection** -- page operations attach the stored token as an
  ``Authorization: Bearer`` header.
- **Bounded timeout** -- every request uses the configured timeout.
  Exceeding it raises :class:`~uwiki_cli.exceptions.TransportError` with
  kind ``TIMEOUT``; nothing is retried.
- **Error mapping** -- non-2xx statuses, ``success=false`` envelopes and
  unparsable bodies become a typed
  :class:`~uwiki_cli.exceptions.TransportError`.

One instance is constructed per invocation with the server address and
injected into both :class:`~uwiki_cli.auth.AuthManager` and
:class:`~uwiki_cli.pages.PageUpdater`.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from uwiki_cli.exceptions import TransportError, TransportErrorKind
from uwiki_cli.models import (
    DEFAULT_TIMEOUT,
    ApiResponse,
    Credentials,
    LoginResponse,
    Page,
    UpdateRequest,
)
from uwiki_cli.output import get_output

LOGIN_PATH = "/a"
ADD_USER_PATH = "/u"
GET_PAGE_PATH = "/g/{slug}"
SET_PAGE_PATH = "/s/{slug}"


class SessionClient:
    """Blocking client for the uwiki login, user, and page endpoints.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        server_address: Base URL of the service, e.g. ``http://localhost:1181``.
        timeout: Per-request timeout in seconds.
        transport: Optional :class:`httpx.BaseTransport`, mainly for tests
            (``httpx.MockTransport``).

    Example::

        with SessionClient("http://localhost:1181") as session:
            token = session.login(Credentials(username="alice", password="pw"))
    """

    def __init__(
        self,
        server_address: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._server_address = server_address.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def server_address(self) -> str:
        return self._server_address

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SessionClient:
        self._client = httpx.Client(
            base_url=self._server_address,
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Endpoints
    # ------------------------------------------------------------------ #

    def login(self, credentials: Credentials) -> str:
        """Exchange *credentials* for a token.

        Args:
            credentials: Non-empty user name and password (checked by the
                caller).

        Returns:
            The non-empty token issued by the service.

        Raises:
            TransportError: ``UNAUTHORIZED`` when the service rejects the
                credentials (HTTP 401/403 or a ``success=false`` envelope),
                ``MALFORMED_RESPONSE`` when no token is returned, or any
                other transport kind.
        """
        response = self._send(
            "POST",
            LOGIN_PATH,
            data={"username": credentials.username, "password": credentials.password},
        )
        payload = self._parse(response, LoginResponse)
        if not payload.success:
            raise TransportError(
                TransportErrorKind.UNAUTHORIZED,
                payload.message or "Login rejected by the service",
                status=response.status_code,
                body=payload.message or None,
            )
        if not isinstance(payload.token, str) or not payload.token.strip():
            raise TransportError(
                TransportErrorKind.MALFORMED_RESPONSE,
                "Login response did not contain a token",
                status=response.status_code,
            )
        return payload.token

    def update_page(self, token: str, request: UpdateRequest) -> None:
        """Write a page with the bearer *token*.

        Returns only when the service confirmed the write with a 2xx status
        and a successful envelope.

        Raises:
            ValueError: If *token* or the request slug is empty.
            TransportError: On any failure; ``UNAUTHORIZED`` for a rejected
                token and ``NOT_FOUND`` for a rejected slug.
        """
        _require(token, "token")
        _require(request.slug, "slug")
        response = self._send(
            "POST",
            SET_PAGE_PATH.format(slug=_quote_slug(request.slug)),
            token=token,
            data=request.form(),
        )
        self._check_envelope(response)

    def get_page(self, token: str, slug: str) -> Page:
        """Fetch the current title, body, and version of a page.

        Raises:
            ValueError: If *token* or *slug* is empty.
            TransportError: On any failure.
        """
        _require(token, "token")
        _require(slug, "slug")
        response = self._send(
            "POST", GET_PAGE_PATH.format(slug=_quote_slug(slug)), token=token
        )
        page = self._parse(response, Page)
        if not page.success:
            raise TransportError(
                TransportErrorKind.SERVER_ERROR,
                page.message or "Service failed to return the page",
                status=response.status_code,
                body=page.message or None,
            )
        return page

    def add_user(
        self, username: str, password: str, token: Optional[str] = None
    ) -> ApiResponse:
        """Create a user account.

        The returned envelope is passed through unchanged so the caller can
        report the service's own message, whether or not ``success`` is set.

        Raises:
            TransportError: On transport or HTTP failure.
        """
        response = self._send(
            "POST",
            ADD_USER_PATH,
            token=token,
            json_body={"username": username, "password": password},
        )
        return self._parse(response, ApiResponse)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _send(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> httpx.Response:
        """Send one request and raise a typed error for transport or HTTP failures."""
        assert self._client is not None, "Client not initialised -- use as context manager"

        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        kwargs: dict[str, Any] = {"method": method, "url": path, "headers": headers}
        if data is not None:
            kwargs["data"] = data
        elif json_body is not None:
            kwargs["json"] = json_body

        output = get_output()
        try:
            response = self._client.request(**kwargs)
        except httpx.TimeoutException as exc:
            output.debug(f"{method} {path} timed out after {self._timeout}s")
            raise TransportError(
                TransportErrorKind.TIMEOUT,
                f"Request to {self._server_address}{path} timed out after {self._timeout}s",
            ) from exc
        except httpx.TransportError as exc:
            output.debug(f"{method} {path} failed: {exc}")
            raise TransportError(
                TransportErrorKind.CONNECTION_FAILED,
                f"Could not reach {self._server_address}: {exc}",
            ) from exc

        output.debug(f"{method} {path} -> HTTP {response.status_code}")
        self._map_response_error(response)
        return response

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed error for any non-2xx status."""
        if response.is_success:
            return

        status = response.status_code
        msg = _extract_message(response)
        full_msg = msg or response.reason_phrase or "request failed"

        if status in (401, 403):
            raise TransportError(
                TransportErrorKind.UNAUTHORIZED, full_msg, status=status, body=msg or None
            )
        if status == 404:
            raise TransportError(
                TransportErrorKind.NOT_FOUND, full_msg, status=status, body=msg or None
            )
        raise TransportError(
            TransportErrorKind.SERVER_ERROR, full_msg, status=status, body=msg or None
        )

    def _check_envelope(self, response: httpx.Response) -> None:
        """Treat a 2xx ``success=false`` envelope as a server-side rejection.

        Empty or non-JSON bodies on a 2xx response count as success.
        """
        if not response.content:
            return
        try:
            body = response.json()
        except ValueError:
            return
        if isinstance(body, dict) and body.get("success") is False:
            message = str(body.get("message") or "")
            raise TransportError(
                TransportErrorKind.SERVER_ERROR,
                message or "Service rejected the update",
                status=response.status_code,
                body=message or None,
            )

    def _parse(self, response: httpx.Response, model: type[ApiResponse]) -> Any:
        """Validate a JSON envelope into *model*."""
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TransportError(
                TransportErrorKind.MALFORMED_RESPONSE,
                f"Unexpected response from {response.request.url.path}: {exc}",
                status=response.status_code,
            ) from exc


def _require(value: Optional[str], name: str) -> None:
    if not value or not value.strip():
        raise ValueError(f"{name} must not be empty")


def _quote_slug(slug: str) -> str:
    """Percent-encode *slug* for the request path, keeping ``/`` separators."""
    return quote(slug, safe="/")


def _extract_message(response: httpx.Response) -> str:
    """Pull a service-provided message out of an error response body."""
    try:
        detail = response.json()
        if isinstance(detail, dict):
            return str(
                detail.get("message") or detail.get("error") or detail.get("detail") or ""
            )
        return str(detail)
    except ValueError:
        return response.text[:200] if response.text else ""
