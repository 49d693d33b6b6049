"""Exception hierarchy for uwiki_cli.

Every error carries a ``kind`` drawn from a small enum so that
:func:`~uwiki_cli.classifier.classify` can map it to an outcome and exit
code without inspecting message text.

Subclass hierarchy::

    UwikiError
    +-- TransportError   (raised by SessionClient only)
    +-- AuthError        (raised by AuthManager)
    +-- UpdateError      (raised by PageUpdater)
    +-- ConfigError      (raised by the config store)

:class:`TransportError` never crosses a component boundary: the auth
manager and page updater translate it into their own error type and keep
the original as ``transport`` (and as ``__cause__``).
"""

from __future__ import annotations

import enum
from typing import Optional


class UwikiError(Exception):
    """Base exception for all uwiki_cli errors.

    Args:
        message: Human-readable error description printed to stderr.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# --- Transport ---


class TransportErrorKind(str, enum.Enum):
    """Failure classes reported by :class:`~uwiki_cli.client.SessionClient`."""

    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection_failed"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    MALFORMED_RESPONSE = "malformed_response"


class TransportError(UwikiError):
    """Raised by the session client for network, HTTP, and payload failures.

    Args:
        kind: The failure class.
        message: Short cause string.
        status: HTTP status code, when a response was received.
        body: Service-provided message, when the response carried one.
    """

    def __init__(
        self,
        kind: TransportErrorKind,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status = status
        self.body = body

    def describe(self) -> str:
        """Return a one-line summary, prefixed with the HTTP status for error responses."""
        if self.status is not None and not 200 <= self.status < 300:
            return f"HTTP {self.status}: {self.message}"
        return self.message


# --- Auth ---


class AuthErrorKind(str, enum.Enum):
    """Failure classes for the login and user-management flows."""

    MISSING_CREDENTIALS = "missing_credentials"
    INVALID_CREDENTIALS = "invalid_credentials"
    SERVICE_UNAVAILABLE = "service_unavailable"
    PERSIST_FAILED = "persist_failed"


class AuthError(UwikiError):
    """Raised when credentials cannot be exchanged for a stored token.

    For :attr:`AuthErrorKind.PERSIST_FAILED` the service already issued a
    token; it is kept on :attr:`token` so the caller can still use or show
    it.

    Args:
        kind: The failure class.
        message: Human-readable detail.
        transport: The underlying transport error, if any.
        token: The issued token (``PERSIST_FAILED`` only).
    """

    def __init__(
        self,
        kind: AuthErrorKind,
        message: str,
        transport: Optional[TransportError] = None,
        token: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.transport = transport
        self.token = token


# --- Page update ---


class UpdateErrorKind(str, enum.Enum):
    """Failure classes for authenticated page operations."""

    NOT_AUTHENTICATED = "not_authenticated"
    INVALID_SLUG = "invalid_slug"
    SLUG_REJECTED = "slug_rejected"
    SERVICE_UNAVAILABLE = "service_unavailable"


class UpdateError(UwikiError):
    """Raised when a page cannot be read or written with the stored token.

    Args:
        kind: The failure class.
        message: Human-readable detail.
        transport: The underlying transport error, if any.
    """

    def __init__(
        self,
        kind: UpdateErrorKind,
        message: str,
        transport: Optional[TransportError] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.transport = transport


# --- Config ---


class ConfigError(UwikiError):
    """Raised for configuration problems (missing file, invalid TOML, bad values)."""
