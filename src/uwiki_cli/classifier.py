"""Error classification -- maps errors to outcomes and exit codes.

:func:`classify` is a pure function: it performs no I/O and always returns
the same :class:`Classification` for the same error. The CLI layer uses the
result to print the detail and hint and to pick the process exit code.

Every ``kind`` of every error type appears in the lookup tables below;
``SERVICE_UNAVAILABLE`` is refined by the wrapped transport error so that a
timeout and a 500 response exit differently.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from uwiki_cli.exceptions import (
    AuthError,
    AuthErrorKind,
    ConfigError,
    TransportError,
    TransportErrorKind,
    UpdateError,
    UpdateErrorKind,
    UwikiError,
)
from uwiki_cli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_PERSIST_FAILURE,
    EXIT_SERVER_ERROR,
)


class Outcome(str, enum.Enum):
    """Stable, user-facing failure categories."""

    INVALID_USAGE = "invalid_usage"
    AUTH_REJECTED = "auth_rejected"
    AUTH_REQUIRED = "auth_required"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    CONNECTION_ERROR = "connection_error"
    PERSIST_FAILED = "persist_failed"
    CONFIG_ERROR = "config_error"
    UNKNOWN = "unknown"


_EXIT_CODES: dict[Outcome, int] = {
    Outcome.INVALID_USAGE: EXIT_INVALID_USAGE,
    Outcome.AUTH_REJECTED: EXIT_AUTH_FAILURE,
    Outcome.AUTH_REQUIRED: EXIT_AUTH_FAILURE,
    Outcome.NOT_FOUND: EXIT_NOT_FOUND,
    Outcome.SERVER_ERROR: EXIT_SERVER_ERROR,
    Outcome.CONNECTION_ERROR: EXIT_CONNECTION_ERROR,
    Outcome.PERSIST_FAILED: EXIT_PERSIST_FAILURE,
    Outcome.CONFIG_ERROR: EXIT_GENERIC_FAILURE,
    Outcome.UNKNOWN: EXIT_GENERIC_FAILURE,
}

_HINTS: dict[Outcome, str] = {
    Outcome.AUTH_REJECTED: "Check the username and password in your config file.",
    Outcome.AUTH_REQUIRED: "Run `uwiki-cli login` to obtain a new token.",
    Outcome.NOT_FOUND: "Check the page slug.",
    Outcome.CONNECTION_ERROR: (
        "Check that server_address is correct and the service is running."
    ),
    Outcome.PERSIST_FAILED: (
        "Fix the config file permissions, then run `uwiki-cli login` again."
    ),
    Outcome.CONFIG_ERROR: "Create a config file with `uwiki-cli config init`.",
}

_TRANSPORT_OUTCOMES: dict[TransportErrorKind, Outcome] = {
    TransportErrorKind.TIMEOUT: Outcome.CONNECTION_ERROR,
    TransportErrorKind.CONNECTION_FAILED: Outcome.CONNECTION_ERROR,
    TransportErrorKind.UNAUTHORIZED: Outcome.AUTH_REJECTED,
    TransportErrorKind.NOT_FOUND: Outcome.NOT_FOUND,
    TransportErrorKind.SERVER_ERROR: Outcome.SERVER_ERROR,
    TransportErrorKind.MALFORMED_RESPONSE: Outcome.SERVER_ERROR,
}

# None means "refine from the wrapped transport error".
_AUTH_OUTCOMES: dict[AuthErrorKind, Optional[Outcome]] = {
    AuthErrorKind.MISSING_CREDENTIALS: Outcome.INVALID_USAGE,
    AuthErrorKind.INVALID_CREDENTIALS: Outcome.AUTH_REJECTED,
    AuthErrorKind.SERVICE_UNAVAILABLE: None,
    AuthErrorKind.PERSIST_FAILED: Outcome.PERSIST_FAILED,
}

_UPDATE_OUTCOMES: dict[UpdateErrorKind, Optional[Outcome]] = {
    UpdateErrorKind.NOT_AUTHENTICATED: Outcome.AUTH_REQUIRED,
    UpdateErrorKind.INVALID_SLUG: Outcome.INVALID_USAGE,
    UpdateErrorKind.SLUG_REJECTED: Outcome.NOT_FOUND,
    UpdateErrorKind.SERVICE_UNAVAILABLE: None,
}

_MISSING_CREDENTIALS_HINT = (
    "Add username and password to your config file (see `uwiki-cli config init`)."
)
_INVALID_SLUG_HINT = "Pass a page slug such as docs/intro."


@dataclass(frozen=True)
class Classification:
    """Result of :func:`classify`.

    Attributes:
        outcome: The failure category.
        exit_code: Process exit code for the category.
        detail: Human-readable description of what went wrong.
        hint: Optional next step for the user.
    """

    outcome: Outcome
    exit_code: int
    detail: str
    hint: Optional[str] = None


def classify(exc: UwikiError) -> Classification:
    """Classify *exc* into an :class:`Outcome` with exit code, detail, and hint."""
    outcome: Optional[Outcome]
    hint: Optional[str] = None

    if isinstance(exc, TransportError):
        outcome = _TRANSPORT_OUTCOMES[exc.kind]
    elif isinstance(exc, AuthError):
        outcome = _AUTH_OUTCOMES[exc.kind] or _refine(exc.transport)
        if exc.kind is AuthErrorKind.MISSING_CREDENTIALS:
            hint = _MISSING_CREDENTIALS_HINT
    elif isinstance(exc, UpdateError):
        outcome = _UPDATE_OUTCOMES[exc.kind] or _refine(exc.transport)
        if exc.kind is UpdateErrorKind.INVALID_SLUG:
            hint = _INVALID_SLUG_HINT
    elif isinstance(exc, ConfigError):
        outcome = Outcome.CONFIG_ERROR
    else:
        outcome = Outcome.UNKNOWN

    return Classification(
        outcome=outcome,
        exit_code=_EXIT_CODES[outcome],
        detail=exc.message,
        hint=hint or _HINTS.get(outcome),
    )


def _refine(transport: Optional[TransportError]) -> Outcome:
    """Pick the outcome for a service failure from its transport cause."""
    if transport is None:
        return Outcome.SERVER_ERROR
    outcome = _TRANSPORT_OUTCOMES[transport.kind]
    if outcome is Outcome.CONNECTION_ERROR:
        return outcome
    return Outcome.SERVER_ERROR
