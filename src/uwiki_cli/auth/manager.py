"""Auth manager -- turns configured credentials into a stored token.

:class:`AuthManager` orchestrates the login flow: it validates the
credentials held in :class:`~uwiki_cli.models.Config`, delegates the
exchange to :class:`~uwiki_cli.client.SessionClient`, and hands the issued
token to :class:`~uwiki_cli.config.ConfigStore`.

Each login is a single attempt with two end states::

    Unauthenticated --login--> Authenticated(token)
                          \\--> Unauthenticated (AuthError)

Transport errors never escape this module untranslated.
"""

from __future__ import annotations

from uwiki_cli.client import SessionClient
from uwiki_cli.config import ConfigStore
from uwiki_cli.exceptions import (
    AuthError,
    AuthErrorKind,
    ConfigError,
    TransportError,
    TransportErrorKind,
)
from uwiki_cli.models import ApiResponse, Config
from uwiki_cli.output import debug


class AuthManager:
    """Login and user-management flows.

    Args:
        session: An open session client for the configured server.
        store: Where a freshly issued token is persisted.

    Example::

        with SessionClient(config.server_address) as session:
            token = AuthManager(session, store).login(config)
    """

    def __init__(self, session: SessionClient, store: ConfigStore) -> None:
        self._session = session
        self._store = store

    def login(self, config: Config) -> str:
        """Exchange the configured credentials for a token and persist it.

        On success ``config.token`` is updated in place and the token is
        written to the store.

        Args:
            config: The loaded configuration; must carry a non-empty
                ``username`` and ``password``.

        Returns:
            The issued token.

        Raises:
            AuthError: ``MISSING_CREDENTIALS`` (no network call made),
                ``INVALID_CREDENTIALS``, ``SERVICE_UNAVAILABLE``, or
                ``PERSIST_FAILED``. For ``PERSIST_FAILED`` the issued token
                is available on the exception and on ``config.token``.
        """
        credentials = config.credentials()
        if credentials is None:
            missing = [
                name for name in ("username", "password") if not getattr(config, name)
            ]
            raise AuthError(
                AuthErrorKind.MISSING_CREDENTIALS,
                f"Config is missing {' and '.join(missing)}",
            )

        debug(f"Logging in to {self._session.server_address} as {credentials.username}")
        try:
            token = self._session.login(credentials)
        except TransportError as exc:
            raise _translate(exc, had_token=config.token is not None) from exc

        config.token = token
        try:
            self._store.persist_token(token)
        except (OSError, ConfigError) as exc:
            raise AuthError(
                AuthErrorKind.PERSIST_FAILED,
                f"Login succeeded and a token was issued, but it could not be "
                f"saved to {self._store.path}: {exc}",
                token=token,
            ) from exc
        return token

    def add_user(
        self, config: Config, username: str, password: str
    ) -> ApiResponse:
        """Ask the service to create a user account.

        The stored token, if any, is attached to the request.

        Returns:
            The service's envelope; ``success`` may be ``False`` when the
            service declined (for example a duplicate user name).

        Raises:
            AuthError: ``MISSING_CREDENTIALS`` for an empty user name or
                password (no network call made), ``INVALID_CREDENTIALS``
                when the service refuses the caller, ``SERVICE_UNAVAILABLE``
                otherwise.
        """
        if not username or not password:
            raise AuthError(
                AuthErrorKind.MISSING_CREDENTIALS,
                "A non-empty user name and password are required to add a user",
            )
        try:
            return self._session.add_user(username, password, token=config.token)
        except TransportError as exc:
            if exc.kind is TransportErrorKind.UNAUTHORIZED:
                raise AuthError(
                    AuthErrorKind.INVALID_CREDENTIALS,
                    f"Service refused to create user '{username}' ({exc.describe()})",
                    transport=exc,
                ) from exc
            raise AuthError(
                AuthErrorKind.SERVICE_UNAVAILABLE, exc.describe(), transport=exc
            ) from exc


def _translate(exc: TransportError, had_token: bool = False) -> AuthError:
    """Map a login transport failure into the auth domain."""
    if exc.kind is TransportErrorKind.UNAUTHORIZED:
        message = "Service rejected the configured username/password"
        if exc.body:
            message += f": {exc.body}"
        if had_token:
            message += " (the previously stored token was left in place)"
        return AuthError(AuthErrorKind.INVALID_CREDENTIALS, message, transport=exc)
    return AuthError(AuthErrorKind.SERVICE_UNAVAILABLE, exc.describe(), transport=exc)
