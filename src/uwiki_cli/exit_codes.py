"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to an :class:`~uwiki_cli.classifier.Outcome` chosen by
:func:`~uwiki_cli.classifier.classify`. Shell wrappers can inspect the exit
code to decide whether to re-run ``login`` or check connectivity without
parsing stderr.

Example::

    $ uwiki-cli set-page docs/intro < intro.md
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- run `uwiki-cli login` again
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or the config file is missing or invalid."""

EXIT_INVALID_USAGE = 2
"""Missing credentials, an empty slug, or other invalid input."""

EXIT_AUTH_FAILURE = 3
"""Credentials were rejected, or no valid token is available."""

EXIT_NOT_FOUND = 4
"""The service rejected the page slug (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The service returned an error status or a malformed response."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_PERSIST_FAILURE = 7
"""A token was issued by the service but could not be saved locally."""
