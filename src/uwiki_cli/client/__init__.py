"""HTTP client module for uwiki_cli.

Provides :class:`SessionClient`, a blocking client backed by
:class:`httpx.Client` that isolates every transport concern (base URL,
timeout, bearer injection, status mapping) from the auth and page flows.

Example::

    from uwiki_cli.client import SessionClient

    with SessionClient(config.server_address, timeout=config.timeout) as session:
        token = session.login(credentials)
"""

from uwiki_cli.client.session import SessionClient

__all__ = ["SessionClient"]
