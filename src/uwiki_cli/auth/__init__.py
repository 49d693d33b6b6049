"""Authentication for uwiki_cli.

- :class:`AuthManager` -- exchanges configured credentials for a token,
  persists it through :class:`~uwiki_cli.config.ConfigStore`, and creates
  user accounts.

Typical usage::

    from uwiki_cli.auth import AuthManager

    token = AuthManager(session, store).login(config)
"""

from uwiki_cli.auth.manager import AuthManager

__all__ = ["AuthManager"]
