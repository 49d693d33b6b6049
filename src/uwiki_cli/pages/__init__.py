"""Authenticated page operations.

- :class:`PageUpdater` -- writes and reads pages by slug using the token
  stored in :class:`~uwiki_cli.models.Config`.
"""

from uwiki_cli.pages.updater import PageUpdater

__all__ = ["PageUpdater"]
