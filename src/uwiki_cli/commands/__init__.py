"""Built-in CLI sub-commands for uwiki_cli.

* :mod:`~uwiki_cli.commands.auth` -- ``login``, ``logout``, ``add-user``.
* :mod:`~uwiki_cli.commands.page` -- ``set-page``, ``get-page``.
* :mod:`~uwiki_cli.commands.config` -- the ``config`` group (``init``,
  ``show``, ``path``).
* :mod:`~uwiki_cli.commands.common` -- config/session loading and error
  reporting shared by the commands above.

Single commands are plain callback functions registered directly on the
root app; multi-command groups export a :class:`typer.Typer` sub-application.
"""
