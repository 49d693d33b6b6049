"""uwiki_cli -- command-line administration client for uwiki installations.

The client authenticates a configured user against a uwiki service, persists
the issued token in the user's config file, and reuses that token to push
page content by slug.

Typical workflow::

    uwiki-cli config init --username alice --password s3cret
    uwiki-cli login                       # exchange credentials for a token
    uwiki-cli set-page docs/intro < intro.md

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for config and wire payloads.
    config: XDG-aware config file discovery and the TOML config store.
    exceptions: Tagged error hierarchy (transport, auth, update, config).
    classifier: Maps errors to outcomes and exit codes.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
