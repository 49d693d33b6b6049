"""Configuration file discovery and the TOML-backed config store.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.uwiki-cli/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Config file location** -- :func:`resolve_config_path` applies the
  precedence ``--config-file`` flag > ``UWIKI_CLI_CONFIG`` > default path.
* **ConfigStore** -- loads the TOML document into a
  :class:`~uwiki_cli.models.Config` and persists token changes back to
  disk. Only the ``token`` key is ever rewritten; every other key the user
  put in the file is preserved.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) with ``0o600`` permissions, since the file holds a
password and a bearer token.
"""

from __future__ import annotations

import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib  # type: ignore[no-redef]

import tomli_w
from pydantic import ValidationError

from uwiki_cli.exceptions import ConfigError
from uwiki_cli.models import Config

_APP_NAME = "uwiki-cli"
_CONFIG_FILENAME = "config.toml"

CONFIG_ENV_VAR = "UWIKI_CLI_CONFIG"
SERVER_ENV_VAR = "UWIKI_SERVER_ADDRESS"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory (not created).

    On Linux/BSD: ``$XDG_CONFIG_HOME/uwiki-cli/`` (default ``~/.config/uwiki-cli/``).
    On macOS/Windows: ``~/.uwiki-cli/``.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/uwiki-cli/`` (default ``~/.local/share/uwiki-cli/``).
    On macOS/Windows: ``~/.uwiki-cli/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_config_path() -> Path:
    """Path of the config file when neither flag nor env var is given."""
    return get_config_dir() / _CONFIG_FILENAME


def resolve_config_path(cli_path: Optional[Path] = None) -> Path:
    """Resolve the config file location.

    Precedence (high to low):
        1. ``--config-file`` flag
        2. ``UWIKI_CLI_CONFIG`` environment variable
        3. :func:`default_config_path`
    """
    if cli_path is not None:
        return Path(cli_path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return default_config_path()


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically with ``0o600`` permissions.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original file is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        # Restrict permissions before any secret is written
        os.chmod(tmp_path, 0o600)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Token display ---


def mask_token(token: Optional[str]) -> str:
    """Return a display-safe form of *token*.

    Tokens longer than 8 characters keep their first 4 and last 2
    characters (``abcd...yz``); shorter ones are fully masked.
    """
    if not token:
        return "(none)"
    if len(token) <= 8:
        return "****"
    return f"{token[:4]}...{token[-2:]}"


# --- Config store ---


class ConfigStore:
    """Read the TOML config file and persist token updates to it.

    Args:
        path: Location of the config file (see :func:`resolve_config_path`).

    Example::

        store = ConfigStore(resolve_config_path())
        config = store.load()
        store.persist_token("tok-123")
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """The filesystem path to the config file."""
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def read_document(self) -> dict[str, Any]:
        """Return the raw TOML document as a dict.

        Raises:
            ConfigError: If the file does not exist, cannot be read, or is
                not valid TOML.
        """
        if not self._path.is_file():
            raise ConfigError(f"No uwiki-cli config file found at {self._path}")
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read config file at {self._path}: {exc}") from exc
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Failed to parse config file at {self._path}: {exc}") from exc

    def load(self, server_override: Optional[str] = None) -> Config:
        """Load and validate the config.

        The server address follows the precedence ``server_override`` >
        ``UWIKI_SERVER_ADDRESS`` > file > default. Overrides only affect the
        returned value and are never written back.

        Raises:
            ConfigError: If the file is missing, unparsable, or fails
                validation.
        """
        data = self.read_document()
        env_server = os.environ.get(SERVER_ENV_VAR)
        if server_override:
            data["server_address"] = server_override
        elif env_server:
            data["server_address"] = env_server
        try:
            return Config.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid config file at {self._path}: {exc}") from exc

    def write_document(self, data: dict[str, Any]) -> None:
        """Serialise *data* as TOML and write it atomically.

        ``None`` values are dropped since TOML has no null.

        Raises:
            OSError: If the file cannot be written.
        """
        cleaned = {k: v for k, v in data.items() if v is not None}
        _atomic_write(self._path, tomli_w.dumps(cleaned))

    def persist_token(self, token: str) -> None:
        """Store *token* in the config file, preserving all other keys.

        Raises:
            ConfigError: If the existing file cannot be parsed.
            OSError: If the file cannot be written.
        """
        data = self.read_document() if self._path.is_file() else {}
        data["token"] = token
        self.write_document(data)

    def clear_token(self) -> bool:
        """Remove the stored token.

        Returns:
            ``True`` if a token was present and removed, ``False`` otherwise.
        """
        data = self.read_document()
        if "token" not in data:
            return False
        del data["token"]
        self.write_document(data)
        return True
