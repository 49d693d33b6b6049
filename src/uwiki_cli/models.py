"""Pydantic models shared across uwiki_cli.

**Configuration model** -- :class:`Config`, read from the user's TOML config
file by :class:`~uwiki_cli.config.ConfigStore` and passed explicitly into the
auth manager and page updater.

**Request models** -- :class:`Credentials` and :class:`UpdateRequest`, built
fresh for each invocation and discarded after the response is processed.

**Response models** -- :class:`ApiResponse`, :class:`LoginResponse` and
:class:`Page`, parsed from the JSON envelopes returned by the wiki service.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SERVER_ADDRESS = "http://localhost:1181"
DEFAULT_TIMEOUT = 10.0


# --- Config ---


class Config(BaseModel):
    """Effective configuration for one CLI invocation.

    Loaded once at process start. Only
    :meth:`~uwiki_cli.auth.AuthManager.login` mutates it, by setting
    :attr:`token` after a successful login.

    Example::

        Config(username="alice", password="s3cret")
    """

    model_config = ConfigDict(extra="ignore")

    server_address: str = Field(
        default=DEFAULT_SERVER_ADDRESS, description="Base URL of the uwiki service"
    )
    username: Optional[str] = Field(default=None, description="Login user name")
    password: Optional[str] = Field(default=None, description="Login password")
    token: Optional[str] = Field(
        default=None, description="Bearer token issued by the last successful login"
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Request timeout in seconds"
    )

    @field_validator("token")
    @classmethod
    def _empty_token_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("server_address")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("server_address must not be empty")
        return value.rstrip("/")

    def credentials(self) -> Optional[Credentials]:
        """Return the login credentials, or ``None`` if either part is missing or empty."""
        if not self.username or not self.password:
            return None
        return Credentials(username=self.username, password=self.password)


# --- Requests ---


class Credentials(BaseModel):
    """User name and password sent to the login endpoint. Never logged or persisted."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='****')"

    __str__ = __repr__


class UpdateRequest(BaseModel):
    """A single page write, sent as a form to ``/s/<slug>``."""

    slug: str
    content: str
    title: Optional[str] = None
    previous_version: Optional[int] = None

    def form(self) -> dict[str, str]:
        """Return the form fields for the update request body."""
        data = {"body": self.content}
        if self.title is not None:
            data["title"] = self.title
        if self.previous_version is not None:
            data["previous_version"] = str(self.previous_version)
        return data


# --- Responses ---


class ApiResponse(BaseModel):
    """The ``{success, message}`` envelope every uwiki endpoint returns."""

    model_config = ConfigDict(extra="allow")

    success: bool
    message: str = ""


class LoginResponse(ApiResponse):
    """Login response; :attr:`token` is present when ``success`` is true."""

    token: Optional[str] = None


class Page(ApiResponse):
    """A page as returned by ``/g/<slug>``."""

    title: Optional[str] = None
    body: Optional[str] = None
    version: Optional[int] = None
