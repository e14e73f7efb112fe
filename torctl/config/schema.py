"""Pydantic models for torctl configuration validation."""

import os

from pydantic import BaseModel, ConfigDict, Field, model_validator

from torctl.core.constants import DEFAULT_HOST, DEFAULT_PORT, MAX_LINE_LENGTH
from torctl.core.types import Endpoint


class ControlConfig(BaseModel):
    """Configuration for a control-port session.

    Example config.json:
        {
            "host": "127.0.0.1",
            "port": 9051,
            "password_env": "TOR_CONTROL_PASSWORD",
            "persistent": true
        }

    Or, for a local socket:
        {"path": "/run/tor/control"}
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    host: str | None = None
    """Control port host. Defaults to 127.0.0.1 when no path is set."""

    port: int | None = Field(default=None, ge=1, le=65535)
    """Control port number. Defaults to 9051 when no path is set."""

    path: str | None = None
    """Unix-domain control socket (alternative to host/port)."""

    password: str = ""
    """Password sent with AUTHENTICATE."""

    password_env: str | None = None
    """Environment variable holding the password (wins over `password` when set)."""

    persistent: bool = False
    """Keep the connection open between commands."""

    connect_timeout: float = Field(default=10.0, gt=0)
    """Seconds allowed for connect + authentication."""

    close_timeout: float = Field(default=5.0, gt=0)
    """Seconds to wait for the server to end the stream after QUIT."""

    reply_timeout: float | None = Field(default=None, gt=0)
    """Seconds to wait for a command reply (None waits forever)."""

    max_line_length: int = Field(default=MAX_LINE_LENGTH, gt=0)
    """Longest reply line accepted before the stream is considered broken."""

    @model_validator(mode="after")
    def validate_endpoint(self) -> "ControlConfig":
        """Ensure path and host/port are not both given."""
        if self.path is not None and (self.host is not None or self.port is not None):
            raise ValueError("ControlConfig: Cannot specify both 'path' and 'host'/'port'")
        return self

    def endpoint(self) -> Endpoint:
        """Return the configured endpoint, filling in host/port defaults."""
        if self.path is not None:
            return Endpoint.unix(self.path)
        return Endpoint.tcp(self.host or DEFAULT_HOST, self.port or DEFAULT_PORT)

    def get_password(self) -> str:
        """Return the password, preferring the `password_env` variable if present."""
        if self.password_env:
            from_env = os.environ.get(self.password_env)
            if from_env is not None:
                return from_env
        return self.password
