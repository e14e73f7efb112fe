"""Core types for torctl.

All dataclasses are frozen for immutability.
"""

from dataclasses import dataclass

from torctl.core.errors import ConfigError


@dataclass(frozen=True)
class Endpoint:
    """Where the control port lives.

    Exactly one form is active: a TCP ``host``/``port`` pair, or the ``path``
    of a Unix-domain socket.

    Attributes:
        host: Hostname or address for a TCP control port.
        port: TCP port (1-65535).
        path: Filesystem path of a local control socket.
    """

    host: str | None = None
    port: int | None = None
    path: str | None = None

    def __post_init__(self) -> None:
        if self.path is not None:
            if self.host is not None or self.port is not None:
                raise ConfigError(
                    "Endpoint: Cannot specify both a socket path and host/port"
                )
            if not self.path:
                raise ConfigError("Endpoint: Socket path must not be empty")
            return

        if not self.host or self.port is None:
            raise ConfigError("Endpoint: Must specify either a socket path or host and port")
        if not 1 <= self.port <= 65535:
            raise ConfigError(f"Endpoint: Port out of range (1-65535): {self.port}")

    @classmethod
    def tcp(cls, host: str, port: int) -> "Endpoint":
        """Create a TCP endpoint."""
        return cls(host=host, port=port)

    @classmethod
    def unix(cls, path: str) -> "Endpoint":
        """Create a Unix-domain socket endpoint."""
        return cls(path=path)

    @property
    def is_unix(self) -> bool:
        """Return True for a local socket path endpoint."""
        return self.path is not None

    def __str__(self) -> str:
        if self.path is not None:
            return f"unix:{self.path}"
        return f"{self.host}:{self.port}"
