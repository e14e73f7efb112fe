"""Typed exception hierarchy for torctl."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from torctl.control.protocol import Reply


class TorCtlError(Exception):
    """Base class for all torctl errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(TorCtlError):
    """Raised for configuration issues (bad endpoint, invalid JSON, validation failure)."""


class LoadError(TorCtlError):
    """Raised when a config file cannot be found, read or parsed."""


class ControlConnectionError(TorCtlError):
    """Raised when the control socket cannot be opened or breaks mid-exchange.

    Covers connect failures, unexpected end of stream while a reply is
    pending, and reply timeouts. Never retried automatically.
    """


class ProtocolError(TorCtlError):
    """Raised when the server sends something the client cannot parse."""


class ReplyFramingError(ProtocolError):
    """A reply line had no recognizable status prefix, or was too long.

    The stream cannot be resynchronised after this, so the connection that
    produced it is torn down.
    """


class AuthenticationError(TorCtlError):
    """The server rejected AUTHENTICATE.

    Attributes:
        status_code: Status parsed from the reply (e.g. 515).
        reply: The full reply, when one was received.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reply: Reply | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reply = reply


class CommandError(TorCtlError):
    """A command reply was not "250 OK".

    Non-fatal: the session stays usable (or was closed by the usual
    keep-connection policy).

    Attributes:
        status_code: Integer from the first three characters of the raw reply,
            or None when those are not a number.
        raw_text: The complete reply text as received.
        reply: The parsed reply.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        raw_text: str = "",
        reply: Reply | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.raw_text = raw_text
        self.reply = reply

    def __str__(self) -> str:
        message = self.message.rstrip()
        if self.status_code is None:
            return message
        return f"{self.status_code} {message}"
