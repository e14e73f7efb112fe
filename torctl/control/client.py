"""Control-port client: one command at a time over a ControlSession.

The control protocol has no request identifiers; a reply belongs to a command
purely by arrival order. ControlClient therefore holds a per-session lock (FIFO
in asyncio) across open, write, wait and the keep-or-close decision, so
concurrent callers are queued instead of interleaved.

Usage:
    async with ControlClient(ControlConfig(password="secret")) as client:
        reply = await client.get_info("version")
        print(reply.key_values()["version"])
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from torctl.config.schema import ControlConfig
from torctl.control.commands import CommandsMixin
from torctl.control.events import StreamEvents
from torctl.control.protocol import Reply, check_reply, encode_command, redact_command
from torctl.control.session import ControlSession
from torctl.core.errors import ControlConnectionError, ProtocolError
from torctl.core.types import Endpoint

logger = logging.getLogger(__name__)


class ControlClient(CommandsMixin):
    """Dispatches commands over a session and classifies the replies."""

    def __init__(
        self,
        config: ControlConfig | None = None,
        session: ControlSession | None = None,
    ) -> None:
        """Initialize ControlClient.

        Args:
            config: Used to build a new session when ``session`` is None.
            session: Existing session to dispatch over.
        """
        if session is not None and config is not None:
            raise ValueError("Pass either config or session, not both")
        self._session = session or ControlSession(config)
        self._lock = asyncio.Lock()

    @property
    def session(self) -> ControlSession:
        return self._session

    @property
    def events(self) -> StreamEvents:
        return self._session.events

    @property
    def persistent(self) -> bool:
        return self._session.persistent

    @persistent.setter
    def persistent(self, value: bool) -> None:
        self._session.persistent = value

    @property
    def is_open(self) -> bool:
        return self._session.is_open

    async def open(self, endpoint: Endpoint | None = None) -> None:
        """Connect and authenticate now instead of on the first command."""
        async with self._lock:
            await self._session.open(endpoint)

    async def close(self, graceful: bool = True) -> None:
        """Close the session (waits for any command in flight)."""
        async with self._lock:
            await self._session.close(graceful=graceful)

    async def abort(self) -> None:
        """Abort the connection immediately, even with a command in flight.

        The in-flight send() fails with ControlConnectionError.
        """
        await self._session.close(graceful=False)

    async def __aenter__(self) -> "ControlClient":
        await self.open()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def send(self, command: str, keep_connection: bool | None = None) -> Reply:
        """Send one command and wait for its reply.

        The session is opened first if needed. After the reply arrives the
        connection is closed with QUIT unless ``keep_connection`` is true or
        the session is persistent; this happens before the result is
        returned or the error raised.

        Args:
            command: Command line without terminator, e.g. "GETINFO version".
            keep_connection: Keep the connection open after this command
                regardless of the persistent setting.

        Returns:
            The "250 OK" reply.

        Raises:
            ControlConnectionError: Connection failed or ended before a reply.
            AuthenticationError: The password was rejected; nothing was sent.
            CommandError: The server answered with anything but "250 OK".
            ValueError: The command contains CR or LF.
        """
        encode_command(command)  # reject CR/LF before anything is opened

        async with self._lock:
            transport = await self._session.open()
            logger.debug("Dispatching: %s", redact_command(command))

            try:
                await transport.write_line(command)
                reply = await transport.receive_reply(timeout=self._session.config.reply_timeout)
            except (ControlConnectionError, ProtocolError):
                # Stream state is unknown; never reuse it
                await self._session.close(graceful=False)
                raise

            if not (keep_connection or self._session.persistent or not self._session.is_open):
                await self._session.close(graceful=True)

            return check_reply(reply)
