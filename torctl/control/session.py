"""Control-port session: connection lifecycle and authentication.

A ControlSession starts closed. open() connects and authenticates with
AUTHENTICATE "<password>"; close() ends the connection either politely (QUIT,
then wait for the server to end the stream) or by aborting the socket. A
session can be reopened any number of times, and drops back to closed on its
own when the server ends the stream.
"""

from __future__ import annotations

import asyncio
import logging

from torctl.config.schema import ControlConfig
from torctl.control.events import StreamEvents
from torctl.control.protocol import format_authenticate
from torctl.control.transport import ControlTransport
from torctl.core.errors import AuthenticationError, ControlConnectionError
from torctl.core.types import Endpoint

logger = logging.getLogger(__name__)


class ControlSession:
    """One (re)openable, authenticated control connection.

    The configuration is fixed for the life of the session except for the
    persistent flag, which may be flipped at any time and governs the next
    command's keep-or-close decision.
    """

    def __init__(
        self,
        config: ControlConfig | None = None,
        events: StreamEvents | None = None,
    ) -> None:
        """Initialize ControlSession.

        Args:
            config: Endpoint, password and timeouts (defaults if None).
            events: Listener registry for raw data / end / async events.
        """
        self._config = config or ControlConfig()
        self._persistent = self._config.persistent
        self._events = events if events is not None else StreamEvents()
        self._transport: ControlTransport | None = None
        self._open_lock = asyncio.Lock()

    @property
    def config(self) -> ControlConfig:
        return self._config

    @property
    def events(self) -> StreamEvents:
        """Stream listeners (raw data, end of stream, async events)."""
        return self._events

    @property
    def persistent(self) -> bool:
        return self._persistent

    @persistent.setter
    def persistent(self, value: bool) -> None:
        self._persistent = bool(value)

    def is_persistent(self) -> bool:
        return self._persistent

    def set_persistent(self, value: bool) -> "ControlSession":
        self._persistent = bool(value)
        return self

    @property
    def is_open(self) -> bool:
        """Check if an authenticated connection is installed."""
        return self._transport is not None and self._transport.is_connected

    @property
    def transport(self) -> ControlTransport | None:
        return self._transport

    async def open(self, endpoint: Endpoint | None = None) -> ControlTransport:
        """Connect and authenticate, or return the already open transport.

        Args:
            endpoint: Overrides the configured endpoint for this connection.

        Returns:
            The authenticated transport.

        Raises:
            ControlConnectionError: If the socket cannot be opened or dies
                before authentication completes.
            AuthenticationError: If the server rejects the password.
        """
        async with self._open_lock:
            if self.is_open:
                assert self._transport is not None
                return self._transport

            target = endpoint or self._config.endpoint()
            transport = ControlTransport(
                target,
                events=self._events,
                max_line_length=self._config.max_line_length,
                on_end=self._handle_end,
            )
            await transport.connect(timeout=self._config.connect_timeout)

            try:
                await transport.write_line(format_authenticate(self._config.get_password()))
                reply = await transport.receive_reply(timeout=self._config.connect_timeout)
            except ControlConnectionError as e:
                transport.abort()
                raise ControlConnectionError(
                    f"Error connecting to control port {target}: {e.message}"
                ) from e
            except Exception:
                transport.abort()
                raise

            if not reply.is_success_class:
                transport.abort()
                raise AuthenticationError(
                    f"Authentication failed with message: {reply.raw_text.rstrip()}",
                    status_code=reply.status_code,
                    reply=reply,
                )

            self._transport = transport
            logger.info("Authenticated to control port %s", target)
            return transport

    async def close(self, graceful: bool = True) -> None:
        """Close the connection if one is open.

        Args:
            graceful: Send QUIT and wait for the server to end the stream.
                If False, abort the socket at once; a pending reply wait
                fails with ControlConnectionError.
        """
        transport = self._transport
        if transport is None:
            return
        self._transport = None

        if not transport.is_connected:
            return

        if not graceful:
            transport.abort()
            await transport.wait_closed()
            return

        try:
            await transport.write_line("QUIT")
        except ControlConnectionError as e:
            logger.debug("QUIT not delivered: %s", e)
            transport.abort()
            await transport.wait_closed()
            return

        if not await transport.wait_closed(timeout=self._config.close_timeout):
            logger.warning(
                "Control port %s did not close within %ss after QUIT, aborting",
                transport.endpoint,
                self._config.close_timeout,
            )
            transport.abort()
            await transport.wait_closed()

    def _handle_end(self, transport: ControlTransport) -> None:
        if self._transport is transport:
            logger.debug("Control port %s closed the connection", transport.endpoint)
            self._transport = None
