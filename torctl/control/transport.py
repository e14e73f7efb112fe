"""Control-port transport.

ControlTransport owns one asyncio stream pair to a TCP or Unix-domain
endpoint. A background read task forwards every raw chunk to the stream
listeners, feeds the ReplyFramer, and queues completed replies for
receive_reply(). Asynchronous 6xx replies go to the event listeners instead
of the queue, so they are never mistaken for a command's answer.

When the stream ends (server close, abort(), read error, framing error) the
transport marks itself closed, fails any pending receive with
ControlConnectionError, and emits the end event.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from torctl.control.events import StreamEvents
from torctl.control.protocol import Reply, ReplyFramer, encode_command, redact_command
from torctl.core.constants import MAX_LINE_LENGTH, READ_CHUNK_SIZE
from torctl.core.errors import ControlConnectionError, ReplyFramingError, TorCtlError
from torctl.core.types import Endpoint

logger = logging.getLogger(__name__)


class ControlTransport:
    """Bidirectional line stream to a control port.

    Attributes:
        endpoint: Where this transport connects.
        events: Listener registry receiving data / end / async events.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        events: StreamEvents | None = None,
        max_line_length: int = MAX_LINE_LENGTH,
        on_end: Callable[[ControlTransport], None] | None = None,
    ) -> None:
        """Initialize ControlTransport.

        Args:
            endpoint: TCP or Unix-domain endpoint.
            events: Listener registry (a private one is created if omitted).
            max_line_length: Longest reply line accepted.
            on_end: Called with this transport once the stream has ended,
                before the end event is emitted.
        """
        self.endpoint = endpoint
        self.events = events if events is not None else StreamEvents()
        self._framer = ReplyFramer(max_line_length=max_line_length)
        self._on_end = on_end
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._read_task: asyncio.Task[None] | None = None
        self._replies: asyncio.Queue[Reply | TorCtlError] = asyncio.Queue()
        self._closed = asyncio.Event()

    async def connect(self, timeout: float | None = None) -> None:
        """Open the socket and start the read loop.

        Raises:
            ControlConnectionError: If the socket cannot be opened in time.
        """
        if self._writer is not None:
            raise ControlConnectionError("Transport already connected")

        if self.endpoint.is_unix:
            opener = asyncio.open_unix_connection(self.endpoint.path)
        else:
            opener = asyncio.open_connection(self.endpoint.host, self.endpoint.port)

        try:
            self._reader, self._writer = await asyncio.wait_for(opener, timeout=timeout)
        except TimeoutError as e:
            raise ControlConnectionError(
                f"Error connecting to control port {self.endpoint}: timed out after {timeout}s"
            ) from e
        except OSError as e:
            raise ControlConnectionError(
                f"Error connecting to control port {self.endpoint}: {e}"
            ) from e

        logger.debug("Connected to control port %s", self.endpoint)
        self._read_task = asyncio.create_task(self._read_loop())

    async def write_line(self, command: str) -> None:
        """Send one command, CRLF-terminated.

        Raises:
            ValueError: If the command contains CR or LF.
            ControlConnectionError: If not connected or the write fails.
        """
        data = encode_command(command)
        if not self.is_connected or self._writer is None:
            raise ControlConnectionError("Transport not connected")

        logger.debug("-> %s", redact_command(command))
        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            raise ControlConnectionError(f"Failed to send command: {e}") from e

    async def receive_reply(self, timeout: float | None = None) -> Reply:
        """Wait for the next command reply.

        Args:
            timeout: Seconds to wait, or None to wait until the stream ends.

        Raises:
            ControlConnectionError: If the stream ended (or ends) before a
                reply arrives, or the timeout expires.
            ReplyFramingError: If the server sent an unparseable line.
        """
        if self._replies.empty() and self._closed.is_set():
            raise ControlConnectionError("Control connection closed")

        try:
            item = await asyncio.wait_for(self._replies.get(), timeout=timeout)
        except TimeoutError as e:
            raise ControlConnectionError(f"No reply from control port within {timeout}s") from e

        if isinstance(item, TorCtlError):
            raise item
        return item

    async def wait_closed(self, timeout: float | None = None) -> bool:
        """Wait for the stream to end.

        Returns:
            True if it ended, False if the timeout expired first.
        """
        try:
            await asyncio.wait_for(self._closed.wait(), timeout=timeout)
        except TimeoutError:
            return False
        if self._read_task is not None:
            await self._read_task
        return True

    def abort(self) -> None:
        """End the stream immediately without any protocol exchange."""
        if self._writer is not None and not self._closed.is_set():
            logger.debug("Aborting control connection to %s", self.endpoint)
            self._writer.transport.abort()

    @property
    def is_connected(self) -> bool:
        """Check if the stream is open."""
        return self._writer is not None and not self._closed.is_set()

    async def _read_loop(self) -> None:
        """Pump socket data into listeners and the framer until end of stream."""
        assert self._reader is not None
        failure: TorCtlError | None = None

        try:
            while True:
                chunk = await self._reader.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                self.events.emit_data(chunk)
                for reply in self._framer.feed(chunk):
                    if reply.is_async_event:
                        self.events.emit_async_event(reply)
                    else:
                        self._replies.put_nowait(reply)
        except ReplyFramingError as e:
            logger.warning("Dropping control connection to %s: %s", self.endpoint, e)
            failure = e
        except OSError as e:
            failure = ControlConnectionError(f"Control connection lost: {e}")

        if failure is None and self._framer.pending:
            failure = ControlConnectionError("Control connection closed in the middle of a reply")
        self._finish(failure or ControlConnectionError("Control connection closed"))

    def _finish(self, failure: TorCtlError) -> None:
        self._closed.set()
        self._framer.reset()
        # Wakes a pending receive_reply(); replies queued earlier stay ahead of it
        self._replies.put_nowait(failure)

        if self._writer is not None:
            self._writer.close()

        logger.debug("Control connection to %s ended", self.endpoint)
        if self._on_end is not None:
            self._on_end(self)
        self.events.emit_end()
