"""Scripted fake control server (TCP or Unix-domain socket).

Speaks just enough of the control protocol to exercise the client:
- AUTHENTICATE "<password>" -> 250 OK, or 515 and hang up
- QUIT -> 250 closing connection, then hang up (unless close_on_quit=False)
- anything else -> canned reply from definitions.reply_for()

Every received line is recorded in ``received`` for assertions.
"""

import argparse
import asyncio
import contextlib
import logging
from typing import Any

from torctl.control.test_server.definitions import AUTH_FAILED, CLOSING, OK, reply_for
from torctl.core.types import Endpoint

logger = logging.getLogger(__name__)


def parse_authenticate(command: str) -> str | None:
    """Extract the password from an AUTHENTICATE line (None if malformed)."""
    keyword, _, argument = command.partition(" ")
    if keyword.upper() != "AUTHENTICATE":
        return None
    if not argument:
        return ""
    if len(argument) < 2 or argument[0] != '"' or argument[-1] != '"':
        return None

    chars: list[str] = []
    escaped = False
    for char in argument[1:-1]:
        if escaped:
            chars.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        else:
            chars.append(char)
    return "".join(chars)


class FakeControlServer:
    """In-process control server for tests.

    Usage:
        async with FakeControlServer(password="secret") as server:
            client = ControlClient(ControlConfig(
                host=server.endpoint.host, port=server.endpoint.port, password="secret",
            ))
            await client.get_info("version")
            assert server.received[-2:] == ["GETINFO version", "QUIT"]
    """

    def __init__(
        self,
        password: str = "",
        replies: dict[str, str] | None = None,
        host: str = "127.0.0.1",
        port: int = 0,
        path: str | None = None,
        fragment_size: int | None = None,
        close_on_quit: bool = True,
    ) -> None:
        """Initialize FakeControlServer.

        Args:
            password: Password AUTHENTICATE must carry.
            replies: Raw replies by exact command or keyword, checked before
                the built-in table.
            host: Bind address for TCP.
            port: TCP port (0 picks a free one).
            path: Serve on this Unix-domain socket instead of TCP.
            fragment_size: Write replies in pieces of this many bytes.
            close_on_quit: Hang up after answering QUIT.
        """
        self.password = password
        self.replies = dict(replies or {})
        self.fragment_size = fragment_size
        self.close_on_quit = close_on_quit
        self.received: list[str] = []
        self.connection_count = 0
        self._host = host
        self._port = port
        self._path = path
        self._server: asyncio.Server | None = None
        self._writers: set[asyncio.StreamWriter] = set()
        self._endpoint: Endpoint | None = None

    @property
    def endpoint(self) -> Endpoint:
        if self._endpoint is None:
            raise RuntimeError("Server not started")
        return self._endpoint

    @property
    def active_connections(self) -> int:
        return len(self._writers)

    async def start(self) -> Endpoint:
        if self._path is not None:
            self._server = await asyncio.start_unix_server(self._handle, path=self._path)
            self._endpoint = Endpoint.unix(self._path)
        else:
            self._server = await asyncio.start_server(self._handle, self._host, self._port)
            port = self._server.sockets[0].getsockname()[1]
            self._endpoint = Endpoint.tcp(self._host, port)
        logger.debug("Fake control server listening on %s", self._endpoint)
        return self._endpoint

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        self.drop_connections()
        await self._server.wait_closed()
        self._server = None

    async def push(self, raw: str) -> None:
        """Send unsolicited text (e.g. a 650 event) to every connected client."""
        for writer in list(self._writers):
            await self._write(writer, raw)

    def drop_connections(self) -> None:
        """Hang up on every client without a protocol exchange."""
        for writer in list(self._writers):
            writer.close()

    async def __aenter__(self) -> "FakeControlServer":
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.stop()

    async def _write(self, writer: asyncio.StreamWriter, raw: str) -> None:
        data = raw.encode("utf-8")
        if not self.fragment_size:
            writer.write(data)
            await writer.drain()
            return
        for start in range(0, len(data), self.fragment_size):
            writer.write(data[start : start + self.fragment_size])
            await writer.drain()
            await asyncio.sleep(0.001)

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.connection_count += 1
        self._writers.add(writer)
        authenticated = False

        try:
            while True:
                line = await reader.readline()
                if not line:
                    break
                command = line.decode("utf-8").rstrip("\r\n")
                self.received.append(command)

                if not authenticated:
                    if parse_authenticate(command) == self.password:
                        authenticated = True
                        await self._write(writer, OK)
                        continue
                    await self._write(writer, AUTH_FAILED)
                    break

                if command.upper() == "QUIT":
                    await self._write(writer, CLOSING)
                    if self.close_on_quit:
                        break
                    continue

                await self._write(writer, reply_for(command, self.replies))
        except ConnectionError as e:
            logger.debug("Fake control server: client went away: %s", e)
        finally:
            self._writers.discard(writer)
            writer.close()


async def run_server(host: str, port: int, path: str | None, password: str) -> None:
    """Serve until cancelled."""
    server = FakeControlServer(password=password, host=host, port=port, path=path)
    endpoint = await server.start()
    print(f"Fake control server listening on {endpoint}", flush=True)
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main() -> None:
    """Entry point."""
    parser = argparse.ArgumentParser(description="Fake Tor control server for testing")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=9051)
    parser.add_argument("--path", help="Serve on a Unix-domain socket instead")
    parser.add_argument("--password", default="")
    args = parser.parse_args()

    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(run_server(args.host, args.port, args.path, args.password))


if __name__ == "__main__":
    main()
