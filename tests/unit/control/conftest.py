"""Fixtures for control-layer unit tests: a scripted in-memory transport."""

from collections import deque
from collections.abc import Iterator
from typing import Any
from unittest.mock import patch

import pytest

from torctl.control.protocol import Reply, ReplyFramer
from torctl.core.errors import ControlConnectionError


def make_reply(raw: bytes) -> Reply:
    """Frame a single raw reply."""
    (reply,) = ReplyFramer().feed(raw)
    return reply


class FakeTransport:
    """Stands in for ControlTransport; replies come from a per-connection script."""

    def __init__(self, controller: "TransportController", endpoint: Any, **kwargs: Any) -> None:
        self.endpoint = endpoint
        self.events = kwargs.get("events")
        self.on_end = kwargs.get("on_end")
        self.written: list[str] = []
        self.aborted = False
        self.connected = False
        self._controller = controller
        self._script: deque[Reply | Exception] = deque(controller.next_script())

    async def connect(self, timeout: float | None = None) -> None:
        if self._controller.connect_error is not None:
            raise self._controller.connect_error
        self.connected = True

    async def write_line(self, command: str) -> None:
        if not self.connected:
            raise ControlConnectionError("Transport not connected")
        self.written.append(command)
        self._controller.log.append(command)
        if command == "QUIT" and self._controller.close_on_quit:
            self._end()

    async def receive_reply(self, timeout: float | None = None) -> Reply:
        if not self._script:
            raise ControlConnectionError("Control connection closed")
        item = self._script.popleft()
        if isinstance(item, Exception):
            raise item
        return item

    async def wait_closed(self, timeout: float | None = None) -> bool:
        return not self.connected

    def abort(self) -> None:
        self.aborted = True
        self._end()

    @property
    def is_connected(self) -> bool:
        return self.connected

    def _end(self) -> None:
        if self.connected:
            self.connected = False
            if self.on_end is not None:
                self.on_end(self)


class TransportController:
    """Scripts the fake transports created while the fixture is active.

    Attributes:
        scripts: One list of replies (or exceptions) per connection, in
            connection order. The first entry answers AUTHENTICATE.
        instances: Transports created so far.
        log: Every line written, across connections.
    """

    def __init__(self) -> None:
        self.scripts: deque[list[Reply | Exception]] = deque()
        self.instances: list[FakeTransport] = []
        self.log: list[str] = []
        self.connect_error: Exception | None = None
        self.close_on_quit = True

    def add_connection(self, *raw_replies: bytes | Exception) -> None:
        script: list[Reply | Exception] = [
            make_reply(item) if isinstance(item, bytes) else item for item in raw_replies
        ]
        self.scripts.append(script)

    def next_script(self) -> list[Reply | Exception]:
        return self.scripts.popleft() if self.scripts else []

    def create(self, endpoint: Any, **kwargs: Any) -> FakeTransport:
        transport = FakeTransport(self, endpoint, **kwargs)
        self.instances.append(transport)
        return transport


@pytest.fixture
def transports() -> Iterator[TransportController]:
    """Patch ControlTransport in the session module with scripted fakes."""
    controller = TransportController()
    with patch("torctl.control.session.ControlTransport", side_effect=controller.create):
        yield controller
