"""Observer interface for control-connection stream events.

Listeners get three kinds of notification, outside the command/reply cycle:

- data: every raw chunk read from the socket (bytes, unparsed)
- end: the server ended the stream
- async event: a complete 6xx reply (e.g. after SETEVENTS CIRC)

Example:
    events = StreamEvents()
    unsubscribe = events.on_data(lambda chunk: print(chunk))
    ...
    unsubscribe()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from torctl.control.protocol import Reply

logger = logging.getLogger(__name__)

DataListener = Callable[[bytes], None]
EndListener = Callable[[], None]
AsyncEventListener = Callable[["Reply"], None]


class StreamEvents:
    """Registry of stream listeners.

    Listeners are plain callables invoked synchronously from the read loop.
    An exception raised by a listener is logged and does not affect other
    listeners or the connection.
    """

    def __init__(self) -> None:
        self._data: list[DataListener] = []
        self._end: list[EndListener] = []
        self._async_event: list[AsyncEventListener] = []

    def on_data(self, listener: DataListener) -> Callable[[], None]:
        """Register a raw data listener. Returns a callable that unsubscribes it."""
        return self._subscribe(self._data, listener)

    def on_end(self, listener: EndListener) -> Callable[[], None]:
        """Register an end-of-stream listener. Returns a callable that unsubscribes it."""
        return self._subscribe(self._end, listener)

    def on_async_event(self, listener: AsyncEventListener) -> Callable[[], None]:
        """Register a 6xx event listener. Returns a callable that unsubscribes it."""
        return self._subscribe(self._async_event, listener)

    def emit_data(self, chunk: bytes) -> None:
        self._emit(self._data, chunk)

    def emit_end(self) -> None:
        self._emit(self._end)

    def emit_async_event(self, reply: Reply) -> None:
        self._emit(self._async_event, reply)

    @staticmethod
    def _subscribe(listeners: list[Any], listener: Any) -> Callable[[], None]:
        listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    @staticmethod
    def _emit(listeners: list[Any], *args: Any) -> None:
        # Copy so listeners may unsubscribe while being notified
        for listener in list(listeners):
            try:
                listener(*args)
            except Exception:
                logger.exception("Stream event listener %r failed", listener)
