"""Command builders and ControlClient helper methods.

Each helper only formats a command line and hands it to send(); none of them
interprets the reply beyond the usual "250 OK" check.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from enum import Enum

from torctl.control.protocol import Reply, quote_string


class Signal(str, Enum):
    """Signals accepted by the SIGNAL command."""

    RELOAD = "RELOAD"
    HUP = "HUP"
    SHUTDOWN = "SHUTDOWN"
    DUMP = "DUMP"
    USR1 = "USR1"
    DEBUG = "DEBUG"
    USR2 = "USR2"
    HALT = "HALT"
    TERM = "TERM"
    INT = "INT"
    NEWNYM = "NEWNYM"
    CLEARDNSCACHE = "CLEARDNSCACHE"
    HEARTBEAT = "HEARTBEAT"
    ACTIVE = "ACTIVE"
    DORMANT = "DORMANT"


# Signals that make the server reload or exit; sending QUIT after them races
# the server's own shutdown, so the connection is left for the server to end.
KEEP_CONNECTION_SIGNALS: frozenset[Signal] = frozenset({
    Signal.RELOAD,
    Signal.SHUTDOWN,
    Signal.HALT,
    Signal.TERM,
})


def _format_value(value: str) -> str:
    if not value or any(c.isspace() or c in '"\\' for c in value):
        return quote_string(value)
    return value


def format_config_pairs(settings: str | Mapping[str, str | None]) -> str:
    """Render ``key=value`` arguments for SETCONF / RESETCONF.

    A raw string is passed through. In a mapping, None means "key only"
    (reset to default) and values with whitespace or quotes are quoted.
    """
    if isinstance(settings, str):
        return settings
    parts = []
    for key, value in settings.items():
        parts.append(key if value is None else f"{key}={_format_value(value)}")
    return " ".join(parts)


def _join(words: str | Iterable[str]) -> str:
    if isinstance(words, str):
        return words
    return " ".join(words)


def build_set_conf(settings: str | Mapping[str, str | None]) -> str:
    return f"SETCONF {format_config_pairs(settings)}"


def build_reset_conf(settings: str | Mapping[str, str | None]) -> str:
    return f"RESETCONF {format_config_pairs(settings)}"


def build_get_conf(keys: str | Iterable[str]) -> str:
    return f"GETCONF {_join(keys)}"


def build_set_events(events: str | Iterable[str]) -> str:
    return f"SETEVENTS {_join(events)}".rstrip()


def build_save_conf(force: bool = False) -> str:
    return "SAVECONF FORCE" if force else "SAVECONF"


def build_signal(signal: Signal | str) -> str:
    name = signal.value if isinstance(signal, Signal) else signal
    return f"SIGNAL {name}"


def build_map_address(mappings: str | Mapping[str, str]) -> str:
    if isinstance(mappings, str):
        return f"MAPADDRESS {mappings}"
    return "MAPADDRESS " + " ".join(f"{old}={new}" for old, new in mappings.items())


def build_get_info(keys: str | Iterable[str]) -> str:
    return f"GETINFO {_join(keys)}"


def build_extend_circuit(
    circuit_id: str | int,
    path: str | Iterable[str] | None = None,
    purpose: str | None = None,
) -> str:
    parts = [f"EXTENDCIRCUIT {circuit_id}"]
    if path:
        parts.append(path if isinstance(path, str) else ",".join(path))
    if purpose:
        parts.append(f"purpose={purpose}")
    return " ".join(parts)


def build_set_circuit_purpose(circuit_id: str | int, purpose: str) -> str:
    return f"SETCIRCUITPURPOSE {circuit_id} purpose={purpose}"


def build_set_router_purpose(nickname_or_key: str, purpose: str) -> str:
    return f"SETROUTERPURPOSE {nickname_or_key} {purpose}"


def build_attach_stream(
    stream_id: str | int,
    circuit_id: str | int,
    hop: int | None = None,
) -> str:
    command = f"ATTACHSTREAM {stream_id} {circuit_id}"
    if hop is not None:
        command += f" HOP={hop}"
    return command


class CommandsMixin(ABC):
    """Typed helpers over send(). Mixed into ControlClient."""

    @abstractmethod
    async def send(self, command: str, keep_connection: bool | None = None) -> Reply:
        """Dispatch one command line and return its "250 OK" reply."""

    # Configuration

    async def set_conf(self, settings: str | Mapping[str, str | None]) -> Reply:
        return await self.send(build_set_conf(settings))

    async def reset_conf(self, settings: str | Mapping[str, str | None]) -> Reply:
        return await self.send(build_reset_conf(settings))

    async def get_conf(self, keys: str | Iterable[str]) -> Reply:
        return await self.send(build_get_conf(keys))

    async def set_events(self, events: str | Iterable[str]) -> Reply:
        """Subscribe to asynchronous events (replaces the previous set).

        Events arrive through ``events.on_async_event`` listeners and only
        while the connection stays open, so this keeps the connection.
        """
        return await self.send(build_set_events(events), keep_connection=True)

    async def save_conf(self, force: bool = False) -> Reply:
        return await self.send(build_save_conf(force))

    # Signals

    async def signal(self, signal: Signal | str, keep_connection: bool | None = None) -> Reply:
        """Send SIGNAL.

        Reload and shutdown style signals keep the connection by default
        (see KEEP_CONNECTION_SIGNALS).
        """
        if keep_connection is None:
            try:
                keep_connection = Signal(signal) in KEEP_CONNECTION_SIGNALS
            except ValueError:
                pass  # unknown signal name, default policy
        return await self.send(build_signal(signal), keep_connection=keep_connection)

    async def new_circuit(self) -> Reply:
        """Ask for new circuits for future connections (SIGNAL NEWNYM)."""
        return await self.signal(Signal.NEWNYM)

    # Addresses, info, circuits and streams

    async def map_address(self, mappings: str | Mapping[str, str]) -> Reply:
        return await self.send(build_map_address(mappings))

    async def get_info(self, keys: str | Iterable[str]) -> Reply:
        return await self.send(build_get_info(keys))

    async def get_info_values(self, *keys: str) -> dict[str, str]:
        """GETINFO the keys and return their values as a dict."""
        reply = await self.get_info(keys)
        return reply.key_values()

    async def extend_circuit(
        self,
        circuit_id: str | int,
        path: str | Iterable[str] | None = None,
        purpose: str | None = None,
    ) -> Reply:
        return await self.send(build_extend_circuit(circuit_id, path, purpose))

    async def set_circuit_purpose(self, circuit_id: str | int, purpose: str) -> Reply:
        return await self.send(build_set_circuit_purpose(circuit_id, purpose))

    async def set_router_purpose(self, nickname_or_key: str, purpose: str) -> Reply:
        return await self.send(build_set_router_purpose(nickname_or_key, purpose))

    async def attach_stream(
        self,
        stream_id: str | int,
        circuit_id: str | int,
        hop: int | None = None,
    ) -> Reply:
        return await self.send(build_attach_stream(stream_id, circuit_id, hop))
