"""Tor control protocol client.

Usage:
    from torctl.control import ControlClient
    from torctl.config import ControlConfig

    async with ControlClient(ControlConfig(password="secret")) as client:
        reply = await client.get_info("version")
        print(reply.lines)
"""

from torctl.control.client import ControlClient
from torctl.control.commands import KEEP_CONNECTION_SIGNALS, Signal
from torctl.control.events import StreamEvents
from torctl.control.protocol import (
    LineKind,
    Reply,
    ReplyFramer,
    ReplyLine,
    check_reply,
    parse_reply_line,
)
from torctl.control.session import ControlSession
from torctl.control.transport import ControlTransport

__all__ = [
    "ControlClient",
    "ControlSession",
    "ControlTransport",
    "KEEP_CONNECTION_SIGNALS",
    "LineKind",
    "Reply",
    "ReplyFramer",
    "ReplyLine",
    "Signal",
    "StreamEvents",
    "check_reply",
    "parse_reply_line",
]
