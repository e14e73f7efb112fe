"""Tor control protocol wire format.

Replies are groups of CRLF-terminated lines::

    250-version=0.4.8.9      continuation line  (code + "-")
    250+config-text=         continuation that opens a data block (code + "+")
    SocksPort 9050           data line
    .                        end of data block
    250 OK                   final line         (code + " ")

ReplyFramer turns an arbitrarily fragmented byte stream into Reply objects.
A reply only ends on a classified final line, so text such as "250 OK"
inside a data block never terminates it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from torctl.core.constants import (
    LINE_TERMINATOR,
    MAX_LINE_LENGTH,
    STATUS_ASYNC_EVENT_CLASS,
    STATUS_OK,
)
from torctl.core.errors import CommandError, ReplyFramingError

logger = logging.getLogger(__name__)

_REPLY_LINE_PATTERN = re.compile(r"^([0-9]{3})([ +-])(.*)$", re.DOTALL)


class LineKind(Enum):
    """Position of a status line within its reply."""

    FINAL = "final"
    CONTINUATION = "continuation"


@dataclass(frozen=True)
class ReplyLine:
    """One classified status line.

    Attributes:
        status_code: The three-digit code.
        separator: " ", "-" or "+".
        text: Everything after the separator.
    """

    status_code: int
    separator: str
    text: str

    @property
    def kind(self) -> LineKind:
        """FINAL for a space separator, CONTINUATION otherwise."""
        return LineKind.FINAL if self.separator == " " else LineKind.CONTINUATION

    @property
    def opens_data_block(self) -> bool:
        """Return True if dot-terminated data lines follow this line."""
        return self.separator == "+"


def parse_reply_line(line: str) -> ReplyLine:
    """Classify a reply line (without its line terminator).

    Raises:
        ReplyFramingError: If the line does not start with a three-digit
            code followed by " ", "-" or "+".
    """
    match = _REPLY_LINE_PATTERN.match(line)
    if match is None:
        raise ReplyFramingError(f"Malformed reply line: {line[:80]!r}")
    return ReplyLine(
        status_code=int(match.group(1)),
        separator=match.group(2),
        text=match.group(3),
    )


@dataclass(frozen=True)
class Reply:
    """A complete reply to one command.

    Attributes:
        status_code: Code of the first line of the reply.
        lines: Content lines in arrival order with the "XYZ?" prefix removed.
            Data-block lines are included as sent (dot-unescaped).
        raw_text: The full reply exactly as received.
        final_line: The line that terminated the reply.
    """

    status_code: int | None
    lines: list[str] = field(default_factory=list)
    raw_text: str = ""
    final_line: ReplyLine | None = None

    @property
    def is_ok(self) -> bool:
        """Return True if the reply ended with exactly "250 OK"."""
        return (
            self.final_line is not None
            and self.final_line.status_code == STATUS_OK
            and self.final_line.text == "OK"
        )

    @property
    def is_success_class(self) -> bool:
        """Return True for any 2xx status."""
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def is_async_event(self) -> bool:
        """Return True for 6xx replies (unsolicited event notifications)."""
        return (
            self.status_code is not None
            and self.status_code // 100 == STATUS_ASYNC_EVENT_CLASS
        )

    def key_values(self) -> dict[str, str]:
        """Collect ``key=value`` lines (as returned by GETINFO and GETCONF).

        Lines without "=" are skipped. A key repeated later wins.
        """
        values: dict[str, str] = {}
        for line in self.lines:
            key, sep, value = line.partition("=")
            if sep:
                values[key] = value
        return values


def status_from_raw(raw_text: str) -> int | None:
    """Parse the status code from the first three characters of a raw reply."""
    head = raw_text[:3]
    if len(head) == 3 and head.isascii() and head.isdigit():
        return int(head)
    return None


def check_reply(reply: Reply) -> Reply:
    """Return the reply if it is "250 OK", else raise CommandError.

    Raises:
        CommandError: Carrying the status from the first three characters of
            the raw text and the raw text minus its four-character prefix.
    """
    if reply.is_ok:
        return reply
    raise CommandError(
        reply.raw_text[4:],
        status_code=status_from_raw(reply.raw_text),
        raw_text=reply.raw_text,
        reply=reply,
    )


def quote_string(value: str) -> str:
    """Render ``value`` as a control-protocol QuotedString."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_authenticate(password: str) -> str:
    """Build the AUTHENTICATE command for password authentication."""
    return f"AUTHENTICATE {quote_string(password)}"


def redact_command(command: str) -> str:
    """Hide credentials before a command is logged."""
    if command.upper().startswith("AUTHENTICATE"):
        return 'AUTHENTICATE "***"'
    return command


def encode_command(command: str) -> bytes:
    """Terminate a command with CRLF and encode it for the wire.

    Raises:
        ValueError: If the command contains CR or LF, which would smuggle a
            second command onto the stream.
    """
    if "\r" in command or "\n" in command:
        raise ValueError(f"Command must be a single line: {redact_command(command)!r}")
    return (command + LINE_TERMINATOR).encode("utf-8")


class ReplyFramer:
    """Incremental parser from raw bytes to Reply objects.

    Call feed() with each chunk read from the socket; it returns every reply
    completed by that chunk, in order. Partial lines and partial replies are
    kept until more data arrives. Blank lines outside a data block are
    skipped.

    A "+" separator always opens a data block, which must end with a lone
    "." line before the reply can complete. A server that uses "+" as a
    plain continuation leaves the reply pending; set
    ControlConfig.reply_timeout to bound the wait for such servers.
    """

    def __init__(self, max_line_length: int = MAX_LINE_LENGTH) -> None:
        self._max_line_length = max_line_length
        self._buffer = bytearray()
        self._raw: list[str] = []
        self._lines: list[str] = []
        self._status: int | None = None
        self._in_data_block = False

    @property
    def pending(self) -> bool:
        """Return True if part of a reply has been received but not finished."""
        return bool(self._buffer) or bool(self._raw)

    def feed(self, chunk: bytes) -> list[Reply]:
        """Consume a chunk and return the replies it completed.

        Raises:
            ReplyFramingError: On a malformed status line or a line longer
                than the configured maximum.
        """
        self._buffer.extend(chunk)
        replies: list[Reply] = []

        while True:
            newline_idx = self._buffer.find(b"\n")
            if newline_idx < 0:
                if len(self._buffer) > self._max_line_length:
                    raise ReplyFramingError(
                        f"Reply line exceeds maximum length ({self._max_line_length} bytes)"
                    )
                break
            if newline_idx > self._max_line_length:
                raise ReplyFramingError(
                    f"Reply line exceeds maximum length ({self._max_line_length} bytes)"
                )

            raw_line = bytes(self._buffer[: newline_idx + 1])
            del self._buffer[: newline_idx + 1]

            reply = self._add_line(raw_line.decode("utf-8", errors="replace"))
            if reply is not None:
                replies.append(reply)

        return replies

    def reset(self) -> None:
        """Drop any buffered bytes and partial reply."""
        self._buffer.clear()
        self._start_reply()

    def _start_reply(self) -> None:
        self._raw = []
        self._lines = []
        self._status = None
        self._in_data_block = False

    def _add_line(self, raw_line: str) -> Reply | None:
        line = raw_line.rstrip("\r\n")

        if self._in_data_block:
            self._raw.append(raw_line)
            if line == ".":
                self._in_data_block = False
            else:
                self._lines.append(line[1:] if line.startswith("..") else line)
            return None

        if not line:
            # Stray blank line: kept in the raw text, never a content line
            if self._raw:
                self._raw.append(raw_line)
            return None

        parsed = parse_reply_line(line)
        self._raw.append(raw_line)
        if self._status is None:
            self._status = parsed.status_code
        self._lines.append(parsed.text)

        if parsed.opens_data_block:
            self._in_data_block = True
            return None
        if parsed.kind is LineKind.CONTINUATION:
            return None

        reply = Reply(
            status_code=self._status,
            lines=self._lines,
            raw_text="".join(self._raw),
            final_line=parsed,
        )
        logger.debug("Reply complete: status=%s lines=%d", reply.status_code, len(reply.lines))
        self._start_reply()
        return reply
