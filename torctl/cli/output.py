"""Rich-based output utilities for the torctl CLI."""

from rich.console import Console
from rich.markup import escape

from torctl.control.protocol import Reply
from torctl.core.errors import CommandError

# Shared console instances (replies on stdout, diagnostics on stderr)
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_reply(reply: Reply) -> None:
    """Print reply lines, dropping the trailing "OK" of a successful reply."""
    lines = reply.lines[:-1] if reply.is_ok and len(reply.lines) > 1 else reply.lines
    for line in lines:
        console.print(line, markup=False)


def print_command_error(error: CommandError) -> None:
    """Print a rejected command with its status code."""
    err_console.print(
        f"[bold red]Error {error.status_code}:[/bold red] {escape(error.message.rstrip())}",
        soft_wrap=True,
    )


def print_error(message: str) -> None:
    """Print an error message in red."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}", soft_wrap=True)
