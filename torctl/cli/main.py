"""Entry point for the torctl CLI.

    torctl getinfo version
    torctl --socket /run/tor/control signal NEWNYM
    torctl -p 9151 --password secret setconf MaxCircuitDirtiness=600
    torctl send GETINFO traffic/read traffic/written
"""

import asyncio
import logging

from torctl.cli.arg_parser import parse_args
from torctl.cli.commands import run_command
from torctl.core.logging import configure_logging


def main(argv: list[str] | None = None) -> None:
    """Entry point for the torctl CLI."""
    args = parse_args(argv)

    if args.verbose >= 2:
        configure_logging(logging.DEBUG)
    elif args.verbose == 1:
        configure_logging(logging.INFO)
    else:
        configure_logging(logging.WARNING)

    try:
        exit_code = asyncio.run(run_command(args))
    except KeyboardInterrupt:
        exit_code = 130
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
