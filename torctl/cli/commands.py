"""CLI command implementations.

Each function runs one control command, prints the reply, and returns an exit
code. They are thin wrappers around ControlClient, called from main.py.
"""

import argparse
import logging
from typing import Any

from pydantic import ValidationError

from torctl.cli.output import print_command_error, print_error, print_reply
from torctl.config.loader import load_config
from torctl.config.schema import ControlConfig
from torctl.control import commands
from torctl.control.client import ControlClient
from torctl.control.protocol import Reply
from torctl.core.errors import CommandError, ConfigError, TorCtlError

logger = logging.getLogger(__name__)


def build_config(args: argparse.Namespace) -> ControlConfig:
    """Load the config file and apply command-line overrides.

    An endpoint given on the command line replaces the configured one
    entirely (a --socket drops host/port, --host/--port drop the path).

    Raises:
        ConfigError: If the file or the combined settings are invalid.
    """
    config = load_config(args.config)
    overrides: dict[str, Any] = {}

    if args.path is not None:
        overrides.update(path=args.path, host=None, port=None)
    elif args.host is not None or args.port is not None:
        overrides["path"] = None
        if args.host is not None:
            overrides["host"] = args.host
        if args.port is not None:
            overrides["port"] = args.port
    if args.password is not None:
        overrides["password"] = args.password
    if args.timeout is not None:
        overrides["reply_timeout"] = args.timeout

    if not overrides:
        return config
    try:
        return ControlConfig.model_validate({**config.model_dump(), **overrides})
    except ValidationError as e:
        raise ConfigError(f"Invalid command-line settings: {e}") from e


def command_line(args: argparse.Namespace) -> str:
    """Translate the parsed subcommand into the command line to send."""
    if args.command == "send":
        return " ".join(args.words)
    if args.command == "getinfo":
        return commands.build_get_info(args.keys)
    if args.command == "getconf":
        return commands.build_get_conf(args.keys)
    if args.command == "setconf":
        settings: dict[str, str | None] = {}
        for item in args.settings:
            key, sep, value = item.partition("=")
            settings[key] = value if sep else None
        return commands.build_set_conf(settings)
    if args.command == "signal":
        return commands.build_signal(args.name)
    raise ValueError(f"Unknown command: {args.command}")


async def run_command(args: argparse.Namespace) -> int:
    """Connect, send the subcommand, print the reply.

    Returns:
        0 on "250 OK", 1 on any error.
    """
    try:
        config = build_config(args)
        line = command_line(args)
    except (ConfigError, ValueError) as e:
        print_error(str(e))
        return 1

    logger.debug("Using control endpoint %s", config.endpoint())

    client = ControlClient(config)
    try:
        if args.command == "signal":
            reply: Reply = await client.signal(args.name)
        else:
            reply = await client.send(line)
    except CommandError as e:
        print_command_error(e)
        return 1
    except TorCtlError as e:
        print_error(e.message)
        return 1
    except ValueError as e:
        print_error(str(e))
        return 1
    finally:
        # Signals such as SHUTDOWN leave the connection for the server to end
        await client.close(graceful=False)

    print_reply(reply)
    return 0
