"""Argument parsing for the torctl CLI."""

import argparse
from pathlib import Path


def add_connection_args(parser: argparse.ArgumentParser) -> None:
    """Add endpoint / auth options to a parser."""
    endpoint = parser.add_mutually_exclusive_group()
    endpoint.add_argument(
        "--socket", "-s",
        dest="path",
        metavar="PATH",
        help="Control socket path (instead of host/port)",
    )
    endpoint.add_argument(
        "--host",
        help="Control port host (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        help="Control port (default: 9051)",
    )
    parser.add_argument(
        "--password",
        help="Control port password (or set password_env in the config file)",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Config file (default: ~/.torctl/config.json)",
    )
    parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Seconds to wait for a reply (default: wait forever)",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="torctl",
        description="Send commands to a Tor control port",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Log protocol traffic to stderr (-v info, -vv debug)",
    )
    add_connection_args(parser)

    subparsers = parser.add_subparsers(dest="command", required=True)

    send_parser = subparsers.add_parser(
        "send",
        help="Send a raw command line",
    )
    send_parser.add_argument("words", nargs="+", help="Command and arguments, e.g. GETINFO version")

    getinfo_parser = subparsers.add_parser(
        "getinfo",
        help="Query GETINFO keys",
    )
    getinfo_parser.add_argument("keys", nargs="+", help="Keys, e.g. version process/pid")

    getconf_parser = subparsers.add_parser(
        "getconf",
        help="Read configuration values",
    )
    getconf_parser.add_argument("keys", nargs="+", help="Option names, e.g. SocksPort")

    setconf_parser = subparsers.add_parser(
        "setconf",
        help="Set configuration values",
    )
    setconf_parser.add_argument(
        "settings",
        nargs="+",
        metavar="KEY=VALUE",
        help="Options to set (KEY alone resets it to default)",
    )

    signal_parser = subparsers.add_parser(
        "signal",
        help="Send a signal (NEWNYM, RELOAD, SHUTDOWN, ...)",
    )
    signal_parser.add_argument("name", type=str.upper, help="Signal name")

    return parser.parse_args(argv)
