"""Fake Tor control server for development and testing.

Usage:
    python -m torctl.control.test_server --port 9051 --password secret

Canned replies (see definitions.py):
    - GETINFO version: 250-version=0.4.8 / 250 OK
    - GETINFO config-text: a data-block reply
    - GETINFO bogus: 552 error
    - SIGNAL, SETCONF, RESETCONF, SETEVENTS, ...: 250 OK
    - anything else: 510 Unrecognized command
"""

from torctl.control.test_server.server import FakeControlServer, parse_authenticate

__all__ = [
    "FakeControlServer",
    "parse_authenticate",
]
