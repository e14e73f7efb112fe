"""Canned replies for the fake control server."""

OK = "250 OK\r\n"
AUTH_FAILED = "515 Authentication failed: Password did not match HashedControlPassword value\r\n"
CLOSING = "250 closing connection\r\n"

VERSION = "0.4.8"

# Exact command -> raw reply
REPLIES: dict[str, str] = {
    "GETINFO version": f"250-version={VERSION}\r\n250 OK\r\n",
    "GETINFO version process/pid": (
        f"250-version={VERSION}\r\n"
        "250-process/pid=4242\r\n"
        "250 OK\r\n"
    ),
    "GETINFO config-text": (
        "250+config-text=\r\n"
        "ControlPort 9051\r\n"
        "SocksPort 9050\r\n"
        "..hidden\r\n"
        ".\r\n"
        "250 OK\r\n"
    ),
    "GETCONF SocksPort": "250-SocksPort=9050\r\n250 OK\r\n",
    "GETINFO bogus": '552 Unrecognized key "bogus"\r\n',
}

# Command keyword -> raw reply (used when no exact match exists)
KEYWORD_REPLIES: dict[str, str] = {
    "SIGNAL": OK,
    "SETCONF": OK,
    "RESETCONF": OK,
    "SETEVENTS": OK,
    "SAVECONF": OK,
    "MAPADDRESS": OK,
    "EXTENDCIRCUIT": "250 EXTENDED 7\r\n",
    "SETCIRCUITPURPOSE": OK,
    "SETROUTERPURPOSE": OK,
    "ATTACHSTREAM": OK,
}


def unrecognized(command: str) -> str:
    """Reply for a command the server does not know."""
    keyword = command.split(" ", 1)[0]
    return f'510 Unrecognized command "{keyword}"\r\n'


def reply_for(command: str, overrides: dict[str, str] | None = None) -> str:
    """Look up the raw reply for a command (overrides first, exact, then keyword)."""
    if overrides and command in overrides:
        return overrides[command]
    if command in REPLIES:
        return REPLIES[command]
    keyword = command.split(" ", 1)[0].upper()
    if overrides and keyword in overrides:
        return overrides[keyword]
    return KEYWORD_REPLIES.get(keyword, unrecognized(command))
