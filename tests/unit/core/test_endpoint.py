"""Tests for the Endpoint type and the error hierarchy."""

import pytest

from torctl.core.errors import CommandError, ConfigError, ProtocolError, ReplyFramingError, TorCtlError
from torctl.core.types import Endpoint


class TestEndpoint:
    """Tests for Endpoint validation."""

    def test_tcp(self) -> None:
        endpoint = Endpoint.tcp("127.0.0.1", 9051)
        assert not endpoint.is_unix
        assert str(endpoint) == "127.0.0.1:9051"

    def test_unix(self) -> None:
        endpoint = Endpoint.unix("/run/tor/control")
        assert endpoint.is_unix
        assert str(endpoint) == "unix:/run/tor/control"

    def test_path_with_host_rejected(self) -> None:
        with pytest.raises(ConfigError, match="Cannot specify both"):
            Endpoint(host="127.0.0.1", path="/run/tor/control")

    def test_empty_path_rejected(self) -> None:
        with pytest.raises(ConfigError):
            Endpoint(path="")

    def test_missing_port_rejected(self) -> None:
        with pytest.raises(ConfigError):
            Endpoint(host="127.0.0.1")

    @pytest.mark.parametrize("port", [0, 70000])
    def test_port_out_of_range(self, port: int) -> None:
        with pytest.raises(ConfigError, match="out of range"):
            Endpoint.tcp("127.0.0.1", port)

    def test_frozen_and_hashable(self) -> None:
        assert {Endpoint.tcp("h", 1), Endpoint.tcp("h", 1)} == {Endpoint.tcp("h", 1)}


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self) -> None:
        assert issubclass(ReplyFramingError, ProtocolError)
        assert issubclass(ProtocolError, TorCtlError)
        assert issubclass(CommandError, TorCtlError)

    def test_command_error_str(self) -> None:
        error = CommandError("Unrecognized command\r\n", status_code=510, raw_text="510 ...")
        assert str(error) == "510 Unrecognized command"
        assert error.message == "Unrecognized command\r\n"

    def test_command_error_without_status(self) -> None:
        assert str(CommandError("garbled")) == "garbled"
