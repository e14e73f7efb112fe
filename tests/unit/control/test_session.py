"""Unit tests for ControlSession open/close/authentication."""

import pytest

from torctl.config.schema import ControlConfig
from torctl.control.events import StreamEvents
from torctl.control.session import ControlSession
from torctl.core.errors import AuthenticationError, ControlConnectionError
from torctl.core.types import Endpoint


class TestControlSessionOpen:
    """Tests for ControlSession.open()."""

    @pytest.mark.asyncio
    async def test_open_authenticates_with_quoted_password(self, transports):
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession(ControlConfig(password="secret"))

        transport = await session.open()

        assert transport.written == ['AUTHENTICATE "secret"']
        assert session.is_open
        assert session.transport is transport

    @pytest.mark.asyncio
    async def test_open_escapes_password(self, transports):
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession(ControlConfig(password='a"b\\c'))

        transport = await session.open()

        assert transport.written == ['AUTHENTICATE "a\\"b\\\\c"']

    @pytest.mark.asyncio
    async def test_default_password_is_empty(self, transports):
        transports.add_connection(b"250 OK\r\n")
        transport = await ControlSession().open()
        assert transport.written == ['AUTHENTICATE ""']

    @pytest.mark.asyncio
    async def test_open_is_idempotent(self, transports):
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession()

        first = await session.open()
        second = await session.open()

        assert first is second
        assert len(transports.instances) == 1

    @pytest.mark.asyncio
    async def test_open_uses_configured_endpoint(self, transports):
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession(ControlConfig(path="/run/tor/control"))

        transport = await session.open()

        assert transport.endpoint == Endpoint.unix("/run/tor/control")

    @pytest.mark.asyncio
    async def test_open_default_endpoint(self, transports):
        transports.add_connection(b"250 OK\r\n")
        transport = await ControlSession().open()
        assert transport.endpoint == Endpoint.tcp("127.0.0.1", 9051)

    @pytest.mark.asyncio
    async def test_override_endpoint_wins(self, transports):
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession(ControlConfig(path="/run/tor/control"))

        transport = await session.open(Endpoint.tcp("10.0.0.1", 9151))

        assert transport.endpoint == Endpoint.tcp("10.0.0.1", 9151)

    @pytest.mark.asyncio
    async def test_session_events_are_passed_to_transport(self, transports):
        transports.add_connection(b"250 OK\r\n")
        events = StreamEvents()
        session = ControlSession(events=events)

        transport = await session.open()

        assert transport.events is events
        assert session.events is events

    @pytest.mark.asyncio
    async def test_bad_password_raises_and_leaves_session_closed(self, transports):
        transports.add_connection(b"515 Bad authentication\r\n")
        session = ControlSession(ControlConfig(password="wrong"))

        with pytest.raises(AuthenticationError) as exc_info:
            await session.open()

        assert exc_info.value.status_code == 515
        assert exc_info.value.reply is not None
        assert "Bad authentication" in exc_info.value.message
        assert not session.is_open
        assert session.transport is None
        assert transports.instances[0].aborted

    @pytest.mark.asyncio
    async def test_reopen_after_failed_authentication(self, transports):
        transports.add_connection(b"515 Bad authentication\r\n")
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession()

        with pytest.raises(AuthenticationError):
            await session.open()
        await session.open()

        assert session.is_open
        assert len(transports.instances) == 2

    @pytest.mark.asyncio
    async def test_connect_error_propagates(self, transports):
        transports.connect_error = ControlConnectionError(
            "Error connecting to control port 127.0.0.1:9051: [Errno 111] Connection refused"
        )
        session = ControlSession()

        with pytest.raises(ControlConnectionError, match="Connection refused"):
            await session.open()

        assert not session.is_open

    @pytest.mark.asyncio
    async def test_stream_end_during_auth_is_wrapped(self, transports):
        transports.add_connection(ControlConnectionError("Control connection closed"))
        session = ControlSession()

        with pytest.raises(ControlConnectionError) as exc_info:
            await session.open()

        assert "Error connecting to control port" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, ControlConnectionError)
        assert transports.instances[0].aborted
        assert not session.is_open


class TestControlSessionClose:
    """Tests for ControlSession.close()."""

    @pytest.mark.asyncio
    async def test_graceful_close_sends_quit(self, transports):
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession()
        transport = await session.open()

        await session.close()

        assert transport.written[-1] == "QUIT"
        assert not transport.aborted
        assert not session.is_open

    @pytest.mark.asyncio
    async def test_forced_close_aborts_without_quit(self, transports):
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession()
        transport = await session.open()

        await session.close(graceful=False)

        assert "QUIT" not in transport.written
        assert transport.aborted
        assert not session.is_open

    @pytest.mark.asyncio
    async def test_close_twice_is_harmless(self, transports):
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession()
        await session.open()

        await session.close()
        await session.close()

        assert transports.log.count("QUIT") == 1

    @pytest.mark.asyncio
    async def test_close_without_connection(self):
        await ControlSession().close()
        await ControlSession().close(graceful=False)

    @pytest.mark.asyncio
    async def test_close_aborts_when_server_ignores_quit(self, transports, caplog):
        transports.add_connection(b"250 OK\r\n")
        transports.close_on_quit = False
        session = ControlSession(ControlConfig(close_timeout=0.01))
        transport = await session.open()

        await session.close()

        assert transport.written[-1] == "QUIT"
        assert transport.aborted
        assert "did not close" in caplog.text

    @pytest.mark.asyncio
    async def test_reopen_after_close(self, transports):
        transports.add_connection(b"250 OK\r\n")
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession()

        await session.open()
        await session.close()
        await session.open()

        assert session.is_open
        assert len(transports.instances) == 2

    @pytest.mark.asyncio
    async def test_server_side_close_resets_session(self, transports):
        transports.add_connection(b"250 OK\r\n")
        session = ControlSession()
        transport = await session.open()

        transport.abort()  # simulates end of stream

        assert not session.is_open
        assert session.transport is None


class TestPersistentFlag:
    """Tests for persistent accessors."""

    def test_default_from_config(self):
        assert ControlSession().is_persistent() is False
        assert ControlSession(ControlConfig(persistent=True)).is_persistent() is True

    def test_set_persistent(self):
        session = ControlSession()
        assert session.set_persistent(True) is session
        assert session.persistent is True
        session.persistent = False
        assert session.is_persistent() is False

    def test_config_is_not_mutated(self):
        config = ControlConfig()
        session = ControlSession(config)
        session.set_persistent(True)
        assert config.persistent is False
