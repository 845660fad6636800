"""Tests for the session-open handshake."""

from __future__ import annotations

import asyncio

import pytest

from evertextbot.core.session import open_session
from evertextbot.errors import HandshakeFailed, HandshakeTimeout, SessionIOError

from .conftest import OPEN_FRAME, ScriptedTransport


@pytest.mark.asyncio
async def test_handshake_joins_namespace() -> None:
    transport = ScriptedTransport([OPEN_FRAME])
    session = await open_session("cookie-value", endpoint="ws://test/socket.io/", transport=transport)

    assert session.sid == "abc"
    assert session.ping_interval_ms == 25000
    assert len(session.buffer) == 0
    assert transport.sent == ["40"]
    assert transport.cookie == "cookie-value"
    assert transport.url == "ws://test/socket.io/"
    assert session.is_connected()

    await session.close()
    assert not transport.is_connected()


@pytest.mark.asyncio
async def test_handshake_default_ping_interval() -> None:
    transport = ScriptedTransport(['0{"sid":"xyz"}'])
    session = await open_session("c", transport=transport)
    assert session.ping_interval_ms == 25000


@pytest.mark.asyncio
async def test_handshake_timeout() -> None:
    transport = ScriptedTransport()
    with pytest.raises(HandshakeTimeout):
        await open_session("c", transport=transport, handshake_timeout_s=0.05)
    assert transport.sent == []
    assert transport.disconnect_calls == 1


@pytest.mark.asyncio
async def test_handshake_stream_closed() -> None:
    transport = ScriptedTransport(close_after=True)
    with pytest.raises(SessionIOError):
        await open_session("c", transport=transport)
    assert transport.disconnect_calls == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("frame", ["40", "0not-json", '0{"pingInterval":25000}'])
async def test_handshake_bad_open_packet(frame: str) -> None:
    transport = ScriptedTransport([frame])
    with pytest.raises(HandshakeFailed):
        await open_session("c", transport=transport)
    assert transport.sent == []
    assert not transport.is_connected()


@pytest.mark.asyncio
async def test_handshake_connect_failure() -> None:
    class RefusingTransport(ScriptedTransport):
        async def connect(self, url: str, *, cookie: str, **kwargs) -> None:  # noqa: ANN003
            raise ConnectionError("refused")

    with pytest.raises(SessionIOError):
        await open_session("c", transport=RefusingTransport())


@pytest.mark.asyncio
async def test_cancelled_handshake_disconnects() -> None:
    transport = ScriptedTransport()
    task = asyncio.create_task(open_session("c", transport=transport, handshake_timeout_s=30.0))
    await asyncio.sleep(0.01)
    assert transport.is_connected()

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert transport.disconnect_calls == 1
    assert not transport.is_connected()
    assert transport.sent == []
