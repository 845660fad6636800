# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Connected game session and the handshake that creates it."""

from __future__ import annotations

import asyncio

from pydantic import BaseModel, ConfigDict, Field

from evertextbot.constants import BUFFER_CAP, DEFAULT_ENDPOINT, HANDSHAKE_TIMEOUT_S
from evertextbot.core.buffer import RollingBuffer
from evertextbot.errors import HandshakeTimeout, SessionIOError
from evertextbot.logging import get_logger
from evertextbot.protocol import NAMESPACE_JOIN, parse_open
from evertextbot.transport.base import FrameTransport
from evertextbot.transport.websocket import WebSocketTransport

logger = get_logger(__name__)


class Session(BaseModel):
    """One handshaken connection with its negotiated heartbeat and output buffer."""

    sid: str
    ping_interval_ms: int
    transport: FrameTransport
    buffer: RollingBuffer = Field(default_factory=lambda: RollingBuffer(BUFFER_CAP))

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def is_connected(self) -> bool:
        return self.transport.is_connected()

    async def close(self) -> None:
        await self.transport.disconnect()


async def open_session(
    cookie: str,
    *,
    endpoint: str = DEFAULT_ENDPOINT,
    transport: FrameTransport | None = None,
    handshake_timeout_s: float = HANDSHAKE_TIMEOUT_S,
) -> Session:
    """Connect, read the open packet and join the default namespace.

    Raises:
        HandshakeTimeout: No frame within ``handshake_timeout_s``
        HandshakeFailed: First frame is not a valid open packet
        SessionIOError: Connection failed or closed before the first frame
    """
    transport = transport or WebSocketTransport()
    try:
        await transport.connect(endpoint, cookie=cookie)
    except ConnectionError as e:
        raise SessionIOError(str(e)) from e

    try:
        try:
            frame = await asyncio.wait_for(transport.receive(), timeout=handshake_timeout_s)
        except TimeoutError as e:
            raise HandshakeTimeout("no open packet from server") from e
        except ConnectionError as e:
            raise SessionIOError("stream closed during handshake") from e

        packet = parse_open(frame)
        logger.info("handshake_complete", sid=packet.sid, ping_interval_ms=packet.ping_interval_ms)

        try:
            await transport.send(NAMESPACE_JOIN)
        except ConnectionError as e:
            raise SessionIOError(str(e)) from e
    except BaseException:
        # Includes cancellation while waiting for the open packet.
        await transport.disconnect()
        raise

    return Session(sid=packet.sid, ping_interval_ms=packet.ping_interval_ms, transport=transport)
