# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""WebSocket transport implementation."""

from __future__ import annotations

from typing import Any

import structlog
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from evertextbot.constants import COOKIE_NAME, USER_AGENT
from evertextbot.transport.base import FrameTransport

log = structlog.get_logger()

DEFAULT_CONNECT_TIMEOUT_S = 30.0
MAX_FRAME_BYTES = 10 * 1024 * 1024


class WebSocketTransport(FrameTransport):
    """Text-frame transport over a single websocket connection."""

    def __init__(self) -> None:
        self._ws: ClientConnection | None = None

    async def connect(
        self,
        url: str,
        *,
        cookie: str,
        user_agent: str = USER_AGENT,
        timeout: float = DEFAULT_CONNECT_TIMEOUT_S,
        **kwargs: Any,
    ) -> None:
        """Open the websocket.

        Args:
            url: ws:// or wss:// endpoint
            cookie: Value of the ``session`` cookie
            user_agent: User-Agent header for the upgrade request
            timeout: Opening handshake timeout in seconds
            **kwargs: Unused, for compatibility

        Raises:
            ConnectionError: If the upgrade fails
        """
        if self._ws is not None:
            await self.disconnect()

        log.info("ws_connecting", url=url)
        try:
            self._ws = await connect(
                url,
                additional_headers={"Cookie": f"{COOKIE_NAME}={cookie}"},
                user_agent_header=user_agent,
                open_timeout=timeout,
                # Heartbeats are application-level (Engine.IO ping/pong)
                ping_interval=None,
                max_size=MAX_FRAME_BYTES,
            )
        except (OSError, InvalidHandshake, InvalidURI, TimeoutError) as e:
            raise ConnectionError(f"Failed to connect to {url}") from e

        log.info("ws_connected", url=url)

    async def disconnect(self) -> None:
        """Close connection and cleanup resources."""
        if self._ws is None:
            return

        ws, self._ws = self._ws, None
        try:
            await ws.close()
        except (ConnectionClosed, OSError):
            pass

        log.info("ws_disconnected")

    async def send(self, frame: str) -> None:
        if self._ws is None:
            raise ConnectionError("Not connected")
        try:
            await self._ws.send(frame)
        except ConnectionClosed as e:
            raise ConnectionError("Send failed") from e

    async def receive(self) -> str:
        if self._ws is None:
            raise ConnectionError("Not connected")
        try:
            message = await self._ws.recv()
        except ConnectionClosed as e:
            raise ConnectionError("Connection closed by remote") from e

        if isinstance(message, bytes):
            return message.decode("utf-8", errors="replace")
        return message

    def is_connected(self) -> bool:
        return self._ws is not None
