# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Outbound event frames."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from evertextbot.errors import SessionIOError
from evertextbot.logging import get_logger
from evertextbot.protocol import PONG, encode_event
from evertextbot.transport.base import FrameTransport

logger = get_logger(__name__)

MASK = "<code>"


class CommandDispatcher:
    """Writes one frame per call straight to the transport, no batching.

    Values listed in ``secrets`` are masked in the ``command_sent`` trace.
    """

    def __init__(self, transport: FrameTransport, secrets: Iterable[str] = ()) -> None:
        self._transport = transport
        self._secrets = frozenset(s for s in secrets if s)

    async def send(self, command: str) -> None:
        """Send a line of game input as an ``input`` event."""
        await self.emit("input", {"input": command})

    async def emit(self, event: str, payload: dict[str, Any]) -> None:
        await self._write(encode_event(event, payload))
        logger.info("command_sent", event_name=event, payload=self._masked(payload))

    async def pong(self) -> None:
        await self._write(PONG)

    def _masked(self, payload: dict[str, Any]) -> dict[str, Any]:
        return {k: MASK if isinstance(v, str) and v in self._secrets else v for k, v in payload.items()}

    async def _write(self, frame: str) -> None:
        try:
            await self._transport.send(frame)
        except ConnectionError as e:
            raise SessionIOError(str(e)) from e
