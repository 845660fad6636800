# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator
from typing import Any

import pytest
import structlog
from structlog.testing import LogCapture

from evertextbot.models import Account
from evertextbot.settings import SessionTimings
from evertextbot.transport.base import FrameTransport

OPEN_FRAME = '0{"sid":"abc","pingInterval":25000}'


def output_frame(text: str) -> str:
    return "42" + json.dumps(["output", {"data": text}])


class ScriptedTransport(FrameTransport):
    """In-memory transport: frames are fed by the test, sends are recorded."""

    def __init__(self, frames: list[str] | tuple[str, ...] = (), *, close_after: bool = False) -> None:
        self.inbox: asyncio.Queue[str | None] = asyncio.Queue()
        for frame in frames:
            self.inbox.put_nowait(frame)
        if close_after:
            self.inbox.put_nowait(None)
        self.sent: list[str] = []
        self.connected = False
        self.url: str | None = None
        self.cookie: str | None = None
        self.disconnect_calls = 0

    def feed(self, frame: str) -> None:
        self.inbox.put_nowait(frame)

    def close_remote(self) -> None:
        self.inbox.put_nowait(None)

    async def connect(self, url: str, *, cookie: str, **kwargs: Any) -> None:
        self.url = url
        self.cookie = cookie
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False

    async def send(self, frame: str) -> None:
        if not self.connected:
            raise ConnectionError("Not connected")
        self.sent.append(frame)

    async def receive(self) -> str:
        if not self.connected:
            raise ConnectionError("Not connected")
        frame = await self.inbox.get()
        if frame is None:
            raise ConnectionError("Connection closed by remote")
        return frame

    def is_connected(self) -> bool:
        return self.connected


@pytest.fixture
def fast_timings() -> SessionTimings:
    """Timings shrunk so driver tests finish in well under a second."""
    return SessionTimings(
        handshake_timeout_s=0.5,
        tick_interval_s=0.01,
        heartbeat_grace_ms=60000,
        activity_timeout_s=30.0,
        start_retry_after_s=30.0,
        settle_delay_s=0.01,
    )


@pytest.fixture
def account() -> Account:
    return Account(name="alice", code="RESTORE-123")


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def log_output() -> Iterator[LogCapture]:
    """Collect structlog events (with bound context) instead of printing them."""
    capture = LogCapture()
    structlog.configure(processors=[structlog.contextvars.merge_contextvars, capture])
    yield capture
    structlog.reset_defaults()
