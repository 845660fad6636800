"""Fault-injection transport wrapper (deterministic).

This is used for resilience testing. It wraps a real transport and injects
dropped frames/disconnects at deterministic intervals so tests are repeatable.
"""

from __future__ import annotations

import asyncio
import contextlib
import random
from typing import Any

from evertextbot.transport.base import FrameTransport


class ChaosTransport(FrameTransport):
    def __init__(
        self,
        inner: FrameTransport,
        *,
        seed: int = 1,
        disconnect_every_n_receives: int = 0,
        drop_every_n_receives: int = 0,
        max_jitter_ms: int = 0,
        label: str = "chaos",
    ) -> None:
        self._inner = inner
        self._rng = random.Random(int(seed))
        self._disconnect_n = int(disconnect_every_n_receives or 0)
        self._drop_n = int(drop_every_n_receives or 0)
        self._max_jitter_ms = int(max_jitter_ms or 0)
        self._label = str(label or "chaos")
        self._rx_count = 0

    async def connect(self, url: str, *, cookie: str, **kwargs: Any) -> None:
        await self._inner.connect(url, cookie=cookie, **kwargs)

    async def disconnect(self) -> None:
        await self._inner.disconnect()

    async def send(self, frame: str) -> None:
        await self._inner.send(frame)

    async def receive(self) -> str:
        while True:
            self._rx_count += 1

            if self._max_jitter_ms > 0:
                await asyncio.sleep(self._rng.uniform(0.0, float(self._max_jitter_ms)) / 1000.0)

            if self._disconnect_n > 0 and (self._rx_count % self._disconnect_n) == 0:
                with contextlib.suppress(Exception):
                    await self._inner.disconnect()
                raise ConnectionError(f"{self._label}: injected disconnect on receive #{self._rx_count}")

            frame = await self._inner.receive()
            if self._drop_n > 0 and (self._rx_count % self._drop_n) == 0:
                # Lose the frame and wait for the next one.
                continue
            return frame

    def is_connected(self) -> bool:
        return self._inner.is_connected()
