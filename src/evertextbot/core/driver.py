# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Top-level control loop for one session."""

from __future__ import annotations

import asyncio
import contextlib
from enum import StrEnum
from typing import Any

from evertextbot.core.dispatcher import CommandDispatcher
from evertextbot.core.session import Session
from evertextbot.core.supervisor import LivenessSupervisor
from evertextbot.core.triggers import TriggerEngine
from evertextbot.errors import MissingCode, SessionIOError, SessionTerminated
from evertextbot.logging import get_logger
from evertextbot.models import SessionOutcome
from evertextbot.protocol import FrameType, classify, decode_event
from evertextbot.settings import SessionTimings

logger = get_logger(__name__)


class DriverState(StrEnum):
    CONNECTED = "connected"
    NAMESPACE_JOINED = "namespace_joined"
    RUNNING = "running"
    TERMINATED = "terminated"


class SessionDriver:
    """Multiplexes supervisor ticks with inbound frames until the session ends.

    Exactly one handler runs at a time; every outbound write happens in
    program order from this loop. The driver owns the transport and closes
    it on exit.
    """

    def __init__(
        self,
        session: Session,
        engine: TriggerEngine,
        timings: SessionTimings | None = None,
    ) -> None:
        self.session = session
        self.engine = engine
        self.timings = timings or SessionTimings()
        self.dispatcher = CommandDispatcher(session.transport, secrets=engine.secrets)
        self.supervisor: LivenessSupervisor | None = None
        self.state = DriverState.CONNECTED
        self.outcome: SessionOutcome | None = None

    async def run(self) -> SessionOutcome:
        """Drive the session to a terminal outcome."""
        if self.state is DriverState.TERMINATED:
            raise RuntimeError("session already terminated")

        account = self.engine.account.name
        logger.info("session_starting", account=account, mode=self.engine.mode.value, sid=self.session.sid)
        try:
            if not self.engine.has_code:
                logger.error("missing_code", account=account)
                raise MissingCode(f"no access code for {account}")
            await self._loop()
        except SessionTerminated as e:
            outcome = e.to_outcome()
        finally:
            await self.session.close()

        self.state = DriverState.TERMINATED
        self.outcome = outcome
        log = logger.info if outcome.ok else logger.warning
        log("session_outcome", account=account, kind=outcome.kind.value, reason=outcome.reason)
        return outcome

    def status(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "phase": self.engine.phase.value,
            "buffer_len": len(self.engine.buffer),
            "auto_sent": self.engine.auto_sent,
            "handout_sent": self.engine.handout_sent,
            "liveness": self.supervisor.status() if self.supervisor else None,
        }

    async def _loop(self) -> None:
        transport = self.session.transport
        loop = asyncio.get_running_loop()
        supervisor = LivenessSupervisor(self.session.ping_interval_ms, self.timings)
        self.supervisor = supervisor

        tick_s = self.timings.tick_interval_s
        next_tick = loop.time()
        recv_task: asyncio.Task[str] | None = None
        try:
            while True:
                if loop.time() >= next_tick:
                    next_tick = loop.time() + tick_s
                    if supervisor.check():
                        await self._retry_start()

                if recv_task is None:
                    recv_task = asyncio.create_task(transport.receive())
                done, _ = await asyncio.wait({recv_task}, timeout=max(0.0, next_tick - loop.time()))
                if not done:
                    continue

                task, recv_task = recv_task, None
                try:
                    frame = task.result()
                except ConnectionError as e:
                    raise SessionIOError(str(e)) from e
                await self._handle_frame(frame)
        finally:
            if recv_task is not None:
                recv_task.cancel()
                with contextlib.suppress(asyncio.CancelledError, ConnectionError):
                    await recv_task

    async def _handle_frame(self, frame: str) -> None:
        kind = classify(frame)
        if kind is FrameType.PING:
            await self.dispatcher.pong()
            self.supervisor.mark_heartbeat()
        elif kind is FrameType.NAMESPACE_JOIN:
            await self._on_namespace_join()
        elif kind is FrameType.EVENT:
            decoded = decode_event(frame)
            if decoded is None:
                logger.debug("malformed_event", frame=frame[:64])
                return
            name, payload = decoded
            if name == "output":
                self.supervisor.mark_activity()
                self.state = DriverState.RUNNING
            result = self.engine.handle_event(name, payload)
            for command in result.commands:
                await self.dispatcher.send(command)
            if result.outcome is not None:
                raise result.outcome

    async def _on_namespace_join(self) -> None:
        logger.info("namespace_joined")
        self.state = DriverState.NAMESPACE_JOINED

        await self.dispatcher.emit("stop", {})
        # Suspends the whole loop; nothing else is pending this early.
        await asyncio.sleep(self.timings.settle_delay_s)
        await self.dispatcher.emit("start", {})

        self.supervisor.mark_activity()
        self.supervisor.mark_start_sent()

    async def _retry_start(self) -> None:
        try:
            await self.dispatcher.emit("start", {"args": ""})
        except SessionIOError as e:
            # The next receive surfaces a dead transport.
            logger.warning("start_retry_failed", error=str(e))
