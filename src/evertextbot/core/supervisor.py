# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Liveness checks evaluated on every supervisor tick."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from evertextbot.errors import ActivityTimeout, ConnectionTimeout
from evertextbot.logging import get_logger
from evertextbot.settings import SessionTimings

logger = get_logger(__name__)


class LivenessStatus(BaseModel):
    ping_interval_ms: int
    since_heartbeat_s: float
    since_activity_s: float
    start_retry_pending: bool


class LivenessSupervisor:
    """Tracks three clocks and decides when a session is dead or stuck.

    1. Heartbeat: no server ping for ``ping_interval + grace`` ms.
    2. Activity: no game output for ``activity_timeout_s``.
    3. Stuck start: once after ``start`` was sent, if neither output nor the
       start itself is newer than ``start_retry_after_s``, ask for a resend.
    """

    def __init__(
        self,
        ping_interval_ms: int,
        timings: SessionTimings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ping_interval_ms = ping_interval_ms
        self.timings = timings or SessionTimings()
        self._clock = clock
        now = clock()
        self._last_heartbeat = now
        self._last_activity = now
        self._start_sent_at: float | None = None

    def mark_heartbeat(self) -> None:
        self._last_heartbeat = self._clock()

    def mark_activity(self) -> None:
        self._last_activity = self._clock()

    def mark_start_sent(self) -> None:
        self._start_sent_at = self._clock()

    def check(self) -> bool:
        """Run all checks once.

        Returns:
            True when the start event should be resent now.

        Raises:
            ConnectionTimeout: Heartbeat went stale
            ActivityTimeout: Game output went stale
        """
        now = self._clock()

        since_ping_ms = (now - self._last_heartbeat) * 1000.0
        if since_ping_ms > self.ping_interval_ms + self.timings.heartbeat_grace_ms:
            logger.error("heartbeat_timeout", since_ms=int(since_ping_ms))
            raise ConnectionTimeout(f"no heartbeat for {int(since_ping_ms)} ms")

        since_activity = now - self._last_activity
        if since_activity > self.timings.activity_timeout_s:
            logger.error("activity_timeout", since_s=round(since_activity, 1))
            raise ActivityTimeout(f"no game output for {since_activity:.0f} s")

        if self._start_sent_at is not None:
            retry_after = self.timings.start_retry_after_s
            if since_activity > retry_after and now - self._start_sent_at > retry_after:
                # Only retry once
                self._start_sent_at = None
                logger.warning("start_retry", since_activity_s=round(since_activity, 1))
                return True

        return False

    def status(self) -> dict[str, Any]:
        now = self._clock()
        return LivenessStatus(
            ping_interval_ms=self.ping_interval_ms,
            since_heartbeat_s=now - self._last_heartbeat,
            since_activity_s=now - self._last_activity,
            start_retry_pending=self._start_sent_at is not None,
        ).model_dump()
