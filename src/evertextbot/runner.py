# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Run accounts through fresh sessions and collect their outcomes."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable

import structlog

from evertextbot.core.driver import SessionDriver
from evertextbot.core.session import open_session
from evertextbot.core.triggers import TriggerEngine
from evertextbot.errors import MissingCode, SessionTerminated
from evertextbot.logging import get_logger
from evertextbot.models import Account, RunMode, SessionOutcome
from evertextbot.settings import Settings
from evertextbot.transport.base import FrameTransport
from evertextbot.transport.chaos import ChaosTransport
from evertextbot.transport.websocket import WebSocketTransport

logger = get_logger(__name__)

TransportFactory = Callable[[], FrameTransport]


async def run_account(
    account: Account,
    mode: RunMode,
    settings: Settings | None = None,
    *,
    transport_factory: TransportFactory | None = None,
) -> SessionOutcome:
    """Open one session for ``account`` and drive it to completion.

    Every event logged while the session runs carries ``account`` and
    ``mode``. When ``settings.chaos`` is set the transport is wrapped in a
    :class:`ChaosTransport`.
    """
    settings = settings or Settings()
    with structlog.contextvars.bound_contextvars(account=account.name, mode=mode.value):
        if not account.code:
            logger.error("missing_code", account=account.name)
            return MissingCode(f"no access code for {account.name}").to_outcome()

        transport = transport_factory() if transport_factory else WebSocketTransport()
        if settings.chaos is not None:
            logger.warning("chaos_enabled", **settings.chaos.model_dump())
            transport = ChaosTransport(transport, **settings.chaos.model_dump())

        try:
            session = await open_session(
                settings.cookie,
                endpoint=settings.endpoint,
                transport=transport,
                handshake_timeout_s=settings.timings.handshake_timeout_s,
            )
        except SessionTerminated as e:
            outcome = e.to_outcome()
            logger.warning("session_outcome", account=account.name, kind=outcome.kind.value, reason=outcome.reason)
            return outcome

        engine = TriggerEngine(account, account.code, mode, buffer=session.buffer)
        return await SessionDriver(session, engine, settings.timings).run()


async def run_accounts(
    accounts: Iterable[Account],
    mode: RunMode,
    settings: Settings | None = None,
    *,
    max_attempts: int = 3,
    retry_delay_s: float = 5.0,
    transport_factory: TransportFactory | None = None,
) -> dict[str, SessionOutcome]:
    """Run accounts one after another.

    A retryable outcome starts a brand-new session (empty buffer, reset
    flags), up to ``max_attempts`` sessions per account.
    """
    settings = settings or Settings()
    results: dict[str, SessionOutcome] = {}

    for account in accounts:
        attempt = 0
        while True:
            attempt += 1
            outcome = await run_account(account, mode, settings, transport_factory=transport_factory)
            if not outcome.retryable or attempt >= max_attempts:
                break
            logger.warning(
                "session_retry",
                account=account.name,
                attempt=attempt,
                max_attempts=max_attempts,
                kind=outcome.kind.value,
                delay=retry_delay_s,
            )
            await asyncio.sleep(retry_delay_s)
        results[account.name] = outcome

    return results
