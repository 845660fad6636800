"""Tests for running accounts through fresh sessions."""

from __future__ import annotations

import pytest
import structlog
from structlog.testing import LogCapture

from evertextbot.models import Account, OutcomeKind, RunMode
from evertextbot.runner import run_account, run_accounts
from evertextbot.settings import ChaosOptions, SessionTimings, Settings

from .conftest import OPEN_FRAME, ScriptedTransport, output_frame


@pytest.fixture
def settings(fast_timings: SessionTimings) -> Settings:
    return Settings(cookie="cookie", endpoint="ws://test/socket.io/", timings=fast_timings)


class TransportFactory:
    def __init__(self, *scripts: list[str]) -> None:
        self._scripts = list(scripts)
        self.created: list[ScriptedTransport] = []

    def __call__(self) -> ScriptedTransport:
        frames = self._scripts.pop(0) if self._scripts else [OPEN_FRAME]
        transport = ScriptedTransport(frames, close_after=True)
        self.created.append(transport)
        return transport


@pytest.mark.asyncio
async def test_missing_code_skips_connection(settings: Settings) -> None:
    factory = TransportFactory()
    outcome = await run_account(Account(name="nocode"), RunMode.DAILY, settings, transport_factory=factory)

    assert outcome.kind is OutcomeKind.MISSING_CODE
    assert factory.created == []


@pytest.mark.asyncio
async def test_run_account_complete(settings: Settings, account: Account) -> None:
    factory = TransportFactory(
        [OPEN_FRAME, "40", output_frame("Enter Command to use"), output_frame("done!\nPress y to perform more commands")]
    )
    outcome = await run_account(account, RunMode.DAILY, settings, transport_factory=factory)

    assert outcome.ok
    transport = factory.created[0]
    assert transport.cookie == "cookie"
    assert transport.url == "ws://test/socket.io/"
    assert not transport.is_connected()


@pytest.mark.asyncio
async def test_run_account_handshake_failure(settings: Settings, account: Account) -> None:
    factory = TransportFactory(["1garbage"])
    outcome = await run_account(account, RunMode.DAILY, settings, transport_factory=factory)

    assert outcome.kind is OutcomeKind.HANDSHAKE_FAILED
    assert outcome.retryable


@pytest.mark.asyncio
async def test_run_accounts_retries_fresh_sessions(settings: Settings, account: Account) -> None:
    factory = TransportFactory()
    results = await run_accounts([account], RunMode.DAILY, settings, max_attempts=3, retry_delay_s=0, transport_factory=factory)

    assert results["alice"].kind is OutcomeKind.IO_ERROR
    assert len(factory.created) == 3


@pytest.mark.asyncio
async def test_run_accounts_stops_on_terminal_error(settings: Settings) -> None:
    accounts = [Account(name="a", code="x"), Account(name="b", code="y")]
    factory = TransportFactory(
        [OPEN_FRAME, "40", output_frame("Zigza error")],
        [OPEN_FRAME, "40", output_frame("Already done\nPress y to perform more commands")],
    )
    results = await run_accounts(accounts, RunMode.HANDOUT, settings, max_attempts=3, retry_delay_s=0, transport_factory=factory)

    assert results["a"].kind is OutcomeKind.ZIGZA_DETECTED
    assert results["b"].ok
    assert len(factory.created) == 2


@pytest.mark.asyncio
async def test_run_account_with_chaos_disconnect(fast_timings: SessionTimings, account: Account) -> None:
    settings = Settings(
        cookie="cookie",
        endpoint="ws://test/socket.io/",
        timings=fast_timings,
        chaos=ChaosOptions(disconnect_every_n_receives=2, label="soak"),
    )
    # Completes cleanly without fault injection; the open packet is receive #1.
    factory = TransportFactory([OPEN_FRAME, "40", output_frame("done!\nPress y to perform more commands")])

    outcome = await run_account(account, RunMode.DAILY, settings, transport_factory=factory)

    assert outcome.kind is OutcomeKind.IO_ERROR
    assert "soak: injected disconnect on receive #2" in (outcome.reason or "")
    inner = factory.created[0]
    assert inner.sent == ["40"]
    assert not inner.is_connected()


@pytest.mark.asyncio
async def test_run_account_without_chaos_uses_plain_transport(
    settings: Settings, account: Account, log_output: LogCapture
) -> None:
    assert settings.chaos is None
    factory = TransportFactory([OPEN_FRAME, "40", output_frame("done!\nPress y to perform more commands")])

    outcome = await run_account(account, RunMode.DAILY, settings, transport_factory=factory)

    assert outcome.ok
    assert not [entry for entry in log_output.entries if entry["event"] == "chaos_enabled"]


@pytest.mark.asyncio
async def test_session_events_carry_account_context(
    settings: Settings, account: Account, log_output: LogCapture
) -> None:
    factory = TransportFactory([OPEN_FRAME, "40", output_frame("Enter Command to use")])

    await run_account(account, RunMode.HANDOUT, settings, transport_factory=factory)

    sent = [entry for entry in log_output.entries if entry["event"] == "command_sent"]
    assert sent
    assert all(entry["account"] == "alice" and entry["mode"] == "handout" for entry in sent)
    assert structlog.contextvars.get_contextvars() == {}
