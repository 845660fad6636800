# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Prompt-driven automation for the game's terminal output.

The engine keeps a rolling buffer of everything the game printed, scans it
against an ordered rule table and answers each recognised prompt once.
Multiple rules may fire in a single scan. Error phrases are checked on every
scan and are never consumed, since they always end the session.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from evertextbot.constants import BUFFER_CAP, TERMINAL_LOG_CHARS
from evertextbot.core.buffer import RollingBuffer
from evertextbot.errors import (
    InvalidCommandRestart,
    LoginRequired,
    ServerClosed,
    ServerFull,
    SessionComplete,
    SessionTerminated,
    ZigzaDetected,
)
from evertextbot.logging import get_logger
from evertextbot.models import Account, RunMode, SessionPhase

logger = get_logger(__name__)

# "<n>--><label>(<name>)" entries in the account picker
SERVER_ENTRY_RE = re.compile(r"(\d+)-->.*?\((.*?)\)")
ALL_SERVERS_LABEL = "All of them"
DEFAULT_SERVER_INDEX = "1"

COMPLETION_KEYWORDS = ("success", "finish", "done", "already")

ERROR_SCANS: tuple[tuple[tuple[str, ...], type[SessionTerminated]], ...] = (
    (("Zigza error",), ZigzaDetected),
    (("Incorrect Restore Code",), ZigzaDetected),
    (("maximum limit of restore accounts",), ServerFull),
    (("restricted only for logged in users",), LoginRequired),
    (("Invalid Command", "Exiting Now"), InvalidCommandRestart),
)

SERVER_CLOSED_EVENTS = frozenset({"idle_timeout", "disconnect"})
IGNORED_EVENTS = frozenset({"activity_ping", "user_count_update"})


@dataclass(frozen=True)
class TriggerRule:
    """A prompt phrase and how to answer it.

    ``respond`` returns the command to send, or None to leave the phrase
    unconsumed. It may raise :class:`SessionTerminated` to end the session.
    """

    phrase: str
    sentinel: str
    respond: Callable[[], str | None]
    secret: bool = False


@dataclass
class TriggerResult:
    """Commands to send, in order, and an optional terminal outcome."""

    commands: list[str] = field(default_factory=list)
    outcome: SessionTerminated | None = None


def find_server_index(text: str, target: str) -> str | None:
    """Pick the account-picker index whose label matches ``target``.

    The label match is case-sensitive; ``"all"`` (any case) selects the
    "All of them" entry instead.
    """
    want_all = target.lower() == "all"
    for match in SERVER_ENTRY_RE.finditer(text):
        label = match.group(2)
        if target in label or (want_all and ALL_SERVERS_LABEL in label):
            return match.group(1)
    return None


class TriggerEngine:
    """Reacts to game output for one session.

    State lives here and nowhere else: the rolling buffer (with its consumed
    markers) and the two sent-flags. A fresh engine is built per session.
    """

    def __init__(
        self,
        account: Account,
        code: str,
        mode: RunMode,
        *,
        buffer: RollingBuffer | None = None,
    ) -> None:
        self.account = account
        self.mode = mode
        self.buffer = buffer if buffer is not None else RollingBuffer(BUFFER_CAP)
        self.phase = SessionPhase.CONNECTED
        self.auto_sent = False
        self.handout_sent = False
        self._code = code
        self.rules: tuple[TriggerRule, ...] = (
            TriggerRule("Enter Command to use", "[PROCESSED_PROMPT]", self._command_prompt),
            TriggerRule("Enter Restore code", "[PROCESSED_CODE]", self._restore_prompt, secret=True),
            TriggerRule("Which acc u want to Login", "[PROCESSED_SERVER]", self._server_prompt),
            TriggerRule("Press y to spend mana on event stages", "[PROCESSED_MANA]", self._mana_prompt),
            TriggerRule("next: Go to the next event", "[PROCESSED_NEXT]", self._next_event_prompt),
            TriggerRule("DO U WANT TO REFILL MANA", "[PROCESSED_REFILL]", lambda: "y"),
            TriggerRule("Enter 1, 2 or 3 to select potion", "[PROCESSED_POTION]", lambda: "3"),
            TriggerRule("number of stam100 potions to refill", "[PROCESSED_QTY]", lambda: "1"),
            TriggerRule("Press y to perform more commands", "[PROCESSED_Y]", self._more_commands_prompt),
        )

    @property
    def has_code(self) -> bool:
        return bool(self._code)

    @property
    def secrets(self) -> tuple[str, ...]:
        """Command values that must never reach the log."""
        return (self._code,) if self._code else ()

    def handle_event(self, name: str, payload: Any) -> TriggerResult:
        """Route one application event."""
        if name == "output":
            data = payload.get("data") if isinstance(payload, dict) else None
            if isinstance(data, str):
                return self.on_output(data)
            return TriggerResult()
        if name in SERVER_CLOSED_EVENTS:
            logger.warning("server_closed_session", event_name=name, account=self.account.name)
            return TriggerResult(outcome=ServerClosed(name))
        if name not in IGNORED_EVENTS:
            logger.debug("unhandled_event", event_name=name)
        return TriggerResult()

    def on_output(self, chunk: str) -> TriggerResult:
        """Append a chunk of game output and answer whatever it completes."""
        flat = chunk.replace("\n", " ")
        if flat.strip():
            logger.info("terminal_output", text=flat[:TERMINAL_LOG_CHARS])

        self.buffer.append(chunk)
        result = TriggerResult()

        for rule in self.rules:
            if rule.phrase not in self.buffer:
                continue
            try:
                command = rule.respond()
            except SessionTerminated as e:
                result.outcome = e
                return result
            if command is None:
                continue
            self.buffer.consume(rule.phrase, rule.sentinel)
            logger.info(
                "trigger_fired",
                prompt=rule.phrase,
                command="<code>" if rule.secret else command,
                phase=self.phase.value,
            )
            result.commands.append(command)

        result.outcome = self._scan_errors()
        return result

    def _scan_errors(self) -> SessionTerminated | None:
        for needles, exc_type in ERROR_SCANS:
            if all(n in self.buffer for n in needles):
                logger.error("game_error_detected", kind=exc_type.kind.value, account=self.account.name)
                return exc_type(" + ".join(needles))
        return None

    def _command_prompt(self) -> str:
        return "d" if self.mode is RunMode.DAILY else "ho"

    def _restore_prompt(self) -> str:
        return self._code

    def _server_prompt(self) -> str | None:
        target = self.account.preferred_server
        if target is None:
            return None
        logger.info("server_selection", target=target)
        index = find_server_index(self.buffer.text, target)
        if index is None:
            logger.warning("server_not_found", target=target, fallback=DEFAULT_SERVER_INDEX)
            index = DEFAULT_SERVER_INDEX
        return index

    def _mana_prompt(self) -> str:
        if self.mode is RunMode.HANDOUT and not self.handout_sent:
            self.handout_sent = True
            return "ho"
        return "y"

    def _next_event_prompt(self) -> str:
        if not self.auto_sent:
            self.auto_sent = True
            return "auto"
        return "exit"

    def _more_commands_prompt(self) -> str:
        done = (
            self.buffer.contains_any(COMPLETION_KEYWORDS, ignore_case=True)
            or self.auto_sent
            or self.handout_sent
        )
        if done:
            logger.info("session_complete_detected", account=self.account.name)
            raise SessionComplete("completion prompt reached")
        logger.warning("completion_unconfirmed", detail="returning to menu")
        return "y"
