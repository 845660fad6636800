# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Data types shared across the session engine."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TARGET_SERVER = "Default"


class RunMode(StrEnum):
    """Per-session behaviour switch, fixed for the lifetime of a session."""

    DAILY = "daily"
    HANDOUT = "handout"


class SessionPhase(StrEnum):
    """Diagnostic tag for where a session is in the game's menu flow.

    Carried on the trigger engine and attached to log events. Nothing
    advances it: the real state is the consumed markers in the rolling
    buffer plus the engine's sent-flags.
    """

    CONNECTED = "connected"
    WAITING_FOR_COMMAND_PROMPT = "waiting_for_command_prompt"
    SENT_D = "sent_d"
    WAITING_FOR_RESTORE_PROMPT = "waiting_for_restore_prompt"
    SENT_CODE = "sent_code"
    WAITING_FOR_SERVER_LIST = "waiting_for_server_list"
    SERVER_SELECTED = "server_selected"
    WAITING_PROCEDURE = "waiting_procedure"
    RAPID_FIRE = "rapid_fire"
    FINISHED = "finished"


class OutcomeKind(StrEnum):
    """Every way a session can end."""

    SESSION_COMPLETE = "session_complete"
    HANDSHAKE_TIMEOUT = "handshake_timeout"
    HANDSHAKE_FAILED = "handshake_failed"
    CONNECTION_TIMEOUT = "connection_timeout"
    ACTIVITY_TIMEOUT = "activity_timeout"
    MISSING_CODE = "missing_code"
    ZIGZA_DETECTED = "zigza_detected"
    SERVER_FULL = "server_full"
    LOGIN_REQUIRED = "login_required"
    INVALID_COMMAND_RESTART = "invalid_command_restart"
    SERVER_CLOSED = "server_closed"
    IO_ERROR = "io_error"

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self]

    @property
    def retryable(self) -> bool:
        """True when a fresh session has a chance of succeeding."""
        return self in _RETRYABLE


_EXIT_CODES: dict[OutcomeKind, int] = {
    OutcomeKind.SESSION_COMPLETE: 0,
    OutcomeKind.IO_ERROR: 1,
    OutcomeKind.HANDSHAKE_TIMEOUT: 10,
    OutcomeKind.HANDSHAKE_FAILED: 11,
    OutcomeKind.CONNECTION_TIMEOUT: 12,
    OutcomeKind.ACTIVITY_TIMEOUT: 13,
    OutcomeKind.SERVER_CLOSED: 14,
    OutcomeKind.INVALID_COMMAND_RESTART: 15,
    OutcomeKind.MISSING_CODE: 20,
    OutcomeKind.ZIGZA_DETECTED: 21,
    OutcomeKind.SERVER_FULL: 22,
    OutcomeKind.LOGIN_REQUIRED: 23,
}

_RETRYABLE = frozenset(
    {
        OutcomeKind.HANDSHAKE_TIMEOUT,
        OutcomeKind.HANDSHAKE_FAILED,
        OutcomeKind.CONNECTION_TIMEOUT,
        OutcomeKind.ACTIVITY_TIMEOUT,
        OutcomeKind.INVALID_COMMAND_RESTART,
        OutcomeKind.SERVER_CLOSED,
        OutcomeKind.IO_ERROR,
    }
)


class SessionOutcome(BaseModel):
    """Terminal result of one session, handed back to the caller."""

    kind: OutcomeKind
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SESSION_COMPLETE

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    @property
    def exit_code(self) -> int:
        return self.kind.exit_code


class Account(BaseModel):
    """One game account from the account database."""

    name: str
    code: str = ""
    target_server: str | None = Field(default=None, alias="targetServer")
    encrypted_code: str | None = Field(default=None, alias="encryptedCode")
    ping_enabled: bool = Field(default=False, alias="pingEnabled")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def preferred_server(self) -> str | None:
        """Target server label, or None when no preference is configured."""
        target = (self.target_server or "").strip()
        if not target or target == DEFAULT_TARGET_SERVER:
            return None
        return target


class AccountDatabase(BaseModel):
    """On-disk account database."""

    accounts: list[Account] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow", populate_by_name=True)
