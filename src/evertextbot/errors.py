# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Terminal session outcomes as an exception hierarchy.

Every session ends by raising one of these. The driver catches them and
turns them into a :class:`~evertextbot.models.SessionOutcome`.
"""

from __future__ import annotations

from evertextbot.models import OutcomeKind, SessionOutcome


class SessionTerminated(Exception):
    """Base exception for anything that ends a session."""

    kind: OutcomeKind = OutcomeKind.IO_ERROR

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.kind.value)
        self.reason = reason

    def to_outcome(self) -> SessionOutcome:
        return SessionOutcome(kind=self.kind, reason=self.reason)


class SessionComplete(SessionTerminated):
    """The scripted run finished."""

    kind = OutcomeKind.SESSION_COMPLETE


class HandshakeTimeout(SessionTerminated):
    """No open packet arrived within the handshake window."""

    kind = OutcomeKind.HANDSHAKE_TIMEOUT


class HandshakeFailed(SessionTerminated):
    """The open packet was malformed or carried no session id."""

    kind = OutcomeKind.HANDSHAKE_FAILED


class ConnectionTimeout(SessionTerminated):
    """Server heartbeat went stale."""

    kind = OutcomeKind.CONNECTION_TIMEOUT


class ActivityTimeout(SessionTerminated):
    """Game output went stale."""

    kind = OutcomeKind.ACTIVITY_TIMEOUT


class MissingCode(SessionTerminated):
    """Account has no access code."""

    kind = OutcomeKind.MISSING_CODE


class ZigzaDetected(SessionTerminated):
    """Server reported a Zigza error or rejected the restore code."""

    kind = OutcomeKind.ZIGZA_DETECTED


class ServerFull(SessionTerminated):
    """Server hit its restore-account limit."""

    kind = OutcomeKind.SERVER_FULL


class LoginRequired(SessionTerminated):
    """Session cookie is no longer accepted."""

    kind = OutcomeKind.LOGIN_REQUIRED


class InvalidCommandRestart(SessionTerminated):
    """Game rejected a command and is exiting."""

    kind = OutcomeKind.INVALID_COMMAND_RESTART


class ServerClosed(SessionTerminated):
    """Server ended the session (idle timeout or disconnect event)."""

    kind = OutcomeKind.SERVER_CLOSED


class SessionIOError(SessionTerminated):
    """Transport failed or closed underneath the session."""

    kind = OutcomeKind.IO_ERROR
