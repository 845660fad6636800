# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session engine: handshake, liveness, triggers and the driver loop."""

from __future__ import annotations

from evertextbot.core.buffer import RollingBuffer
from evertextbot.core.dispatcher import CommandDispatcher
from evertextbot.core.driver import DriverState, SessionDriver
from evertextbot.core.session import Session, open_session
from evertextbot.core.supervisor import LivenessSupervisor
from evertextbot.core.triggers import TriggerEngine, TriggerResult, TriggerRule, find_server_index

__all__ = [
    "CommandDispatcher",
    "DriverState",
    "LivenessSupervisor",
    "RollingBuffer",
    "Session",
    "SessionDriver",
    "TriggerEngine",
    "TriggerResult",
    "TriggerRule",
    "find_server_index",
    "open_session",
]
