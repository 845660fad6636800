# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport layer for game server connections."""

from __future__ import annotations

from evertextbot.transport.base import FrameTransport
from evertextbot.transport.websocket import WebSocketTransport

__all__ = ["FrameTransport", "WebSocketTransport"]
