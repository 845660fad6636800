# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared constants for evertextbot."""

from __future__ import annotations

# Socket.IO (EIO v4) over a plain websocket transport
DEFAULT_ENDPOINT = "wss://evertext.sytes.net/socket.io/?EIO=4&transport=websocket"

# The server rejects upgrades that do not look like a browser
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
COOKIE_NAME = "session"

# Handshake
HANDSHAKE_TIMEOUT_S = 10.0
DEFAULT_PING_INTERVAL_MS = 25000

# Liveness supervision
TICK_INTERVAL_S = 5.0
HEARTBEAT_GRACE_MS = 15000
ACTIVITY_TIMEOUT_S = 180.0
START_RETRY_AFTER_S = 20.0
SETTLE_DELAY_S = 1.5

# Rolling output buffer
BUFFER_CAP = 10000

# Trace log
TERMINAL_LOG_CHARS = 150
