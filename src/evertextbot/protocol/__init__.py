# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Socket.IO subprotocol framing."""

from __future__ import annotations

from evertextbot.protocol.packets import (
    NAMESPACE_JOIN,
    PING,
    PONG,
    FrameType,
    OpenPacket,
    classify,
    decode_event,
    encode_event,
    parse_open,
)

__all__ = [
    "NAMESPACE_JOIN",
    "PING",
    "PONG",
    "FrameType",
    "OpenPacket",
    "classify",
    "decode_event",
    "encode_event",
    "parse_open",
]
