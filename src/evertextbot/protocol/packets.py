# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Encode and decode the handful of Socket.IO frames the game server speaks.

Wire format (Engine.IO v4 packet type + Socket.IO packet type):
    0<json>        server open packet {"sid": ..., "pingInterval": ...}
    40             namespace join (both directions)
    2 / 3          server ping / client pong
    42<json-array> event frame ["name", payload]
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from evertextbot.constants import DEFAULT_PING_INTERVAL_MS
from evertextbot.errors import HandshakeFailed

OPEN = "0"
PING = "2"
PONG = "3"
NAMESPACE_JOIN = "40"
EVENT = "42"


class FrameType(StrEnum):
    PING = "ping"
    NAMESPACE_JOIN = "namespace_join"
    EVENT = "event"
    OTHER = "other"


class OpenPacket(BaseModel):
    sid: str
    ping_interval_ms: int = DEFAULT_PING_INTERVAL_MS


def parse_open(frame: str) -> OpenPacket:
    """Parse the server's first frame.

    Raises:
        HandshakeFailed: Wrong packet type, bad JSON, or no ``sid``.
    """
    if not frame.startswith(OPEN):
        raise HandshakeFailed(f"unexpected first frame: {frame[:32]!r}")
    try:
        data = json.loads(frame[len(OPEN) :])
    except ValueError as e:
        raise HandshakeFailed("malformed open packet") from e
    if not isinstance(data, dict):
        raise HandshakeFailed("open packet is not an object")

    sid = data.get("sid")
    if not isinstance(sid, str):
        raise HandshakeFailed("no sid in open packet")

    ping = data.get("pingInterval")
    if isinstance(ping, bool) or not isinstance(ping, int) or ping < 0:
        ping = DEFAULT_PING_INTERVAL_MS
    return OpenPacket(sid=sid, ping_interval_ms=ping)


def classify(frame: str) -> FrameType:
    if frame == PING:
        return FrameType.PING
    if frame.startswith(NAMESPACE_JOIN):
        return FrameType.NAMESPACE_JOIN
    if frame.startswith(EVENT):
        return FrameType.EVENT
    return FrameType.OTHER


def encode_event(name: str, payload: dict[str, Any]) -> str:
    return EVENT + json.dumps([name, payload], separators=(",", ":"))


def decode_event(frame: str) -> tuple[str, Any] | None:
    """Split an event frame into (name, payload).

    Returns None for anything that is not a well-formed event array.
    """
    if not frame.startswith(EVENT):
        return None
    try:
        event = json.loads(frame[len(EVENT) :])
    except ValueError:
        return None
    if not isinstance(event, list) or not event:
        return None
    name = event[0] if isinstance(event[0], str) else ""
    payload = event[1] if len(event) > 1 else None
    return name, payload
