# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Abstract base class for framed text transports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class FrameTransport(ABC):
    """Abstract base for duplex transports carrying discrete text frames."""

    @abstractmethod
    async def connect(self, url: str, *, cookie: str, **kwargs: Any) -> None:
        """Establish connection to the remote endpoint.

        Args:
            url: Endpoint URL
            cookie: Session cookie value sent on the upgrade request
            **kwargs: Transport-specific connection options

        Raises:
            ConnectionError: If connection fails
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection and cleanup resources.

        Should be idempotent - safe to call multiple times.
        """

    @abstractmethod
    async def send(self, frame: str) -> None:
        """Send one text frame.

        Raises:
            ConnectionError: If not connected or send fails
        """

    @abstractmethod
    async def receive(self) -> str:
        """Wait for the next inbound frame.

        Raises:
            ConnectionError: If not connected or the stream closed
        """

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if connection is active."""
