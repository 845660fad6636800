# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""structlog setup for the bot's trace log.

Everything the bot reports (terminal text it saw, commands it sent, the
final outcome) is a structlog event on stderr. ``log_format="json"`` emits
one JSON object per line for unattended runs; the default console renderer
is for a human watching a session. Context bound with
``structlog.contextvars.bound_contextvars`` (the runner binds ``account``
and ``mode``) is merged into every event logged inside that block.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from evertextbot.settings import Settings

__all__ = ["get_logger", "configure_logging"]


def _renderer(log_format: str) -> list[structlog.types.Processor]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog from ``settings`` (read from the environment if None).

    Unknown level names fall back to INFO.
    """
    if settings is None:
        from evertextbot.settings import Settings

        settings = Settings()

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            *_renderer(settings.log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)
