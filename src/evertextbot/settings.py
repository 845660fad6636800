# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Application settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from evertextbot import constants


class SessionTimings(BaseModel):
    """Timing knobs for one session. Defaults match the live server."""

    handshake_timeout_s: float = constants.HANDSHAKE_TIMEOUT_S
    tick_interval_s: float = constants.TICK_INTERVAL_S
    heartbeat_grace_ms: int = constants.HEARTBEAT_GRACE_MS
    activity_timeout_s: float = constants.ACTIVITY_TIMEOUT_S
    start_retry_after_s: float = constants.START_RETRY_AFTER_S
    settle_delay_s: float = constants.SETTLE_DELAY_S


class ChaosOptions(BaseModel):
    """Fault injection applied to the live transport (resilience testing)."""

    seed: int = 1
    disconnect_every_n_receives: int = 0
    drop_every_n_receives: int = 0
    max_jitter_ms: int = 0
    label: str = "chaos"


class Settings(BaseSettings):
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    endpoint: str = constants.DEFAULT_ENDPOINT
    cookie: str = ""
    db_path: Path = Path("db.json")
    timings: SessionTimings = Field(default_factory=SessionTimings)
    chaos: ChaosOptions | None = None

    model_config = SettingsConfigDict(
        env_prefix="EVERTEXT_",
        env_nested_delimiter="__",
        extra="ignore",
    )
