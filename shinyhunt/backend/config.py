"""Configuration helpers for backend runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TrackerSettings:
    storage_path: str
    database_url: str | None
    host: str
    port: int
    log_level: str


def _default_storage_path() -> str:
    return str(Path.home() / ".shinyhunt" / "state.json")


def load_settings() -> TrackerSettings:
    port_raw = os.getenv("SHINYHUNT_PORT", "8000")
    return TrackerSettings(
        storage_path=os.getenv("SHINYHUNT_STORAGE_PATH", _default_storage_path()),
        database_url=os.getenv("SHINYHUNT_DATABASE_URL"),
        host=os.getenv("SHINYHUNT_HOST", "127.0.0.1"),
        port=int(port_raw),
        log_level=os.getenv("SHINYHUNT_LOG_LEVEL", "INFO").upper(),
    )
