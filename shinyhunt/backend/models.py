"""Domain models for hunt sessions, settings and odds estimates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class HuntMethod(str, Enum):
    WILD = "wild"
    OUTBREAK = "outbreak"
    MASUDA = "masuda"


@dataclass
class HuntSettings:
    method: HuntMethod = HuntMethod.WILD
    shiny_charm_active: bool = False
    # Only read for wild encounters and outbreaks.
    sparkling_power_active: bool = False
    # Only read for outbreaks; the UI offers 0, 30 and 60.
    outbreak_defeat_count: int = 0


@dataclass
class HuntSession:
    session_id: str
    title: str
    attempt_counter: int
    created_at: datetime
    settings: HuntSettings = field(default_factory=HuntSettings)
    completed: bool = False


@dataclass
class AppState:
    """Archive (most recently completed first) plus the session being hunted."""

    sessions: list[HuntSession] = field(default_factory=list)
    current: HuntSession | None = None


@dataclass(frozen=True)
class OddsResult:
    one_in: float
    probability: float
    expected_attempts: float
    explanation: str
    rolls: int | None = None
