"""Persisted JSON shape for hunt sessions.

Stored data is the only untrusted input, so every field falls back to its
default on its own instead of failing the whole record.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from shinyhunt.backend.models import HuntMethod, HuntSession, HuntSettings
from shinyhunt.backend.state import DEFAULT_TITLE, generate_session_id

logger = logging.getLogger(__name__)


def _lenient_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _lenient_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


class SettingsRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    method: HuntMethod = HuntMethod.WILD
    shiny_charm_active: bool = False
    sparkling_power_active: bool = False
    outbreak_defeat_count: int = 0

    @field_validator("method", mode="before")
    @classmethod
    def _known_method(cls, value: Any) -> HuntMethod:
        try:
            return HuntMethod(value)
        except (TypeError, ValueError):
            return HuntMethod.WILD

    @field_validator("shiny_charm_active", "sparkling_power_active", mode="before")
    @classmethod
    def _bool_or_false(cls, value: Any) -> bool:
        return _lenient_bool(value)

    @field_validator("outbreak_defeat_count", mode="before")
    @classmethod
    def _int_or_zero(cls, value: Any) -> int:
        return _lenient_int(value)

    @classmethod
    def from_domain(cls, settings: HuntSettings) -> SettingsRecord:
        return cls(
            method=settings.method,
            shiny_charm_active=settings.shiny_charm_active,
            sparkling_power_active=settings.sparkling_power_active,
            outbreak_defeat_count=settings.outbreak_defeat_count,
        )

    def to_domain(self) -> HuntSettings:
        return HuntSettings(
            method=self.method,
            shiny_charm_active=self.shiny_charm_active,
            sparkling_power_active=self.sparkling_power_active,
            outbreak_defeat_count=self.outbreak_defeat_count,
        )


class SessionRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str = DEFAULT_TITLE
    attempt_counter: int = 0
    created_at: datetime
    completed: bool = False
    settings: SettingsRecord = Field(default_factory=SettingsRecord)

    @field_validator("id", mode="before")
    @classmethod
    def _id_or_fresh(cls, value: Any) -> str:
        if isinstance(value, str) and value:
            return value
        return generate_session_id()

    @field_validator("title", mode="before")
    @classmethod
    def _title_or_default(cls, value: Any) -> str:
        return value if isinstance(value, str) else DEFAULT_TITLE

    @field_validator("attempt_counter", mode="before")
    @classmethod
    def _non_negative_counter(cls, value: Any) -> int:
        return max(0, _lenient_int(value))

    @field_validator("created_at", mode="before")
    @classmethod
    def _timestamp_or_now(cls, value: Any) -> datetime:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                pass
        return datetime.now(timezone.utc)

    @field_validator("completed", mode="before")
    @classmethod
    def _completed_or_false(cls, value: Any) -> bool:
        return _lenient_bool(value)

    @field_validator("settings", mode="before")
    @classmethod
    def _settings_object(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, SettingsRecord)) else {}

    @field_serializer("created_at")
    def _iso_timestamp(self, value: datetime) -> str:
        return value.isoformat()

    @classmethod
    def from_domain(cls, session: HuntSession) -> SessionRecord:
        return cls(
            id=session.session_id,
            title=session.title,
            attempt_counter=session.attempt_counter,
            created_at=session.created_at,
            completed=session.completed,
            settings=SettingsRecord.from_domain(session.settings),
        )

    def to_domain(self) -> HuntSession:
        return HuntSession(
            session_id=self.id,
            title=self.title,
            attempt_counter=self.attempt_counter,
            created_at=self.created_at,
            settings=self.settings.to_domain(),
            completed=self.completed,
        )


def session_to_dict(session: HuntSession) -> dict[str, Any]:
    return SessionRecord.from_domain(session).model_dump(mode="json", by_alias=True)


def session_from_dict(payload: dict[str, Any]) -> HuntSession:
    # Required fields are filled here so their validators supply the fallback.
    data = dict(payload)
    data.setdefault("id", None)
    data.setdefault("createdAt", None)
    return SessionRecord.model_validate(data).to_domain()


def dump_session(session: HuntSession) -> str:
    return json.dumps(session_to_dict(session))


def dump_sessions(sessions: list[HuntSession]) -> str:
    return json.dumps([session_to_dict(session) for session in sessions])


def load_session(raw: str | None) -> HuntSession | None:
    """Decode one stored session; ``None`` when absent or unreadable."""
    if raw is None:
        return None
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError):
        logger.warning("Stored session is not valid JSON; ignoring it")
        return None
    if not isinstance(payload, dict):
        logger.warning("Stored session is not a JSON object; ignoring it")
        return None
    return session_from_dict(payload)


def load_sessions(raw: str | None) -> list[HuntSession]:
    """Decode the stored archive, skipping entries that are not objects."""
    if raw is None:
        return []
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError):
        logger.warning("Stored archive is not valid JSON; starting with an empty archive")
        return []
    if not isinstance(payload, list):
        logger.warning("Stored archive is not a JSON array; starting with an empty archive")
        return []

    sessions: list[HuntSession] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            logger.warning("Skipping archived entry %d: not a JSON object", index)
            continue
        sessions.append(session_from_dict(item))
    return sessions
