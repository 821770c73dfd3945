"""Builders for fresh hunt sessions."""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

from shinyhunt.backend.models import HuntSession, HuntSettings

DEFAULT_TITLE = "Untitled"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_session_id() -> str:
    return str(uuid.uuid4())


def build_new_session(title: str = DEFAULT_TITLE) -> HuntSession:
    """Return a session with a fresh id, zero counter and default settings."""
    return HuntSession(
        session_id=generate_session_id(),
        title=title,
        attempt_counter=0,
        created_at=_utc_now(),
        settings=HuntSettings(),
        completed=False,
    )
