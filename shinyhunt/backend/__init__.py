"""Backend package for the shiny hunt tracker."""

from .config import TrackerSettings, load_settings
from .engine import chance_within, count_rolls, estimate, probability_for_rolls
from .models import AppState, HuntMethod, HuntSession, HuntSettings, OddsResult
from .session_store import SessionStore, SessionStoreNotReadyError
from .state import build_new_session
from .store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore, PostgresKeyValueStore, create_store

__all__ = [
    "AppState",
    "build_new_session",
    "chance_within",
    "count_rolls",
    "create_store",
    "estimate",
    "HuntMethod",
    "HuntSession",
    "HuntSettings",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "load_settings",
    "OddsResult",
    "PostgresKeyValueStore",
    "probability_for_rolls",
    "SessionStore",
    "SessionStoreNotReadyError",
    "TrackerSettings",
]
