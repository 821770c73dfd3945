"""Owner of the current hunt session and the archive of completed ones."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
import copy
import dataclasses
import logging
from typing import Any

from shinyhunt.backend.models import AppState, HuntSession
from shinyhunt.backend.serialization import dump_session, dump_sessions, load_session, load_sessions
from shinyhunt.backend.state import build_new_session
from shinyhunt.backend.store import KeyValueStore

logger = logging.getLogger(__name__)

ARCHIVED_SESSIONS_KEY = "archived_sessions"
CURRENT_SESSION_KEY = "current_session"

Listener = Callable[[], None]


class SessionStoreNotReadyError(RuntimeError):
    """Raised when a mutation is attempted before ``initialize()`` or after ``close()``."""


class SessionStore:
    """Mediates every mutation of the hunt state.

    Each effective mutation notifies listeners synchronously and then queues one
    full snapshot write. Writes run on a single worker in submission order, so the
    latest snapshot always lands last. Write failures are logged and dropped; the
    in-memory state stays authoritative.
    """

    def __init__(self, storage: KeyValueStore, executor: Executor | None = None) -> None:
        self._storage = storage
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="shinyhunt-persist")
        self._state = AppState()
        self._listeners: list[Listener] = []
        self._pending: list[Future[None]] = []
        self._initialized = False
        self._closed = False

    def __enter__(self) -> SessionStore:
        if not self._initialized:
            self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def sessions(self) -> tuple[HuntSession, ...]:
        return tuple(self._state.sessions)

    @property
    def current(self) -> HuntSession | None:
        return self._state.current

    def get_archived(self, session_id: str) -> HuntSession | None:
        for session in self._state.sessions:
            if session.session_id == session_id:
                return session
        return None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def initialize(self) -> None:
        """Load the archive and current session from storage."""
        sessions = load_sessions(self._read(ARCHIVED_SESSIONS_KEY))
        current = load_session(self._read(CURRENT_SESSION_KEY))
        if current is None:
            current = build_new_session()
        current.completed = False

        self._state = AppState(sessions=sessions, current=current)
        self._initialized = True
        logger.info("Loaded %d archived session(s)", len(sessions))
        self._notify()

    def mutate_current(self, fn: Callable[[HuntSession], Any]) -> None:
        self._ensure_ready()
        current = self._state.current
        if current is None:
            return
        fn(current)
        self._commit()

    def increment_counter(self, delta: int = 1) -> None:
        def apply(session: HuntSession) -> None:
            session.attempt_counter = max(0, session.attempt_counter + delta)

        self.mutate_current(apply)

    def decrement_counter(self, delta: int = 1) -> None:
        self.increment_counter(-delta)

    def reset_counter(self) -> None:
        def apply(session: HuntSession) -> None:
            session.attempt_counter = 0

        self.mutate_current(apply)

    def rename_current(self, title: str) -> None:
        def apply(session: HuntSession) -> None:
            session.title = title

        self.mutate_current(apply)

    def update_settings(self, **changes: Any) -> None:
        def apply(session: HuntSession) -> None:
            session.settings = dataclasses.replace(session.settings, **changes)

        self.mutate_current(apply)

    def complete_current(self) -> None:
        """Archive the current session and start a fresh one in a single step."""
        self._ensure_ready()
        current = self._state.current
        if current is None:
            return
        finished = copy.deepcopy(current)
        finished.completed = True
        self._state.sessions.insert(0, finished)
        self._state.current = build_new_session()
        self._commit()

    def delete_archived(self, session_id: str) -> None:
        self._ensure_ready()
        remaining = [session for session in self._state.sessions if session.session_id != session_id]
        if len(remaining) == len(self._state.sessions):
            return
        self._state.sessions = remaining
        self._commit()

    def load_from_archive(self, session_id: str) -> None:
        """Seed the current session's title, counter and settings from an archived one."""
        self._ensure_ready()
        archived = self.get_archived(session_id)
        if archived is None:
            return

        def apply(session: HuntSession) -> None:
            session.title = archived.title
            session.attempt_counter = archived.attempt_counter
            session.settings = copy.deepcopy(archived.settings)

        self.mutate_current(apply)

    def flush(self, timeout: float | None = None) -> None:
        """Block until every queued write has finished."""
        pending, self._pending = self._pending, []
        wait(pending, timeout=timeout)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.flush()
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def _ensure_ready(self) -> None:
        if self._closed:
            raise SessionStoreNotReadyError("SessionStore is closed; no further mutations are accepted")
        if not self._initialized:
            raise SessionStoreNotReadyError("SessionStore.initialize() must run before mutations")

    def _read(self, key: str) -> str | None:
        try:
            return self._storage.get(key)
        except Exception:
            logger.warning("Could not read %r from storage; using defaults", key, exc_info=True)
            return None

    def _commit(self) -> None:
        # Taken after listeners so any mutation they make is part of this write.
        try:
            self._notify()
        finally:
            entries = self._snapshot()
            self._pending = [future for future in self._pending if not future.done()]
            self._pending.append(self._executor.submit(self._write, entries))

    def _snapshot(self) -> dict[str, str]:
        entries = {ARCHIVED_SESSIONS_KEY: dump_sessions(self._state.sessions)}
        if self._state.current is not None:
            entries[CURRENT_SESSION_KEY] = dump_session(self._state.current)
        return entries

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _write(self, entries: dict[str, str]) -> None:
        try:
            self._storage.set_many(entries)
        except Exception:
            logger.warning("Dropping state write; storage unavailable", exc_info=True)
            return
        logger.debug("Persisted %d storage entries", len(entries))
