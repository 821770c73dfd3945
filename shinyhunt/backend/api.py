"""FastAPI endpoints for the local hunt UI: state, odds, mutations and websocket sync."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import dataclasses
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from .config import load_settings
from .engine import chance_within, estimate
from .models import HuntMethod, HuntSession, HuntSettings
from .serialization import session_to_dict
from .session_store import SessionStore
from .store import create_store


class SettingsPayload(BaseModel):
    method: HuntMethod = HuntMethod.WILD
    shinyCharmActive: bool = False
    sparklingPowerActive: bool = False
    outbreakDefeatCount: int = Field(default=0, ge=0)

    def to_settings(self) -> HuntSettings:
        return HuntSettings(
            method=self.method,
            shiny_charm_active=self.shinyCharmActive,
            sparkling_power_active=self.sparklingPowerActive,
            outbreak_defeat_count=self.outbreakDefeatCount,
        )


class UpdateCurrentRequest(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    method: HuntMethod | None = None
    shinyCharmActive: bool | None = None
    sparklingPowerActive: bool | None = None
    outbreakDefeatCount: int | None = Field(default=None, ge=0)


class CounterRequest(BaseModel):
    delta: int = Field(default=1, ge=0)


class StateResponse(BaseModel):
    state: dict[str, Any]


class OddsResponse(BaseModel):
    odds: dict[str, Any]


_SETTINGS_FIELDS = {
    "method": "method",
    "shinyCharmActive": "shiny_charm_active",
    "sparklingPowerActive": "sparkling_power_active",
    "outbreakDefeatCount": "outbreak_defeat_count",
}


def odds_payload(settings: HuntSettings, attempts: int = 0) -> dict[str, Any]:
    odds = estimate(settings)
    return {
        "oneIn": odds.one_in,
        "probability": odds.probability,
        "expectedAttempts": odds.expected_attempts,
        "explanation": odds.explanation,
        "rolls": odds.rolls,
        "cumulativeProbability": chance_within(odds.probability, attempts),
    }


def build_state_payload(store: SessionStore) -> dict[str, Any]:
    current = store.current
    return {
        "current": session_to_dict(current) if current is not None else None,
        "sessions": [session_to_dict(session) for session in store.sessions],
        "odds": odds_payload(current.settings, current.attempt_counter) if current is not None else None,
    }


class StateWebSocketHub:
    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._queued: list[dict[str, Any]] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)

    def queue_state(self, state: dict[str, Any]) -> None:
        self._queued.append(state)

    async def send_state(self, websocket: WebSocket, state: dict[str, Any]) -> None:
        await websocket.send_json({"type": "state.full", "state": state})

    async def broadcast_queued(self) -> None:
        queued, self._queued = self._queued, []
        for state in queued:
            await self.broadcast_state(state)

    async def broadcast_state(self, state: dict[str, Any]) -> None:
        stale_connections: list[WebSocket] = []
        for websocket in list(self._connections):
            try:
                await self.send_state(websocket, state)
            except (RuntimeError, WebSocketDisconnect):
                stale_connections.append(websocket)
        for websocket in stale_connections:
            self.disconnect(websocket)


def _default_store() -> SessionStore:
    settings = load_settings()
    return SessionStore(create_store(database_url=settings.database_url, storage_path=settings.storage_path))


def create_app(store: SessionStore | None = None) -> FastAPI:
    session_store = store if store is not None else _default_store()
    websocket_hub = StateWebSocketHub()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if not session_store.initialized:
            session_store.initialize()
            await websocket_hub.broadcast_queued()
        try:
            yield
        finally:
            session_store.close()

    app = FastAPI(title="Shiny Hunt Tracker API", version="0.1.0", lifespan=lifespan)
    app.state.websocket_hub = websocket_hub
    app.state.session_store = session_store

    # Snapshot at notification time so a broadcast never mixes two mutations.
    session_store.subscribe(lambda: websocket_hub.queue_state(build_state_payload(session_store)))

    def get_store() -> SessionStore:
        return session_store

    async def respond(local_store: SessionStore) -> StateResponse:
        await websocket_hub.broadcast_queued()
        return StateResponse(state=build_state_payload(local_store))

    def require_archived(local_store: SessionStore, session_id: str) -> None:
        if local_store.get_archived(session_id) is None:
            raise HTTPException(status_code=404, detail="Archived session not found")

    @app.get("/api/state", response_model=StateResponse)
    async def get_state(local_store: SessionStore = Depends(get_store)) -> StateResponse:
        return StateResponse(state=build_state_payload(local_store))

    @app.post("/api/odds", response_model=OddsResponse)
    def post_odds(payload: SettingsPayload) -> OddsResponse:
        return OddsResponse(odds=odds_payload(payload.to_settings()))

    @app.patch("/api/current", response_model=StateResponse)
    async def patch_current(
        payload: UpdateCurrentRequest,
        local_store: SessionStore = Depends(get_store),
    ) -> StateResponse:
        provided = payload.model_dump(exclude_unset=True, exclude_none=True)
        title = provided.pop("title", None)
        changes = {_SETTINGS_FIELDS[name]: value for name, value in provided.items()}

        def apply(session: HuntSession) -> None:
            if title is not None:
                session.title = title
            if changes:
                session.settings = dataclasses.replace(session.settings, **changes)

        if title is not None or changes:
            local_store.mutate_current(apply)
        return await respond(local_store)

    @app.post("/api/current/increment", response_model=StateResponse)
    async def post_increment(
        payload: CounterRequest | None = None,
        local_store: SessionStore = Depends(get_store),
    ) -> StateResponse:
        local_store.increment_counter(payload.delta if payload is not None else 1)
        return await respond(local_store)

    @app.post("/api/current/decrement", response_model=StateResponse)
    async def post_decrement(
        payload: CounterRequest | None = None,
        local_store: SessionStore = Depends(get_store),
    ) -> StateResponse:
        local_store.decrement_counter(payload.delta if payload is not None else 1)
        return await respond(local_store)

    @app.post("/api/current/reset", response_model=StateResponse)
    async def post_reset(local_store: SessionStore = Depends(get_store)) -> StateResponse:
        local_store.reset_counter()
        return await respond(local_store)

    @app.post("/api/current/complete", response_model=StateResponse)
    async def post_complete(local_store: SessionStore = Depends(get_store)) -> StateResponse:
        local_store.complete_current()
        return await respond(local_store)

    @app.delete("/api/sessions/{session_id}", response_model=StateResponse)
    async def delete_session(session_id: str, local_store: SessionStore = Depends(get_store)) -> StateResponse:
        require_archived(local_store, session_id)
        local_store.delete_archived(session_id)
        return await respond(local_store)

    @app.post("/api/sessions/{session_id}/load", response_model=StateResponse)
    async def load_session(session_id: str, local_store: SessionStore = Depends(get_store)) -> StateResponse:
        require_archived(local_store, session_id)
        local_store.load_from_archive(session_id)
        return await respond(local_store)

    @app.websocket("/ws/state")
    async def state_ws(websocket: WebSocket) -> None:
        await websocket_hub.connect(websocket)
        await websocket_hub.send_state(websocket, build_state_payload(session_store))
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            websocket_hub.disconnect(websocket)

    return app
