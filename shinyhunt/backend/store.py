"""Durable key-value storage backends for persisted hunt state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None:
        """Return the stored string for ``key`` or ``None`` when absent."""

    def set_many(self, entries: dict[str, str]) -> None:
        """Overwrite every given key as a single snapshot write."""


@dataclass
class InMemoryKeyValueStore:
    def __post_init__(self) -> None:
        self._entries: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def set_many(self, entries: dict[str, str]) -> None:
        self._entries.update(entries)


@dataclass
class JsonFileKeyValueStore:
    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path).expanduser()

    def get(self, key: str) -> str | None:
        value = self._read_entries().get(key)
        return value if isinstance(value, str) else None

    def set_many(self, entries: dict[str, str]) -> None:
        try:
            current = self._read_entries()
        except ValueError:
            logger.warning("Storage file %s is corrupt; rewriting it from scratch", self.path)
            current = {}
        current.update(entries)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(json.dumps(current), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def _read_entries(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data


@dataclass
class PostgresKeyValueStore:
    database_url: str

    def _connect(self) -> Any:
        import psycopg

        return psycopg.connect(self.database_url)

    def get(self, key: str) -> str | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT value FROM kv_entries WHERE key = %s", (key,))
                row = cur.fetchone()

        if row is None:
            return None
        return row[0]

    def set_many(self, entries: dict[str, str]) -> None:
        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            with conn.cursor() as cur:
                for key, value in entries.items():
                    cur.execute(
                        """
                        INSERT INTO kv_entries (key, value, updated_at)
                        VALUES (%s, %s, %s)
                        ON CONFLICT (key) DO UPDATE
                        SET value = EXCLUDED.value, updated_at = EXCLUDED.updated_at
                        """,
                        (key, value, now),
                    )
            conn.commit()


def create_store(database_url: str | None, storage_path: str | None) -> KeyValueStore:
    if database_url:
        return PostgresKeyValueStore(database_url=database_url)
    if storage_path:
        return JsonFileKeyValueStore(path=Path(storage_path))
    return InMemoryKeyValueStore()
