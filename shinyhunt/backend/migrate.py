"""Create the Postgres key-value table and optionally move local JSON state into it."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from shinyhunt.backend.config import load_settings
from shinyhunt.backend.session_store import ARCHIVED_SESSIONS_KEY, CURRENT_SESSION_KEY
from shinyhunt.backend.store import JsonFileKeyValueStore, PostgresKeyValueStore

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("db_schema.sql")
HUNT_STATE_KEYS = (ARCHIVED_SESSIONS_KEY, CURRENT_SESSION_KEY)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Prepare Postgres storage for the shiny hunt tracker")
    parser.add_argument("--database-url", default=settings.database_url)
    parser.add_argument(
        "--import-file",
        default=None,
        help="JSON state file whose hunt sessions are copied into Postgres",
    )
    return parser.parse_args(argv)


def apply_schema(database_url: str, schema_path: Path = SCHEMA_PATH) -> None:
    import psycopg

    with psycopg.connect(database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(schema_path.read_text(encoding="utf-8"))
        conn.commit()


def import_json_state(source: JsonFileKeyValueStore, target: PostgresKeyValueStore) -> int:
    """Copy the stored hunt keys present in ``source``; returns how many were copied."""
    entries = {}
    for key in HUNT_STATE_KEYS:
        value = source.get(key)
        if value is not None:
            entries[key] = value
    if entries:
        target.set_many(entries)
    return len(entries)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if not args.database_url:
        raise RuntimeError("SHINYHUNT_DATABASE_URL or --database-url is required for migration")

    apply_schema(args.database_url)
    logger.info("kv_entries schema applied")

    if args.import_file:
        copied = import_json_state(
            JsonFileKeyValueStore(path=Path(args.import_file)),
            PostgresKeyValueStore(database_url=args.database_url),
        )
        logger.info("Imported %d hunt state entries from %s", copied, args.import_file)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
