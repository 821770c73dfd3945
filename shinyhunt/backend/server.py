"""Run the local tracker API with uvicorn."""

from __future__ import annotations

import argparse
import logging

from shinyhunt.backend.api import create_app
from shinyhunt.backend.config import load_settings
from shinyhunt.backend.session_store import SessionStore
from shinyhunt.backend.store import create_store

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Shiny hunt tracker server")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--storage-path", default=settings.storage_path)
    parser.add_argument("--database-url", default=settings.database_url)
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


def build_store(args: argparse.Namespace) -> SessionStore:
    storage = create_store(database_url=args.database_url, storage_path=args.storage_path)
    logger.info("Using %s for hunt state", type(storage).__name__)
    return SessionStore(storage)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    import uvicorn

    app = create_app(store=build_store(args))
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
