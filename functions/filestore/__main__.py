"""
Run the file store service under uvicorn.

The store is initialized before the server starts; if the database cannot be
opened or its schema created, the process exits with status 1.
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

import uvicorn

from filestore.app import create_app
from filestore.config import get_settings
from filestore.db import FileStoreError
from filestore.dependencies import get_file_store

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Single file store server")
    parser.add_argument("--host", type=str, default=None, help="Bind address")
    parser.add_argument(
        "--port", type=int, default=None, help="Listen port (default: $PORT or 3000)"
    )
    parser.add_argument(
        "--db-file",
        type=str,
        default=None,
        help="SQLite database path (ignored when DATABASE_URL is set)",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    if args.host:
        settings.host = args.host
    if args.port is not None:
        settings.port = args.port
    if args.db_file:
        settings.db_file = args.db_file

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    try:
        get_file_store().ensure_initialized()
    except FileStoreError as exc:
        logger.critical("Failed to initialize database: %s", exc)
        return 1

    logger.info("Starting server on %s:%d", settings.host, settings.port)
    uvicorn.run(
        create_app(),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
