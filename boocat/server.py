"""
boocat server entry point.

Opens the record store, registers the formats, reconciles the text indexes
and serves the website and the JSON API until interrupted.
"""

import argparse
import sqlite3
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn

from util.logging import logger

from .api.content import WebContent
from .api.main import create_app
from .core import config
from .core.catalog import build_registry
from .core.errors import InternalError
from .core.service import RecordService
from .core.store import SQLiteRecordStore


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve boocat records")
    parser.add_argument("--url", "-url", default=config.BOOCAT_URL,
                        help="This server's listen address, host:port (default: %(default)s)")
    parser.add_argument("--dbds", "-dbds", default=config.DB_PATH,
                        help="SQLite database file (default: %(default)s)")
    parser.add_argument("--webroot", "-webroot", default=config.WEB_ROOT,
                        help="Directory with the website templates and files (default: %(default)s)")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        help="Logging level (default: %(default)s)")
    return parser.parse_args(argv)


def build_service(db_path: str):
    """Open the store and wire the record service. Store failures are fatal."""
    try:
        store = SQLiteRecordStore.open(db_path)
        registry = build_registry(store)
        store.initialize_indexes(registry)
    except (sqlite3.Error, OSError, InternalError) as e:
        logger.error(f"Couldn't open database {db_path}: {e}")
        sys.exit(1)
    return RecordService(registry, store)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logger.configure_level(args.log_level)

    try:
        host, port = config.parse_listen_address(args.url)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(2)

    service = build_service(args.dbds)

    content = None
    if Path(args.webroot).is_dir():
        content = WebContent.from_directory(args.webroot, service.registry)
    else:
        logger.warning(f"Web root {args.webroot} not found, serving the JSON API only")

    app = create_app(service, content=content)

    logger.info(f"Starting boocat on {host}:{port}")
    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level=args.log_level.lower(),
            timeout_graceful_shutdown=config.SHUTDOWN_TIMEOUT_SEC,
        )
    finally:
        service.store.close()


if __name__ == "__main__":
    main()
