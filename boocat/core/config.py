"""
Configuration for the boocat server.

Values come from the environment (optionally a .env file); command line flags
in boocat.server override them.
"""

import os
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "boocat.sqlite")

# Listen address, host:port
BOOCAT_URL = os.getenv("BOOCAT_URL", "localhost:80")

# Directory with the website templates and static files
WEB_ROOT = os.getenv("WEB_ROOT", "bcweb")

DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Seconds to wait for in-flight requests on shutdown
SHUTDOWN_TIMEOUT_SEC = int(os.getenv("SHUTDOWN_TIMEOUT_SEC", "5"))

# Version string
VERSION = "1.0.0"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_db_directory(db_path: str = DB_PATH) -> None:
    """Ensure the database directory exists."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)


def parse_listen_address(url: str) -> Tuple[str, int]:
    """Split a "host:port" listen address. A missing port means 80."""
    url = url.strip()
    for prefix in ("http://", "https://"):
        if url.startswith(prefix):
            url = url[len(prefix):]
    url = url.rstrip("/")
    host, sep, port = url.rpartition(":")
    if not sep:
        return url or "localhost", 80
    if not port.isdigit():
        raise ValueError(f"Invalid port in listen address: {url}")
    return host or "0.0.0.0", int(port)
