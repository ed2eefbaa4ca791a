"""
SQLite connection handling and base schema for the record store.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator

from .config import ensure_db_directory


@contextmanager
def get_db(db_path: str) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    conn = sqlite3.connect(db_path)
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: str):
    """Initialize the database with the records table."""
    ensure_db_directory(db_path)
    with get_db(db_path) as conn:
        cursor = conn.cursor()

        # One row per record; fields is the JSON document without the id
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS records (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                collection TEXT NOT NULL,
                id TEXT NOT NULL,
                fields TEXT NOT NULL,
                UNIQUE (collection, id)
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_records_collection ON records(collection, seq)')

        conn.commit()


def health_check(db_path: str) -> bool:
    """Check database health."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='records'")
            return cursor.fetchone() is not None
    except sqlite3.Error:
        return False
