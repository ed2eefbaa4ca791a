"""
Document store for records, backed by SQLite.

Every format is a collection: its records are JSON documents in the records
table, keyed by (collection, id). Searchable fields are mirrored into one FTS5
table per format, which is derived data: it is reconciled with the format's
searchable fields at startup and never edited by hand.

Record ids are generated here and are opaque to every layer above.
"""

import json
import re
import sqlite3
import uuid
from contextlib import contextmanager
from typing import Dict, FrozenSet, Generator, Iterable, List, Mapping, Optional

from util.logging import logger

from .db import get_db, health_check, init_db
from .errors import (
    FormatDefinitionError,
    FormatNotFoundError,
    InternalError,
    RecordDoesntHaveIDError,
    RecordHasIDError,
    RecordNotFoundError,
)
from .formats import ID_FIELD, Format
from .validators import ReferenceValidator

# Column names FTS5 reserves for itself
RESERVED_INDEX_COLUMNS = {"rank", "rowid", "oid", "_rowid_"}

INDEX_ID_COLUMN = "_record_id"

SEARCH_TERM_RE = re.compile(r"\w+", re.UNICODE)

# Reconciliation outcomes
INDEX_CREATED = "created"
INDEX_UPDATED = "updated"
INDEX_DROPPED = "dropped"
INDEX_REBUILT = "rebuilt"
INDEX_UNCHANGED = "unchanged"


def _index_table(format_name: str) -> str:
    return f"fts_{format_name}"


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _to_record(record_id: str, fields_json: str) -> Dict[str, str]:
    record = {ID_FIELD: record_id}
    record.update(json.loads(fields_json))
    return record


def split_id(record: Mapping[str, str]):
    """Separate the id from the rest of the fields of a record."""
    record_id = None
    fields = {}
    for name, value in record.items():
        if name == ID_FIELD:
            record_id = value
        else:
            fields[name] = str(value)
    return record_id, fields


class SQLiteRecordStore:
    """Record store with one collection and one text index per format."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        # Collection name -> fields in its text index
        self._collections: Dict[str, FrozenSet[str]] = {}
        self._closed = False

    @classmethod
    def open(cls, db_path: str) -> "SQLiteRecordStore":
        """Open the store, creating the base schema if needed.

        Raises sqlite3.Error or OSError when the database can't be used.
        """
        init_db(db_path)
        logger.log_operation("store.open", "success", {"db_path": db_path})
        return cls(db_path)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            logger.log_operation("store.close", "success", {"db_path": self.db_path})

    @property
    def closed(self) -> bool:
        return self._closed

    def health_check(self) -> bool:
        return not self._closed and health_check(self.db_path)

    def collections(self) -> List[str]:
        return list(self._collections)

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        if self._closed:
            raise InternalError("store is closed")
        try:
            with get_db(self.db_path) as conn:
                yield conn
        except sqlite3.Error as e:
            raise InternalError(f"database error: {e}") from e

    def _indexed_fields(self, format_name: str) -> FrozenSet[str]:
        try:
            return self._collections[format_name]
        except KeyError:
            raise FormatNotFoundError() from None

    # -- Records -------------------------------------------------------

    def create(self, format_name: str, record: Mapping[str, str]) -> str:
        """Insert a new record and return its generated id."""
        if ID_FIELD in record:
            raise RecordHasIDError()
        indexed = self._indexed_fields(format_name)
        _, fields = split_id(record)
        record_id = uuid.uuid4().hex
        with self._connection() as conn:
            with conn:
                conn.execute(
                    "INSERT INTO records (collection, id, fields) VALUES (?, ?, ?)",
                    (format_name, record_id, json.dumps(fields))
                )
                self._index_record(conn, format_name, indexed, record_id, fields)
        return record_id

    def replace(self, format_name: str, record: Mapping[str, str]) -> None:
        """Replace all non-id fields of the record stored under record["id"]."""
        record_id, fields = split_id(record)
        if not record_id:
            raise RecordDoesntHaveIDError()
        indexed = self._indexed_fields(format_name)
        with self._connection() as conn:
            with conn:
                cursor = conn.execute(
                    "UPDATE records SET fields = ? WHERE collection = ? AND id = ?",
                    (json.dumps(fields), format_name, record_id)
                )
                if cursor.rowcount != 1:
                    raise RecordNotFoundError()
                self._index_record(conn, format_name, indexed, record_id, fields)

    def read_one(self, format_name: str, record_id: str) -> Dict[str, str]:
        self._indexed_fields(format_name)
        with self._connection() as conn:
            row = conn.execute(
                "SELECT fields FROM records WHERE collection = ? AND id = ?",
                (format_name, record_id)
            ).fetchone()
        if row is None:
            raise RecordNotFoundError()
        return _to_record(record_id, row[0])

    def read_all(self, format_name: str) -> List[Dict[str, str]]:
        self._indexed_fields(format_name)
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT id, fields FROM records WHERE collection = ? ORDER BY seq",
                (format_name,)
            ).fetchall()
        return [_to_record(record_id, fields) for record_id, fields in rows]

    def search(self, format_name: str, query: str) -> List[Dict[str, str]]:
        """Full-text search over the searchable fields of the format.

        Any word of the query matches, case-insensitively; best matches first.
        """
        indexed = self._indexed_fields(format_name)
        terms = SEARCH_TERM_RE.findall(query or "")
        if not terms or not indexed:
            return []
        match = " OR ".join(f'"{term}"' for term in terms)
        table = _quote(_index_table(format_name))
        with self._connection() as conn:
            ids = [row[0] for row in conn.execute(
                f"SELECT {INDEX_ID_COLUMN} FROM {table} WHERE {table} MATCH ? ORDER BY rank",
                (match,)
            )]
            if not ids:
                return []
            placeholders = ",".join("?" for _ in ids)
            rows = conn.execute(
                f"SELECT id, fields FROM records WHERE collection = ? AND id IN ({placeholders})",
                [format_name] + ids
            ).fetchall()
        by_id = {record_id: fields for record_id, fields in rows}
        return [_to_record(record_id, by_id[record_id]) for record_id in ids if record_id in by_id]

    def reference_validator(self, format_name: str) -> ReferenceValidator:
        """Validator of references to records of the format."""
        return ReferenceValidator(self, format_name)

    # -- Text indexes --------------------------------------------------

    def initialize_indexes(self, formats: Iterable[Format], force: bool = False) -> Dict[str, str]:
        """Register the collections and reconcile their text indexes.

        An index whose fields differ from the format's searchable fields is
        dropped and recreated from the stored records. With force=True every
        index is rebuilt. Returns the outcome per format name.
        """
        formats = list(formats)
        for fmt in formats:
            reserved = fmt.searchable & RESERVED_INDEX_COLUMNS
            if reserved:
                raise FormatDefinitionError(
                    f"Fields {sorted(reserved)} of format '{fmt.name}' can't be searchable")

        outcomes = {}
        with self._connection() as conn:
            with conn:
                for fmt in formats:
                    outcomes[fmt.name] = self._reconcile_index(conn, fmt, force)
        for fmt in formats:
            self._collections[fmt.name] = fmt.searchable
        for name, outcome in outcomes.items():
            logger.log_index_reconciliation(name, outcome, sorted(self._collections[name]))
        return outcomes

    def _reconcile_index(self, conn: sqlite3.Connection, fmt: Format, force: bool) -> str:
        existing = self._existing_index_fields(conn, fmt.name)
        if existing is None:
            if not fmt.searchable:
                return INDEX_UNCHANGED
            self._create_index(conn, fmt)
            return INDEX_CREATED
        if not fmt.searchable:
            self._drop_index(conn, fmt.name)
            return INDEX_DROPPED
        if force:
            self._drop_index(conn, fmt.name)
            self._create_index(conn, fmt)
            return INDEX_REBUILT
        if fmt.searchable_are(existing):
            return INDEX_UNCHANGED
        self._drop_index(conn, fmt.name)
        self._create_index(conn, fmt)
        return INDEX_UPDATED

    def index_fields(self, format_name: str) -> Optional[FrozenSet[str]]:
        """Fields of the text index currently in the database, None if absent."""
        with self._connection() as conn:
            return self._existing_index_fields(conn, format_name)

    @staticmethod
    def _existing_index_fields(conn: sqlite3.Connection, format_name: str) -> Optional[FrozenSet[str]]:
        table = _index_table(format_name)
        row = conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
        ).fetchone()
        if row is None:
            return None
        columns = conn.execute(f"PRAGMA table_info({_quote(table)})").fetchall()
        return frozenset(col[1] for col in columns if col[1] != INDEX_ID_COLUMN)

    def _create_index(self, conn: sqlite3.Connection, fmt: Format) -> None:
        columns = ", ".join(_quote(name) for name in sorted(fmt.searchable))
        conn.execute(
            f"CREATE VIRTUAL TABLE {_quote(_index_table(fmt.name))} "
            f"USING fts5({INDEX_ID_COLUMN} UNINDEXED, {columns})"
        )
        rows = conn.execute(
            "SELECT id, fields FROM records WHERE collection = ? ORDER BY seq", (fmt.name,)
        ).fetchall()
        for record_id, fields_json in rows:
            self._insert_index_row(conn, fmt.name, fmt.searchable, record_id, json.loads(fields_json))

    @staticmethod
    def _drop_index(conn: sqlite3.Connection, format_name: str) -> None:
        conn.execute(f"DROP TABLE IF EXISTS {_quote(_index_table(format_name))}")

    def _index_record(self, conn: sqlite3.Connection, format_name: str, indexed: FrozenSet[str],
                      record_id: str, fields: Mapping[str, str]) -> None:
        if not indexed:
            return
        conn.execute(
            f"DELETE FROM {_quote(_index_table(format_name))} WHERE {INDEX_ID_COLUMN} = ?",
            (record_id,)
        )
        self._insert_index_row(conn, format_name, indexed, record_id, fields)

    @staticmethod
    def _insert_index_row(conn: sqlite3.Connection, format_name: str, indexed: FrozenSet[str],
                          record_id: str, fields: Mapping[str, str]) -> None:
        names = sorted(indexed)
        columns = ", ".join([INDEX_ID_COLUMN] + [_quote(name) for name in names])
        placeholders = ", ".join("?" for _ in range(len(names) + 1))
        conn.execute(
            f"INSERT INTO {_quote(_index_table(format_name))} ({columns}) VALUES ({placeholders})",
            [record_id] + [str(fields.get(name, "")) for name in names]
        )
