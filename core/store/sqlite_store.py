# Path: core/store/sqlite_store.py
# Purpose: Provide the SQLite-backed clip store with named-parameter statements and scoped transactions.
# Layer: core/store.
# Details: Owns the schema, translates sqlite3 errors into archive errors, and exposes row access by column name.

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from core.errors import ClipArchiveError, ConstraintViolation, StoreUnavailable

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

SCHEMA_VERSION = 1

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS clips (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        is_image INTEGER NOT NULL DEFAULT 0,
        is_file INTEGER NOT NULL DEFAULT 0,
        phash INTEGER NOT NULL DEFAULT 0,
        thumbnail BLOB,
        description TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL,
        source_path TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_clips_created_at ON clips(created_at)",
    """
    CREATE TABLE IF NOT EXISTS tags (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS clips_tags (
        clip_id INTEGER NOT NULL REFERENCES clips(id) ON DELETE CASCADE,
        tag_id INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
        PRIMARY KEY (clip_id, tag_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_clips_tags_tag ON clips_tags(tag_id)",
    """
    CREATE TABLE IF NOT EXISTS servers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        protocol TEXT NOT NULL,
        settings TEXT,
        upload_enabled INTEGER NOT NULL DEFAULT 1,
        output_format_id INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS uploads (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        clip_id INTEGER NOT NULL REFERENCES clips(id) ON DELETE CASCADE,
        server_id INTEGER NOT NULL REFERENCES servers(id) ON DELETE CASCADE,
        url TEXT NOT NULL DEFAULT '',
        uploaded_at TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_uploads_clip ON uploads(clip_id)",
    "CREATE INDEX IF NOT EXISTS idx_uploads_server ON uploads(server_id)",
)


@dataclass
class Statement:
    """SQL template plus its named parameter bindings."""

    sql: str
    params: Dict[str, Any] = field(default_factory=dict)

    def bind(self, name: str, value: Any) -> "Statement":
        """Bind ``value`` to the ``:name`` placeholder and return the statement for chaining."""

        self.params[name.lstrip(":")] = value
        return self


@dataclass
class Result:
    """Outcome of executing a statement."""

    last_insert_id: int
    rows: List[sqlite3.Row]
    rowcount: int = -1


class ClipStore:
    """Durable record storage for clips, tags, associations, servers, and uploads.

    Statements run in autocommit mode unless wrapped in :meth:`transaction`. Transactions
    are re-entrant: only the outermost scope commits, and any exception rolls back the
    whole scope before propagating.

    The connection is shared across threads. An open transaction holds the store lock
    until it commits or rolls back, so statements from other threads wait for it
    instead of joining it.
    """

    def __init__(self, path: Path | str = MEMORY_PATH, timeout: float = 5.0) -> None:
        self.path = str(path)
        self._depth = 0
        self._lock = threading.RLock()
        self._conn = self._connect_sqlite(self.path, timeout)
        self._ensure_schema()

    # SQLite helpers
    @staticmethod
    def _connect_sqlite(path: str, timeout: float) -> sqlite3.Connection:
        """Create a SQLite connection with foreign keys enabled and rows addressable by name."""

        if path != MEMORY_PATH:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(path, timeout=timeout, isolation_level=None, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            raise StoreUnavailable(str(exc), operation="connect", target=path) from exc
        return conn

    def _ensure_schema(self) -> None:
        """Create tables and indexes if missing and stamp the schema version."""

        with self.transaction():
            for ddl in SCHEMA:
                self.run(ddl, operation="ensure_schema")
            self.run(f"PRAGMA user_version = {SCHEMA_VERSION}", operation="ensure_schema")
        logger.debug("Clip store ready at %s (schema v%d)", self.path, SCHEMA_VERSION)

    # Statement API
    def prepare(self, template: str) -> Statement:
        """Return an unbound statement for ``template``."""

        return Statement(template)

    def execute(self, statement: Statement, operation: str = "execute", target: Any = None) -> Result:
        """Run a prepared statement and fetch all resulting rows."""

        with self._lock:
            try:
                cursor = self._conn.execute(statement.sql, statement.params)
                rows = cursor.fetchall()
            except sqlite3.Error as exc:
                raise _translate_error(exc, operation, target) from exc
        return Result(last_insert_id=int(cursor.lastrowid or 0), rows=rows, rowcount=cursor.rowcount)

    def run(
        self,
        sql: str,
        params: Optional[Dict[str, Any]] = None,
        operation: str = "execute",
        target: Any = None,
    ) -> Result:
        """Prepare, bind, and execute ``sql`` in one call."""

        statement = self.prepare(sql)
        for name, value in (params or {}).items():
            statement.bind(name, value)
        return self.execute(statement, operation=operation, target=target)

    @contextmanager
    def transaction(self) -> Iterator["ClipStore"]:
        """Scope a group of statements into one atomic unit."""

        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self.run("BEGIN", operation="begin")
            self._depth = 1
            try:
                yield self
                self.run("COMMIT", operation="commit")
            except BaseException:
                if self._conn.in_transaction:
                    self._conn.rollback()
                    logger.debug("Rolled back transaction on %s", self.path)
                raise
            finally:
                self._depth = 0

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "ClipStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _translate_error(exc: sqlite3.Error, operation: str, target: Any) -> ClipArchiveError:
    if isinstance(exc, sqlite3.IntegrityError):
        return ConstraintViolation(str(exc), operation=operation, target=target)
    if isinstance(exc, (sqlite3.OperationalError, sqlite3.ProgrammingError)):
        return StoreUnavailable(str(exc), operation=operation, target=target)
    return ClipArchiveError(str(exc), operation=operation, target=target)
