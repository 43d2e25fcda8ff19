"""SQLite backend for file-based stores."""

from __future__ import annotations

import logging
import os
import re
import sqlite3
from typing import Optional

from ..utils.sanitize import sanitize_text
from .base import Database, PreparedStatement
from .placeholders import ParamStyle
from .rows import ResultSet, RowCollector

logger = logging.getLogger(__name__)

_EXPLAIN = re.compile(r"^\s*EXPLAIN\b", re.IGNORECASE)


def _is_memory_path(path: str) -> bool:
    return path in ("", ":memory:") or path.startswith("file::memory:")


class SQLiteDatabase(Database):
    """Embedded SQLite database backed by a single file.

    Statements run in autocommit mode. Rows are pushed into a per-call
    ``RowCollector`` installed as the cursor's row factory.

    SQLite compiles a whole statement before stepping it, so a statement the
    engine rejects has not run at all when its error reaches us.
    """

    backend_type = "sqlite"
    param_style = ParamStyle.QMARK
    native_style = ParamStyle.QMARK
    # sqlite3.Warning covers "one statement at a time" on older Pythons
    driver_errors = (sqlite3.Error, sqlite3.Warning)
    table_exists_sql = "SELECT name FROM sqlite_master WHERE type='table' AND name=?"

    def __init__(self, path: Optional[str] = None):
        super().__init__()
        self._path = ""
        if path is not None:
            self.open(path)

    @property
    def path(self) -> str:
        return self._path

    def open(self, path: str) -> None:
        """Open the database file at ``path``, creating it if missing.

        Does nothing if the handle is already open. On failure the handle
        stays unusable; check ``good()`` afterwards.
        """
        if self._good:
            return

        try:
            conn = sqlite3.connect(path, isolation_level=None)
        except sqlite3.Error as e:
            logger.warning(f"Failed to open SQLite database {path}: {e}")
            return

        # Invalid UTF-8 stored in TEXT columns is repaired instead of raising
        conn.text_factory = sanitize_text
        self._path = path
        self._attach(conn, path)

    def empty(self) -> bool:
        """Check if the database file has zero bytes.

        In-memory databases have no file, so their schema is checked instead.
        """
        if _is_memory_path(self._path):
            if not self._good:
                return True
            return self._count_is_zero("SELECT count(*) AS n FROM sqlite_master")

        try:
            return os.path.getsize(self._path) == 0
        except OSError:
            return True

    def _disconnect(self, conn: sqlite3.Connection) -> None:
        conn.close()

    def _execute(self, prepared: PreparedStatement, collect: bool) -> ResultSet:
        collector = RowCollector(self.encoding) if collect else None
        cursor = self._conn.cursor()
        try:
            if collector is not None:
                cursor.row_factory = collector
            cursor.execute(prepared.sql, prepared.params or ())
            if collector is None:
                return []
            cursor.fetchall()
            return collector.rows
        except sqlite3.Error:
            if collector is not None:
                collector.discard()
            raise
        finally:
            cursor.close()

    def _is_statement_error(self, error: BaseException) -> bool:
        # Constraint and data errors are IntegrityError/DataError
        return isinstance(error, (sqlite3.OperationalError, sqlite3.ProgrammingError, sqlite3.Warning))

    def _dry_prepare(self, sql: str, param_count: int) -> bool:
        # EXPLAIN compiles the statement into bytecode without running it
        explain = sql if _EXPLAIN.match(sql) else f"EXPLAIN {sql}"
        cursor = self._conn.cursor()
        try:
            cursor.execute(explain, (None,) * param_count)
        except self.driver_errors as e:
            logger.debug(f"SQLite rejected statement: {e}")
            return False
        finally:
            cursor.close()
        return True

    def _last_insert_id(self) -> int:
        row = self._conn.execute("SELECT last_insert_rowid()").fetchone()
        rowid = int(row[0]) if row else 0
        # 0 is also what SQLite reports before anything was written
        if rowid == 0 and self._conn.total_changes == 0:
            return -1
        return rowid
