"""PostgreSQL backend for networked servers."""

from __future__ import annotations

import itertools
import logging
from typing import Any, Optional

import psycopg
from psycopg import pq

from .base import Database, PreparedStatement
from .placeholders import ParamStyle
from .rows import ResultSet, read_pgresult

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5432

# SQLSTATE class 42: syntax error or access rule violation
STATEMENT_ERROR_CLASS = "42"
# "could not determine data type of parameter $n"
INDETERMINATE_DATATYPE = b"42P18"


class PostgreSQLDatabase(Database):
    """PostgreSQL server connection using psycopg.

    The session runs in autocommit mode. Results are read in text format
    straight from the libpq result, cell by cell.

    A successful ``exec``/``query`` makes a single round trip. Only a failure
    in SQLSTATE class 42 triggers a server-side prepare of the statement, and
    only a rejected prepare makes it invalid: class 42 also covers run-time
    errors such as permission denied or an object that already exists.
    """

    backend_type = "postgresql"
    param_style = ParamStyle.FORMAT
    native_style = ParamStyle.NUMERIC
    driver_errors = (psycopg.Error,)
    table_exists_sql = (
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_schema = current_schema() AND table_name = ?"
    )

    _statement_ids = itertools.count(1)

    def __init__(
        self,
        host: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        dbname: Optional[str] = None,
        port: int = DEFAULT_PORT,
        **options: Any,
    ):
        super().__init__()
        if host is not None:
            self.open(host, user, password, dbname, port, **options)

    def open(
        self,
        host: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        dbname: Optional[str] = None,
        port: int = DEFAULT_PORT,
        **options: Any,
    ) -> None:
        """Connect to the server.

        Extra keyword arguments are passed to libpq as connection options
        (e.g. ``connect_timeout``). Does nothing if the handle is already
        open. On failure the handle stays unusable; check ``good()``.
        """
        if self._good:
            return

        credentials = f"{user}@" if user else ""
        target = f"postgresql://{credentials}{host}:{port}/{dbname or ''}"
        try:
            conn = psycopg.connect(
                host=host,
                user=user,
                password=password,
                dbname=dbname,
                port=port,
                autocommit=True,
                **options,
            )
        except psycopg.Error as e:
            logger.warning(f"Failed to connect to PostgreSQL {target}: {e}")
            return

        self._attach(conn, target)

    @property
    def encoding(self) -> str:
        if self._conn is None:
            return "utf-8"
        return self._conn.info.encoding

    def empty(self) -> bool:
        """Check if the server database has no user tables (one round trip)."""
        if not self._good:
            return True

        return self._count_is_zero(
            "SELECT count(*) AS n FROM information_schema.tables "
            "WHERE table_schema NOT IN ('pg_catalog', 'information_schema')"
        )

    def _disconnect(self, conn: psycopg.Connection) -> None:
        conn.close()

    def _execute(self, prepared: PreparedStatement, collect: bool) -> ResultSet:
        with self._conn.cursor() as cur:
            cur.execute(prepared.sql, prepared.params)
            if not collect:
                return []
            return read_pgresult(cur.pgresult, self.encoding)

    def _is_statement_error(self, error: BaseException) -> bool:
        sqlstate = getattr(error, "sqlstate", None) or ""
        return sqlstate.startswith(STATEMENT_ERROR_CLASS)

    def _dry_prepare(self, sql: str, param_count: int) -> bool:
        pgconn = self._conn.pgconn
        name = f"sdatabase_validate_{next(self._statement_ids)}".encode()

        result = pgconn.prepare(name, sql.encode(self.encoding))
        try:
            created = result.status == pq.ExecStatus.COMMAND_OK
            ok = created
            if not created:
                sqlstate = result.error_field(pq.DiagnosticField.SQLSTATE)
                # Untyped parameters only get a type from a bound value
                ok = sqlstate == INDETERMINATE_DATATYPE
                if not ok:
                    message = (result.error_message or b"").decode(self.encoding, "replace")
                    logger.debug(f"PostgreSQL rejected statement: {message.strip()}")
        finally:
            result.clear()

        if created:
            pgconn.exec_(b"DEALLOCATE " + name).clear()
        return ok

    def _last_insert_id(self) -> int:
        with self._conn.cursor() as cur:
            cur.execute("SELECT lastval()")
            row = cur.fetchone()
        return int(row[0]) if row else -1
