"""Base connection handle shared by all database backends."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import TracebackType
from typing import Any, ClassVar, Optional, Tuple, Type

from ..utils.sanitize import sanitize_text
from .binding import bind_arguments
from .exceptions import InvalidStatementError
from .placeholders import ParamStyle, count_placeholders, placeholder, translate
from .rows import ResultSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedStatement:
    """A statement translated for one backend, with its bound parameters."""

    statement: str
    # Form handed to the driver at execution
    sql: str
    # Form the engine itself compiles, used to re-check a failed statement
    native_sql: str
    params: Optional[Tuple[Any, ...]] = None
    placeholders: int = 0


class Database(ABC):
    """Connection handle with a uniform exec/query/validate contract.

    A handle is either usable (``good()`` is true) or not. Every operation on
    an unusable handle returns a sentinel (``False``, ``[]`` or ``-1``)
    instead of raising. The only failure that is raised is
    ``InvalidStatementError``, when validation was requested and failed.

    Statements are executed directly. Only when execution fails with an error
    the backend attributes to the statement itself is the statement
    dry-prepared, and only a failed dry prepare is reported as invalid. A
    successful call therefore compiles its statement once.

    Handles are not thread-safe; use one handle per thread or lock externally.
    """

    backend_type: ClassVar[str] = ""
    # Placeholder form handed to the driver at execution
    param_style: ClassVar[ParamStyle] = ParamStyle.QMARK
    # Placeholder form the engine itself understands
    native_style: ClassVar[ParamStyle] = ParamStyle.QMARK
    driver_errors: ClassVar[Tuple[Type[BaseException], ...]] = ()
    table_exists_sql: ClassVar[str] = ""

    def __init__(self) -> None:
        self._conn: Any = None
        self._target = ""
        self._good = False

    def __enter__(self) -> "Database":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_good", False):
            self.close()

    def __repr__(self) -> str:
        state = "open" if self._good else "closed"
        return f"<{type(self).__name__} {self._target!r} ({state})>"

    @property
    def target(self) -> str:
        """Store identifier used in logs and errors (never includes a password)."""
        return self._target

    @property
    def encoding(self) -> str:
        """Python codec name of the text encoding the backend expects."""
        return "utf-8"

    def good(self) -> bool:
        """Check if the handle is usable."""
        return self._good

    def is_open(self) -> bool:
        """Check if the handle is open."""
        return self.good()

    def placeholder(self, index: int) -> str:
        """Get the native placeholder syntax for a 1-based parameter index."""
        return placeholder(self.native_style, index)

    def close(self) -> None:
        """Release the native connection. Safe to call more than once."""
        if not self._good:
            return

        conn, self._conn = self._conn, None
        self._good = False
        try:
            self._disconnect(conn)
        except self.driver_errors as e:
            logger.warning(f"Error closing {self.backend_type} database {self._target}: {e}")
        logger.info(f"{self.backend_type} database closed: {self._target}")

    def exec(self, statement: str, *args: Any, validate: bool = True) -> bool:
        """Execute a statement that returns no rows.

        Args:
            statement: Statement template with ``?`` or ``$n`` placeholders
            *args: Values for the placeholders, in occurrence order
            validate: Raise if the statement itself is rejected by the engine

        Returns:
            True if the statement ran successfully

        Raises:
            InvalidStatementError: If validation was requested and failed
        """
        if not self._good:
            return False

        prepared = self._prepare(statement, args)
        try:
            self._execute(prepared, collect=False)
        except self.driver_errors as e:
            self._handle_failure(prepared, e, validate)
            return False
        return True

    def query(self, statement: str, *args: Any, validate: bool = True) -> ResultSet:
        """Execute a statement and return its rows.

        Returns:
            List of rows mapping column names to text values; empty on failure

        Raises:
            InvalidStatementError: If validation was requested and failed
        """
        if not self._good:
            return []

        prepared = self._prepare(statement, args)
        try:
            return self._execute(prepared, collect=True)
        except self.driver_errors as e:
            self._handle_failure(prepared, e, validate)
            return []

    def validate(self, statement: str) -> bool:
        """Check whether the backend accepts ``statement`` without running it.

        Placeholders are left without values for the check; a placeholder
        whose type the engine cannot infer on its own does not make the
        statement invalid.
        """
        if not self._good:
            return False

        text = sanitize_text(statement, self.encoding)
        sql = translate(text, self.native_style)
        try:
            return self._dry_prepare(sql, count_placeholders(text))
        except self.driver_errors as e:
            logger.debug(f"Validation failed for {statement!r}: {e}")
            return False

    def last_insert_id(self) -> int:
        """Get the most recent auto-generated row id for this session, or -1."""
        if not self._good:
            return -1

        try:
            return self._last_insert_id()
        except self.driver_errors as e:
            logger.debug(f"No last insert id on {self._target}: {e}")
            return -1

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        return bool(self.query(self.table_exists_sql, table_name, validate=False))

    @abstractmethod
    def empty(self) -> bool:
        """Check if the underlying store holds no content at all."""
        ...

    def _attach(self, conn: Any, target: str) -> None:
        self._conn = conn
        self._target = target
        self._good = True
        logger.info(f"{self.backend_type} database opened: {target}")

    def _prepare(self, statement: str, args: Tuple[Any, ...]) -> PreparedStatement:
        text = sanitize_text(statement, self.encoding)
        placeholders = count_placeholders(text)
        if not args:
            if placeholders:
                raise TypeError(f"Statement has placeholders but no arguments were given: {statement}")
            return PreparedStatement(statement, text, text)
        return PreparedStatement(
            statement,
            translate(text, self.param_style),
            translate(text, self.native_style),
            bind_arguments(args, self.encoding),
            placeholders,
        )

    def _invalid(self, prepared: PreparedStatement) -> InvalidStatementError:
        logger.error(f"Invalid SQL statement in database '{self._target}': {prepared.statement}")
        return InvalidStatementError(prepared.statement, self._target)

    def _handle_failure(
        self, prepared: PreparedStatement, error: BaseException, validate: bool
    ) -> None:
        if validate and self._is_statement_error(error) and not self._accepts(prepared):
            raise self._invalid(prepared) from error
        logger.warning(f"Statement failed on {self._target}: {error} ({prepared.statement})")

    def _accepts(self, prepared: PreparedStatement) -> bool:
        """Dry-prepare a statement whose execution just failed.

        A statement that cannot be checked (e.g. the connection dropped) is
        treated as accepted, so the failure stays an execution failure.
        """
        try:
            return self._dry_prepare(prepared.native_sql, prepared.placeholders)
        except self.driver_errors as e:
            logger.debug(f"Could not re-check {prepared.statement!r}: {e}")
            return True

    def _count_is_zero(self, sql: str) -> bool:
        """Run a ``count(*) AS n`` statement and check for zero.

        A count that cannot be read reports False: the store is not known
        to be empty.
        """
        try:
            rows = self._execute(PreparedStatement(sql, sql, sql), collect=True)
        except self.driver_errors as e:
            logger.warning(f"Could not inspect {self._target}: {e}")
            return False
        return bool(rows) and rows[0].get("n") == "0"

    def _is_statement_error(self, error: BaseException) -> bool:
        """Whether an execution error may come from the statement itself."""
        return False

    @abstractmethod
    def _disconnect(self, conn: Any) -> None:
        """Close the native connection."""
        ...

    @abstractmethod
    def _execute(self, prepared: PreparedStatement, collect: bool) -> ResultSet:
        """Run a prepared statement, returning rows when ``collect`` is set."""
        ...

    @abstractmethod
    def _dry_prepare(self, sql: str, param_count: int) -> bool:
        """Prepare native ``sql`` without executing it; False if the engine rejects it."""
        ...

    @abstractmethod
    def _last_insert_id(self) -> int:
        """Read the session's last insert id from the driver."""
        ...
