"""sdatabase - simple SQL access over SQLite and PostgreSQL."""

from .db import (
    Database,
    DatabaseError,
    InvalidStatementError,
    ResultSet,
    Row,
    SQLiteDatabase,
    open_database,
)

__version__ = "0.3.0"

__all__ = [
    "Database",
    "DatabaseError",
    "InvalidStatementError",
    "ResultSet",
    "Row",
    "SQLiteDatabase",
    "open_database",
    "__version__",
]
