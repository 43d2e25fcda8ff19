"""Database exceptions for sdatabase.

Only ``InvalidStatementError`` escapes handle operations; every other failure
kind degrades to a sentinel return value.
"""

from __future__ import annotations


class DatabaseError(Exception):
    """Base class for all sdatabase exceptions."""


class InvalidStatementError(DatabaseError):
    """Raised when a statement fails validation and validation was requested."""

    def __init__(self, statement: str, target: str):
        self.statement = statement
        self.target = target
        super().__init__(f"Invalid SQL statement in database '{target}': {statement}")


class UnsupportedDatabaseURL(DatabaseError, ValueError):
    """Raised when a database URL cannot be mapped to a backend."""
