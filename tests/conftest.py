"""Pytest configuration and fixtures for sdatabase tests."""

import logging
import os
from unittest.mock import MagicMock, patch

import pytest

from sdatabase.config.settings import Settings
from sdatabase.db.sqlite import SQLiteDatabase


class FakePGresult:
    """Stand-in for a libpq result in text format."""

    def __init__(self, names, rows):
        self._names = list(names)
        self._rows = [list(row) for row in rows]

    @property
    def nfields(self):
        return len(self._names)

    @property
    def ntuples(self):
        return len(self._rows)

    def fname(self, column):
        return self._names[column].encode()

    def get_value(self, row, column):
        value = self._rows[row][column]
        return None if value is None else value.encode()


@pytest.fixture(autouse=True)
def isolated_settings():
    """Run every test against default settings, ignoring SDB_* variables."""
    env = {key: value for key, value in os.environ.items() if not key.startswith("SDB_")}
    with patch.dict(os.environ, env, clear=True):
        Settings.refresh_from_env()
        yield
    Settings.refresh_from_env()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "test.db")


@pytest.fixture
def sqlite_db(db_path):
    """An open file-backed database, closed after the test."""
    db = SQLiteDatabase(db_path)
    yield db
    db.close()


@pytest.fixture
def pg_conn():
    """Mocked psycopg connection and the cursor it hands out."""
    conn = MagicMock()
    conn.info.encoding = "utf-8"
    cursor = MagicMock()
    cursor.pgresult = FakePGresult([], [])
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn, cursor


@pytest.fixture
def pg_db(pg_conn):
    """A PostgreSQL handle opened against the mocked connection."""
    from sdatabase.db.postgres import PostgreSQLDatabase

    conn, _ = pg_conn
    with patch("sdatabase.db.postgres.psycopg.connect", return_value=conn):
        db = PostgreSQLDatabase("localhost", "app", "secret", "appdb")
    yield db
    db.close()


# Keep library logs quiet unless a test asks for them
logging.getLogger("sdatabase").setLevel(logging.ERROR)


@pytest.fixture
def make_pgresult():
    """Factory for fake libpq results."""
    return FakePGresult
