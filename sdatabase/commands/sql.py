"""SQL commands for the sdatabase CLI."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, List, Optional, Sequence

from ..db import InvalidStatementError, ResultSet, open_database
from ..utils.sanitize import sanitize_connection_string

logger = logging.getLogger(__name__)


def coerce_arguments(values: Sequence[str], as_text: bool = False) -> List[Any]:
    """Turn command-line strings into typed arguments (int, then float, then text)."""
    if as_text:
        return list(values)

    coerced: List[Any] = []
    for value in values:
        for kind in (int, float):
            try:
                coerced.append(kind(value))
                break
            except ValueError:
                continue
        else:
            coerced.append(value)
    return coerced


def format_rows(rows: ResultSet, as_json: bool = False) -> str:
    """Render rows as JSON or as a tab-separated table with a header line."""
    if as_json:
        return json.dumps(rows, indent=2, ensure_ascii=False)
    if not rows:
        return ""
    columns = list(rows[0].keys())
    lines = ["\t".join(columns)]
    lines.extend("\t".join(row.get(column, "") for column in columns) for row in rows)
    return "\n".join(lines)


def _unavailable(url: Optional[str]) -> int:
    shown = sanitize_connection_string(url) if url else "default database"
    print(f"❌ Could not open {shown}", file=sys.stderr)
    return 1


def _invalid(error: InvalidStatementError) -> int:
    print(f"❌ {error}", file=sys.stderr)
    return 2


def run_query(
    url: Optional[str],
    statement: str,
    args: Sequence[Any] = (),
    validate: bool = True,
    as_json: bool = False,
) -> int:
    """Run a row-returning statement and print its rows."""
    with open_database(url) as db:
        if not db.good():
            return _unavailable(url)
        try:
            rows = db.query(statement, *args, validate=validate)
        except InvalidStatementError as e:
            return _invalid(e)

    output = format_rows(rows, as_json=as_json)
    if output:
        print(output)
    return 0


def run_exec(
    url: Optional[str],
    statement: str,
    args: Sequence[Any] = (),
    validate: bool = True,
) -> int:
    """Run a statement that returns no rows and print the last insert id."""
    with open_database(url) as db:
        if not db.good():
            return _unavailable(url)
        try:
            ok = db.exec(statement, *args, validate=validate)
        except InvalidStatementError as e:
            return _invalid(e)

        if not ok:
            print("❌ Statement failed", file=sys.stderr)
            return 1
        print(f"✅ OK (last insert id: {db.last_insert_id()})")
    return 0


def run_validate(url: Optional[str], statement: str) -> int:
    """Check a statement without running it."""
    with open_database(url) as db:
        if not db.good():
            return _unavailable(url)
        if db.validate(statement):
            print("✅ Valid")
            return 0
    print("❌ Invalid", file=sys.stderr)
    return 2
