"""Normalize native result sets into a list of text-valued rows."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ..utils.sanitize import sanitize_text

# Column name -> text value; NULL is ""
Row = Dict[str, str]
ResultSet = List[Row]


def to_text(value: Any, encoding: str = "utf-8") -> str:
    """Render a driver value the way the engine's text accessor would."""
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return sanitize_text(bytes(value), encoding)
    if isinstance(value, float):
        return repr(value)
    return str(value)


class RowCollector:
    """Row callback that accumulates rows for a single call.

    Installed as a cursor ``row_factory``: the driver pushes each row to it
    as the statement steps. A new collector is created for every query, so
    rows never leak between calls or handles.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self.rows: ResultSet = []
        self._names: Optional[List[str]] = None

    def __call__(self, cursor: Any, values: Sequence[Any]) -> Row:
        if self._names is None:
            self._names = [column[0] for column in cursor.description or ()]
        row = {name: to_text(value, self.encoding) for name, value in zip(self._names, values)}
        self.rows.append(row)
        return row

    def discard(self) -> None:
        """Drop everything collected so far."""
        self.rows = []


def read_pgresult(result: Any, encoding: str = "utf-8") -> ResultSet:
    """Pull rows out of a libpq result in text format.

    Walks ``ntuples x nfields`` reading each cell's native text value.
    """
    if result is None:
        return []

    names = []
    for column in range(result.nfields):
        name = result.fname(column)
        names.append(sanitize_text(name or b"", encoding))

    rows: ResultSet = []
    for index in range(result.ntuples):
        row: Row = {}
        for column, name in enumerate(names):
            value = result.get_value(index, column)
            row[name] = "" if value is None else sanitize_text(bytes(value), encoding)
        rows.append(row)
    return rows


__all__ = ["Row", "ResultSet", "to_text", "RowCollector", "read_pgresult"]
