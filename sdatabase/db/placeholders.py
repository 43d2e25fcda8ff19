"""Translate backend-neutral placeholders into native parameter syntax.

Statement templates use either ``?`` or ``$n`` as placeholders. Digits on
``$n`` are informational only: parameters are numbered by occurrence order.
Quoted strings, quoted identifiers and comments are copied verbatim, so a
``?`` inside ``'...'`` is never treated as a placeholder.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Tuple

_DIGITS = "0123456789"


class ParamStyle(Enum):
    """Native placeholder forms."""

    QMARK = "qmark"  # ?
    NUMERIC = "numeric"  # $1, $2, ...
    FORMAT = "format"  # %s, with literal % doubled


def placeholder(style: ParamStyle, index: int) -> str:
    """Return the native placeholder for a 1-based parameter index."""
    if style is ParamStyle.QMARK:
        return "?"
    if style is ParamStyle.NUMERIC:
        return f"${index}"
    return "%s"


def _skip_to(sql: str, terminator: str, start: int) -> int:
    end = sql.find(terminator, start)
    return len(sql) if end == -1 else end + len(terminator)


def _tokens(sql: str) -> Iterator[Tuple[str, bool]]:
    """Split ``sql`` into ``(chunk, is_placeholder)`` pieces, left to right."""
    i = 0
    start = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if ch in ("'", '"'):
            i = _skip_to(sql, ch, i + 1)
        elif sql.startswith("--", i):
            i = _skip_to(sql, "\n", i + 2)
        elif sql.startswith("/*", i):
            i = _skip_to(sql, "*/", i + 2)
        elif ch == "?" or (ch == "$" and i + 1 < n and sql[i + 1] in _DIGITS):
            if start < i:
                yield sql[start:i], False
            j = i + 1
            if ch == "$":
                while j < n and sql[j] in _DIGITS:
                    j += 1
            yield sql[i:j], True
            i = start = j
        else:
            i += 1
    if start < n:
        yield sql[start:], False


def count_placeholders(template: str) -> int:
    """Count neutral placeholders outside literals and comments."""
    return sum(1 for _, is_placeholder in _tokens(template) if is_placeholder)


def translate(template: str, style: ParamStyle) -> str:
    """Rewrite neutral placeholders in ``template`` into ``style``.

    A template without placeholders is returned unchanged.
    """
    if not count_placeholders(template):
        return template

    parts: List[str] = []
    index = 0
    for chunk, is_placeholder in _tokens(template):
        if is_placeholder:
            index += 1
            parts.append(placeholder(style, index))
        elif style is ParamStyle.FORMAT:
            parts.append(chunk.replace("%", "%%"))
        else:
            parts.append(chunk)
    return "".join(parts)


__all__ = ["ParamStyle", "placeholder", "count_placeholders", "translate"]
