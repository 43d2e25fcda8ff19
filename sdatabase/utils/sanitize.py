"""Text sanitization for values sent to a database backend."""

from __future__ import annotations

import codecs
import logging
import re
from typing import Tuple, Union

logger = logging.getLogger(__name__)

SKIP_ERRORS = "sdatabase-skip"


def _skip_one(exc: UnicodeError) -> Tuple[str, int]:
    """Drop exactly one offending unit and resume right after it."""
    if isinstance(exc, (UnicodeDecodeError, UnicodeEncodeError, UnicodeTranslateError)):
        return "", exc.start + 1
    raise exc


codecs.register_error(SKIP_ERRORS, _skip_one)


def _to_bytes(text: str, encoding: str) -> bytes:
    try:
        # Lone surrogates produced by surrogateescape map back to their raw bytes
        return text.encode(encoding, "surrogateescape")
    except UnicodeEncodeError:
        return text.encode(encoding, SKIP_ERRORS)


def sanitize_text(value: Union[str, bytes, bytearray], encoding: str = "utf-8") -> str:
    """Return ``value`` as text that is valid in ``encoding``.

    Invalid input is repaired by skipping one byte at a time, so the minimum
    number of bytes is dropped. Valid text comes back unchanged. If the value
    cannot be transcoded at all, an empty string is returned.

    Args:
        value: Text or raw bytes to sanitize
        encoding: Python codec name of the backend's expected encoding

    Returns:
        Sanitized text
    """
    try:
        raw = bytes(value) if isinstance(value, (bytes, bytearray)) else _to_bytes(value, encoding)
        return raw.decode(encoding, SKIP_ERRORS)
    except (UnicodeError, LookupError) as e:
        logger.warning(f"Failed to sanitize text for {encoding}: {e}")
        return ""


def sanitize_connection_string(conn_str: str) -> str:
    """Remove password from connection string for logging."""
    # Match patterns like :password@ and replace password
    return re.sub(r":([^:@/]+)@", r":***@", conn_str)


__all__ = [
    "SKIP_ERRORS",
    "sanitize_text",
    "sanitize_connection_string",
]
