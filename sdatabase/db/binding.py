"""Typed parameter binding.

Arguments are a closed set of variants: ``Integer``, ``Float`` and ``Text``.
Each variant knows how to produce the value handed to the driver, so the
binder never needs to switch on Python types after coercion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Tuple, Union

from ..utils.sanitize import sanitize_text

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Integer:
    """Signed 64-bit integer argument."""

    value: int

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise OverflowError(f"Integer argument out of 64-bit range: {self.value}")

    def bind(self, encoding: str) -> int:
        return int(self.value)


@dataclass(frozen=True)
class Float:
    """Double-precision float argument."""

    value: float

    def bind(self, encoding: str) -> float:
        return float(self.value)


@dataclass(frozen=True)
class Text:
    """Text argument; sanitized for the backend encoding when bound."""

    value: Union[str, bytes]

    def bind(self, encoding: str) -> str:
        return sanitize_text(self.value, encoding)


Argument = Union[Integer, Float, Text]


def to_argument(value: Any) -> Argument:
    """Coerce a Python value into a bound argument variant.

    Raises:
        TypeError: If the value has no matching variant
        OverflowError: If an integer does not fit in 64 bits
    """
    if isinstance(value, (Integer, Float, Text)):
        return value
    # bool is an int subclass; SQL engines store it as 0/1
    if isinstance(value, int):
        return Integer(int(value))
    if isinstance(value, float):
        return Float(value)
    if isinstance(value, (str, bytes, bytearray)):
        return Text(bytes(value) if isinstance(value, bytearray) else value)
    raise TypeError(f"Unsupported argument type: {type(value).__name__}")


def bind_arguments(arguments: Iterable[Any], encoding: str = "utf-8") -> Tuple[Any, ...]:
    """Convert arguments into driver-native parameters, preserving order.

    Args:
        arguments: Values in placeholder occurrence order
        encoding: Backend text encoding used for sanitizing ``Text`` values

    Returns:
        Tuple of native parameters

    Raises:
        ValueError: If no arguments are given
    """
    bound = tuple(to_argument(value).bind(encoding) for value in arguments)
    if not bound:
        raise ValueError("bind_arguments() requires at least one argument")
    return bound


__all__ = [
    "Argument",
    "Integer",
    "Float",
    "Text",
    "to_argument",
    "bind_arguments",
]
