"""Brace-placeholder text formatting used by the kernel log."""

from __future__ import annotations

import math
from typing import Any, Callable, Iterator

from navylib.itoa import itoa

FLOAT_PRECISION = 6

_UNITS = ((1073741824, "GB"), (1048576, "MB"), (1024, "KB"))
_MISSING = object()


class Char(str):
    """A single character, rendered as such by the formatter."""

    def __new__(cls, value: str) -> "Char":
        if len(value) != 1:
            raise ValueError("a Char holds exactly one character")
        return super().__new__(cls, value)


def _to_int64(value: int) -> int:
    return ((value + 2**63) % 2**64) - 2**63


def _format_decimal(value: int, mode: str) -> str:
    number = _to_int64(value)
    base, pad, unit = 10, 0, ""

    if mode == "a":
        base, pad = 16, 16
    elif mode == "x":
        base = 16
    elif mode == "M":
        for divisor, suffix in _UNITS:
            if number // divisor >= 1:
                number //= divisor
                unit = suffix
                break
        else:
            unit = "B"

    return itoa(number, base).rjust(pad, "0") + unit


def _format_float(value: float) -> str:
    if not math.isfinite(value):
        return "<error>"

    sign = "-" if value < 0 else ""
    value = abs(value)
    integer = int(value)
    pieces = [sign, itoa(integer), "."]
    fraction = value - integer

    for _ in range(FLOAT_PRECISION):
        if not fraction:
            break
        fraction *= 10
        digit = int(fraction)
        fraction -= digit
        pieces.append(itoa(digit))

    return "".join(pieces)


def _render_value(value: Any, mode: str) -> str:
    if isinstance(value, str):
        return str(value)
    if isinstance(value, int):
        return _format_decimal(value, mode)
    if isinstance(value, float):
        return _format_float(value)
    return "<error>"


def _pieces(fmt: str, args: tuple) -> Iterator[str]:
    values = iter(args)
    size = len(fmt)
    offset = 0

    while offset < size:
        char = fmt[offset]
        if char != "{":
            yield char
            offset += 1
            continue

        end = fmt.find("}", offset)
        if end == -1:
            mode = ""
            offset = size
        else:
            mode = fmt[offset + 1:end][-1:]
            offset = end

        value = next(values, _MISSING)
        if value is not _MISSING:
            rendered = _render_value(value, mode)
            if rendered:
                yield rendered

        offset += 1


def print_format(callback: Callable[[str], Any], fmt: str, *args: Any) -> None:
    """Format ``fmt`` with ``args`` and hand each piece to ``callback``."""
    for piece in _pieces(fmt, args):
        callback(piece)


def format_string(fmt: str, *args: Any) -> str:
    """Return ``fmt`` with each ``{}`` placeholder replaced by the next argument.

    A placeholder's last character selects the mode for integers: ``a`` for
    zero-padded 16-digit hex, ``x`` for hex, ``M`` for a byte size with unit.
    """
    return "".join(_pieces(fmt, args))