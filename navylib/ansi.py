"""Small C-library style helpers: digits, powers, parsing, random numbers, strings."""

from __future__ import annotations

from typing import Optional, Union

_UINT32 = 0xFFFFFFFF
_UINT64 = 2**64
_RAND_MULTIPLIER = 1103515245
_RAND_INCREMENT = 12345


def _wrap_int64(value: int) -> int:
    return ((value + 2**63) % _UINT64) - 2**63


def _wrap_int32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


def _at(text: str, index: int) -> str:
    """Character at ``index``, or NUL past the end of ``text``."""
    return text[index] if index < len(text) else "\0"


def isdigit(c: Union[str, int]) -> bool:
    """True when ``c`` (a character or a character code) is an ASCII digit."""
    code = ord(c) if isinstance(c, str) else c
    return ord("0") <= code <= ord("9")


def ipow(base: int, power: int) -> int:
    """``base`` raised to ``power`` with 64-bit wraparound; 1 for ``power <= 0``."""
    if power <= 0:
        return 1
    return _wrap_int64(pow(base, power, _UINT64))


def pow10(power: int) -> int:
    """Ten raised to ``power`` with 64-bit wraparound; 1 for ``power <= 0``."""
    return ipow(10, power)


def atoi(text: str) -> int:
    """Parse an optionally negative decimal integer, truncated to 32 bits.

    Every character after an optional leading ``-`` is taken as a digit
    weighted by its position; no validation is done.
    """
    negative = text.startswith("-")
    digits = text[1:] if negative else text
    total = 0

    for index, char in enumerate(digits):
        power = (len(digits) - index - 1) & 0xFFFF
        weight = pow10(power) & _UINT32
        total += ((ord(char) - ord("0")) * weight) & _UINT32

    total = _wrap_int64(total)
    if negative:
        total = _wrap_int64(-total)
    return _wrap_int32(total)


class Random:
    """Linear congruential generator producing values in ``[0, 32768)``."""

    def __init__(self, seed: int = 1) -> None:
        self._state = seed & _UINT32

    def seed(self, seed: int) -> None:
        """Restart the sequence from ``seed``."""
        self._state = seed & _UINT32

    def next(self) -> int:
        """Advance the generator and return the next value."""
        self._state = (self._state * _RAND_MULTIPLIER + _RAND_INCREMENT) & _UINT32
        return (self._state // 65536) % 32768


def strrchr(text: str, char: str) -> Optional[int]:
    """Index of the last occurrence of ``char`` in ``text``, or None."""
    if char == "\0":
        return None
    position = text.rfind(char)
    return position if position >= 0 else None


def strncmp(s1: str, s2: str, n: int) -> int:
    """Compare at most ``n`` characters.

    On a mismatch the sign is decided by the second characters of the two
    strings, not by the mismatching ones.
    """
    for index in range(n):
        a, b = _at(s1, index), _at(s2, index)
        if a != b:
            return -1 if _at(s1, 1) < _at(s2, 1) else 1
        if a == "\0":
            return 0
    return 0


def strcmp(s1: str, s2: str) -> int:
    """Length difference when lengths differ, otherwise :func:`strncmp`."""
    if len(s1) != len(s2):
        return len(s1) - len(s2)
    return strncmp(s1, s2, len(s1))


def strchrcount(text: str, char: str) -> int:
    """Number of occurrences of ``char`` in ``text``."""
    return sum(1 for c in text if c == char)


class Tokenizer:
    """Splits a string into tokens one call at a time.

    At most one delimiter is skipped before a token, so runs of three or
    more delimiters yield empty tokens.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def next(self, delim: str) -> Optional[str]:
        """Return the next token separated by any character of ``delim``, or None."""
        text = self._text
        pos = self._pos

        if pos < len(text) and text[pos] in delim:
            pos += 1

        if pos >= len(text):
            return None

        start = pos
        while pos < len(text):
            if text[pos] in delim:
                self._pos = pos + 1
                return text[start:pos]
            pos += 1

        self._pos = pos
        return text[start:]