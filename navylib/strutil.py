"""Substring and character searches over strings.

Substring searches examine start positions ``0`` to
``len(haystack) - len(needle) - 1``; a haystack shorter than the needle
gives ``0``.
"""


def _starts(haystack: str, needle: str) -> range:
    return range(len(haystack) - len(needle))


def count(haystack: str, needle: str) -> int:
    """Count (possibly overlapping) occurrences of ``needle``."""
    if len(haystack) < len(needle):
        return 0
    width = len(needle)
    return sum(1 for i in _starts(haystack, needle) if haystack[i:i + width] == needle)


def count_chr(text: str, char: str) -> int:
    """Count occurrences of the character ``char``."""
    return sum(1 for c in text if c == char)


def last(haystack: str, needle: str) -> int:
    """Position of the last occurrence of ``needle``, or -1."""
    if len(haystack) < len(needle):
        return 0
    width = len(needle)
    position = -1
    for i in _starts(haystack, needle):
        if haystack[i:i + width] == needle:
            position = i
    return position


def last_chr(text: str, char: str) -> int:
    """Position of the last occurrence of ``char``, or -1."""
    position = -1
    for i, c in enumerate(text):
        if c == char:
            position = i
    return position


def first(haystack: str, needle: str) -> int:
    """Position of the first occurrence of ``needle``, or -1."""
    if len(haystack) < len(needle):
        return 0
    width = len(needle)
    return next(
        (i for i in _starts(haystack, needle) if haystack[i:i + width] == needle),
        -1,
    )


def first_chr(text: str, char: str) -> int:
    """Position of the first occurrence of ``char``, or -1."""
    return next((i for i, c in enumerate(text) if c == char), -1)