"""Parser for the lisp-like configuration language.

A document is a quote followed by a list of ``(key value)`` pairs, for
example ``'((name "navy") (version 1))``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from navylib.lexer import lex

_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class LisonType(Enum):
    LIST = 0
    SYMBOL = 1
    TRUE = 2
    NIL = 3
    NUMBER = 4
    FLOAT = 5
    CHAR = 6
    STR = 7
    ERROR = 8
    QUOTE = 9


class LisonError(ValueError):
    """A document could not be parsed; ``line`` is where the problem was found."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"{message} at line {line}")
        self.message = message
        self.line = line


@dataclass
class Lison:
    """A parsed value: a list of values, a symbol, a string, a number and so on."""

    type: LisonType
    value: Any = None

    def get(self, key: str) -> "Lison":
        """The value paired with the symbol ``key`` in this list, or nil.

        Lookup stops with nil at the first item that is not a pair starting
        with a symbol.
        """
        if self.type is not LisonType.LIST:
            return _nil()
        for item in self.value:
            if item.type is LisonType.QUOTE:
                continue
            if item.type is not LisonType.LIST:
                return _nil()
            if not item.value or item.value[0].type is not LisonType.SYMBOL:
                return _nil()
            if item.value[0].value == key:
                return item.value[1] if len(item.value) > 1 else _nil()
        return _nil()


def _nil() -> Lison:
    return Lison(LisonType.NIL)


def _at(text: str, index: int) -> str:
    return text[index] if 0 <= index < len(text) else "\0"


def is_number(token: str) -> bool:
    """True for an optionally negative run of decimal digits."""
    if not token or token == "-":
        return False
    digits = token[1:] if token[0] == "-" else token
    return all("0" <= c <= "9" for c in digits)


def is_float(token: str) -> bool:
    """True when the token holds a digit and exactly one dot."""
    if not token:
        return False
    has_digit = False
    found_dot = False
    valid = True
    for char in token[1:] if token[0] == "-" else token:
        if found_dot and char == ".":
            valid = False
        if "0" <= char <= "9":
            has_digit = True
        if char == ".":
            found_dot = True
    return found_dot and has_digit and valid


def is_str(token: str) -> bool:
    """True for a double-quoted token with no unescaped quote inside it."""
    if _at(token, 0) != '"':
        return False
    index = 1
    while index < len(token):
        if token[index] == "\\":
            index += 1
        if _at(token, index) == '"' and _at(token, index + 1) != "\0":
            return False
        index += 1
    return _at(token, index - 1) == '"'


def _strtod(token: str) -> float:
    match = _FLOAT_PREFIX.match(token)
    return float(match.group(0)) if match else 0.0


class _Parser:
    def __init__(self, text: str) -> None:
        self.line_count = text.count("\n") + 1
        self.tokens: List[str] = lex(text)
        self.offset = 0

    def eof(self) -> bool:
        return self.offset >= len(self.tokens)

    def current(self) -> Optional[str]:
        return None if self.eof() else self.tokens[self.offset]

    def advance(self) -> Optional[str]:
        token = self.current()
        self.offset += 1
        return token

    def line(self) -> int:
        return self.tokens[: self.offset].count("\n") + 1

    def error(self, message: str) -> LisonError:
        return LisonError(message, self.line())

    def read_form(self) -> Lison:
        token = self.current()
        if token == "(":
            return self.read_list()
        if token == ")":
            raise self.error("Unexpected EOF")
        if token == "'":
            self.advance()
            return Lison(LisonType.QUOTE)
        if token == "\n":
            self.advance()
            return self.read_form()
        return self.read_atom()

    def read_list(self) -> Lison:
        items: List[Lison] = []
        quoted = False
        self.advance()

        while self.current() != ")":
            if self.current() == "\n":
                self.advance()
                continue
            if self.eof():
                raise self.error("Unexpected EOF")
            item = self.read_form()
            if item.type is LisonType.QUOTE:
                quoted = True
            else:
                items.append(item)

        if len(items) != 2 and not quoted and self.line() != self.line_count:
            raise self.error("A pair was expected")

        self.advance()
        return Lison(LisonType.LIST, items)

    def read_atom(self) -> Lison:
        if self.eof():
            raise self.error("Unexpected EOF")
        token = self.advance()

        if is_number(token):
            return Lison(LisonType.NUMBER, int(token))
        if is_float(token):
            return Lison(LisonType.FLOAT, _strtod(token))
        if token.startswith('"'):
            if is_str(token):
                return Lison(LisonType.STR, token[1:-1])
            return _nil()
        if token == "nil":
            return _nil()
        if token == "#t":
            return Lison(LisonType.TRUE)
        return Lison(LisonType.SYMBOL, token)


def parse(text: str) -> Lison:
    """Parse a whole document and return its top-level list.

    Raises :class:`LisonError` when the document is malformed.
    """
    parser = _Parser(text)

    try:
        quote: Optional[Lison] = parser.read_form()
    except LisonError:
        quote = None

    if quote is not None and quote.type is not LisonType.QUOTE:
        raise parser.error("Invalid LISON code: No quote found")

    root = parser.read_form()
    if root.type is not LisonType.LIST:
        raise parser.error("Invalid LISON code: No list found")
    return root