"""Tokenizer for the lisp-like configuration language."""

from __future__ import annotations

from typing import List

_SEPARATORS = "\r\f\v"
_BLANKS = "\t "
_PUNCTUATION = "'()"


def lex(text: str) -> List[str]:
    """Split ``text`` into tokens.

    Newlines become ``"\\n"`` tokens, quotes and parentheses are tokens of
    their own outside strings, blanks separate tokens outside strings, and
    ``;`` starts a comment running to the end of the line. ``#`` followed by
    ``t`` yields a ``"#t"`` token while the ``t`` is lexed as usual; any
    other ``#`` is a token by itself.
    """
    tokens: List[str] = []
    builder: List[str] = []
    in_string = False
    in_comment = False

    def flush() -> None:
        if builder:
            tokens.append("".join(builder))
            builder.clear()

    for index, char in enumerate(text):
        if in_comment:
            if char == "\n":
                tokens.append("\n")
                in_comment = False
            continue

        if char == "\n":
            flush()
            tokens.append("\n")
        elif char in _SEPARATORS:
            flush()
        elif char in _BLANKS:
            if in_string:
                builder.append(char)
            else:
                flush()
        elif char == "#":
            flush()
            if text[index + 1:index + 2] == "t":
                tokens.append("#t")
            else:
                tokens.append("#")
        elif char in _PUNCTUATION:
            if in_string:
                builder.append(char)
            else:
                flush()
                tokens.append(char)
        elif char == '"':
            builder.append(char)
            in_string = not in_string
        elif char == ";":
            flush()
            in_comment = True
        else:
            builder.append(char)

    flush()
    return tokens