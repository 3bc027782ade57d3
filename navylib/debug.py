"""Logging and panicking with source location prefixes."""

from __future__ import annotations

import inspect
import os
import sys
from types import FrameType
from typing import Any, Callable, Optional

from navylib.fmt import format_string, print_format

_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"


class PanicError(RuntimeError):
    """Raised by :meth:`Logger.panic` after the message has been written."""

    def __init__(self, message: str, filename: str = "", line: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.filename = filename
        self.line = line


class Logger:
    """Writes formatted messages, each prefixed with the caller's file and line."""

    def __init__(self, out: Optional[Callable[[str], Any]] = None) -> None:
        self._out = out if out is not None else sys.stdout.write

    def _emit(self, colour: str, caller: Optional[FrameType], fmt: str, args: tuple) -> tuple:
        if caller is None:
            filename, line = "?", 0
        else:
            filename = os.path.basename(caller.f_code.co_filename)
            line = caller.f_lineno
        print_format(self._out, colour + "{}:{}" + _RESET + " ", filename, line)
        print_format(self._out, fmt, *args)
        self._out("\n")
        return filename, line

    def log(self, fmt: str, *args: Any) -> None:
        """Write one formatted line."""
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        self._emit(_YELLOW, caller, fmt, args)

    def panic(self, fmt: str, *args: Any) -> None:
        """Write one formatted line and raise :class:`PanicError`."""
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        filename, line = self._emit(_RED, caller, fmt, args)
        raise PanicError(format_string(fmt, *args), filename, line)