"""Command-line entry points: dump loader entries of a config file, run a compiled module."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from navylib.debug import Logger
from navylib.lexer import lex  # noqa: F401  (kept for symmetry with the parser's tokenizer)
from navylib.marshal_reader import MarshalError, read_pyc
from navylib.parser import LisonError, LisonType, parse
from navylib.pyvm import VirtualMachine, VmError

DEFAULT_LISON_PATH = "./pkg/lison-test/test.lisp"
DEFAULT_PYC_PATH = "./pkg/marshal-test/test.pyc"


def _read(path: str, mode: str):
    try:
        with open(Path(path), mode) as handle:
            return handle.read()
    except OSError as exc:
        print(f"cannot read {path}: {exc.strerror}", file=sys.stderr)
        return None


def lison_main(argv: Optional[List[str]] = None) -> int:
    """Print ``name @ kernel`` for every entry of a loader configuration file."""
    parser = argparse.ArgumentParser(description="List the loader entries of a configuration file.")
    parser.add_argument("path", nargs="?", default=DEFAULT_LISON_PATH)
    args = parser.parse_args(argv)

    text = _read(args.path, "r")
    if text is None:
        return 1

    logger = Logger()
    try:
        master = parse(text)
    except LisonError as exc:
        logger.log("{} at line {}", exc.message, exc.line)
        return 1

    entries = master.get("entries")
    if entries.type is LisonType.LIST:
        for entry in entries.value:
            name = entry.get("name")
            kernel = entry.get("kernel")
            logger.log("{} @ {}", name.value, kernel.value)
    return 0


def marshal_main(argv: Optional[List[str]] = None) -> int:
    """Run the module code of a compiled-module file."""
    parser = argparse.ArgumentParser(description="Run a compiled module.")
    parser.add_argument("path", nargs="?", default=DEFAULT_PYC_PATH)
    args = parser.parse_args(argv)

    data = _read(args.path, "rb")
    if data is None:
        return 1

    try:
        code = read_pyc(data)
        VirtualMachine().run(code)
    except (MarshalError, VmError) as exc:
        print(f"{args.path}: {exc}", file=sys.stderr)
        return 1
    return 0