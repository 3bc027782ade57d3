"""Decoding a subset of the Python marshal format and compiled-module files."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

FLAG_REF = 0x80
PYC_MAGIC = b"o\r\r\n"
PYC_HEADER_SIZE = 16

_INT32 = struct.Struct("<i")


class MarshalError(ValueError):
    """The data cannot be decoded."""


class MarshalType(IntEnum):
    NULL = ord("0")
    NONE = ord("N")
    FALSE = ord("F")
    TRUE = ord("T")
    STOPITER = ord("S")
    ELLIPSIS = ord(".")
    INT = ord("i")
    INT64 = ord("I")
    FLOAT = ord("f")
    BINARY_FLOAT = ord("g")
    COMPLEX = ord("x")
    BINARY_COMPLEX = ord("y")
    LONG = ord("l")
    STRING = ord("s")
    INTERNED = ord("t")
    REF = ord("r")
    TUPLE = ord("(")
    LIST = ord("[")
    DICT = ord("{")
    CODE = ord("c")
    UNICODE = ord("u")
    UNKNOWN = ord("?")
    SET = ord("<")
    FROZENSET = ord(">")
    ASCII = ord("a")
    ASCII_INTERNED = ord("A")
    SMALL_TUPLE = ord(")")
    SHORT_ASCII = ord("z")
    SHORT_ASCII_INTERNED = ord("Z")
    BUILTIN = ord("%")


@dataclass
class MarshalObject:
    """A decoded value together with its marshal type."""

    type: MarshalType
    value: Any = None


@dataclass
class MarshalCode:
    """The fields of a marshalled code object."""

    argcount: int
    posonlyargcount: int
    kwonlyargcount: int
    stacksize: int
    flags: int
    code: MarshalObject
    consts: MarshalObject
    names: MarshalObject
    localsplusnames: MarshalObject
    localspluskinds: MarshalObject
    filename: MarshalObject
    name: MarshalObject
    qualname: MarshalObject
    firstlineno: int
    linetable: MarshalObject


_EMPTY_TYPES = {MarshalType.NONE, MarshalType.NULL, MarshalType.FALSE, MarshalType.TRUE}
_SHORT_STRINGS = {MarshalType.SHORT_ASCII, MarshalType.SHORT_ASCII_INTERNED}


def unpack_double(data: bytes, little_endian: bool = True) -> float:
    """Decode an 8-byte IEEE 754 double."""
    if len(data) != 8:
        raise MarshalError(f"a double takes 8 bytes, not {len(data)}")
    return struct.unpack("<d" if little_endian else ">d", bytes(data))[0]


class MarshalReader:
    """Reads marshalled objects one after another from ``data``."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self.offset = 0

    @property
    def eof(self) -> bool:
        return self.offset >= len(self._data)

    def _take(self, count: int) -> bytes:
        if self.offset + count > len(self._data):
            raise MarshalError(f"need {count} bytes at offset {self.offset}")
        chunk = self._data[self.offset:self.offset + count]
        self.offset += count
        return chunk

    def _byte(self) -> int:
        return self._take(1)[0]

    def _long(self) -> int:
        return _INT32.unpack(self._take(4))[0]

    def _skip(self, count: int) -> None:
        self.offset += count

    def _read_code(self) -> MarshalCode:
        self._skip(4)
        argcount = self._long()
        posonlyargcount = self._long()
        kwonlyargcount = self._long()
        stacksize = self._long()
        flags = self._long()
        code = self.read_object()
        consts = self.read_object()
        names = self.read_object()
        localsplusnames = self.read_object()
        localspluskinds = self.read_object()
        filename = self.read_object()
        name = self.read_object()
        qualname = self.read_object()
        firstlineno = self._long()
        linetable = self.read_object()
        return MarshalCode(
            argcount, posonlyargcount, kwonlyargcount, stacksize, flags,
            code, consts, names, localsplusnames, localspluskinds,
            filename, name, qualname, firstlineno, linetable,
        )

    def read_object(self) -> MarshalObject:
        """Decode the next object.

        Raises :class:`MarshalError` at the end of the data, when the type
        byte is the last byte, or for an unsupported type.
        """
        if self.eof:
            raise MarshalError("no object left to read")
        code = self._byte()
        type_code = code & ~FLAG_REF & 0xFF
        if self.eof:
            raise MarshalError("object type at the end of the data")

        try:
            kind = MarshalType(type_code)
        except ValueError:
            raise MarshalError(f"Unknown opcode {type_code} ({chr(type_code)})") from None

        if kind in _EMPTY_TYPES:
            return MarshalObject(kind)
        if kind is MarshalType.BINARY_FLOAT:
            return MarshalObject(kind, unpack_double(self._take(8), True))
        if kind is MarshalType.INT:
            return MarshalObject(kind, self._long())
        if kind is MarshalType.CODE:
            return MarshalObject(kind, self._read_code())
        if kind is MarshalType.STRING:
            size = self._long()
            if size < 0:
                raise MarshalError(f"negative string length {size}")
            return MarshalObject(kind, self._take(size))
        if kind in _SHORT_STRINGS:
            return MarshalObject(kind, self._take(self._byte()))
        if kind is MarshalType.SMALL_TUPLE:
            size = self._byte()
            return MarshalObject(kind, [self.read_object() for _ in range(size)])
        if kind is MarshalType.REF:
            self._byte()
            self._skip(3)
            return MarshalObject(kind)

        raise MarshalError(f"Unknown opcode {type_code} ({chr(type_code)})")


def read_pyc(data: bytes) -> MarshalCode:
    """Decode the module code object of a compiled-module file."""
    data = bytes(data)
    if len(data) < PYC_HEADER_SIZE or data[:4] != PYC_MAGIC:
        raise MarshalError("not a compiled module with the expected magic number")
    obj = MarshalReader(data[PYC_HEADER_SIZE:]).read_object()
    if obj.type is not MarshalType.CODE:
        raise MarshalError("the module does not hold a code object")
    return obj.value