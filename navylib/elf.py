"""Reading 64-bit ELF images and laying out their loadable segments."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import List

from navylib.pmm import PAGE_SIZE, align_up

EI_NIDENT = 16
ELF_MAGIC = b"\x7fELF"

_EHDR = struct.Struct("<16sHHIQQQIHHHHHH")
_PHDR = struct.Struct("<IIQQQQQQ")


class ElfFormatError(ValueError):
    """The data is not a well-formed 64-bit ELF image."""


class SegmentType(IntEnum):
    NULL = 0
    LOAD = 1
    DYNAMIC = 2
    INTERP = 3
    NOTE = 4
    SHLIB = 5
    PHDR = 6
    TLS = 7
    LOOS = 0x60000000
    HIOS = 0x6FFFFFFF
    LOPROC = 0x70000000
    HIPROC = 0x7FFFFFFF


@dataclass(frozen=True)
class ElfHeader:
    """The file header at the start of an ELF image."""

    ident: bytes
    type: int
    machine: int
    version: int
    entry: int
    phoff: int
    shoff: int
    flags: int
    ehsize: int
    phentsize: int
    phnum: int
    shentsize: int
    shnum: int
    shstrndx: int


@dataclass(frozen=True)
class ProgramHeader:
    """One entry of the program header table."""

    type: int
    flags: int
    offset: int
    vaddr: int
    paddr: int
    filesz: int
    memsz: int
    align: int

    @property
    def is_load(self) -> bool:
        return self.type == SegmentType.LOAD


@dataclass(frozen=True)
class LoadedSegment:
    """A loadable segment: where it goes, how many bytes of pages it takes, and its contents."""

    vaddr: int
    length: int
    data: bytes


def parse_header(data: bytes) -> ElfHeader:
    """Decode the ELF file header, checking the magic number."""
    if bytes(data[:4]) != ELF_MAGIC:
        raise ElfFormatError("not an ELF image")
    if len(data) < _EHDR.size:
        raise ElfFormatError("truncated ELF header")
    return ElfHeader(*_EHDR.unpack_from(data))


def program_headers(data: bytes, header: ElfHeader) -> List[ProgramHeader]:
    """Decode every entry of the program header table described by ``header``."""
    if header.phnum and header.phentsize < _PHDR.size:
        raise ElfFormatError(f"program header entries of {header.phentsize} bytes are too small")

    headers = []
    for index in range(header.phnum):
        offset = header.phoff + index * header.phentsize
        if offset + _PHDR.size > len(data):
            raise ElfFormatError(f"program header {index} lies outside the image")
        headers.append(ProgramHeader(*_PHDR.unpack_from(data, offset)))
    return headers


def load_segments(data: bytes) -> List[LoadedSegment]:
    """Lay out every loadable segment of the image.

    Each segment's contents are its file bytes followed by zeros up to its
    memory size; its length is the memory size rounded up to whole pages.
    """
    data = bytes(data)
    header = parse_header(data)
    segments = []

    for ph in program_headers(data, header):
        if not ph.is_load:
            continue
        if ph.filesz > ph.memsz:
            raise ElfFormatError("segment file size exceeds its memory size")
        chunk = data[ph.offset:ph.offset + ph.filesz]
        if len(chunk) < ph.filesz:
            raise ElfFormatError("segment contents lie outside the image")
        contents = chunk + bytes(ph.memsz - ph.filesz)
        segments.append(LoadedSegment(ph.vaddr, align_up(ph.memsz, PAGE_SIZE), contents))

    return segments