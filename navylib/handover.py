"""Boot information handed to the kernel: memory map and loaded modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, List, Optional, Tuple

from navylib.fmt import format_string

LIMIT_MEMORY_MAP_SIZE = 64
LIMIT_MODULE_SIZE = 64

STIVALE2_MMAP_USABLE = 1
STIVALE2_MMAP_RESERVED = 2
STIVALE2_MMAP_ACPI_RECLAIMABLE = 3
STIVALE2_MMAP_ACPI_NVS = 4
STIVALE2_MMAP_BAD_MEMORY = 5
STIVALE2_MMAP_BOOTLOADER_RECLAIMABLE = 0x1000
STIVALE2_MMAP_KERNEL_AND_MODULES = 0x1001
STIVALE2_MMAP_FRAMEBUFFER = 0x1002


@dataclass(frozen=True)
class Range:
    """A span of addresses starting at ``base``."""

    base: int
    length: int


class MemmapType(IntEnum):
    USABLE = 0
    RESERVED = 1
    ACPI_RECLAIMABLE = 2
    ACPI_NVS = 3
    BAD_MEMORY = 4
    BOOTLOADER_RECLAIMABLE = 5
    KERNEL_AND_MODULES = 6
    FRAMEBUFFER = 7

    @property
    def label(self) -> str:
        return f"MEMMAP_{self.name}"


@dataclass
class Memmap:
    range: Range
    type: MemmapType


@dataclass
class Module:
    name: str
    addr: Range


@dataclass
class Handover:
    memmaps: List[Memmap] = field(default_factory=list)
    modules: List[Module] = field(default_factory=list)

    def find_module(self, name: str) -> Optional[Module]:
        """The first module called ``name``, or None."""
        return next((m for m in self.modules if m.name == name), None)

    def memmap_lines(self) -> List[str]:
        """One line per memory map entry: base, length and type."""
        return [
            format_string("{a} - {a} ({})", m.range.base, m.range.length, m.type.label)
            for m in self.memmaps
        ]


_STIVALE_TYPES = {
    STIVALE2_MMAP_BOOTLOADER_RECLAIMABLE: MemmapType.BOOTLOADER_RECLAIMABLE,
    STIVALE2_MMAP_KERNEL_AND_MODULES: MemmapType.KERNEL_AND_MODULES,
    STIVALE2_MMAP_FRAMEBUFFER: MemmapType.FRAMEBUFFER,
    STIVALE2_MMAP_USABLE: MemmapType.USABLE,
}


def memmap_type_from_stivale(kind: int) -> MemmapType:
    """Map a bootloader memory type; anything unrecognised is reserved."""
    return _STIVALE_TYPES.get(kind, MemmapType.RESERVED)


def parse_stivale_memmap(entries: Iterable[Tuple[int, int, int]]) -> List[Memmap]:
    """Build memory map entries from ``(base, length, type)`` triples."""
    entries = list(entries)
    if len(entries) > LIMIT_MEMORY_MAP_SIZE:
        raise ValueError(f"memory map has more than {LIMIT_MEMORY_MAP_SIZE} entries")
    return [
        Memmap(Range(base, length), memmap_type_from_stivale(kind))
        for base, length, kind in entries
    ]


def parse_stivale_modules(modules: Iterable[Tuple[int, int, str]]) -> List[Module]:
    """Build modules from ``(begin, end, name)`` triples."""
    modules = list(modules)
    if len(modules) > LIMIT_MODULE_SIZE:
        raise ValueError(f"more than {LIMIT_MODULE_SIZE} modules")
    return [Module(name, Range(begin, end - begin)) for begin, end, name in modules]