import pytest

from navylib.handover import (
    LIMIT_MEMORY_MAP_SIZE,
    LIMIT_MODULE_SIZE,
    STIVALE2_MMAP_ACPI_NVS,
    STIVALE2_MMAP_BOOTLOADER_RECLAIMABLE,
    STIVALE2_MMAP_FRAMEBUFFER,
    STIVALE2_MMAP_KERNEL_AND_MODULES,
    STIVALE2_MMAP_USABLE,
    Handover,
    Memmap,
    MemmapType,
    Module,
    Range,
    memmap_type_from_stivale,
    parse_stivale_memmap,
    parse_stivale_modules,
)


@pytest.mark.parametrize(
    "kind,expected",
    [
        (STIVALE2_MMAP_USABLE, MemmapType.USABLE),
        (STIVALE2_MMAP_BOOTLOADER_RECLAIMABLE, MemmapType.BOOTLOADER_RECLAIMABLE),
        (STIVALE2_MMAP_KERNEL_AND_MODULES, MemmapType.KERNEL_AND_MODULES),
        (STIVALE2_MMAP_FRAMEBUFFER, MemmapType.FRAMEBUFFER),
        (STIVALE2_MMAP_ACPI_NVS, MemmapType.RESERVED),
        (12345, MemmapType.RESERVED),
    ],
)
def test_memmap_type_from_stivale(kind, expected):
    assert memmap_type_from_stivale(kind) is expected


def test_parse_memmap():
    entries = parse_stivale_memmap([(0x1000, 0x2000, STIVALE2_MMAP_USABLE), (0, 0x1000, 2)])
    assert entries == [
        Memmap(Range(0x1000, 0x2000), MemmapType.USABLE),
        Memmap(Range(0, 0x1000), MemmapType.RESERVED),
    ]


def test_parse_memmap_limit():
    entries = [(0, 1, STIVALE2_MMAP_USABLE)] * (LIMIT_MEMORY_MAP_SIZE + 1)
    with pytest.raises(ValueError):
        parse_stivale_memmap(entries)
    assert len(parse_stivale_memmap(entries[:-1])) == LIMIT_MEMORY_MAP_SIZE


def test_parse_modules_computes_length():
    modules = parse_stivale_modules([(0x5000, 0x7000, "test")])
    assert modules == [Module("test", Range(0x5000, 0x7000 - 0x5000))]


def test_parse_modules_limit():
    with pytest.raises(ValueError):
        parse_stivale_modules([(0, 1, "m")] * (LIMIT_MODULE_SIZE + 1))


def test_find_module():
    first = Module("test", Range(0x1000, 0x10))
    second = Module("test", Range(0x2000, 0x10))
    handover = Handover(modules=[Module("init", Range(0, 1)), first, second])
    assert handover.find_module("test") is first
    assert handover.find_module("missing") is None


def test_memmap_lines():
    handover = Handover(memmaps=[Memmap(Range(0x1000, 0x2000), MemmapType.USABLE)])
    assert handover.memmap_lines() == [
        "0000000000001000 - 0000000000002000 (MEMMAP_USABLE)"
    ]


def test_memmap_lines_one_per_entry():
    handover = Handover(
        memmaps=parse_stivale_memmap([(0, 1, 1), (1, 2, 2), (3, 4, 0x1002)])
    )
    lines = handover.memmap_lines()
    assert len(lines) == 3
    assert lines[2].endswith("(MEMMAP_FRAMEBUFFER)")