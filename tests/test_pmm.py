import pytest

from navylib.handover import Handover, Memmap, MemmapType, Range
from navylib.pmm import (
    PAGE_SIZE,
    OutOfMemoryError,
    PhysicalMemoryManager,
    align_down,
    align_up,
)

USABLE_BASE = PAGE_SIZE
MEMORY_END = 0x400000


def _handover():
    return Handover(
        memmaps=[
            Memmap(Range(0, PAGE_SIZE), MemmapType.RESERVED),
            Memmap(Range(USABLE_BASE, MEMORY_END - USABLE_BASE), MemmapType.USABLE),
        ]
    )


def _overlaps(a, b):
    return a.base < b.base + b.length and b.base < a.base + a.length


def test_align_helpers():
    assert align_up(PAGE_SIZE, PAGE_SIZE) == PAGE_SIZE
    assert align_up(1, PAGE_SIZE) == PAGE_SIZE
    assert align_down(PAGE_SIZE + 1, PAGE_SIZE) == PAGE_SIZE
    assert align_down(PAGE_SIZE - 1, PAGE_SIZE) == 0


def test_bitmap_carved_from_first_usable_region():
    handover = _handover()
    pmm = PhysicalMemoryManager(handover)
    assert pmm.bitmap_range.base == USABLE_BASE
    assert handover.memmaps[1].range.base == USABLE_BASE + PAGE_SIZE
    assert handover.memmaps[1].range.length == MEMORY_END - USABLE_BASE - PAGE_SIZE


def test_first_allocation_follows_bitmap():
    pmm = PhysicalMemoryManager(_handover())
    page = pmm.alloc(PAGE_SIZE)
    assert page == Range(0x2000, PAGE_SIZE)


def test_allocations_are_aligned_and_disjoint():
    pmm = PhysicalMemoryManager(_handover())
    pages = [pmm.alloc(PAGE_SIZE * n) for n in (1, 3, 2)]
    for page, pages_wanted in zip(pages, (1, 3, 2)):
        assert page.base % PAGE_SIZE == 0
        assert page.length >= PAGE_SIZE * pages_wanted
        assert not _overlaps(page, pmm.bitmap_range)
        assert page.base >= PAGE_SIZE
    for i, a in enumerate(pages):
        for b in pages[i + 1:]:
            assert not _overlaps(a, b)


def test_exhaustion_and_free():
    pmm = PhysicalMemoryManager(_handover())
    with pytest.raises(OutOfMemoryError):
        pmm.alloc(MEMORY_END)

    blocks = []
    while True:
        try:
            blocks.append(pmm.alloc(PAGE_SIZE))
        except OutOfMemoryError:
            break
    assert len(blocks) > 0
    assert len({b.base for b in blocks}) == len(blocks)

    pmm.free(blocks[0])
    assert pmm.alloc(PAGE_SIZE) == blocks[0]


def test_set_used_blocks_allocation():
    pmm = PhysicalMemoryManager(_handover())
    first = pmm.alloc(PAGE_SIZE)
    pmm.free(first)
    pmm.set_used(first)
    again = pmm.alloc(PAGE_SIZE)
    assert again != first
    assert not _overlaps(again, first)


def test_no_usable_region_raises():
    handover = Handover(memmaps=[Memmap(Range(0, MEMORY_END), MemmapType.RESERVED)])
    with pytest.raises(OutOfMemoryError):
        PhysicalMemoryManager(handover)


def test_empty_memory_map_rejected():
    with pytest.raises(ValueError):
        PhysicalMemoryManager(Handover())