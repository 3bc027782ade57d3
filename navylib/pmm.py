"""Physical page allocator backed by a bitmap of used pages."""

from __future__ import annotations

import threading

from navylib.bitmap import Bitmap
from navylib.handover import Handover, MemmapType, Range

STACK_SIZE = 0x4000
PAGE_SIZE = 4096
USER_STACK_BASE = 0xC0000000
MMAP_IO_BASE = 0xFFFF800000000000
MMAP_KERNEL_BASE = 0xFFFFFFFF80000000


class OutOfMemoryError(RuntimeError):
    """No physical memory is available for a request."""


def align_up(addr: int, align: int) -> int:
    """Round ``addr`` up to a multiple of the power of two ``align``."""
    return (addr + align - 1) & ~(align - 1)


def align_down(addr: int, align: int) -> int:
    """Round ``addr`` down to a multiple of the power of two ``align``."""
    return addr & ~(align - 1)


class PhysicalMemoryManager:
    """Tracks physical pages described by a handover memory map.

    The bitmap is carved out of the first usable region large enough to hold
    it; that region in ``handover`` is shrunk accordingly.
    """

    def __init__(self, handover: Handover) -> None:
        if not handover.memmaps:
            raise ValueError("the memory map is empty")

        last = handover.memmaps[-1].range
        self._length = (last.base + last.length) // (PAGE_SIZE * 8)
        self._lock = threading.Lock()
        self._last_index = 0

        reserved = align_up(self._length, PAGE_SIZE)
        for entry in handover.memmaps:
            if entry.type is MemmapType.USABLE and entry.range.length >= self._length:
                self.bitmap_range = Range(entry.range.base, self._length)
                entry.range = Range(entry.range.base + reserved, entry.range.length - reserved)
                break
        else:
            raise OutOfMemoryError("Couldn't find a valid memory space for the PMM Bitmap")

        self._bitmap = Bitmap(self._length + 1)
        self._bitmap.buffer[:] = b"\xff" * len(self._bitmap.buffer)

        for entry in handover.memmaps:
            if entry.type is MemmapType.USABLE:
                self.free(
                    Range(
                        align_down(entry.range.base, PAGE_SIZE),
                        align_up(entry.range.length, PAGE_SIZE),
                    )
                )

        self.set_used(self.bitmap_range)

    def set_used(self, page: Range) -> None:
        """Mark every whole page of ``page`` as used."""
        target = page.base // PAGE_SIZE
        with self._lock:
            for index in range(target, target + page.length // PAGE_SIZE):
                self._bitmap.set_bit(index)

    def free(self, page: Range) -> None:
        """Mark every whole page of ``page`` as free."""
        target = page.base // PAGE_SIZE
        with self._lock:
            for index in range(target, target + page.length // PAGE_SIZE):
                self._bitmap.clear_bit(index)

    def _search(self, size: int) -> Range:
        base = 0
        length = 0
        for index in range(self._last_index, self._length):
            if length >= size:
                break
            if not self._bitmap.is_bit_set(index):
                if length == 0:
                    base = index * PAGE_SIZE
                length += PAGE_SIZE
            else:
                length = 0
        return Range(base, length)

    def alloc(self, size: int) -> Range:
        """Allocate a contiguous run of pages covering at least ``size`` bytes."""
        while True:
            found = self._search(size)
            if found.length >= size:
                self._last_index = (found.base + found.length) // PAGE_SIZE
                self.set_used(found)
                return found
            if self._last_index == 0:
                raise OutOfMemoryError(f"no {size} bytes of contiguous physical memory")
            self._last_index = 0