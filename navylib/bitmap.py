"""A fixed-size bit array stored least significant bit first in each byte."""

from __future__ import annotations


class Bitmap:
    """Bit array of ``length`` bytes, all bits clear at creation."""

    def __init__(self, length: int) -> None:
        if length < 0:
            raise ValueError("bitmap length must not be negative")
        self.buffer = bytearray(length)

    @property
    def length(self) -> int:
        """Size of the bitmap in bytes."""
        return len(self.buffer)

    def set_bit(self, index: int) -> None:
        """Set the bit at ``index``."""
        byte, bit = divmod(index, 8)
        self.buffer[byte] |= 1 << bit

    def clear_bit(self, index: int) -> None:
        """Clear the bit at ``index``."""
        byte, bit = divmod(index, 8)
        self.buffer[byte] &= ~(1 << bit) & 0xFF

    def is_bit_set(self, index: int) -> bool:
        """True when the bit at ``index`` is set."""
        byte, bit = divmod(index, 8)
        return bool(self.buffer[byte] & (1 << bit))