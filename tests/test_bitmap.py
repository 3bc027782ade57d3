import pytest

from navylib.bitmap import Bitmap


def test_new_bitmap_is_clear():
    bitmap = Bitmap(4)
    assert bitmap.length == 4
    assert not any(bitmap.is_bit_set(i) for i in range(32))


def test_set_and_clear_round_trip():
    bitmap = Bitmap(2)
    bitmap.set_bit(9)
    assert bitmap.is_bit_set(9)
    assert not bitmap.is_bit_set(8)
    bitmap.clear_bit(9)
    assert not bitmap.is_bit_set(9)
    assert bitmap.buffer == bytearray(2)


def test_bit_order_within_byte():
    bitmap = Bitmap(1)
    bitmap.set_bit(0)
    assert bitmap.buffer[0] == 1
    bitmap.set_bit(7)
    assert bitmap.buffer[0] == 0x81


def test_clear_leaves_other_bits():
    bitmap = Bitmap(1)
    for i in range(8):
        bitmap.set_bit(i)
    bitmap.clear_bit(3)
    assert [bitmap.is_bit_set(i) for i in range(8)] == [i != 3 for i in range(8)]


def test_out_of_range_index_raises():
    bitmap = Bitmap(1)
    with pytest.raises(IndexError):
        bitmap.set_bit(8)


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        Bitmap(-1)