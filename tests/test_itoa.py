import pytest

from navylib.itoa import itoa


@pytest.mark.parametrize("value", [0, 1, 7, 10, 255, 4096, 123456789, 2**40 + 3])
@pytest.mark.parametrize("base", [2, 8, 10, 16, 36])
def test_round_trip(value, base):
    assert int(itoa(value, base), base) == value


@pytest.mark.parametrize("value", [0, 9, 10, 255, 0xDEADBEEF, 2**63 - 1])
def test_hex_matches_lowercase_format(value):
    assert itoa(value, 16) == format(value, "x")


def test_zero_is_single_digit():
    assert itoa(0, 10) == "0"


def test_default_base_is_decimal():
    assert itoa(1234) == str(1234)


@pytest.mark.parametrize("value", [-1, -42, -1000000])
def test_negative_decimal(value):
    result = itoa(value, 10)
    assert result == "-" + itoa(-value, 10)
    assert int(result) == value


def test_negative_hex_is_two_halves():
    assert itoa(-1, 16) == "f" * 16


def test_negative_hex_split_has_no_padding():
    value = -(2**32)
    assert itoa(value, 16) == itoa(0xFFFFFFFF, 16) + itoa(0, 16)


@pytest.mark.parametrize("base", [0, 1, 37])
def test_invalid_base(base):
    with pytest.raises(ValueError):
        itoa(5, base)