"""Integer to text conversion in an arbitrary base."""

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_LOW_MASK = 0xFFFFFFFF
_HIGH_MASK = 0xFFFFFFFF00000000


def itoa(value: int, base: int = 10) -> str:
    """Render ``value`` in ``base`` using lowercase digits.

    Negative values in a base other than ten are written as the digits of
    their upper 32 bits followed by the digits of their lower 32 bits.
    """
    if not 2 <= base <= len(_DIGITS):
        raise ValueError(f"unsupported base: {base}")

    if value < 0 and base != 10:
        high = (value & _HIGH_MASK) >> 32
        low = value & _LOW_MASK
        return itoa(high, base) + itoa(low, base)

    if value < 0:
        return "-" + itoa(-value, base)

    digits = []
    while True:
        value, digit = divmod(value, base)
        digits.append(_DIGITS[digit])
        if not value:
            break
    return "".join(reversed(digits))