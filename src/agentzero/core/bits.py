"""Bit-level helpers for integer and IEEE-754 values.

Pure Python, no solver dependencies. Widths are expressed in bits.
"""

import ctypes
import math
import struct

# All-ones mask for the integer widths the analyzer models.
AND_TABLE: dict[int, int] = {
    8: 0xFF,
    16: 0xFFFF,
    32: 0xFFFFFFFF,
    64: 0xFFFFFFFFFFFFFFFF,
}

# Sign bit for each width.
MSB_TABLE: dict[int, int] = {
    8: 0x80,
    16: 0x8000,
    32: 0x80000000,
    64: 0x8000000000000000,
}

CTYPE_SIGNED_TABLE: dict[int, type] = {
    8: ctypes.c_int8,
    16: ctypes.c_int16,
    32: ctypes.c_int32,
    64: ctypes.c_int64,
}

CTYPE_UNSIGNED_TABLE: dict[int, type] = {
    8: ctypes.c_uint8,
    16: ctypes.c_uint16,
    32: ctypes.c_uint32,
    64: ctypes.c_uint64,
}

# (struct float format, struct unsigned format) per IEEE width.
_IEEE_FORMATS: dict[int, tuple[str, str]] = {
    32: ("<f", "<I"),
    64: ("<d", "<Q"),
}


def unsigned_to_signed(unsigned_value: int, nb_bits: int) -> int:
    """Convert an unsigned integer to its signed representation.

    >>> unsigned_to_signed(0xFF, 8)
    -1
    >>> unsigned_to_signed(0x7F, 8)
    127
    """
    return CTYPE_SIGNED_TABLE[nb_bits](unsigned_value).value


def signed_to_unsigned(signed_value: int, nb_bits: int) -> int:
    """Convert a signed integer to its unsigned (bit pattern) representation.

    >>> signed_to_unsigned(-1, 16)
    65535
    >>> signed_to_unsigned(42, 32)
    42
    """
    return CTYPE_UNSIGNED_TABLE[nb_bits](signed_value).value


def get_msb(value: int, nb_bits: int) -> int:
    return (value & MSB_TABLE[nb_bits]) >> (nb_bits - 1)


def float_to_bits(value: float, nb_bits: int) -> int:
    """Return the IEEE-754 bit pattern of *value* at the given width.

    Rounds to single precision first when ``nb_bits`` is 32.

    >>> hex(float_to_bits(1.0, 32))
    '0x3f800000'
    >>> hex(float_to_bits(-0.0, 64))
    '0x8000000000000000'
    """
    float_fmt, uint_fmt = _IEEE_FORMATS[nb_bits]
    try:
        packed = struct.pack(float_fmt, value)
    except OverflowError:
        # out of single-precision range: rounds to the signed infinity
        packed = struct.pack(float_fmt, math.copysign(math.inf, value))
    return struct.unpack(uint_fmt, packed)[0]


def bits_to_float(bits: int, nb_bits: int) -> float:
    """Inverse of :func:`float_to_bits`."""
    float_fmt, uint_fmt = _IEEE_FORMATS[nb_bits]
    return struct.unpack(float_fmt, struct.pack(uint_fmt, bits))[0]


def round_to_single(value: float) -> float:
    """Round a Python float to the nearest float32 value."""
    return bits_to_float(float_to_bits(value, 32), 32)


def shortest_repr(value: float, nb_bits: int = 64) -> str:
    """Shortest locale-independent decimal text that round-trips at *nb_bits*.

    >>> shortest_repr(0.1, 32)
    '0.1'
    >>> shortest_repr(2.5)
    '2.5'
    """
    if math.isnan(value) or math.isinf(value):
        return repr(value)
    if nb_bits == 64:
        return repr(value)
    for precision in range(1, 18):
        text = format(value, f".{precision}g")
        if round_to_single(float(text)) == value:
            return repr(float(text))
    return repr(value)
