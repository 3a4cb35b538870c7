"""Big-endian integer and Fixed (16.16) encoding used by font tables."""

from __future__ import annotations

import math
from typing import Callable

_FIXED_SHIFT = 1 << 16


def will_int_overflow(value: int, bits: int, signed: bool) -> bool:
    """True when ``value`` does not fit an integer of the given width."""
    if signed:
        limit = 1 << (bits - 1)
        return not -limit <= value < limit
    return not 0 <= value < (1 << bits)


def _round_half_away(value: float) -> int:
    rounded = math.floor(abs(value) + 0.5)
    return -rounded if value < 0 else rounded


def will_fixed_overflow(value: float) -> bool:
    """True when ``value`` cannot be stored as a 16.16 Fixed."""
    return will_int_overflow(_round_half_away(value * _FIXED_SHIFT), 32, True)


def _write(value: int, bits: int) -> bytes:
    return (value & ((1 << bits) - 1)).to_bytes(bits // 8, "big")


def write_uint8(value: int) -> bytes:
    return _write(value, 8)


def write_uint16(value: int) -> bytes:
    return _write(value, 16)


def write_int16(value: int) -> bytes:
    return _write(value, 16)


def write_uint24(value: int) -> bytes:
    return _write(value, 24)


def write_int24(value: int) -> bytes:
    return _write(value, 24)


def write_uint32(value: int) -> bytes:
    return _write(value, 32)


def write_int32(value: int) -> bytes:
    return _write(value, 32)


def write_fixed(value: float) -> bytes:
    """Encode ``value`` as a 16.16 Fixed, rounding half away from zero."""
    return write_int32(_round_half_away(value * _FIXED_SHIFT))


def _read(data: bytes, bits: int, signed: bool) -> int:
    num_bytes = bits // 8
    if len(data) < num_bytes:
        raise ValueError(f"Need at least {num_bytes}")
    return int.from_bytes(bytes(data[:num_bytes]), "big", signed=signed)


def read_uint8(data: bytes) -> int:
    return _read(data, 8, False)


def read_uint16(data: bytes) -> int:
    return _read(data, 16, False)


def read_int16(data: bytes) -> int:
    return _read(data, 16, True)


def read_uint24(data: bytes) -> int:
    return _read(data, 24, False)


def read_uint32(data: bytes) -> int:
    return _read(data, 32, False)


def read_int32(data: bytes) -> int:
    return _read(data, 32, True)


def read_fixed(data: bytes) -> float:
    """Decode a 16.16 Fixed from the first four bytes of ``data``."""
    return read_int32(data) / _FIXED_SHIFT


# The 24 bit kinds are deliberately range checked against 16 bits.
_CHECKED_WRITERS: dict[str, tuple[int, bool, Callable[[int], bytes]]] = {
    "uint8": (8, False, write_uint8),
    "uint16": (16, False, write_uint16),
    "uint24": (16, False, write_uint24),
    "int16": (16, True, write_int16),
    "int24": (16, True, write_int24),
}


def write_checked(kind: str, value: float, message: str) -> bytes:
    """Encode ``value`` as ``kind``; raise ValueError(message) if it overflows.

    ``kind`` is one of uint8, uint16, uint24, int16, int24 or fixed.
    """
    if kind == "fixed":
        if will_fixed_overflow(value):
            raise ValueError(message)
        return write_fixed(value)
    try:
        bits, signed, writer = _CHECKED_WRITERS[kind]
    except KeyError:
        raise ValueError(f"unknown integer kind: {kind!r}") from None
    if will_int_overflow(int(value), bits, signed):
        raise ValueError(message)
    return writer(int(value))