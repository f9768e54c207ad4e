#!/usr/bin/env python3
"""
Blueprint Primitive Reader / Writer
===================================

Little-endian fixed width reads over an immutable byte buffer. Each reader
takes the buffer and a cursor and returns (value, new_cursor):

| Function  | Width | Type            |
|-----------|-------|-----------------|
| read_i8   | 1     | signed byte     |
| read_u8   | 1     | unsigned byte   |
| read_i16  | 2     | signed short    |
| read_u16  | 2     | unsigned short  |
| read_i32  | 4     | signed int      |
| read_u32  | 4     | unsigned int    |
| read_f32  | 4     | IEEE-754 float  |

The readers do not check bounds. Codecs call ensure_available() for every
fixed-size group before reading it, so a short buffer surfaces as an
InsufficientDataError instead of a struct.error.

The write_* functions are the mirror image used by the encoders: they
append the packed value to a bytearray. A value outside the range of its
width raises CorruptedDataError naming the width and the value.
"""

import struct
from typing import Tuple

from bp_errors import CorruptedDataError, InsufficientDataError

_I8 = struct.Struct('<b')
_U8 = struct.Struct('<B')
_I16 = struct.Struct('<h')
_U16 = struct.Struct('<H')
_I32 = struct.Struct('<i')
_U32 = struct.Struct('<I')
_F32 = struct.Struct('<f')


def ensure_available(data: bytes, offset: int, size: int, what: str = "record"):
    """Raise InsufficientDataError unless `size` bytes remain at `offset`."""
    available = len(data) - offset
    if offset < 0 or available < size:
        raise InsufficientDataError(size, max(available, 0), offset, what)


# =============================================================================
# Readers
# =============================================================================

def read_i8(data: bytes, offset: int) -> Tuple[int, int]:
    return _I8.unpack_from(data, offset)[0], offset + 1


def read_u8(data: bytes, offset: int) -> Tuple[int, int]:
    return _U8.unpack_from(data, offset)[0], offset + 1


def read_i16(data: bytes, offset: int) -> Tuple[int, int]:
    return _I16.unpack_from(data, offset)[0], offset + 2


def read_u16(data: bytes, offset: int) -> Tuple[int, int]:
    return _U16.unpack_from(data, offset)[0], offset + 2


def read_i32(data: bytes, offset: int) -> Tuple[int, int]:
    return _I32.unpack_from(data, offset)[0], offset + 4


def read_u32(data: bytes, offset: int) -> Tuple[int, int]:
    return _U32.unpack_from(data, offset)[0], offset + 4


def read_f32(data: bytes, offset: int) -> Tuple[float, int]:
    return _F32.unpack_from(data, offset)[0], offset + 4


# =============================================================================
# Writers
# =============================================================================

def _pack(out: bytearray, packer: struct.Struct, name: str, value):
    try:
        out.extend(packer.pack(value))
    except (struct.error, OverflowError) as e:
        raise CorruptedDataError(f"Cannot write {value!r} as {name}: {e}") from None


def write_i8(out: bytearray, value: int):
    _pack(out, _I8, "i8", value)


def write_u8(out: bytearray, value: int):
    _pack(out, _U8, "u8", value)


def write_i16(out: bytearray, value: int):
    _pack(out, _I16, "i16", value)


def write_u16(out: bytearray, value: int):
    _pack(out, _U16, "u16", value)


def write_i32(out: bytearray, value: int):
    _pack(out, _I32, "i32", value)


def write_u32(out: bytearray, value: int):
    _pack(out, _U32, "u32", value)


def write_f32(out: bytearray, value: float):
    _pack(out, _F32, "f32", value)


def hex_sample(data: bytes, length: int = 32) -> list:
    """Format the first `length` bytes as 16-byte hex dump lines."""
    lines = []
    for i in range(0, min(length, len(data)), 16):
        hex_str = ' '.join(f'{b:02x}' for b in data[i:i+16])
        lines.append(f"{i:04x}: {hex_str}")
    return lines
