"""Big-endian field decoding for ND backup volume headers.

ND machines are big-endian; every integer in a volume header is stored
most-significant byte first regardless of the host we run on. Callers are
expected to length-check buffers before decoding.
"""

from __future__ import annotations

import struct


NAME_TERMINATOR = ord("'")
SEVEN_BIT_MASK = 0x7F

_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")
_I32 = struct.Struct(">i")


def read_u16_be(buf: bytes, offset: int) -> int:
    return _U16.unpack_from(buf, offset)[0]


def read_u32_be(buf: bytes, offset: int) -> int:
    return _U32.unpack_from(buf, offset)[0]


def read_i32_be(buf: bytes, offset: int) -> int:
    return _I32.unpack_from(buf, offset)[0]


def extract_name(buf: bytes, offset: int, width: int) -> str:
    """Decode a 7-bit text field terminated by an apostrophe.

    The high bit of every byte is masked off. The first apostrophe ends the
    name and is not part of it; without one the whole field is the name.
    """
    chars = []
    for byte in buf[offset : offset + width]:
        byte &= SEVEN_BIT_MASK
        if byte == NAME_TERMINATOR:
            break
        chars.append(chr(byte))
    return "".join(chars)


def extract_raw(buf: bytes, offset: int, width: int) -> bytes:
    return bytes(buf[offset : offset + width])
