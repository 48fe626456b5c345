"""Sequential big-endian reader over an in-memory byte buffer.

Every read checks the remaining length before touching the buffer, so a
truncated chunk surfaces as ``TruncatedDataError`` instead of an
``IndexError`` deep inside the decoder.

Variable-length quantities (VLQ) are big-endian base-128: each byte
contributes its low 7 bits, and a set high bit means another byte
follows.
"""

from __future__ import annotations

import struct

VLQ_MAX = 0x0FFFFFFF  # largest value a 4-byte VLQ can hold


class MidiParseError(ValueError):
    """Raised when a byte stream is not a usable Standard MIDI File."""


class TruncatedDataError(MidiParseError):
    """Raised when a read would run past the end of the available bytes."""


class ByteCursor:
    """Read fixed-width and variable-length integers from ``data``."""

    def __init__(self, data: bytes, *, label: str = "buffer") -> None:
        self._data = bytes(data)
        self._pos = 0
        self.label = label

    @property
    def pos(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def _take(self, count: int) -> int:
        start = self._pos
        if count > len(self._data) - start:
            raise TruncatedDataError(
                f"{self.label}: need {count} byte(s) at offset 0x{start:X}, "
                f"only {len(self._data) - start} left"
            )
        self._pos = start + count
        return start

    def read_u8(self) -> int:
        start = self._take(1)
        return self._data[start]

    def read_u16_be(self) -> int:
        start = self._take(2)
        return struct.unpack_from(">H", self._data, start)[0]

    def read_u32_be(self) -> int:
        start = self._take(4)
        return struct.unpack_from(">I", self._data, start)[0]

    def read_bytes(self, count: int) -> bytes:
        start = self._take(count)
        return self._data[start : start + count]

    def read_vlq(self) -> int:
        value = 0
        while True:
            byte = self.read_u8()
            value = (value << 7) | (byte & 0x7F)
            if not byte & 0x80:
                return value


def encode_vlq(value: int) -> bytes:
    """Encode ``value`` (0..0x0FFFFFFF) as a big-endian VLQ."""

    if value < 0 or value > VLQ_MAX:
        raise ValueError(f"VLQ value out of range: {value}")
    out = bytearray([value & 0x7F])
    value >>= 7
    while value:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.reverse()
    return bytes(out)
