"""Standard MIDI File container: header validation and track extraction.

Layout (all integers big-endian)::

  [RIFF size:u32 "RMID" "data" size:u32]   optional 20-byte wrapper
  "MThd" 00 00 00 06 format:u16 ntrks:u16 division:u16
  ntrks x ( tag:4 length:u32 data[length] )

Only formats 0 and 1 are accepted.  Track chunk tags are carried through
as read; anything other than ``MTrk`` is logged but not rejected.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, List, Union

from .cursor import MidiParseError, TruncatedDataError

logger = logging.getLogger(__name__)

MIDI_MAGIC = 0x4D546864  # "MThd"
RIFF_MAGIC = 0x52494646  # "RIFF"
TRACK_MAGIC = b"MTrk"
HEADER_LENGTH = 6
RIFF_SKIP = 16  # chunk size + "RMID" + "data" + data size
SUPPORTED_FORMATS = frozenset({0, 1})

ByteSource = Union[bytes, bytearray, memoryview, BinaryIO]


@dataclass(frozen=True)
class SMFHeader:
    format: int
    track_count: int
    division: int
    riff_wrapped: bool = False

    @property
    def uses_smpte(self) -> bool:
        """True when the division word encodes SMPTE frames, not PPQN."""

        return bool(self.division & 0x8000)

    @property
    def ticks_per_quarter(self) -> int | None:
        return None if self.uses_smpte else self.division


@dataclass(frozen=True)
class RawTrack:
    """One track chunk's undecoded bytes."""

    index: int  # 0-based position in the file
    tag: bytes  # 4-byte chunk tag, normally b"MTrk"
    data: bytes

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class SMFFile:
    header: SMFHeader
    tracks: List[RawTrack]

    @property
    def division(self) -> int:
        return self.header.division


class _StreamReader:
    """Exact-length reads over a sequential binary stream."""

    def __init__(self, fp: BinaryIO) -> None:
        self._fp = fp
        self.offset = 0

    def read_exact(self, count: int, what: str) -> bytes:
        buf = bytearray()
        while len(buf) < count:
            chunk = self._fp.read(count - len(buf))
            if not chunk:
                raise TruncatedDataError(
                    f"short read for {what} at offset 0x{self.offset:X}: "
                    f"wanted {count} byte(s), got {len(buf)}"
                )
            buf.extend(chunk)
        self.offset += count
        return bytes(buf)

    def read_u16_be(self, what: str) -> int:
        return int.from_bytes(self.read_exact(2, what), "big")

    def read_u32_be(self, what: str) -> int:
        return int.from_bytes(self.read_exact(4, what), "big")


def _as_stream(source: ByteSource) -> BinaryIO:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source))
    if not hasattr(source, "read"):
        raise TypeError(
            f"expected bytes or a binary file object, got {type(source).__name__}"
        )
    return source


def read_header(reader: _StreamReader) -> SMFHeader:
    riff_wrapped = False
    tag = reader.read_u32_be("file tag")
    if tag == RIFF_MAGIC:
        riff_wrapped = True
        reader.read_exact(RIFF_SKIP, "RIFF wrapper")
        logger.debug("RIFF wrapper skipped, inner tag at 0x%X", reader.offset)
        tag = reader.read_u32_be("file tag")
    if tag != MIDI_MAGIC:
        raise MidiParseError(f"bad magic: {tag.to_bytes(4, 'big').hex()}")

    size = reader.read_u32_be("header length")
    if size != HEADER_LENGTH:
        raise MidiParseError(
            f"header length must be {HEADER_LENGTH}, got {size}"
        )

    fmt = reader.read_u16_be("format")
    if fmt not in SUPPORTED_FORMATS:
        raise MidiParseError(f"unsupported SMF format {fmt}")

    track_count = reader.read_u16_be("track count")
    division = reader.read_u16_be("division")
    return SMFHeader(
        format=fmt,
        track_count=track_count,
        division=division,
        riff_wrapped=riff_wrapped,
    )


def read_smf_file(source: ByteSource) -> SMFFile:
    """Validate the container and slice out every declared track chunk.

    ``source`` is read sequentially up to the end of the last declared
    chunk; trailing bytes are left unread.
    """
    reader = _StreamReader(_as_stream(source))
    header = read_header(reader)

    tracks: List[RawTrack] = []
    for index in range(header.track_count):
        tag = reader.read_exact(4, f"track {index} tag")
        if tag != TRACK_MAGIC:
            logger.debug("track %d has chunk tag %r, reading it anyway", index, tag)
        length = reader.read_u32_be(f"track {index} length")
        data = reader.read_exact(length, f"track {index} data")
        tracks.append(RawTrack(index=index, tag=tag, data=data))

    logger.debug(
        "SMF format %d, %d track(s), division 0x%04X",
        header.format,
        header.track_count,
        header.division,
    )
    return SMFFile(header=header, tracks=tracks)
