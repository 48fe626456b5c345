from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.cursor import (  # noqa: E402
    VLQ_MAX,
    ByteCursor,
    MidiParseError,
    TruncatedDataError,
    encode_vlq,
)


# Reference encodings from the SMF 1.0 document.
KNOWN_VLQ = [
    (0x00000000, b"\x00"),
    (0x00000040, b"\x40"),
    (0x0000007F, b"\x7F"),
    (0x00000080, b"\x81\x00"),
    (0x00002000, b"\xC0\x00"),
    (0x00003FFF, b"\xFF\x7F"),
    (0x00004000, b"\x81\x80\x00"),
    (0x00100000, b"\xC0\x80\x00"),
    (0x001FFFFF, b"\xFF\xFF\x7F"),
    (0x00200000, b"\x81\x80\x80\x00"),
    (0x08000000, b"\xC0\x80\x80\x00"),
    (0x0FFFFFFF, b"\xFF\xFF\xFF\x7F"),
]


@pytest.mark.parametrize("value,encoded", KNOWN_VLQ, ids=lambda v: f"{v!r}")
def test_read_vlq_known_encodings(value: int, encoded: bytes) -> None:
    cursor = ByteCursor(encoded)
    assert cursor.read_vlq() == value
    assert cursor.at_end


@pytest.mark.parametrize("value,encoded", KNOWN_VLQ, ids=lambda v: f"{v!r}")
def test_encode_vlq_known_encodings(value: int, encoded: bytes) -> None:
    assert encode_vlq(value) == encoded


def test_vlq_round_trip_across_range() -> None:
    values = list(range(0, 0x200)) + [1 << n for n in range(28)]
    values += [(1 << n) - 1 for n in range(1, 29)]
    values += list(range(0, VLQ_MAX, 0x0FFFFF))
    buf = b"".join(encode_vlq(v) for v in values)
    cursor = ByteCursor(buf)
    decoded = [cursor.read_vlq() for _ in values]
    assert decoded == values
    assert cursor.at_end


@pytest.mark.parametrize("value", [-1, VLQ_MAX + 1])
def test_encode_vlq_rejects_out_of_range(value: int) -> None:
    with pytest.raises(ValueError, match="out of range"):
        encode_vlq(value)


def test_fixed_width_reads_are_big_endian() -> None:
    cursor = ByteCursor(b"MThd\x00\x06\x01\xE0\x7F")
    assert cursor.read_u32_be() == 0x4D546864
    assert cursor.read_u16_be() == 6
    assert cursor.read_u16_be() == 480
    assert cursor.read_u8() == 0x7F
    assert cursor.at_end
    assert cursor.remaining == 0


def test_read_bytes_advances_position() -> None:
    cursor = ByteCursor(b"\x01\x02\x03\x04\x05")
    assert cursor.read_bytes(0) == b""
    assert cursor.read_bytes(3) == b"\x01\x02\x03"
    assert cursor.pos == 3
    assert cursor.remaining == 2


@pytest.mark.parametrize(
    "data,reader",
    [
        (b"", "read_u8"),
        (b"\x00", "read_u16_be"),
        (b"\x00\x00\x00", "read_u32_be"),
        (b"\x81\x80", "read_vlq"),
    ],
)
def test_reads_past_end_raise(data: bytes, reader: str) -> None:
    cursor = ByteCursor(data, label="track 4")
    with pytest.raises(TruncatedDataError, match="track 4"):
        getattr(cursor, reader)()


def test_short_read_bytes_leaves_position_unchanged() -> None:
    cursor = ByteCursor(b"\x01\x02")
    with pytest.raises(TruncatedDataError, match="need 3 byte"):
        cursor.read_bytes(3)
    assert cursor.pos == 0


def test_truncation_is_a_parse_error() -> None:
    assert issubclass(TruncatedDataError, MidiParseError)
    assert issubclass(MidiParseError, ValueError)
