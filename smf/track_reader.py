"""Decode one MTrk chunk into a chronological list of events.

Each event is ``delta:VLQ`` followed by either:

  FF type len:VLQ payload   meta event (type 0x2F ends the track)
  Fx len:VLQ payload        system exclusive and other system bytes
  status data [data]        channel event
  data [data]               channel event under running status

Running status latches the kind and channel of the last channel status
byte.  Meta and sysex events leave the latch untouched.  A data byte that
arrives under a latch with no known data layout (including before any
status byte) is consumed without producing an event.
"""

from __future__ import annotations

import logging
from typing import List, Union

from .container import RawTrack
from .cursor import ByteCursor
from .events import (
    META_END_OF_TRACK,
    META_MARKER,
    ONE_DATA_KINDS,
    SYSTEM,
    TWO_DATA_KINDS,
    MidiEvent,
)

logger = logging.getLogger(__name__)


def decode_track(track: Union[RawTrack, bytes]) -> List[MidiEvent]:
    """Parse a track chunk's bytes into events with absolute tick times.

    Parameters
    ----------
    track : RawTrack or bytes
        The chunk payload (everything after the 8-byte chunk header).

    Returns
    -------
    list[MidiEvent]
        Events in file order; ``time`` is non-decreasing.

    Raises
    ------
    TruncatedDataError
        If an event runs past the end of the chunk.
    """
    if isinstance(track, RawTrack):
        data = track.data
        label = f"track {track.index}"
    else:
        data = bytes(track)
        label = "track"
    cursor = ByteCursor(data, label=label)

    events: List[MidiEvent] = []
    abs_time = 0
    last_kind = 0
    last_channel = 0
    skipped = 0

    while not cursor.at_end:
        abs_time += cursor.read_vlq()
        byte = cursor.read_u8()

        if byte >> 4 == SYSTEM:
            meta_type = cursor.read_u8() if byte == META_MARKER else 0
            length = cursor.read_vlq()
            extra = cursor.read_bytes(length) if length else b""
            events.append(
                MidiEvent(time=abs_time, status=byte, data0=meta_type, extra=extra)
            )
            if byte == META_MARKER and meta_type == META_END_OF_TRACK:
                break
            continue

        if byte & 0x80:
            last_kind = byte >> 4
            last_channel = byte & 0x0F
            data0 = cursor.read_u8() & 0x7F
        else:
            data0 = byte

        status = (last_kind << 4) | last_channel
        if last_kind in TWO_DATA_KINDS:
            data1 = cursor.read_u8() & 0x7F
            events.append(MidiEvent(time=abs_time, status=status, data0=data0, data1=data1))
        elif last_kind in ONE_DATA_KINDS:
            events.append(MidiEvent(time=abs_time, status=status, data0=data0))
        else:
            skipped += 1

    if skipped:
        logger.debug("%s: skipped %d byte(s) with no running status", label, skipped)
    logger.debug("%s: %d event(s), last tick %d", label, len(events), abs_time)
    return events
