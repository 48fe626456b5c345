"""MIDI event records and the owned event sequence handed to playback.

Channel events fold the channel into ``status`` (note-on on channel 3 is
``0x93``).  Meta events keep the raw ``0xFF`` marker with the meta type in
``data0``; system-exclusive events keep their raw marker with ``data0 == 0``.
Variable-length payloads live in ``extra``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List

# Channel event kinds (high nibble of the status byte)
NOTE_OFF = 0x8
NOTE_ON = 0x9
AFTERTOUCH = 0xA
CONTROLLER = 0xB
PROG_CHANGE = 0xC
PRESSURE = 0xD
PITCH_WHEEL = 0xE
SYSTEM = 0xF

TWO_DATA_KINDS = frozenset({NOTE_OFF, NOTE_ON, AFTERTOUCH, CONTROLLER, PITCH_WHEEL})
ONE_DATA_KINDS = frozenset({PROG_CHANGE, PRESSURE})

META_MARKER = 0xFF

# Meta types the decoder gives special treatment
META_END_OF_TRACK = 0x2F
META_TEMPO = 0x51

META_NAMES = {
    0x00: "sequence_number",
    0x01: "text",
    0x02: "copyright",
    0x03: "track_name",
    0x04: "instrument_name",
    0x05: "lyric",
    0x06: "marker",
    0x07: "cue_point",
    0x20: "channel_prefix",
    0x21: "midi_port",
    META_END_OF_TRACK: "end_of_track",
    META_TEMPO: "set_tempo",
    0x54: "smpte_offset",
    0x58: "time_signature",
    0x59: "key_signature",
    0x7F: "sequencer_specific",
}

KIND_NAMES = {
    NOTE_OFF: "note_off",
    NOTE_ON: "note_on",
    AFTERTOUCH: "aftertouch",
    CONTROLLER: "control_change",
    PROG_CHANGE: "program_change",
    PRESSURE: "channel_pressure",
    PITCH_WHEEL: "pitchwheel",
}


@dataclass(frozen=True)
class MidiEvent:
    """A single decoded event with its absolute tick time."""

    time: int  # absolute ticks from the start of the originating track
    status: int
    data0: int = 0
    data1: int = 0
    extra: bytes = b""

    @property
    def kind(self) -> int:
        return (self.status >> 4) & 0x0F

    @property
    def is_channel(self) -> bool:
        return self.kind != SYSTEM

    @property
    def is_meta(self) -> bool:
        return self.status == META_MARKER

    @property
    def is_sysex(self) -> bool:
        return self.kind == SYSTEM and self.status != META_MARKER

    @property
    def channel(self) -> int | None:
        return self.status & 0x0F if self.is_channel else None

    @property
    def meta_type(self) -> int | None:
        return self.data0 if self.is_meta else None

    @property
    def tempo(self) -> int | None:
        """Microseconds per quarter note for a set-tempo meta, else None."""

        if self.meta_type != META_TEMPO or len(self.extra) < 3:
            return None
        return int.from_bytes(self.extra[:3], "big")

    @property
    def name(self) -> str:
        if self.is_meta:
            return META_NAMES.get(self.data0, f"meta_0x{self.data0:02X}")
        if self.is_sysex:
            return "sysex" if self.status in (0xF0, 0xF7) else f"system_0x{self.status:02X}"
        return KIND_NAMES[self.kind]

    def to_bytes(self) -> bytes:
        """Wire bytes for a channel event (status + 1 or 2 data bytes)."""

        if not self.is_channel:
            raise ValueError(f"{self.name} is not a channel message")
        if self.kind in ONE_DATA_KINDS:
            return bytes([self.status, self.data0])
        return bytes([self.status, self.data0, self.data1])


class EventList:
    """Owned, time-ordered sequence of ``MidiEvent``.

    The list is the single handle to a parsed song's events.  ``dispose``
    releases every event and payload at once; the handle is unusable
    afterwards.
    """

    __slots__ = ("_events", "_disposed")

    def __init__(self, events: Iterable[MidiEvent] = ()) -> None:
        self._events: List[MidiEvent] = list(events)
        self._disposed = False

    def _check_live(self) -> None:
        if self._disposed:
            raise RuntimeError("event list has been disposed")

    @property
    def disposed(self) -> bool:
        return self._disposed

    def append(self, event: MidiEvent) -> None:
        self._check_live()
        self._events.append(event)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[MidiEvent]:
        self._check_live()
        return iter(self._events)

    def __getitem__(self, index):
        self._check_live()
        return self._events[index]

    def __bool__(self) -> bool:
        return bool(self._events)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._events)} events"
        return f"EventList({state})"

    def times(self) -> List[int]:
        self._check_live()
        return [event.time for event in self._events]

    def dispose(self) -> None:
        self._check_live()
        self._events.clear()
        self._disposed = True


def dispose(events: EventList) -> None:
    """Release an entire event list.  The list must not be used afterwards."""

    events.dispose()
