"""Top-level entry points: bytes in, one merged event stream out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Tuple, Union

from .container import ByteSource, SMFHeader, read_smf_file
from .cursor import MidiParseError
from .events import EventList, MidiEvent
from .merge import merge_tracks
from .track_reader import decode_track

logger = logging.getLogger(__name__)


def _parse(source: ByteSource) -> Tuple[SMFHeader, EventList]:
    smf_file = read_smf_file(source)
    try:
        per_track: List[List[MidiEvent]] = [
            decode_track(track) for track in smf_file.tracks
        ]
    except MemoryError as exc:
        raise MidiParseError("out of memory while decoding tracks") from exc
    events = merge_tracks(per_track)
    logger.debug(
        "merged %d event(s) from %d track(s)", len(events), len(per_track)
    )
    return smf_file.header, events


def parse(source: ByteSource) -> Tuple[int, EventList]:
    """Parse a Standard MIDI File into ``(division, events)``.

    ``source`` is ``bytes`` or a binary file object positioned at the start
    of the file.  Raises ``MidiParseError`` if the input is not usable; no
    partial event list is ever returned.
    """
    header, events = _parse(source)
    return header.division, events


@dataclass(frozen=True)
class Song:
    """A parsed file: its header plus the merged event stream."""

    header: SMFHeader
    events: EventList
    source_name: str = "<bytes>"

    @property
    def division(self) -> int:
        return self.header.division

    def __len__(self) -> int:
        return len(self.events)

    def dispose(self) -> None:
        self.events.dispose()

    @classmethod
    def from_bytes(cls, data: bytes, *, source_name: str = "<bytes>") -> "Song":
        header, events = _parse(data)
        return cls(header=header, events=events, source_name=source_name)

    @classmethod
    def from_stream(cls, fp: BinaryIO) -> "Song":
        header, events = _parse(fp)
        return cls(
            header=header,
            events=events,
            source_name=str(getattr(fp, "name", "<stream>")),
        )


def load_song(path: Union[str, Path]) -> Song:
    """Read and parse the MIDI file at ``path``."""

    path = Path(path)
    data = path.read_bytes()
    return Song.from_bytes(data, source_name=str(path))
