#!/usr/bin/env python3
"""Human-readable Standard MIDI File inspector.

Parses one `.mid` / `.rmi` file and prints the header followed by the
merged event stream.  Tick times are converted to seconds with a running
tempo: 120 BPM until the first set-tempo meta, then whatever the file
says.  This is the same conversion a playback layer performs; the parser
itself never interprets tempo.

Optional cross-check against mido (`--compare-mido`) confirms that both
parsers see the same channel messages at the same absolute ticks.

Usage:
  python tools/inspect_midi.py song.mid
  python tools/inspect_midi.py song.mid --limit 40 --tempo-bpm 96
  python tools/inspect_midi.py song.mid --compare-mido
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Iterable, Iterator, List, Sequence, Tuple

import mido

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.cursor import MidiParseError  # noqa: E402
from smf.events import MidiEvent  # noqa: E402
from smf.song import Song, load_song  # noqa: E402


DEFAULT_BPM = 120.0
NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
MIDO_CHANNEL_TYPES = frozenset(
    {
        "note_off",
        "note_on",
        "polytouch",
        "control_change",
        "program_change",
        "aftertouch",
        "pitchwheel",
    }
)


def format_midi_note(value: int) -> str:
    return f"{NOTE_NAMES[value % 12]}{value // 12 - 1}"


def iter_seconds(
    events: Iterable[MidiEvent], division: int, initial_tempo: int
) -> Iterator[Tuple[MidiEvent, float]]:
    """Yield each event with its wall-clock offset in seconds."""

    tempo = initial_tempo
    last_tick = 0
    seconds = 0.0
    for event in events:
        seconds += (event.time - last_tick) * tempo / (division * 1_000_000)
        last_tick = event.time
        yield event, seconds
        if event.tempo is not None:
            tempo = event.tempo


def describe_event(event: MidiEvent) -> str:
    if event.is_meta:
        detail = f"{event.name} len={len(event.extra)}"
        if event.tempo is not None:
            detail += f" tempo={event.tempo}us ({60_000_000 / event.tempo:.2f} bpm)"
        elif event.extra:
            detail += f" data={event.extra[:16].hex()}"
        return detail
    if event.is_sysex:
        return f"{event.name} 0x{event.status:02X} len={len(event.extra)}"

    parts = [f"{event.name:<16}", f"ch={event.channel + 1:<2}"]
    if event.name in ("note_on", "note_off", "aftertouch"):
        parts.append(f"note={format_midi_note(event.data0)} ({event.data0})")
        parts.append(f"vel={event.data1}")
    elif event.name == "pitchwheel":
        parts.append(f"value={((event.data1 << 7) | event.data0) - 8192}")
    elif event.name == "control_change":
        parts.append(f"cc={event.data0} value={event.data1}")
    else:
        parts.append(f"value={event.data0}")
    return "  ".join(parts)


def generate_report(song: Song, *, limit: int | None, bpm: float) -> str:
    header = song.header
    lines = [
        f"File: {song.source_name}",
        f"Format: {header.format}  Tracks: {header.track_count}  "
        f"Division: 0x{header.division:04X}"
        + (" (SMPTE)" if header.uses_smpte else f" ({header.division} ppqn)")
        + ("  [RIFF]" if header.riff_wrapped else ""),
        f"Events: {len(song.events)}",
        "",
    ]

    if header.uses_smpte or header.division == 0:
        timed = ((event, None) for event in song.events)
    else:
        timed = iter_seconds(song.events, header.division, round(60_000_000 / bpm))

    for index, (event, seconds) in enumerate(timed):
        if limit is not None and index >= limit:
            lines.append(f"... {len(song.events) - limit} more")
            break
        when = "      ?" if seconds is None else f"{seconds:8.3f}s"
        lines.append(
            f"{event.time:>8}  {when}  0x{event.status:02X}  {describe_event(event)}"
        )
    return "\n".join(lines)


def channel_messages(song: Song) -> List[Tuple[int, bytes]]:
    return [(event.time, event.to_bytes()) for event in song.events if event.is_channel]


def mido_channel_messages(path: Path) -> List[Tuple[int, bytes]]:
    midi = mido.MidiFile(str(path))
    messages: List[Tuple[int, bytes]] = []
    tick = 0
    for message in mido.merge_tracks(midi.tracks):
        tick += message.time
        if message.type in MIDO_CHANNEL_TYPES:
            messages.append((tick, bytes(message.bytes())))
    return messages


def compare_with_mido(song: Song, path: Path) -> List[str]:
    ours = channel_messages(song)
    theirs = mido_channel_messages(path)
    problems: List[str] = []
    if len(ours) != len(theirs):
        problems.append(f"message count differs: ours={len(ours)} mido={len(theirs)}")
    for index, (a, b) in enumerate(zip(ours, theirs)):
        if a != b:
            problems.append(
                f"#{index}: ours=({a[0]}, {a[1].hex()}) mido=({b[0]}, {b[1].hex()})"
            )
            if len(problems) >= 10:
                break
    return problems


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Inspect the merged event stream of a Standard MIDI File."
    )
    parser.add_argument("path", type=Path, help="Path to the .mid or .rmi file.")
    parser.add_argument(
        "--limit", type=int, default=None, help="Show at most this many events."
    )
    parser.add_argument(
        "--tempo-bpm",
        type=float,
        default=DEFAULT_BPM,
        help="Tempo assumed until the first set-tempo meta (default: 120).",
    )
    parser.add_argument(
        "--compare-mido",
        action="store_true",
        help="Cross-check channel messages against mido's parser.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    args = parser.parse_args(argv)

    if args.tempo_bpm <= 0:
        parser.error("--tempo-bpm must be positive")
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        song = load_song(args.path)
    except MidiParseError as err:
        print(f"ERR {args.path}: {err}", file=sys.stderr)
        return 1

    print(generate_report(song, limit=args.limit, bpm=args.tempo_bpm))

    status = 0
    if args.compare_mido:
        problems = compare_with_mido(song, args.path)
        if problems:
            print("mido mismatch:")
            for line in problems:
                print(f"  {line}")
            status = 1
        else:
            print("mido: channel messages match")

    song.dispose()
    return status


if __name__ == "__main__":
    raise SystemExit(main())
