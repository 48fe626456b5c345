"""Interleave per-track event lists into one chronological stream."""

from __future__ import annotations

import heapq
from typing import List, Sequence

from .events import EventList, MidiEvent


def merge_tracks(per_track: Sequence[List[MidiEvent]]) -> EventList:
    """K-way merge of chronological track lists.

    The heap is keyed on ``(time, track_index)``: at equal tick times the
    event from the lower-indexed track comes first, and events from one
    track keep their file order.  The output holds the same event objects
    as the inputs; nothing is copied.
    """
    merged = EventList()
    heap = [
        (events[0].time, track_index, 0)
        for track_index, events in enumerate(per_track)
        if events
    ]
    heapq.heapify(heap)

    while heap:
        _, track_index, pos = heapq.heappop(heap)
        events = per_track[track_index]
        merged.append(events[pos])
        pos += 1
        if pos < len(events):
            heapq.heappush(heap, (events[pos].time, track_index, pos))

    return merged
