"""Standard MIDI File parsing into a single chronological event stream."""

from .container import (  # noqa: F401
    MIDI_MAGIC,
    RIFF_MAGIC,
    RawTrack,
    SMFFile,
    SMFHeader,
    read_smf_file,
)
from .cursor import (  # noqa: F401
    ByteCursor,
    MidiParseError,
    TruncatedDataError,
    encode_vlq,
)
from .events import (  # noqa: F401
    META_END_OF_TRACK,
    META_TEMPO,
    EventList,
    MidiEvent,
    dispose,
)
from .merge import merge_tracks  # noqa: F401
from .song import Song, load_song, parse  # noqa: F401
from .track_reader import decode_track  # noqa: F401
