"""Core types and constants for Note Track."""

from .note import (
    Note,
    NoteIdentity,
    nearest_note,
    note_name,
    midi_to_freq,
    freq_to_midi_float,
    deviation_percent,
)
from .events import NoteEvent, NoteOn, NoteOff, PitchBend
from .errors import (
    NoteTrackError,
    DeviceUnavailable,
    ModelLoadFailure,
    InferenceFailure,
    Rejection,
)
from .constants import (
    PITCH_NAMES,
    CANONICAL_SR,
    DEFAULT_FRAME_SIZE,
    DEFAULT_REFERENCE_PITCH,
)

__all__ = [
    "Note",
    "NoteIdentity",
    "nearest_note",
    "note_name",
    "midi_to_freq",
    "freq_to_midi_float",
    "deviation_percent",
    "NoteEvent",
    "NoteOn",
    "NoteOff",
    "PitchBend",
    "NoteTrackError",
    "DeviceUnavailable",
    "ModelLoadFailure",
    "InferenceFailure",
    "Rejection",
    "PITCH_NAMES",
    "CANONICAL_SR",
    "DEFAULT_FRAME_SIZE",
    "DEFAULT_REFERENCE_PITCH",
]
