"""Note identities and equal-tempered note math."""

import math
from dataclasses import dataclass

from .constants import A4_MIDI, DEFAULT_REFERENCE_PITCH, PITCH_NAMES


def freq_to_midi_float(freq: float, reference: float = DEFAULT_REFERENCE_PITCH) -> float:
    """Convert frequency (Hz) to a fractional MIDI note number."""
    if freq <= 0:
        raise ValueError(f"Frequency must be positive, got {freq}")
    return A4_MIDI + 12.0 * math.log2(freq / reference)


def midi_to_freq(midi: float, reference: float = DEFAULT_REFERENCE_PITCH) -> float:
    """Convert MIDI note number to frequency (Hz)."""
    return reference * (2 ** ((midi - A4_MIDI) / 12.0))


def note_name(midi: int) -> str:
    """Get note name (e.g., 'C4', 'A#3')."""
    octave = (midi // 12) - 1
    return f"{PITCH_NAMES[midi % 12]}{octave}"


@dataclass(frozen=True)
class NoteIdentity:
    """Nearest equal-tempered note plus the residual offset in cents."""

    number: int  # MIDI note number
    cents: float = 0.0  # -50..+50, positive means sharp

    @property
    def name(self) -> str:
        return note_name(self.number)

    def frequency(self, reference: float = DEFAULT_REFERENCE_PITCH) -> float:
        """Equal-tempered frequency of the note itself (without the offset)."""
        return midi_to_freq(self.number, reference)


def nearest_note(freq: float, reference: float = DEFAULT_REFERENCE_PITCH) -> NoteIdentity:
    """
    Map a frequency to its nearest equal-tempered note.

    Exact half-semitone deviations round up, so 452.89 Hz (A4 + 50 cents)
    maps to A#4 with -50 cents.

    Args:
        freq: Frequency in Hz
        reference: Frequency of A4

    Returns:
        NoteIdentity with the note number and residual cents
    """
    midi = freq_to_midi_float(freq, reference)
    number = int(math.floor(midi + 0.5))
    return NoteIdentity(number=number, cents=(midi - number) * 100.0)


def deviation_percent(freq: float, note: int, reference: float = DEFAULT_REFERENCE_PITCH) -> float:
    """Absolute deviation of *freq* from *note*'s ET frequency, in percent."""
    target = midi_to_freq(note, reference)
    return abs(freq - target) / target * 100.0


@dataclass
class Note:
    """A recorded note with absolute timing."""

    pitch: int  # MIDI pitch (0-127)
    onset: float  # Start time in seconds
    offset: float  # End time in seconds
    velocity: int = 64  # MIDI velocity (0-127)

    @property
    def duration(self) -> float:
        """Note duration in seconds."""
        return self.offset - self.onset

    @property
    def pitch_name(self) -> str:
        return note_name(self.pitch)
