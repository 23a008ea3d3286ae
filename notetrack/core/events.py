"""Note events emitted by the decision state machine."""

from dataclasses import dataclass
from typing import Union

from .constants import PITCHWHEEL_MAX, PITCHWHEEL_MIN


@dataclass(frozen=True)
class NoteOn:
    note: int
    velocity: int = 64


@dataclass(frozen=True)
class NoteOff:
    note: int


@dataclass(frozen=True)
class PitchBend:
    """Normalized pitch bend, -1.0 (full down) to 1.0 (full up)."""

    value: float

    def __post_init__(self):
        object.__setattr__(self, "value", max(-1.0, min(1.0, float(self.value))))

    def to_midi_pitchwheel(self) -> int:
        """Map to the 14-bit signed MIDI pitch wheel range."""
        if self.value >= 0:
            return int(round(self.value * PITCHWHEEL_MAX))
        return int(round(self.value * -PITCHWHEEL_MIN))


NoteEvent = Union[NoteOn, NoteOff, PitchBend]
