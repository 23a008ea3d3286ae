"""Note decision state machine.

Turns the stream of verified pitch estimates into discrete note events.
States are ``Silent`` (no active note) and ``Tracking(n)``. A note only
changes when the estimate snaps to a different equal-tempered note, so
jitter inside the tolerance window produces pitch bends, never retriggers.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from ..config import DetectionConfig
from ..core import (
    NoteEvent,
    NoteIdentity,
    NoteOff,
    NoteOn,
    PitchBend,
    Rejection,
    deviation_percent,
    nearest_note,
)
from ..core.constants import MIDI_MAX, MIDI_MIN
from ..analysis import VerifiedEstimate


@dataclass
class TrackedNoteState:
    """Mutable tracking state, owned by a single NoteDecision."""

    active_note: Optional[NoteIdentity] = None
    pending_release: Dict[int, None] = field(default_factory=dict)  # ordered set
    last_bend_cents: float = 0.0
    sustain: bool = False

    @property
    def pending_notes(self) -> List[int]:
        """Notes waiting for sustain release, oldest first."""
        return list(self.pending_release)

    def clear(self) -> None:
        self.active_note = None
        self.pending_release.clear()
        self.last_bend_cents = 0.0


class NoteDecision:
    """Hysteresis and sustain logic between pitch estimates and note events."""

    def __init__(self, config: DetectionConfig):
        self.reference_pitch = config.reference_pitch
        self.percent_tolerance = config.percent_tolerance
        self.bend_range = config.pitch_bend_range_semitones
        self.bend_deadband = config.bend_deadband_cents
        self.velocity_scale = config.velocity_scale
        self._state = TrackedNoteState()

    @property
    def state(self) -> TrackedNoteState:
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state.active_note is not None

    @property
    def sustain(self) -> bool:
        return self._state.sustain

    def snap(self, frequency: float) -> Optional[NoteIdentity]:
        """
        Nearest note within the tolerance window, or None.

        Args:
            frequency: Candidate frequency in Hz

        Returns:
            NoteIdentity if *frequency* is within ``percent_tolerance`` of
            the nearest ET note and inside the MIDI range
        """
        identity = nearest_note(frequency, self.reference_pitch)
        if not MIDI_MIN <= identity.number <= MIDI_MAX:
            return None
        if deviation_percent(frequency, identity.number, self.reference_pitch) > self.percent_tolerance:
            return None
        return identity

    def process(self, verified: VerifiedEstimate) -> List[NoteEvent]:
        """
        Advance the state machine by one analysis frame.

        Frames without any pitch end the active note. Frames whose pitch
        was rejected (harmonics or tolerance) leave the state untouched.
        """
        if not verified.accepted:
            if verified.rejection is Rejection.NO_SIGNAL:
                return self._release_active()
            return []

        identity = self.snap(verified.frequency)
        if identity is None:
            return []

        state = self._state
        events: List[NoteEvent] = []

        if state.active_note is not None and state.active_note.number == identity.number:
            state.active_note = identity
            events.extend(self._bend(identity.cents))
            return events

        # Bend precedes the Off/On pair
        events.extend(self._bend(identity.cents))
        if state.active_note is not None:
            events.extend(self._release(state.active_note.number))

        state.active_note = identity
        events.append(NoteOn(identity.number, self._velocity(verified.energy)))
        return events

    def set_sustain(self, enabled: bool) -> List[NoteEvent]:
        """
        Engage or release sustain.

        Releasing drains the pending notes in the order they were deferred.
        A pending note that is being tracked again keeps sounding; its
        release comes when tracking leaves it.
        """
        state = self._state
        if enabled:
            state.sustain = True
            return []
        if not state.sustain:
            return []

        state.sustain = False
        active = state.active_note.number if state.active_note is not None else None
        events = [NoteOff(note) for note in state.pending_release if note != active]
        state.pending_release.clear()
        return events

    def panic(self) -> List[NoteEvent]:
        """Silence every sounding note immediately, ignoring sustain."""
        state = self._state
        sounding = list(state.pending_release)
        if state.active_note is not None and state.active_note.number not in state.pending_release:
            sounding.append(state.active_note.number)

        events: List[NoteEvent] = [NoteOff(note) for note in sounding]
        if state.last_bend_cents != 0.0:
            events.append(PitchBend(0.0))
        state.clear()
        return events

    def stop(self) -> List[NoteEvent]:
        """Panic and return to the initial state, sustain released."""
        events = self.panic()
        self._state.sustain = False
        return events

    def _release_active(self) -> List[NoteEvent]:
        state = self._state
        if state.active_note is None:
            return []
        note = state.active_note.number
        state.active_note = None
        return self._release(note)

    def _release(self, note: int) -> List[NoteEvent]:
        if self._state.sustain:
            self._state.pending_release[note] = None
            return []
        return [NoteOff(note)]

    def _bend(self, cents: float) -> List[NoteEvent]:
        if abs(cents - self._state.last_bend_cents) < self.bend_deadband:
            return []
        self._state.last_bend_cents = cents
        return [PitchBend(cents / 100.0 / self.bend_range)]

    def _velocity(self, energy: float) -> int:
        return int(np.clip(round(energy * self.velocity_scale), 1, 127))
