"""Note events to a MIDI output port (mido) and to MIDI files (pretty_midi)."""

import time
from typing import Callable, Dict, List, Optional

import pretty_midi

from ..core import DeviceUnavailable, Note, PitchBend
from .base import NoteConsumer


class MidiPortOutput(NoteConsumer):
    """
    Sends events to a MIDI output port.

    Args:
        port_name: Output port name; None opens the default port
        channel: MIDI channel (0-15)
        virtual: Create a virtual port instead of opening an existing one

    Raises:
        DeviceUnavailable: If the port cannot be opened
    """

    def __init__(self, port_name: Optional[str] = None, channel: int = 0, virtual: bool = False):
        import mido

        self._mido = mido
        self.channel = channel
        try:
            self.port = mido.open_output(port_name, virtual=virtual)
        except Exception as e:
            raise DeviceUnavailable(f"Cannot open MIDI output {port_name or 'default'}: {e}") from e

    def _send(self, kind: str, **kwargs) -> None:
        self.port.send(self._mido.Message(kind, channel=self.channel, **kwargs))

    def note_on(self, note: int, velocity: int) -> None:
        self._send("note_on", note=note, velocity=velocity)

    def note_off(self, note: int) -> None:
        self._send("note_off", note=note, velocity=0)

    def pitch_bend(self, value: float) -> None:
        self._send("pitchwheel", pitch=PitchBend(value).to_midi_pitchwheel())

    def close(self) -> None:
        self.port.close()


class PerformanceRecorder(NoteConsumer):
    """
    Collects On/Off pairs into timed notes for export.

    Args:
        clock: Time source in seconds; time since construction by default
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.monotonic
        self.notes: List[Note] = []
        self._open: Dict[int, Note] = {}
        self._origin = time.monotonic() if clock is None else 0.0

    def _now(self) -> float:
        return self.clock() - self._origin

    def note_on(self, note: int, velocity: int) -> None:
        now = self._now()
        if note in self._open:
            # Retrigger of a sounding note ends the previous one
            self._close_note(note, now)
        self._open[note] = Note(pitch=note, onset=now, offset=now, velocity=velocity)

    def note_off(self, note: int) -> None:
        if note in self._open:
            self._close_note(note, self._now())

    def _close_note(self, note: int, now: float) -> None:
        recorded = self._open.pop(note)
        recorded.offset = now
        self.notes.append(recorded)

    def close(self) -> None:
        """Close notes that never received an Off."""
        now = self._now()
        for note in list(self._open):
            self._close_note(note, now)

    def export_midi(
        self,
        output_path: str,
        tempo: float = 120.0,
        instrument_program: int = 0,
    ) -> None:
        """
        Export the recorded notes to a MIDI file.

        Args:
            output_path: Path to output MIDI file
            tempo: Tempo in BPM
            instrument_program: MIDI program number (0-127)
        """
        midi = pretty_midi.PrettyMIDI(initial_tempo=tempo)
        instrument = pretty_midi.Instrument(program=instrument_program, name="Note Track")

        for note in sorted(self.notes, key=lambda n: n.onset):
            if note.duration <= 0:
                continue
            instrument.notes.append(
                pretty_midi.Note(
                    velocity=note.velocity,
                    pitch=note.pitch,
                    start=note.onset,
                    end=note.offset,
                )
            )

        midi.instruments.append(instrument)
        midi.write(str(output_path))
