"""Tests for note math and note events."""

import pytest

from notetrack.core import (
    Note,
    NoteIdentity,
    PitchBend,
    deviation_percent,
    midi_to_freq,
    nearest_note,
    note_name,
)


class TestNearestNote:
    def test_reference_pitch(self):
        identity = nearest_note(440.0)
        assert identity.number == 69
        assert identity.cents == pytest.approx(0.0, abs=1e-9)
        assert identity.name == "A4"

    def test_octaves(self):
        assert nearest_note(880.0).number == 81
        assert nearest_note(220.0).number == 57
        assert nearest_note(261.63).number == 60  # C4 (approx)

    def test_residual_cents(self):
        identity = nearest_note(445.0)
        assert identity.number == 69
        assert identity.cents == pytest.approx(19.56, abs=0.01)

        flat = nearest_note(435.0)
        assert flat.number == 69
        assert flat.cents < 0

    def test_half_semitone_rounds_up(self):
        # A4 + exactly 50 cents
        identity = nearest_note(midi_to_freq(69.5))
        assert identity.number == 70
        assert identity.cents == pytest.approx(-50.0, abs=1e-6)

    def test_deterministic(self):
        freqs = [27.5, 98.0, 311.13, 445.0, 1567.98]
        first = [nearest_note(f) for f in freqs]
        second = [nearest_note(f) for f in freqs]
        assert first == second

    def test_custom_reference(self):
        assert nearest_note(432.0, reference=432.0).number == 69

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            nearest_note(0.0)


class TestNoteHelpers:
    def test_note_name(self):
        assert note_name(60) == "C4"
        assert note_name(69) == "A4"
        assert note_name(61) == "C#4"
        assert note_name(21) == "A0"

    def test_midi_to_freq(self):
        assert midi_to_freq(69) == 440.0
        assert abs(midi_to_freq(60) - 261.63) < 0.01

    def test_identity_frequency(self):
        assert NoteIdentity(81, 12.0).frequency() == pytest.approx(880.0)

    def test_deviation_percent(self):
        assert deviation_percent(440.0, 69) == 0.0
        assert deviation_percent(448.8, 69) == pytest.approx(2.0)

    def test_recorded_note(self):
        note = Note(pitch=69, onset=0.5, offset=1.5, velocity=80)
        assert note.duration == 1.0
        assert note.pitch_name == "A4"


class TestPitchBend:
    def test_clamped(self):
        assert PitchBend(1.7).value == 1.0
        assert PitchBend(-3.0).value == -1.0

    def test_pitchwheel_range(self):
        assert PitchBend(0.0).to_midi_pitchwheel() == 0
        assert PitchBend(1.0).to_midi_pitchwheel() == 8191
        assert PitchBend(-1.0).to_midi_pitchwheel() == -8192
        assert PitchBend(0.5).to_midi_pitchwheel() == 4096
