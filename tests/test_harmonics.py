"""Tests for the harmonic verifier."""

import numpy as np
import pytest

from notetrack.analysis import HarmonicVerifier, PitchEstimate
from notetrack.core import Rejection

from conftest import harmonic_tone, sine, white_noise


@pytest.fixture
def verifier(config):
    return HarmonicVerifier(config)


class TestProminence:
    def test_pure_tone_has_no_harmonics(self, verifier):
        frame = sine(440.0)
        score = verifier.prominence(440.0, verifier.magnitude_spectrum(frame), len(frame))
        assert 0.0 <= score < 0.05

    def test_rich_tone_is_prominent(self, verifier):
        frame = harmonic_tone(440.0)
        score = verifier.prominence(440.0, verifier.magnitude_spectrum(frame), len(frame))
        assert score > 0.6
        assert score <= 1.0

    def test_high_pure_tone(self, verifier):
        frame = sine(1900.0)
        score = verifier.prominence(1900.0, verifier.magnitude_spectrum(frame), len(frame))
        assert score == pytest.approx(0.0, abs=0.05)

    def test_spectrum_length(self, verifier):
        assert len(verifier.magnitude_spectrum(sine(440.0))) == 513


class TestVerify:
    def test_no_pitch(self, verifier):
        result = verifier.verify(PitchEstimate.silent(0.0), sine(440.0))
        assert not result.accepted
        assert result.rejection is Rejection.NO_SIGNAL

    def test_high_confidence_accepted_alone(self, verifier):
        result = verifier.verify(PitchEstimate(440.0, 0.97, 0.35), sine(440.0))
        assert result.accepted
        assert result.rejection is None

    def test_moderate_confidence_with_harmonics(self, verifier):
        result = verifier.verify(PitchEstimate(440.0, 0.6, 0.35), harmonic_tone(440.0))
        assert result.accepted
        assert result.prominence > 0.3

    def test_moderate_confidence_without_harmonics(self, verifier):
        result = verifier.verify(PitchEstimate(440.0, 0.6, 0.35), sine(440.0))
        assert not result.accepted
        assert result.rejection is Rejection.AMBIGUOUS_PITCH
        assert result.prominence < 0.3

    def test_low_confidence_rejected(self, verifier):
        result = verifier.verify(PitchEstimate(440.0, 0.2, 0.1), white_noise())
        assert not result.accepted
        assert result.rejection is Rejection.AMBIGUOUS_PITCH

    def test_passes_estimate_through(self, verifier):
        estimate = PitchEstimate(440.0, 0.95, 0.35)
        result = verifier.verify(estimate, sine(440.0))
        assert result.estimate is estimate
        assert result.frequency == 440.0
        assert result.confidence == 0.95
        assert result.energy == 0.35
