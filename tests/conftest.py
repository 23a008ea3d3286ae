"""Shared fixtures and synthetic signal helpers."""

import numpy as np
import pytest

from notetrack.analysis import PitchEstimate, VerifiedEstimate
from notetrack.config import DetectionConfig
from notetrack.core import Rejection

SR = 16000
FRAME = 1024


def sine(freq: float, n_samples: int = FRAME, sr: int = SR, amplitude: float = 0.5, phase: float = 0.0) -> np.ndarray:
    """Generate a sine tone."""
    t = np.arange(n_samples) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t + phase)).astype(np.float32)


def harmonic_tone(freq: float, n_samples: int = FRAME, sr: int = SR, amplitude: float = 0.2, n_harmonics: int = 5) -> np.ndarray:
    """Generate a tone with equal-amplitude harmonics 1..n."""
    t = np.arange(n_samples) / sr
    audio = sum(np.sin(2 * np.pi * freq * h * t) for h in range(1, n_harmonics + 1))
    return (amplitude * audio).astype(np.float32)


def white_noise(n_samples: int = FRAME, amplitude: float = 0.1, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return (rng.standard_normal(n_samples) * amplitude).astype(np.float32)


def silence(n_samples: int = FRAME) -> np.ndarray:
    return np.zeros(n_samples, dtype=np.float32)


def accepted(freq: float, confidence: float = 0.95, energy: float = 0.35) -> VerifiedEstimate:
    return VerifiedEstimate(PitchEstimate(freq, confidence, energy), accepted=True)


def no_signal(energy: float = 0.0) -> VerifiedEstimate:
    return VerifiedEstimate(PitchEstimate.silent(energy), accepted=False, rejection=Rejection.NO_SIGNAL)


def ambiguous(freq: float = 440.0) -> VerifiedEstimate:
    return VerifiedEstimate(
        PitchEstimate(freq, 0.3, 0.35), accepted=False, rejection=Rejection.AMBIGUOUS_PITCH
    )


@pytest.fixture
def config():
    return DetectionConfig()
