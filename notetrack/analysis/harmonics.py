"""Harmonic plausibility check for candidate fundamentals."""

import numpy as np
from scipy.fft import rfft
from scipy.signal import get_window

from ..config import DetectionConfig
from ..core import Rejection
from .estimate import PitchEstimate, VerifiedEstimate

HARMONICS = (2, 3, 4, 5)


class HarmonicVerifier:
    """
    Accepts a candidate when the estimator is confident enough on its own,
    or moderately confident and backed by harmonic energy.

    Prominence is ``tanh(mean(|X(h * f0)|, h = 2..5) / |X(f0)|)``.
    """

    def __init__(self, config: DetectionConfig):
        self.sample_rate = config.sample_rate
        self.high_confidence = config.high_confidence
        self.moderate_confidence = config.moderate_confidence
        self.threshold = config.harmonic_prominence_threshold
        self._window = get_window("hann", config.frame_size)

    def magnitude_spectrum(self, frame: np.ndarray) -> np.ndarray:
        frame = np.asarray(frame, dtype=np.float64)
        window = self._window if len(frame) == len(self._window) else get_window("hann", len(frame))
        return np.abs(rfft(frame * window))

    def _peak_near(self, spectrum: np.ndarray, freq: float, n_fft: int) -> float:
        """Largest magnitude within one bin of *freq*; 0 above Nyquist."""
        center = int(round(freq * n_fft / self.sample_rate))
        if center >= len(spectrum):
            return 0.0
        lo = max(0, center - 1)
        hi = min(len(spectrum), center + 2)
        return float(np.max(spectrum[lo:hi]))

    def prominence(self, frequency: float, spectrum: np.ndarray, n_fft: int) -> float:
        """Harmonic prominence of *frequency* in [0, 1]."""
        fundamental = self._peak_near(spectrum, frequency, n_fft)
        harmonics = [self._peak_near(spectrum, h * frequency, n_fft) for h in HARMONICS]
        ratio = float(np.mean(harmonics)) / max(fundamental, 1e-12)
        return float(np.tanh(ratio))

    def verify(self, estimate: PitchEstimate, frame: np.ndarray) -> VerifiedEstimate:
        if not estimate.has_pitch:
            return VerifiedEstimate(estimate, accepted=False, rejection=Rejection.NO_SIGNAL)

        if estimate.confidence >= self.high_confidence:
            return VerifiedEstimate(estimate, accepted=True)

        if estimate.confidence >= self.moderate_confidence:
            spectrum = self.magnitude_spectrum(frame)
            score = self.prominence(estimate.frequency, spectrum, len(frame))
            if score > self.threshold:
                return VerifiedEstimate(estimate, accepted=True, prominence=score)
            return VerifiedEstimate(
                estimate, accepted=False, rejection=Rejection.AMBIGUOUS_PITCH, prominence=score
            )

        return VerifiedEstimate(estimate, accepted=False, rejection=Rejection.AMBIGUOUS_PITCH)
