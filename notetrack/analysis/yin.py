"""YIN time-domain pitch estimation."""

import numpy as np

from ..config import DetectionConfig
from .base import PitchEstimator
from .estimate import PitchEstimate, rms


def difference_function(frame: np.ndarray, max_lag: int) -> np.ndarray:
    """
    Squared difference function d(tau) for tau in [0, max_lag].

    The integration window is ``len(frame) - max_lag`` samples so every
    lag is computed over the same number of terms.
    """
    frame = np.asarray(frame, dtype=np.float64)
    window = len(frame) - max_lag
    ref = frame[:window]
    diff = np.zeros(max_lag + 1)
    for tau in range(1, max_lag + 1):
        delta = ref - frame[tau:tau + window]
        diff[tau] = np.dot(delta, delta)
    return diff


def cumulative_mean_normalized(diff: np.ndarray) -> np.ndarray:
    """Cumulative-mean-normalized difference d'(tau), with d'(0) = 1."""
    cmnd = np.ones_like(diff)
    running = np.cumsum(diff[1:])
    lags = np.arange(1, len(diff))
    with np.errstate(divide="ignore", invalid="ignore"):
        normalized = diff[1:] * lags / running
    cmnd[1:] = np.where(running > 0, normalized, 1.0)
    return cmnd


def parabolic_offset(values: np.ndarray, index: int) -> float:
    """Sub-sample offset of the vertex of the parabola through index-1..index+1."""
    if index <= 0 or index >= len(values) - 1:
        return 0.0
    x0, x1, x2 = values[index - 1], values[index], values[index + 1]
    denom = x0 - 2 * x1 + x2
    if abs(denom) < 1e-12:
        return 0.0
    return float(np.clip(0.5 * (x0 - x2) / denom, -1.0, 1.0))


class TimeDomainEstimator(PitchEstimator):
    """Always-available YIN-style estimator, cheap enough for the audio path."""

    name = "yin"

    def __init__(self, config: DetectionConfig):
        self.sample_rate = config.sample_rate
        self.min_freq = config.min_freq
        self.max_freq = config.max_freq
        self.min_lag = config.min_lag
        self.max_lag = config.max_lag
        self.threshold = config.yin_threshold
        self.energy_gate = config.energy_gate

    def estimate(self, frame: np.ndarray) -> PitchEstimate:
        energy = rms(frame)
        if energy < self.energy_gate:
            return PitchEstimate.silent(energy)

        cmnd = cumulative_mean_normalized(difference_function(frame, self.max_lag))

        tau = self._first_dip(cmnd)
        if tau is None:
            # No lag is periodic enough
            best = float(np.min(cmnd[self.min_lag:]))
            return PitchEstimate.silent(energy, confidence=float(np.clip(1.0 - best, 0.0, 1.0)))

        refined = tau + parabolic_offset(cmnd, tau)
        confidence = float(np.clip(1.0 - cmnd[tau], 0.0, 1.0))
        frequency = self.sample_rate / refined

        if not self.min_freq <= frequency <= self.max_freq:
            return PitchEstimate.silent(energy, confidence=confidence)

        return PitchEstimate(frequency=frequency, confidence=confidence, energy=energy)

    def _first_dip(self, cmnd: np.ndarray):
        """First lag below threshold, walked down to its local minimum."""
        below = np.nonzero(cmnd[self.min_lag:self.max_lag + 1] < self.threshold)[0]
        if len(below) == 0:
            return None
        tau = self.min_lag + int(below[0])
        while tau + 1 <= self.max_lag and cmnd[tau + 1] < cmnd[tau]:
            tau += 1
        return tau
