"""Per-frame pitch estimates."""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core import Rejection


def rms(frame: np.ndarray) -> float:
    """Root-mean-square level of a frame."""
    frame = np.asarray(frame, dtype=np.float64)
    if len(frame) == 0:
        return 0.0
    return float(np.sqrt(np.mean(frame ** 2)))


@dataclass(frozen=True)
class PitchEstimate:
    """Output of a pitch estimator for one frame."""

    frequency: Optional[float]  # Hz, None when no pitch was found
    confidence: float  # 0.0 - 1.0
    energy: float  # frame RMS

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")
        if self.energy < 0:
            raise ValueError(f"energy must be non-negative, got {self.energy}")
        if self.frequency is not None and self.frequency <= 0:
            raise ValueError(f"frequency must be positive, got {self.frequency}")

    @property
    def has_pitch(self) -> bool:
        return self.frequency is not None

    @classmethod
    def silent(cls, energy: float, confidence: float = 0.0) -> "PitchEstimate":
        return cls(frequency=None, confidence=confidence, energy=energy)


@dataclass(frozen=True)
class VerifiedEstimate:
    """A pitch estimate after harmonic verification."""

    estimate: PitchEstimate
    accepted: bool
    rejection: Optional[Rejection] = None
    prominence: Optional[float] = None

    @property
    def frequency(self) -> Optional[float]:
        return self.estimate.frequency

    @property
    def confidence(self) -> float:
        return self.estimate.confidence

    @property
    def energy(self) -> float:
        return self.estimate.energy
