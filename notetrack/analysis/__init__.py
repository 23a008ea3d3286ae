"""Analysis layer - per-frame pitch estimation and verification.

- YIN time-domain estimator (always available)
- Learned estimator over a 20-cent grid (optional, CREPE or TorchScript)
- Harmonic verifier rejecting noise and octave errors
"""

from .estimate import PitchEstimate, VerifiedEstimate, rms
from .base import PitchEstimator
from .yin import TimeDomainEstimator
from .learned import LearnedEstimator, ModelRunner, load_model, bin_frequencies
from .selector import EstimatorSelector, build_selector
from .harmonics import HarmonicVerifier

__all__ = [
    "PitchEstimate",
    "VerifiedEstimate",
    "rms",
    "PitchEstimator",
    "TimeDomainEstimator",
    "LearnedEstimator",
    "ModelRunner",
    "load_model",
    "bin_frequencies",
    "EstimatorSelector",
    "build_selector",
    "HarmonicVerifier",
]
