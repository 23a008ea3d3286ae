"""Base class for pitch estimators."""

from abc import ABC, abstractmethod

import numpy as np

from .estimate import PitchEstimate


class PitchEstimator(ABC):
    """Abstract base class: one analysis frame in, one estimate out."""

    name = "estimator"

    @abstractmethod
    def estimate(self, frame: np.ndarray) -> PitchEstimate:
        """
        Estimate the dominant pitch of a frame.

        Args:
            frame: Analysis frame at the canonical sample rate

        Returns:
            PitchEstimate (frequency is None when no pitch was found)
        """
        pass
