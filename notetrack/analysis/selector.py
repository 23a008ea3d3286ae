"""Estimator selection with one-way fallback."""

import warnings
from typing import Optional

import numpy as np

from ..config import DetectionConfig
from ..core import InferenceFailure, ModelLoadFailure
from .base import PitchEstimator
from .estimate import PitchEstimate
from .learned import LearnedEstimator, load_model
from .yin import TimeDomainEstimator


class EstimatorSelector(PitchEstimator):
    """
    Prefers the learned estimator while it is healthy.

    The first inference failure switches to the time-domain estimator for
    the rest of the session. There is no retry.
    """

    name = "selector"

    def __init__(
        self,
        time_domain: TimeDomainEstimator,
        learned: Optional[PitchEstimator] = None,
    ):
        self.time_domain = time_domain
        self.learned = learned
        self._active: PitchEstimator = learned if learned is not None else time_domain
        self.failure: Optional[InferenceFailure] = None

    @property
    def learned_active(self) -> bool:
        return self._active is not self.time_domain

    @property
    def active_name(self) -> str:
        return self._active.name

    def disable_learned(self, failure: InferenceFailure) -> None:
        if not self.learned_active:
            return
        self._active = self.time_domain
        self.failure = failure
        warnings.warn(f"Learned pitch estimator disabled, falling back to YIN: {failure}")

    def estimate(self, frame: np.ndarray) -> PitchEstimate:
        if self.learned_active:
            try:
                return self._active.estimate(frame)
            except Exception as e:
                failure = e if isinstance(e, InferenceFailure) else InferenceFailure(str(e))
                self.disable_learned(failure)
        return self.time_domain.estimate(frame)


def build_selector(config: DetectionConfig) -> EstimatorSelector:
    """
    Create the estimator stack for a config.

    A model that cannot be loaded is reported with a warning and the
    session runs on YIN alone.
    """
    time_domain = TimeDomainEstimator(config)
    learned = None
    if config.model_path:
        try:
            runner = load_model(
                config.model_path,
                input_name=config.model_input_name,
                output_name=config.model_output_name,
            )
            learned = LearnedEstimator(runner, config)
        except ModelLoadFailure as e:
            warnings.warn(f"{e}; using YIN only")
    return EstimatorSelector(time_domain, learned)
