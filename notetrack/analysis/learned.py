"""Learned (neural) pitch estimation.

The model sees one normalised frame as a ``[1, frame_size]`` tensor and
returns one logit per bin of a fixed log-spaced grid (20 cents per bin,
starting at C1). The estimate is the probability-weighted mean frequency
over all bins; confidence is the peak probability.
"""

from pathlib import Path
from typing import Callable, Dict

import numpy as np
from scipy.special import softmax

from ..config import DetectionConfig
from ..core import InferenceFailure, ModelLoadFailure
from ..core.constants import GRID_BASE_HZ, GRID_BINS, GRID_CENTS_PER_BIN
from .base import PitchEstimator
from .estimate import PitchEstimate, rms

TORCHSCRIPT_SUFFIXES = {".pt", ".ts", ".torchscript"}


def bin_frequencies(n_bins: int = GRID_BINS) -> np.ndarray:
    """Center frequency of every output bin."""
    cents = GRID_CENTS_PER_BIN * np.arange(n_bins)
    return GRID_BASE_HZ * 2 ** (cents / 1200.0)


class ModelRunner:
    """
    A loaded model with one named input and one named output.

    Args:
        fn: Callable mapping a ``[1, frame_size]`` float32 array to logits
        input_name: Name of the model input
        output_name: Name of the model output
        description: Human readable model origin
    """

    def __init__(
        self,
        fn: Callable[[np.ndarray], np.ndarray],
        input_name: str = "input",
        output_name: str = "logits",
        description: str = "",
    ):
        self.fn = fn
        self.input_name = input_name
        self.output_name = output_name
        self.description = description

    def run(self, feeds: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        return {self.output_name: self.fn(feeds[self.input_name])}


def load_model(
    locator: str,
    input_name: str = "input",
    output_name: str = "logits",
) -> ModelRunner:
    """
    Load a pitch model.

    Args:
        locator: ``crepe:<capacity>`` (tiny, small, medium, large, full) for
            the pretrained CREPE weights, or a path to a TorchScript file
        input_name: Name of the model input
        output_name: Name of the model output

    Returns:
        ModelRunner ready for inference

    Raises:
        ModelLoadFailure: If the model or its runtime cannot be loaded
    """
    try:
        if locator.startswith("crepe:"):
            return _load_crepe(locator.split(":", 1)[1] or "tiny", input_name, output_name)

        path = Path(locator)
        if path.suffix.lower() not in TORCHSCRIPT_SUFFIXES:
            raise ModelLoadFailure(
                f"Unsupported model format: {path.suffix}. "
                f"Supported: crepe:<capacity>, {sorted(TORCHSCRIPT_SUFFIXES)}"
            )
        if not path.exists():
            raise ModelLoadFailure(f"Model file not found: {path}")
        return _load_torchscript(path, input_name, output_name)

    except ModelLoadFailure:
        raise
    except Exception as e:
        raise ModelLoadFailure(f"Failed to load model {locator}: {e}") from e


def _load_crepe(capacity: str, input_name: str, output_name: str) -> ModelRunner:
    import crepe.core

    model = crepe.core.build_and_load_model(capacity)

    def run(frames: np.ndarray) -> np.ndarray:
        # CREPE ends in a sigmoid; invert it to recover logits
        activation = np.clip(model.predict(frames, verbose=0), 1e-7, 1 - 1e-7)
        return np.log(activation) - np.log1p(-activation)

    return ModelRunner(run, input_name, output_name, description=f"crepe:{capacity}")


def _load_torchscript(path: Path, input_name: str, output_name: str) -> ModelRunner:
    import torch

    module = torch.jit.load(str(path), map_location="cpu")
    module.eval()

    def run(frames: np.ndarray) -> np.ndarray:
        with torch.no_grad():
            output = module(torch.from_numpy(frames))
        if isinstance(output, dict):
            output = output[output_name]
        return output.cpu().numpy()

    return ModelRunner(run, input_name, output_name, description=str(path))


class LearnedEstimator(PitchEstimator):
    """Neural estimator over the fixed frequency grid."""

    name = "learned"

    def __init__(self, runner: ModelRunner, config: DetectionConfig):
        self.runner = runner
        self.frame_size = config.frame_size
        self.min_freq = config.min_freq
        self.max_freq = config.max_freq
        self.energy_gate = config.energy_gate
        self._grid = bin_frequencies()

    def estimate(self, frame: np.ndarray) -> PitchEstimate:
        energy = rms(frame)
        if energy < self.energy_gate:
            return PitchEstimate.silent(energy)

        logits = self._infer(frame)
        if len(logits) != len(self._grid):
            self._grid = bin_frequencies(len(logits))

        probs = softmax(logits)
        frequency = float(np.sum(probs * self._grid))
        confidence = float(np.clip(np.max(probs), 0.0, 1.0))

        if not self.min_freq <= frequency <= self.max_freq:
            return PitchEstimate.silent(energy, confidence=confidence)

        return PitchEstimate(frequency=frequency, confidence=confidence, energy=energy)

    def _infer(self, frame: np.ndarray) -> np.ndarray:
        x = np.asarray(frame, dtype=np.float32).ravel()
        if len(x) != self.frame_size:
            raise InferenceFailure(f"Expected {self.frame_size} samples, got {len(x)}")
        x = x - np.mean(x)
        x = x / np.clip(np.std(x), 1e-8, None)

        outputs = self.runner.run({self.runner.input_name: x[np.newaxis, :]})
        logits = np.asarray(outputs[self.runner.output_name], dtype=np.float64).reshape(-1)
        if len(logits) == 0 or not np.all(np.isfinite(logits)):
            raise InferenceFailure("Model returned empty or non-finite logits")
        return logits
