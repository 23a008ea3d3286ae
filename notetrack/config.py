"""Detection configuration.

All tunables of the pitch-to-note pipeline live in one dataclass so that
independent tracker instances can run side by side with different settings.
Sustain is deliberately absent: it is a runtime toggle on the tracker.
"""

import json
import re
import warnings
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .core.constants import CANONICAL_SR, DEFAULT_FRAME_SIZE, DEFAULT_REFERENCE_PITCH


@dataclass
class DetectionConfig:
    """Configuration surface of the note tracker."""

    # Framing
    sample_rate: int = CANONICAL_SR
    frame_size: int = DEFAULT_FRAME_SIZE
    buffer_capacity: Optional[int] = None  # defaults to 2 * frame_size
    detection_interval_ms: Optional[float] = None  # defaults to frame duration

    # Estimation
    energy_gate: float = 0.01  # minimum frame RMS
    min_freq: float = 50.0
    max_freq: float = 2000.0
    yin_threshold: float = 0.15

    # Verification
    high_confidence: float = 0.95  # above 1 - yin_threshold
    moderate_confidence: float = 0.5
    harmonic_prominence_threshold: float = 0.3

    # Note decision
    percent_tolerance: float = 2.0
    pitch_bend_range_semitones: float = 2.0
    bend_deadband_cents: float = 5.0
    reference_pitch: float = DEFAULT_REFERENCE_PITCH
    velocity_scale: float = 200.0

    # Learned estimator
    model_path: Optional[str] = None
    model_input_name: str = "input"
    model_output_name: str = "logits"
    inference_queue_size: int = 4

    def __post_init__(self):
        if self.buffer_capacity is None:
            self.buffer_capacity = 2 * self.frame_size
        if self.detection_interval_ms is None:
            self.detection_interval_ms = 1000.0 * self.frame_size / self.sample_rate

    @property
    def min_lag(self) -> int:
        """Smallest YIN lag in samples (highest detectable frequency)."""
        return max(2, int(self.sample_rate // self.max_freq))

    @property
    def max_lag(self) -> int:
        """Largest YIN lag in samples (lowest detectable frequency)."""
        return int(-(-self.sample_rate // self.min_freq))

    def validate(self) -> "DetectionConfig":
        """
        Check the configuration for inconsistent values.

        Returns:
            self, so calls can be chained

        Raises:
            ValueError: On the first invalid setting
        """
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.frame_size <= 0:
            raise ValueError(f"frame_size must be positive, got {self.frame_size}")
        if self.buffer_capacity < self.frame_size:
            raise ValueError(
                f"buffer_capacity ({self.buffer_capacity}) must hold at least "
                f"one frame ({self.frame_size})"
            )
        if not 0 < self.min_freq < self.max_freq:
            raise ValueError(
                f"Expected 0 < min_freq < max_freq, got {self.min_freq}, {self.max_freq}"
            )
        if self.max_freq >= self.sample_rate / 2:
            raise ValueError(f"max_freq must be below Nyquist ({self.sample_rate / 2} Hz)")
        if self.max_lag + 2 >= self.frame_size:
            raise ValueError(
                f"frame_size {self.frame_size} too short for min_freq {self.min_freq} Hz "
                f"(needs more than {self.max_lag + 2} samples)"
            )
        if self.energy_gate < 0:
            raise ValueError(f"energy_gate must be non-negative, got {self.energy_gate}")
        if not 0 < self.percent_tolerance < 50:
            raise ValueError(f"percent_tolerance must be in (0, 50), got {self.percent_tolerance}")
        if not 0 < self.yin_threshold < 1:
            raise ValueError(f"yin_threshold must be in (0, 1), got {self.yin_threshold}")
        if not 0 <= self.moderate_confidence <= self.high_confidence <= 1:
            raise ValueError("Expected 0 <= moderate_confidence <= high_confidence <= 1")
        if self.high_confidence <= 1 - self.yin_threshold:
            raise ValueError(
                f"high_confidence ({self.high_confidence}) must exceed 1 - yin_threshold "
                f"({1 - self.yin_threshold:.2f}) or YIN pitches skip the harmonic check"
            )
        if not 0 <= self.harmonic_prominence_threshold <= 1:
            raise ValueError("harmonic_prominence_threshold must be in [0, 1]")
        if self.pitch_bend_range_semitones <= 0:
            raise ValueError("pitch_bend_range_semitones must be positive")
        if self.bend_deadband_cents < 0:
            raise ValueError("bend_deadband_cents must be non-negative")
        if self.inference_queue_size < 1:
            raise ValueError("inference_queue_size must be at least 1")
        if self.detection_interval_ms <= 0:
            raise ValueError("detection_interval_ms must be positive")
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetectionConfig":
        """
        Build a config from a mapping.

        Accepts snake_case field names as well as camelCase aliases
        (``energyGate``, ``minFreq``, ``frameSize``...). Unknown keys are
        ignored with a warning.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _snake_case(key)
            if name not in known:
                warnings.warn(f"Ignoring unknown config option: {key}")
                continue
            kwargs[name] = value
        return cls(**kwargs).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def load_config(path: str) -> DetectionConfig:
    """
    Load a JSON config file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not valid JSON or holds invalid values
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config file must hold a JSON object: {path}")
    return DetectionConfig.from_dict(data)
