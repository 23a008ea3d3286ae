"""Resampling and fixed-size frame assembly.

Runs on the time-critical audio path: the buffer is allocated once and
never grows. Input that does not fit before the next frame boundary is
dropped and counted.
"""

from typing import List

import numpy as np

from ..config import DetectionConfig


def resample_linear(block: np.ndarray, from_rate: float, to_rate: float) -> np.ndarray:
    """
    Resample a block by linear interpolation.

    Output sample ``i`` is read at fractional input position ``i * ratio``
    where ``ratio = from_rate / to_rate``; the right neighbour is clamped to
    the last input sample.

    Args:
        block: Mono audio block
        from_rate: Sample rate of *block*
        to_rate: Target sample rate

    Returns:
        Resampled float32 block of length ``round(len(block) / ratio)``
    """
    block = np.asarray(block, dtype=np.float32).ravel()
    if from_rate == to_rate or len(block) == 0:
        return block.copy()

    ratio = from_rate / to_rate
    new_length = int(round(len(block) / ratio))
    positions = np.arange(new_length) * ratio
    i0 = np.floor(positions).astype(np.int64)
    i0 = np.minimum(i0, len(block) - 1)
    i1 = np.minimum(i0 + 1, len(block) - 1)
    frac = (positions - i0).astype(np.float32)
    return block[i0] + (block[i1] - block[i0]) * frac


class FrameAssembler:
    """Accumulates resampled audio and yields fixed-length analysis frames."""

    def __init__(self, config: DetectionConfig):
        self.sample_rate = config.sample_rate
        self.frame_size = config.frame_size
        self.capacity = config.buffer_capacity

        self._buffer = np.zeros(self.capacity, dtype=np.float32)
        self._position = 0

        # Diagnostics
        self.dropped_samples = 0
        self.frames_emitted = 0

    @property
    def buffered(self) -> int:
        """Number of samples waiting for the next frame boundary."""
        return self._position

    def push(self, block: np.ndarray, sample_rate: float) -> List[np.ndarray]:
        """
        Add a native-rate block and collect every completed frame.

        Args:
            block: Mono audio block of any length
            sample_rate: Native sample rate of *block*

        Returns:
            Frames of exactly ``frame_size`` samples, oldest first
        """
        resampled = resample_linear(block, sample_rate, self.sample_rate)

        space = self.capacity - self._position
        if len(resampled) > space:
            self.dropped_samples += len(resampled) - space
            resampled = resampled[:space]

        n = len(resampled)
        self._buffer[self._position:self._position + n] = resampled
        self._position += n

        frames = []
        while self._position >= self.frame_size:
            frames.append(self._buffer[:self.frame_size].copy())
            remainder = self._position - self.frame_size
            self._buffer[:remainder] = self._buffer[self.frame_size:self._position]
            self._position = remainder
            self.frames_emitted += 1

        return frames

    def reset(self) -> None:
        """Discard any partially assembled frame."""
        self._position = 0
