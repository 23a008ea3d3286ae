"""Audio file loading for offline analysis."""

from pathlib import Path
from typing import Optional, Tuple

import librosa
import numpy as np


class AudioLoader:
    """Reads a file (or a slice of it) as mono float32 at its native rate."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a"}

    def __init__(self, sr: Optional[int] = None, normalize: bool = False):
        self.sr = sr
        self.normalize = normalize

    def load(
        self,
        path: str,
        start: float = 0.0,
        duration: Optional[float] = None,
    ) -> Tuple[np.ndarray, int]:
        """
        Load an audio file.

        Args:
            path: Path to audio file
            start: Skip this many seconds from the beginning
            duration: Read at most this many seconds (None = to the end)

        Returns:
            Tuple of (mono float32 audio, sample rate)

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If the format is not supported or the slice is empty
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")
        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        audio, sr = librosa.load(
            str(path), sr=self.sr, mono=True, offset=start, duration=duration
        )
        if len(audio) == 0:
            raise ValueError(f"No audio in {path.name} from {start:.2f}s")

        if self.normalize:
            peak = np.abs(audio).max()
            if peak > 0:
                audio = audio / peak
        return audio.astype(np.float32), int(sr)
