"""Input layer - audio delivery and frame assembly."""

from .framing import FrameAssembler, resample_linear
from .sources import FrameSource, ArraySource, PollingSource, MicrophoneSource
from .loader import AudioLoader

__all__ = [
    "FrameAssembler",
    "resample_linear",
    "FrameSource",
    "ArraySource",
    "PollingSource",
    "MicrophoneSource",
    "AudioLoader",
]
