"""Error taxonomy for Note Track.

Only resource errors are exceptions. Per-frame outcomes such as silence or
an ambiguous pitch are reported as ``Rejection`` values, never raised.
"""

from enum import Enum


class NoteTrackError(Exception):
    """Base class for all Note Track errors."""


class DeviceUnavailable(NoteTrackError):
    """Audio input (or MIDI output) device could not be opened."""


class ModelLoadFailure(NoteTrackError):
    """Learned estimator model could not be loaded."""


class InferenceFailure(NoteTrackError):
    """Learned estimator raised during inference."""


class Rejection(Enum):
    """Why a frame did not produce an accepted pitch."""

    NO_SIGNAL = "no_signal"  # energy below gate or no periodicity found
    AMBIGUOUS_PITCH = "ambiguous_pitch"  # failed harmonic or tolerance check
