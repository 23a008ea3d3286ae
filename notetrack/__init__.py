"""Note Track - microphone pitch to discrete note events.

Architecture Layers:
    1. core/      - Note math, note events, errors
    2. input/     - Frame sources, resampling and frame assembly
    3. analysis/  - Pitch estimation (YIN, learned) and harmonic verification
    4. tracking/  - Note decision state machine (hysteresis, sustain)
    5. output/    - Event dispatch to MIDI ports, logs and recorders
"""

__version__ = "0.1.0"

# Core types
from .core import NoteIdentity, NoteOn, NoteOff, PitchBend, nearest_note

# Configuration
from .config import DetectionConfig, load_config

# Input layer
from .input import FrameAssembler, ArraySource, PollingSource, MicrophoneSource

# Analysis layer
from .analysis import (
    PitchEstimate,
    TimeDomainEstimator,
    LearnedEstimator,
    EstimatorSelector,
    HarmonicVerifier,
)

# Tracking layer
from .tracking import NoteDecision

# Output layer
from .output import OutputDispatcher, EventLog, MidiPortOutput, PerformanceRecorder

# Pipeline
from .engine import NoteTracker

__all__ = [
    # Core
    "NoteIdentity",
    "NoteOn",
    "NoteOff",
    "PitchBend",
    "nearest_note",
    # Config
    "DetectionConfig",
    "load_config",
    # Input
    "FrameAssembler",
    "ArraySource",
    "PollingSource",
    "MicrophoneSource",
    # Analysis
    "PitchEstimate",
    "TimeDomainEstimator",
    "LearnedEstimator",
    "EstimatorSelector",
    "HarmonicVerifier",
    # Tracking
    "NoteDecision",
    # Output
    "OutputDispatcher",
    "EventLog",
    "MidiPortOutput",
    "PerformanceRecorder",
    # Pipeline
    "NoteTracker",
]
