"""Global constants for Note Track."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Tuning
A4_MIDI = 69
DEFAULT_REFERENCE_PITCH = 440.0

# Analysis defaults
CANONICAL_SR = 16000
DEFAULT_FRAME_SIZE = 1024

# Learned estimator output grid (20-cent bins starting at C1)
GRID_BASE_HZ = 32.70319566
GRID_CENTS_PER_BIN = 20
GRID_BINS = 360

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127
PITCHWHEEL_MIN = -8192
PITCHWHEEL_MAX = 8191
