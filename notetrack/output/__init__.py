"""Output layer - delivery of note events to consumers."""

from .base import NoteConsumer
from .dispatcher import OutputDispatcher, ThreadedRelay
from .log import EventLog, LoggedEvent
from .midi import MidiPortOutput, PerformanceRecorder

__all__ = [
    "NoteConsumer",
    "OutputDispatcher",
    "ThreadedRelay",
    "EventLog",
    "LoggedEvent",
    "MidiPortOutput",
    "PerformanceRecorder",
]
