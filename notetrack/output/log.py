"""In-memory event log consumer."""

import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..core import NoteEvent, NoteOff, NoteOn, PitchBend, note_name
from .base import NoteConsumer


@dataclass(frozen=True)
class LoggedEvent:
    time: float
    event: NoteEvent

    def to_dict(self) -> dict:
        event = self.event
        if isinstance(event, NoteOn):
            return {"time": self.time, "type": "on", "note": event.note,
                    "name": note_name(event.note), "velocity": event.velocity}
        if isinstance(event, NoteOff):
            return {"time": self.time, "type": "off", "note": event.note,
                    "name": note_name(event.note)}
        return {"time": self.time, "type": "bend", "value": event.value}


class EventLog(NoteConsumer):
    """
    Records every event with a timestamp.

    Args:
        clock: Time source in seconds; ``time.monotonic`` by default.
            Offline analysis passes the stream position instead.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.monotonic
        self.entries: List[LoggedEvent] = []
        self.statuses: List[Tuple[str, float]] = []
        self._lock = threading.Lock()

    @property
    def events(self) -> List[NoteEvent]:
        with self._lock:
            return [entry.event for entry in self.entries]

    def _append(self, event: NoteEvent) -> None:
        with self._lock:
            self.entries.append(LoggedEvent(self.clock(), event))

    def note_on(self, note: int, velocity: int) -> None:
        self._append(NoteOn(note, velocity))

    def note_off(self, note: int) -> None:
        self._append(NoteOff(note))

    def pitch_bend(self, value: float) -> None:
        self._append(PitchBend(value))

    def status(self, note_name: str, frequency: float) -> None:
        with self._lock:
            self.statuses.append((note_name, frequency))

    def to_list(self) -> List[dict]:
        with self._lock:
            return [entry.to_dict() for entry in self.entries]
