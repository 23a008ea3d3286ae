"""Event dispatch to output consumers."""

import queue
import threading
import warnings
from typing import Iterable, List, Optional, Sequence, Tuple

from ..core import NoteEvent, NoteOff, NoteOn, PitchBend
from .base import NoteConsumer


class OutputDispatcher:
    """Stateless relay from NoteEvent values to consumer calls, in order."""

    def __init__(self, consumers: Optional[Sequence[NoteConsumer]] = None):
        self.consumers: List[NoteConsumer] = list(consumers or [])

    def add(self, consumer: NoteConsumer) -> None:
        self.consumers.append(consumer)

    def dispatch(self, events: Iterable[NoteEvent]) -> None:
        for event in events:
            for consumer in self.consumers:
                if isinstance(event, NoteOn):
                    consumer.note_on(event.note, event.velocity)
                elif isinstance(event, NoteOff):
                    consumer.note_off(event.note)
                elif isinstance(event, PitchBend):
                    consumer.pitch_bend(event.value)
                else:
                    raise TypeError(f"Unknown note event: {event!r}")

    def status(self, note_name: str, frequency: float) -> None:
        """Best effort: a failing consumer is warned about and skipped."""
        for consumer in self.consumers:
            try:
                consumer.status(note_name, frequency)
            except Exception as e:
                warnings.warn(f"Status update failed for {type(consumer).__name__}: {e}")

    def close(self) -> None:
        for consumer in self.consumers:
            consumer.close()


_CLOSE = object()
_STATUS = object()


class ThreadedRelay:
    """
    Delivers events on a dedicated consumer thread.

    Producers call ``dispatch``/``status`` from any thread; events are
    handed over through a FIFO queue so emission order is kept. Status
    updates are display-only and coalesce: at most one is queued, and it
    carries the latest value when delivered.
    """

    def __init__(self, dispatcher: OutputDispatcher, maxsize: int = 0):
        self.dispatcher = dispatcher
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self._status_lock = threading.Lock()
        self._latest_status: Optional[Tuple[str, float]] = None
        self._thread = threading.Thread(target=self._run, name="notetrack-output", daemon=True)
        self._thread.start()

    def dispatch(self, events: Iterable[NoteEvent]) -> None:
        events = list(events)
        if events:
            self._queue.put(events)

    def status(self, note_name: str, frequency: float) -> None:
        with self._status_lock:
            queued = self._latest_status is not None
            self._latest_status = (note_name, frequency)
        if not queued:
            self._queue.put(_STATUS)

    def flush(self) -> None:
        """Block until every queued message has been delivered."""
        if self._thread.is_alive():
            self._queue.join()

    def close(self) -> None:
        if not self._thread.is_alive():
            return
        self._queue.put(_CLOSE)
        self._thread.join()
        self.dispatcher.close()

    def _run(self) -> None:
        while True:
            message = self._queue.get()
            try:
                if message is _CLOSE:
                    return
                if message is _STATUS:
                    with self._status_lock:
                        latest, self._latest_status = self._latest_status, None
                    self.dispatcher.status(*latest)
                else:
                    self.dispatcher.dispatch(message)
            except Exception as e:
                warnings.warn(f"Output consumer failed: {e}")
            finally:
                self._queue.task_done()
