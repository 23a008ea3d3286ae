"""The note tracking pipeline.

audio blocks -> FrameAssembler -> estimator -> HarmonicVerifier
-> NoteDecision -> OutputDispatcher -> consumers

``push_audio`` is safe to call from an audio driver callback once the
tracker is started: YIN runs inline, while frames meant for the learned
estimator go to a worker thread through a small queue that drops the
oldest frame when full. After a learned-estimator failure the worker keeps
the queue until it is empty, then retires and frames run inline, so frames
are always decided in arrival order. Before ``start()`` every frame is
processed synchronously, which is what offline analysis wants.
"""

import threading
from collections import deque
from typing import List, Optional, Sequence

import numpy as np

from .analysis import EstimatorSelector, HarmonicVerifier, PitchEstimate, build_selector
from .config import DetectionConfig
from .core import NoteEvent
from .input import FrameAssembler
from .output import NoteConsumer, OutputDispatcher, ThreadedRelay
from .tracking import NoteDecision


class NoteTracker:
    """
    Real-time monophonic pitch-to-note tracker.

    Args:
        config: Detection settings (defaults if None)
        consumers: Receivers of note events
        selector: Estimator stack; built from *config* if None
        threaded_output: Deliver events on a separate consumer thread
    """

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        consumers: Optional[Sequence[NoteConsumer]] = None,
        selector: Optional[EstimatorSelector] = None,
        threaded_output: bool = False,
    ):
        self.config = (config or DetectionConfig()).validate()
        self.assembler = FrameAssembler(self.config)
        self.selector = selector or build_selector(self.config)
        self.verifier = HarmonicVerifier(self.config)
        self.decision = NoteDecision(self.config)
        self.dispatcher = OutputDispatcher(consumers)
        self.output = ThreadedRelay(self.dispatcher) if threaded_output else self.dispatcher

        self._lock = threading.RLock()
        self._frames: deque = deque(maxlen=self.config.inference_queue_size)
        self._frames_ready = threading.Condition()
        self._worker: Optional[threading.Thread] = None
        self._running = False
        self._offloading = False
        self._generation = 0

        # Diagnostics
        self.frames_processed = 0
        self.dropped_frames = 0

    @property
    def sustain(self) -> bool:
        return self.decision.sustain

    @property
    def is_running(self) -> bool:
        """True while frames are handed to the inference worker."""
        return self._offloading

    def push_audio(self, block: np.ndarray, sample_rate: float) -> None:
        """Feed a native-rate mono block (any length)."""
        with self._lock:
            frames = self.assembler.push(block, sample_rate)
        for frame in frames:
            if not self._enqueue(frame):
                self.process_frame(frame)

    def process_frame(self, frame: np.ndarray) -> List[NoteEvent]:
        """Run one analysis frame through the pipeline synchronously."""
        generation = self._generation
        estimate = self.selector.estimate(frame)
        return self._decide(frame, estimate, generation)

    def set_sustain(self, enabled: bool) -> List[NoteEvent]:
        with self._lock:
            events = self.decision.set_sustain(enabled)
            self.output.dispatch(events)
        return events

    def panic(self) -> List[NoteEvent]:
        with self._lock:
            events = self.decision.panic()
            self.output.dispatch(events)
        return events

    def start(self) -> "NoteTracker":
        """Start the inference worker if the learned estimator is active."""
        if self._worker is None and self.selector.learned_active:
            self._running = True
            self._offloading = True
            self._worker = threading.Thread(
                target=self._worker_loop, name="notetrack-inference", daemon=True
            )
            self._worker.start()
        return self

    def stop(self) -> List[NoteEvent]:
        """
        Stop detection.

        Drops queued frames, discards any estimate still in flight, emits
        Off for every sounding note and resets to the initial state.
        """
        with self._frames_ready:
            self._running = False
            self._offloading = False
            self._frames.clear()
            self._frames_ready.notify_all()

        with self._lock:
            self._generation += 1
            events = self.decision.stop()
            self.output.dispatch(events)
            self.assembler.reset()

        if self._worker is not None:
            self._worker.join()
            self._worker = None
        if isinstance(self.output, ThreadedRelay):
            self.output.flush()
        return events

    def close(self) -> None:
        """Stop and release the consumers."""
        self.stop()
        self.output.close()

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _enqueue(self, frame: np.ndarray) -> bool:
        """Queue *frame* for the worker; False once the worker has retired."""
        with self._frames_ready:
            if not self._offloading:
                return False
            if len(self._frames) == self._frames.maxlen:
                self.dropped_frames += 1
            self._frames.append(frame)
            self._frames_ready.notify()
        return True

    def _worker_loop(self) -> None:
        while True:
            with self._frames_ready:
                while self._running and not self._frames:
                    if not self.selector.learned_active:
                        # Drained after a fallback: later frames run inline
                        self._offloading = False
                        return
                    self._frames_ready.wait()
                if not self._running:
                    return
                frame = self._frames.popleft()
                generation = self._generation
            estimate = self.selector.estimate(frame)
            self._decide(frame, estimate, generation)

    def _decide(self, frame: np.ndarray, estimate: PitchEstimate, generation: int) -> List[NoteEvent]:
        verified = self.verifier.verify(estimate, frame)
        with self._lock:
            if generation != self._generation:
                return []
            events = self.decision.process(verified)
            self.frames_processed += 1
            self.output.dispatch(events)
            active = self.decision.state.active_note
            if verified.accepted and active is not None:
                self.output.status(active.name, verified.frequency)
        return events
