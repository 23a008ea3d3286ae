"""Push-based frame sources.

Every way of getting audio into the tracker (an audio driver callback, a
timer that polls a reader, an in-memory array) pushes native-rate blocks
into the same sink, so downstream code never knows how it was fed.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np

from ..core import DeviceUnavailable

# sink(block, sample_rate)
BlockSink = Callable[[np.ndarray, float], None]


class FrameSource(ABC):
    """Abstract base class for audio block producers."""

    def __init__(self, sample_rate: float):
        self.sample_rate = sample_rate
        self._sink: Optional[BlockSink] = None

    def connect(self, sink: BlockSink) -> "FrameSource":
        """Attach the consumer of audio blocks."""
        self._sink = sink
        return self

    def emit(self, block: np.ndarray) -> None:
        if self._sink is not None:
            self._sink(block, self.sample_rate)

    @abstractmethod
    def start(self) -> None:
        """Begin delivering blocks."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering blocks. Safe to call more than once."""
        pass

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()


class ArraySource(FrameSource):
    """Feeds an in-memory signal synchronously, one block at a time."""

    def __init__(self, audio: np.ndarray, sample_rate: float, block_size: int = 512):
        super().__init__(sample_rate)
        self.audio = np.asarray(audio, dtype=np.float32).ravel()
        self.block_size = block_size
        self._stopped = False

    def start(self) -> None:
        self._stopped = False
        for start in range(0, len(self.audio), self.block_size):
            if self._stopped:
                break
            self.emit(self.audio[start:start + self.block_size])

    def stop(self) -> None:
        self._stopped = True


class PollingSource(FrameSource):
    """
    Timer-driven fallback: pulls a block from *read* every interval.

    Args:
        read: Callable returning the audio captured since the last call
            (may return an empty array)
        sample_rate: Native sample rate of the returned audio
        interval_ms: Polling period in milliseconds
    """

    def __init__(
        self,
        read: Callable[[], np.ndarray],
        sample_rate: float,
        interval_ms: float = 64.0,
    ):
        super().__init__(sample_rate)
        self.read = read
        self.interval_ms = interval_ms
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def for_config(cls, read: Callable[[], np.ndarray], sample_rate: float, config) -> "PollingSource":
        """Poll at the configured detection interval."""
        return cls(read, sample_rate, interval_ms=config.detection_interval_ms)

    def poll_once(self) -> None:
        block = self.read()
        if block is not None and len(block) > 0:
            self.emit(block)

    def _run(self) -> None:
        interval = self.interval_ms / 1000.0
        while not self._stop_event.wait(interval):
            self.poll_once()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="notetrack-poll", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None


class MicrophoneSource(FrameSource):
    """
    Live microphone input through sounddevice.

    The driver callback only copies the first channel and pushes it on;
    it never blocks.

    Raises:
        DeviceUnavailable: From ``start()`` if the device cannot be opened
    """

    def __init__(
        self,
        device: Optional[str] = None,
        sample_rate: float = 44100,
        block_size: int = 512,
    ):
        super().__init__(sample_rate)
        self.device = device
        self.block_size = block_size
        self.status_errors = 0
        self._stream = None

    def _callback(self, indata, frames, time, status) -> None:
        if status:
            self.status_errors += 1
        self.emit(indata[:, 0].copy())

    def start(self) -> None:
        if self._stream is not None:
            return
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            raise DeviceUnavailable(f"sounddevice/PortAudio not available: {e}") from e

        try:
            self._stream = sd.InputStream(
                device=self.device,
                channels=1,
                samplerate=self.sample_rate,
                blocksize=self.block_size,
                callback=self._callback,
                dtype="float32",
            )
            self._stream.start()
        except Exception as e:
            self._stream = None
            raise DeviceUnavailable(f"Cannot open audio input {self.device or 'default'}: {e}") from e

    def stop(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
