"""Base classes for capture collaborators that deliver FFT frames."""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureFrame:
    """One frequency-domain frame as delivered by the capture side."""
    data: bytes  # Interleaved int8 (real, imaginary) pairs
    sample_rate: int
    timestamp: float  # Time in seconds since start


class FrameSource(ABC):
    """Abstract base class for FFT frame providers."""

    def __init__(self):
        self._running = False
        self._released = False
        self._callback: Optional[Callable[[CaptureFrame], None]] = None
        self._start_time: float = 0
        self._error: Optional[str] = None
        self._callback_warned = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_released(self) -> bool:
        return self._released

    @property
    def last_error(self) -> Optional[str]:
        return self._error

    def set_callback(self, callback: Callable[[CaptureFrame], None]) -> None:
        """Set the callback to receive frames."""
        self._callback = callback

    @abstractmethod
    def list_devices(self) -> list[tuple[int, str]]:
        """List available capture devices as (index, name) tuples."""
        pass

    @abstractmethod
    def start(self, device_index: Optional[int] = None) -> bool:
        """Start delivering frames. Returns True on success."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering frames; may be started again."""
        pass

    def release(self) -> None:
        """Stop and free the source for good."""
        self.stop()
        self._callback = None
        self._released = True
        logger.info(f"{type(self).__name__} released")

    def _emit_frame(self, data: bytes, sample_rate: int, timestamp: float) -> None:
        """Emit a frame to the callback."""
        if self._callback:
            self._callback(CaptureFrame(data=data, sample_rate=sample_rate, timestamp=timestamp))
        elif not self._callback_warned:
            logger.warning(f"{type(self).__name__}: no callback set, dropping frames")
            self._callback_warned = True


class RingBuffer:
    """Thread-safe ring buffer holding the most recent PCM samples."""

    def __init__(self, capacity: int = 44100):
        self._buffer = np.zeros(capacity, dtype=np.float32)
        self._capacity = capacity
        self._write_pos = 0
        self._available = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def available(self) -> int:
        return self._available

    def write(self, data: np.ndarray) -> None:
        """Append samples, overwriting the oldest once full."""
        data = np.asarray(data, dtype=np.float32)[-self._capacity:]
        n = len(data)
        with self._lock:
            indices = (self._write_pos + np.arange(n)) % self._capacity
            self._buffer[indices] = data
            self._write_pos = (self._write_pos + n) % self._capacity
            self._available = min(self._available + n, self._capacity)

    def read(self, n: int) -> np.ndarray:
        """Up to n of the most recent samples, oldest first."""
        with self._lock:
            n = min(n, self._available)
            indices = (self._write_pos - n + np.arange(n)) % self._capacity
            return self._buffer[indices]

    def clear(self) -> None:
        with self._lock:
            self._write_pos = 0
            self._available = 0
