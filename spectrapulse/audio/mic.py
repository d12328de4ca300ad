"""Microphone frame source using sounddevice."""

import logging
import time
from functools import lru_cache
from typing import Optional

import numpy as np
from scipy import signal

try:
    import sounddevice as sd
except (ImportError, OSError):  # OSError: PortAudio library missing
    sd = None

from .base import FrameSource, RingBuffer

logger = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def hann_window(size: int) -> np.ndarray:
    """Read-only hann window, built once per FFT size."""
    window = signal.windows.hann(size)
    window.setflags(write=False)
    return window


def pcm_to_fft_frame(samples: np.ndarray, capture_size: int = 1024) -> bytes:
    """
    Pack PCM samples into an interleaved int8 FFT frame.

    Layout follows the platform visualizer convention: byte 0 is the DC real
    part, byte 1 the Nyquist real part, then (real, imaginary) for bins
    1 .. capture_size/2 - 1. A full-scale sine lands near 127.

    Args:
        samples: Mono float samples (-1 to 1); the most recent capture_size are used
        capture_size: FFT size, even

    Returns:
        capture_size bytes
    """
    if capture_size < 4 or capture_size % 2:
        raise ValueError(f"capture_size must be an even number >= 4, got {capture_size}")

    samples = np.asarray(samples, dtype=np.float64)
    if len(samples) < capture_size:
        padded = np.zeros(capture_size, dtype=np.float64)
        padded[capture_size - len(samples):] = samples
        samples = padded
    else:
        samples = samples[-capture_size:]

    window = hann_window(capture_size)
    spectrum = np.fft.rfft(samples * window)
    spectrum = spectrum * (2.0 / window.sum()) * 127.0

    frame = np.empty(capture_size, dtype=np.float64)
    frame[0] = spectrum[0].real
    frame[1] = spectrum[capture_size // 2].real
    frame[2::2] = spectrum[1:capture_size // 2].real
    frame[3::2] = spectrum[1:capture_size // 2].imag
    return np.clip(np.round(frame), -128, 127).astype(np.int8).tobytes()


class MicrophoneFrameSource(FrameSource):
    """Captures the microphone and emits FFT frames at a fixed rate."""

    def __init__(self,
                 sample_rate: int = 44100,
                 capture_size: int = 1024,
                 capture_rate_hz: float = 20.0):
        super().__init__()
        self._sample_rate = sample_rate
        self._capture_size = capture_size
        self._capture_rate_hz = capture_rate_hz
        self._buffer = RingBuffer(capacity=max(capture_size * 2, sample_rate))
        self._stream = None

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def capture_size(self) -> int:
        return self._capture_size

    def list_devices(self) -> list[tuple[int, str]]:
        """List input devices."""
        if sd is None:
            return []

        devices = []
        try:
            for i, dev in enumerate(sd.query_devices()):
                if dev["max_input_channels"] > 0:
                    devices.append((i, dev["name"]))
        except Exception as e:
            logger.warning(f"Failed to query audio devices: {e}")

        devices.sort(key=lambda x: x[1].lower())
        return devices

    def start(self, device_index: Optional[int] = None) -> bool:
        """Start capturing from the microphone."""
        if self._released:
            self._error = "source already released"
            return False
        if sd is None:
            self._error = "sounddevice not available"
            logger.error(self._error)
            return False
        if self._running:
            return True

        self._start_time = time.time()
        self._error = None
        self._buffer.clear()
        blocksize = max(1, int(self._sample_rate / self._capture_rate_hz))

        def callback(indata, frames, time_info, status):
            if status:
                self._error = str(status)
            self._buffer.write(indata[:, 0].astype(np.float32))
            frame = pcm_to_fft_frame(self._buffer.read(self._capture_size), self._capture_size)
            self._emit_frame(frame, self._sample_rate, time.time() - self._start_time)

        try:
            self._stream = sd.InputStream(
                device=device_index,
                channels=1,
                samplerate=self._sample_rate,
                blocksize=blocksize,
                dtype=np.float32,
                callback=callback,
            )
            self._stream.start()
        except Exception as e:
            self._error = str(e)
            self._stream = None
            logger.error(f"Failed to start microphone capture: {e}")
            return False

        self._running = True
        logger.info(
            f"Microphone capture started: {self._sample_rate}Hz, "
            f"{self._capture_size}-point FFT at {self._capture_rate_hz:g} frames/s"
        )
        return True

    def stop(self) -> None:
        """Stop capturing."""
        if not self._running:
            return
        self._running = False
        if self._stream:
            try:
                self._stream.stop()
                self._stream.close()
            except Exception as e:
                logger.warning(f"Error closing input stream: {e}")
            self._stream = None
        logger.info("Microphone capture stopped")
