"""Magnitude spectrum extraction from interleaved FFT frames."""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)

# Anything the capture side hands us: raw bytes or signed 8-bit values
FrameData = Union[bytes, bytearray, memoryview, Sequence[int], np.ndarray]

# Shortest frame that can hold a DC pair plus one usable pair
MIN_FRAME_SIZE = 4


@dataclass(frozen=True)
class MagnitudeSpectrum:
    """Per-bin magnitudes of one frame, DC excluded."""
    magnitudes: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float64))
    frame_size: int = 0  # Length of the source frame in bytes
    sample_rate: Optional[int] = None  # Hz, when the capture side reported it

    def __len__(self) -> int:
        return len(self.magnitudes)

    @property
    def is_empty(self) -> bool:
        return len(self.magnitudes) == 0

    @property
    def bin_hz(self) -> Optional[float]:
        """Frequency resolution in Hz, or None if the sample rate is unknown."""
        if not self.sample_rate or self.frame_size <= 0:
            return None
        return self.sample_rate / self.frame_size

    def frequency_of(self, index: int) -> Optional[float]:
        """Centre frequency of a magnitude bin (bin 0 is FFT pair 1)."""
        resolution = self.bin_hz
        if resolution is None:
            return None
        return (index + 1) * resolution

    def index_range(self, min_hz: float, max_hz: float) -> tuple[int, int]:
        """
        Half-open bin range [start, stop) whose frequencies fall in [min_hz, max_hz].

        Returns the full range when the sample rate is unknown.
        """
        resolution = self.bin_hz
        if resolution is None:
            return 0, len(self.magnitudes)

        # Bin i sits at (i + 1) * resolution
        start = int(np.ceil(min_hz / resolution)) - 1
        stop = int(np.floor(max_hz / resolution))
        start = max(0, min(start, len(self.magnitudes)))
        stop = max(start, min(stop, len(self.magnitudes)))
        return start, stop

    def restrict(self, min_hz: float, max_hz: float) -> np.ndarray:
        """Magnitudes inside a frequency range."""
        start, stop = self.index_range(min_hz, max_hz)
        return self.magnitudes[start:stop]

    def dominant_frequency(self) -> Optional[float]:
        """Frequency of the strongest bin, None if unknown or silent."""
        if self.is_empty or self.bin_hz is None:
            return None
        index = int(np.argmax(self.magnitudes))
        if self.magnitudes[index] <= 0:
            return None
        return self.frequency_of(index)


def _as_int8(frame: FrameData) -> np.ndarray:
    if isinstance(frame, (bytes, bytearray, memoryview)):
        return np.frombuffer(frame, dtype=np.int8)
    if isinstance(frame, np.ndarray) and frame.dtype == np.uint8:
        return frame.view(np.int8)
    return np.asarray(frame, dtype=np.int8)


class SpectrumExtractor:
    """Converts interleaved (real, imaginary) FFT frames to magnitudes."""

    def extract(self, frame: Optional[FrameData], sample_rate: Optional[int] = None) -> MagnitudeSpectrum:
        """
        Extract the magnitude spectrum of a frame.

        Pair 0 holds the DC component and is skipped. Only the first half of
        the frame is used since the second half mirrors it for real input.

        Args:
            frame: Signed 8-bit interleaved FFT data
            sample_rate: Capture sample rate in Hz (optional)

        Returns:
            MagnitudeSpectrum with floor((len/2 - 1)/2) bins, empty for
            missing or too-short frames
        """
        if frame is None or len(frame) < MIN_FRAME_SIZE:
            logger.debug("Skipping degenerate frame")
            return MagnitudeSpectrum(sample_rate=sample_rate)

        data = _as_int8(frame).astype(np.float64)
        half = len(data) // 2

        real = data[2:half:2]
        imaginary = data[3:half + 1:2]
        magnitudes = np.hypot(real, imaginary)

        return MagnitudeSpectrum(
            magnitudes=magnitudes,
            frame_size=len(data),
            sample_rate=sample_rate,
        )
