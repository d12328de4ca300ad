"""Time-windowed energy history for adaptive thresholds."""

import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from spectrapulse.exceptions import ConfigurationError

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Milliseconds from a monotonic clock."""
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class EnergySample:
    timestamp_ms: float
    energy: float


class EnergyHistory:
    """Keeps the energy samples of the trailing window for mean/variance queries."""

    def __init__(self, window_ms: float = 1500.0, clock: Optional[Clock] = None):
        if window_ms <= 0:
            raise ConfigurationError(f"window_ms must be positive, got {window_ms}")
        self._window_ms = window_ms
        self._clock = clock or monotonic_ms
        self._samples: deque[EnergySample] = deque()

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def window_ms(self) -> float:
        return self._window_ms

    @window_ms.setter
    def window_ms(self, value: float) -> None:
        if value <= 0:
            raise ConfigurationError(f"window_ms must be positive, got {value}")
        self._window_ms = value
        if self._samples:
            self._evict(self._samples[-1].timestamp_ms)

    def samples(self) -> list[EnergySample]:
        return list(self._samples)

    def add_sample(self, energy: float, timestamp_ms: Optional[float] = None) -> None:
        """Append a sample, then drop everything older than the window."""
        now = self._clock() if timestamp_ms is None else timestamp_ms
        self._samples.append(EnergySample(now, float(energy)))
        self._evict(now)

    def get_average(self) -> float:
        if not self._samples:
            return 0.0
        energies = self._energies()
        # Identical samples average to exactly that value, free of summation error
        if np.ptp(energies) == 0:
            return float(energies[0])
        return float(np.mean(energies))

    def get_variance(self) -> float:
        """Population variance (no Bessel correction), 0 below two samples."""
        if len(self._samples) < 2:
            return 0.0
        energies = self._energies()
        if np.ptp(energies) == 0:
            return 0.0
        return float(np.var(energies))

    def clear(self) -> None:
        self._samples.clear()

    def _energies(self) -> np.ndarray:
        return np.fromiter((s.energy for s in self._samples), dtype=np.float64, count=len(self._samples))

    def _evict(self, now: float) -> None:
        cutoff = now - self._window_ms
        while self._samples and self._samples[0].timestamp_ms < cutoff:
            self._samples.popleft()
