"""Temporal and cross-band smoothing of amplitude vectors."""

from typing import Optional, Sequence

import numpy as np

from spectrapulse.exceptions import ConfigurationError

# Center-weighted kernels for circular band layouts
KERNEL_3_TAP = (0.15, 0.7, 0.15)
KERNEL_5_TAP = (0.1, 0.2, 0.4, 0.2, 0.1)


class PeakDecay:
    """Falling-peak smoothing across frames for each band."""

    def __init__(self, num_bands: int, decay: float = 0.95):
        if not 0.0 < decay < 1.0:
            raise ConfigurationError(f"decay must be within (0, 1), got {decay}")
        self.decay = decay
        self._levels = np.zeros(num_bands, dtype=np.float64)

    @property
    def levels(self) -> np.ndarray:
        return self._levels.copy()

    def process(self, values: np.ndarray) -> np.ndarray:
        """Output is the max of the incoming value and the decayed previous output."""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != self._levels.shape:
            raise ValueError(f"Expected {len(self._levels)} bands, got {len(values)}")
        self._levels = np.maximum(self._levels * self.decay, values)
        return self._levels.copy()

    def reset(self) -> None:
        self._levels = np.zeros_like(self._levels)


class NeighborSmoother:
    """Weighted smoothing of each band with its circular neighbours."""

    def __init__(self, kernel: Sequence[float] = KERNEL_3_TAP, passes: int = 1):
        kernel = np.asarray(kernel, dtype=np.float64)
        if kernel.ndim != 1 or len(kernel) % 2 == 0:
            raise ConfigurationError("kernel must be a 1-D sequence of odd length")
        if np.any(kernel < 0):
            raise ConfigurationError("kernel weights must be non-negative")
        if passes < 1:
            raise ConfigurationError(f"passes must be >= 1, got {passes}")
        self._kernel = kernel
        self._passes = passes

    @property
    def kernel(self) -> tuple[float, ...]:
        return tuple(self._kernel.tolist())

    @property
    def passes(self) -> int:
        return self._passes

    def process(self, values: np.ndarray) -> np.ndarray:
        result = np.asarray(values, dtype=np.float64)
        if len(result) == 0:
            return result.copy()
        half = len(self._kernel) // 2
        for _ in range(self._passes):
            # Indices wrap around: band 0 and the last band are neighbours
            smoothed = np.zeros_like(result)
            for offset, weight in zip(range(-half, half + 1), self._kernel):
                smoothed += weight * np.roll(result, -offset)
            result = smoothed
        return result


class TemporalSmoother:
    """
    Composes the cross-frame decay and cross-band passes.

    Either pass may be disabled. When both run, decay runs first since the
    neighbour pass expects already-decayed input.
    """

    def __init__(self,
                 num_bands: int,
                 decay: Optional[float] = None,
                 kernel: Optional[Sequence[float]] = None,
                 passes: int = 1):
        self._num_bands = num_bands
        self._decay = PeakDecay(num_bands, decay) if decay is not None else None
        self._neighbors = NeighborSmoother(kernel, passes) if kernel is not None else None

    @property
    def decay_enabled(self) -> bool:
        return self._decay is not None

    @property
    def neighbor_enabled(self) -> bool:
        return self._neighbors is not None

    def process(self, values: np.ndarray) -> np.ndarray:
        """Smooth one frame of amplitudes; output is clamped to [0, 1]."""
        result = np.asarray(values, dtype=np.float64)
        if len(result) != self._num_bands:
            raise ValueError(f"Expected {self._num_bands} bands, got {len(result)}")

        if self._decay is not None:
            result = self._decay.process(result)
        if self._neighbors is not None:
            result = self._neighbors.process(result)

        return np.clip(result, 0.0, 1.0)

    def reset(self) -> None:
        if self._decay is not None:
            self._decay.reset()
