"""Frequency band mapping: aggregates a magnitude spectrum into output bands."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from spectrapulse.analysis.spectrum import MagnitudeSpectrum
from spectrapulse.exceptions import ConfigurationError, require_number

logger = logging.getLogger(__name__)


class DistributionMode(Enum):
    """How spectrum bins are assigned to bands."""
    LINEAR = "linear"
    LOGARITHMIC = "logarithmic"
    SAMPLED = "sampled"  # One bin per band, evenly strided


class ReductionMode(Enum):
    """How the bins of one band are combined."""
    MEAN = "mean"
    MAX = "max"


@dataclass(frozen=True)
class FrequencyRange:
    """Inclusive frequency range in Hz."""
    min_hz: float
    max_hz: float

    def __post_init__(self):
        require_number("min_hz", self.min_hz)
        require_number("max_hz", self.max_hz)
        if self.min_hz < 0:
            raise ConfigurationError(f"min_hz must be >= 0, got {self.min_hz}")
        if self.min_hz >= self.max_hz:
            raise ConfigurationError(
                f"Invalid frequency range: min_hz ({self.min_hz}) must be below max_hz ({self.max_hz})"
            )


class FrequencyBand(Enum):
    """Named frequency regions, usable as a band or beat-energy restriction."""
    ALL_FREQUENCIES = None
    SUB_BASS = (20.0, 60.0)
    BASS = (60.0, 250.0)
    LOW_MID = (250.0, 500.0)
    MID = (500.0, 2000.0)
    HIGH_MID = (2000.0, 4000.0)
    PRESENCE = (4000.0, 6000.0)
    BRILLIANCE = (6000.0, 20000.0)

    @property
    def frequency_range(self) -> Optional[FrequencyRange]:
        if self.value is None:
            return None
        return FrequencyRange(*self.value)

    @classmethod
    def from_name(cls, name: Optional[str]) -> "FrequencyBand":
        """Look up a band by name, falling back to ALL_FREQUENCIES."""
        if not name:
            return cls.ALL_FREQUENCIES
        try:
            return cls[name.upper()]
        except KeyError:
            logger.warning(f"Unknown frequency band '{name}', using ALL_FREQUENCIES")
            return cls.ALL_FREQUENCIES


@dataclass(frozen=True)
class BandConfig:
    """Band layout for one visualization."""
    band_count: int = 32
    distribution: DistributionMode = DistributionMode.LINEAR
    reduction: ReductionMode = ReductionMode.MEAN
    frequency_range: Optional[FrequencyRange] = None
    log_base: float = 1.05

    def __post_init__(self):
        if not isinstance(self.band_count, int) or self.band_count <= 0:
            raise ConfigurationError(f"band_count must be a positive integer, got {self.band_count!r}")
        if self.log_base <= 1.0:
            raise ConfigurationError(f"log_base must be greater than 1, got {self.log_base}")


class BandMapper:
    """Aggregates a magnitude spectrum into a fixed number of bands."""

    def __init__(self, config: BandConfig):
        self._config = config

    @property
    def config(self) -> BandConfig:
        return self._config

    @property
    def band_count(self) -> int:
        return self._config.band_count

    def map(self, spectrum: MagnitudeSpectrum) -> np.ndarray:
        """
        Reduce a spectrum to raw per-band magnitudes.

        Args:
            spectrum: Magnitude spectrum of the current frame

        Returns:
            Array of band_count raw magnitudes; bands with no bins are 0
        """
        magnitudes = self._select(spectrum)
        result = np.zeros(self._config.band_count, dtype=np.float64)
        if len(magnitudes) == 0:
            return result

        reduce = np.max if self._config.reduction is ReductionMode.MAX else np.mean
        for i, (start, stop) in enumerate(self.band_ranges(len(magnitudes))):
            if stop > start:
                result[i] = reduce(magnitudes[start:stop])
        return result

    def band_ranges(self, size: int) -> list[tuple[int, int]]:
        """Half-open index range of every band for a spectrum of the given size."""
        if size <= 0:
            return [(0, 0)] * self._config.band_count

        mode = self._config.distribution
        if mode is DistributionMode.LOGARITHMIC:
            return self._logarithmic_ranges(size)
        if mode is DistributionMode.SAMPLED:
            return self._sampled_ranges(size)
        return self._linear_ranges(size)

    def _select(self, spectrum: MagnitudeSpectrum) -> np.ndarray:
        freq_range = self._config.frequency_range
        if freq_range is None:
            return spectrum.magnitudes
        if spectrum.bin_hz is None:
            logger.debug("Sample rate unknown, frequency range ignored")
            return spectrum.magnitudes
        return spectrum.restrict(freq_range.min_hz, freq_range.max_hz)

    def _linear_ranges(self, size: int) -> list[tuple[int, int]]:
        count = self._config.band_count
        per_band = size // count

        if per_band == 0:
            # Fewer bins than bands: one bin each, trailing bands stay empty
            return [(i, i + 1) if i < size else (size, size) for i in range(count)]

        ranges = [(i * per_band, (i + 1) * per_band) for i in range(count)]
        # Last band absorbs the remainder
        ranges[-1] = (ranges[-1][0], size)
        return ranges

    def _logarithmic_ranges(self, size: int) -> list[tuple[int, int]]:
        # Band edges grow as base^i - 1, read as a percentage of the spectrum
        base = self._config.log_base
        last = size - 1
        ranges = []
        for i in range(self._config.band_count):
            freq_start = int(base ** i - 1)
            freq_end = int(base ** (i + 1) - 1)
            start = min(max(freq_start * size // 100, 0), last)
            end = min(max(freq_end * size // 100, start), last)
            ranges.append((start, end + 1))
        return ranges

    def _sampled_ranges(self, size: int) -> list[tuple[int, int]]:
        count = self._config.band_count
        step = size / count
        ranges = []
        for i in range(count):
            index = min(int(i * step), size - 1)
            ranges.append((index, index + 1))
        return ranges
