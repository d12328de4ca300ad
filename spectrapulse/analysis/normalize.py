"""Perceptual (dB) normalization of band magnitudes."""

from typing import Union

import numpy as np

from spectrapulse.exceptions import ConfigurationError


class Normalizer:
    """Maps raw magnitudes to amplitudes in [0, 1] via dB compression."""

    def __init__(self, reference_db: float = 80.0, gain: float = 1.0, tilt: float = 0.0):
        """
        Initialize normalizer.

        Args:
            reference_db: dB level treated as full scale (typically 45-80)
            gain: Linear multiplier applied after dB scaling
            tilt: Attenuation of high bands, band i is scaled by 1 - (i / N) * tilt
        """
        if reference_db <= 0:
            raise ConfigurationError(f"reference_db must be positive, got {reference_db}")
        if gain < 0:
            raise ConfigurationError(f"gain must be >= 0, got {gain}")
        if not 0.0 <= tilt <= 1.0:
            raise ConfigurationError(f"tilt must be within [0, 1], got {tilt}")
        self._reference_db = reference_db
        self._gain = gain
        self._tilt = tilt

    @property
    def reference_db(self) -> float:
        return self._reference_db

    @property
    def gain(self) -> float:
        return self._gain

    @property
    def tilt(self) -> float:
        return self._tilt

    def normalize(self, magnitude: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """
        amplitude = clamp(20 * log10(magnitude + 1) / reference_db, 0, 1)

        The +1 keeps silence at 0 dB instead of -inf.
        """
        magnitude = np.maximum(magnitude, 0.0)
        db = 20.0 * np.log10(magnitude + 1.0)
        amplitude = np.clip(db / self._reference_db * self._gain, 0.0, 1.0)
        if np.ndim(amplitude) == 0:
            return float(amplitude)
        return amplitude

    def normalize_bands(self, magnitudes: np.ndarray) -> np.ndarray:
        """Normalize a whole band vector, applying the high-band tilt."""
        amplitudes = np.asarray(self.normalize(np.asarray(magnitudes, dtype=np.float64)))
        if self._tilt > 0 and len(amplitudes) > 0:
            factors = 1.0 - (np.arange(len(amplitudes)) / len(amplitudes)) * self._tilt
            amplitudes = amplitudes * factors
        return amplitudes
