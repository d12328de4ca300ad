"""Adaptive energy-based beat detection."""

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

import numpy as np

from spectrapulse.analysis.bands import FrequencyBand
from spectrapulse.analysis.energy import Clock, EnergyHistory, monotonic_ms
from spectrapulse.analysis.spectrum import MagnitudeSpectrum
from spectrapulse.exceptions import ConfigurationError, require_number

logger = logging.getLogger(__name__)

# Intensity saturates at this many standard deviations above average
MAX_SIGMA = 3.0

# Spread below this fraction of the average is rounding noise, not signal
MIN_RELATIVE_SPREAD = 1e-9


@dataclass(frozen=True)
class BeatDetectionConfig:
    """Beat detection tuning."""
    sensitivity: float = 0.7  # Multiplier on the standard deviation
    refractory_ms: float = 100.0  # Minimum time between beats
    smoothing_factor: float = 0.8  # Weight of the previous intensity on a beat
    history_window_ms: float = 1500.0
    intensity_decay: float = 0.95  # Per-frame decay between beats
    frequency_band: FrequencyBand = FrequencyBand.ALL_FREQUENCIES

    def __post_init__(self):
        for name in ("sensitivity", "refractory_ms", "smoothing_factor", "history_window_ms", "intensity_decay"):
            require_number(name, getattr(self, name))
        if not isinstance(self.frequency_band, FrequencyBand):
            raise ConfigurationError(f"frequency_band must be a FrequencyBand, got {self.frequency_band!r}")
        if self.sensitivity < 0:
            raise ConfigurationError(f"sensitivity must be >= 0, got {self.sensitivity}")
        if self.refractory_ms < 0:
            raise ConfigurationError(f"refractory_ms must be >= 0, got {self.refractory_ms}")
        if not 0.0 <= self.smoothing_factor < 1.0:
            raise ConfigurationError(f"smoothing_factor must be within [0, 1), got {self.smoothing_factor}")
        if self.history_window_ms <= 0:
            raise ConfigurationError(f"history_window_ms must be positive, got {self.history_window_ms}")
        if not 0.0 <= self.intensity_decay <= 1.0:
            raise ConfigurationError(f"intensity_decay must be within [0, 1], got {self.intensity_decay}")


@dataclass(frozen=True)
class BeatEvent:
    """A detected beat."""
    timestamp_ms: float
    intensity: float
    frequency: Optional[float] = None  # Dominant frequency in Hz, if known


@dataclass(frozen=True)
class BeatDetectionState:
    """Snapshot of the detector for continuous visual feedback."""
    is_enabled: bool = False
    current_energy: float = 0.0
    average_energy: float = 0.0
    energy_variance: float = 0.0
    last_beat_timestamp: Optional[float] = None
    beat_intensity: float = 0.0


class DetectorPhase(Enum):
    DISABLED = "disabled"
    ARMED = "armed"
    REFRACTORY = "refractory"


class BeatDetector:
    """
    Detects beats from one scalar energy value per frame.

    A beat fires when the energy exceeds ``average + sensitivity * stddev`` of
    the trailing history and the refractory interval since the previous beat
    has elapsed. Beat intensity is low-pass filtered across beats and decays
    between them.
    """

    def __init__(self,
                 config: Optional[BeatDetectionConfig] = None,
                 enabled: bool = True,
                 clock: Optional[Clock] = None):
        self._config = config or BeatDetectionConfig()
        self._clock = clock or monotonic_ms
        self._history = EnergyHistory(self._config.history_window_ms, clock=self._clock)
        self._enabled = enabled

        self._current_energy: float = 0.0
        self._average_energy: float = 0.0
        self._variance: float = 0.0
        self._last_beat_time: Optional[float] = None
        self._intensity: float = 0.0
        self._last_time: Optional[float] = None
        self._is_beat: bool = False

    @property
    def config(self) -> BeatDetectionConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self.set_enabled(value)

    @property
    def history(self) -> EnergyHistory:
        return self._history

    @property
    def phase(self) -> DetectorPhase:
        if not self._enabled:
            return DetectorPhase.DISABLED
        if self._in_refractory(self._last_time):
            return DetectorPhase.REFRACTORY
        return DetectorPhase.ARMED

    @property
    def state(self) -> BeatDetectionState:
        return BeatDetectionState(
            is_enabled=self._enabled,
            current_energy=self._current_energy,
            average_energy=self._average_energy,
            energy_variance=self._variance,
            last_beat_timestamp=self._last_beat_time,
            beat_intensity=self._intensity,
        )

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable detection. Disabling drops history and intensity."""
        if enabled == self._enabled:
            return
        self._enabled = enabled
        if not enabled:
            self.reset()
        logger.info(f"Beat detection {'enabled' if enabled else 'disabled'}")

    def update_config(self, config: BeatDetectionConfig) -> None:
        """Swap tuning parameters without losing history."""
        self._config = config
        self._history.window_ms = config.history_window_ms

    def update(self, **changes) -> BeatDetectionConfig:
        """Update individual config fields, e.g. ``update(sensitivity=1.0)``."""
        self.update_config(replace(self._config, **changes))
        return self._config

    def is_beat(self) -> bool:
        """Check if a beat was detected in the last processed frame."""
        return self._is_beat

    def get_intensity(self) -> float:
        """Get current beat intensity (with decay)."""
        return self._intensity

    def frame_energy(self, spectrum: MagnitudeSpectrum) -> Optional[float]:
        """Mean magnitude over the configured band, None when there is no data."""
        magnitudes = spectrum.magnitudes
        freq_range = self._config.frequency_band.frequency_range
        if freq_range is not None and spectrum.bin_hz is not None:
            magnitudes = spectrum.restrict(freq_range.min_hz, freq_range.max_hz)
        if len(magnitudes) == 0:
            return None
        return float(np.mean(magnitudes))

    def process_spectrum(self,
                         spectrum: MagnitudeSpectrum,
                         timestamp_ms: Optional[float] = None) -> Optional[BeatEvent]:
        """Reduce a spectrum to its energy and run detection on it."""
        if not self._enabled:
            return None
        energy = self.frame_energy(spectrum)
        if energy is None:
            if not spectrum.is_empty:
                # Band has no bins at this sample rate; nothing to detect but intensity still falls
                self._is_beat = False
                self._decay_intensity()
            return None
        return self.process(energy, timestamp_ms, frequency=spectrum.dominant_frequency())

    def process(self,
                energy: float,
                timestamp_ms: Optional[float] = None,
                frequency: Optional[float] = None) -> Optional[BeatEvent]:
        """
        Feed one frame's energy.

        Args:
            energy: Scalar energy of the frame
            timestamp_ms: Frame time, defaults to the detector clock
            frequency: Dominant frequency to attach to an emitted event

        Returns:
            BeatEvent if a beat fired on this frame, else None
        """
        self._is_beat = False
        if not self._enabled:
            return None

        now = self._clock() if timestamp_ms is None else timestamp_ms
        self._last_time = now
        self._current_energy = float(energy)

        self._history.add_sample(energy, now)
        avg = self._history.get_average()
        variance = self._history.get_variance()
        stddev = math.sqrt(variance)
        if stddev <= MIN_RELATIVE_SPREAD * max(abs(avg), 1.0):
            stddev = 0.0
        self._average_energy = avg
        self._variance = variance

        threshold = avg + self._config.sensitivity * stddev
        if stddev > 0 and energy > threshold and not self._in_refractory(now):
            raw = min(max((energy - avg) / stddev, 0.0), MAX_SIGMA) / MAX_SIGMA
            smoothing = self._config.smoothing_factor
            self._intensity = self._clamp(self._intensity * smoothing + raw * (1.0 - smoothing))
            self._last_beat_time = now
            self._is_beat = True
            logger.debug(f"Beat at {now:.0f}ms: energy={energy:.2f} threshold={threshold:.2f} "
                         f"intensity={self._intensity:.3f}")
            return BeatEvent(timestamp_ms=now, intensity=self._intensity, frequency=frequency)

        self._decay_intensity()
        return None

    def reset(self) -> None:
        """Reset detector state."""
        self._history.clear()
        self._intensity = 0.0
        self._current_energy = 0.0
        self._average_energy = 0.0
        self._variance = 0.0
        self._last_beat_time = None
        self._last_time = None
        self._is_beat = False

    def _in_refractory(self, now: Optional[float]) -> bool:
        if self._last_beat_time is None or now is None:
            return False
        return now - self._last_beat_time <= self._config.refractory_ms

    def _decay_intensity(self) -> None:
        self._intensity = self._clamp(self._intensity * self._config.intensity_decay)

    @staticmethod
    def _clamp(value: float) -> float:
        return max(0.0, min(1.0, value))
