"""Analysis session: owns all per-stream state and publishes snapshots."""

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Optional

from spectrapulse.analysis.bands import BandConfig, BandMapper
from spectrapulse.analysis.beat import BeatDetectionConfig, BeatDetectionState, BeatDetector, BeatEvent
from spectrapulse.analysis.energy import Clock, monotonic_ms
from spectrapulse.analysis.normalize import Normalizer
from spectrapulse.analysis.smoothing import TemporalSmoother
from spectrapulse.analysis.spectrum import FrameData, SpectrumExtractor
from spectrapulse.exceptions import ConfigurationError, require_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionConfig:
    """Complete analysis configuration for one session."""
    bands: BandConfig = field(default_factory=BandConfig)
    reference_db: float = 80.0
    gain: float = 1.0
    tilt: float = 0.0
    decay: Optional[float] = None  # Cross-frame peak decay, None to skip
    kernel: Optional[tuple[float, ...]] = None  # Cross-band kernel, None to skip
    smoothing_passes: int = 1
    beat: BeatDetectionConfig = field(default_factory=BeatDetectionConfig)
    beat_detection_enabled: bool = True

    def __post_init__(self):
        for name in ("reference_db", "gain", "tilt"):
            require_number(name, getattr(self, name))
        if self.decay is not None:
            require_number("decay", self.decay)
        if not isinstance(self.smoothing_passes, int) or isinstance(self.smoothing_passes, bool):
            raise ConfigurationError(f"smoothing_passes must be an integer, got {self.smoothing_passes!r}")
        if self.reference_db <= 0:
            raise ConfigurationError(f"reference_db must be positive, got {self.reference_db}")
        if self.gain < 0:
            raise ConfigurationError(f"gain must be >= 0, got {self.gain}")
        if not 0.0 <= self.tilt <= 1.0:
            raise ConfigurationError(f"tilt must be within [0, 1], got {self.tilt}")
        if self.decay is not None and not 0.0 < self.decay < 1.0:
            raise ConfigurationError(f"decay must be within (0, 1), got {self.decay}")
        if self.kernel is not None and len(self.kernel) % 2 == 0:
            raise ConfigurationError("kernel must have an odd number of weights")
        if self.smoothing_passes < 1:
            raise ConfigurationError(f"smoothing_passes must be >= 1, got {self.smoothing_passes}")


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Immutable per-frame output handed to readers."""
    frame_index: int
    timestamp_ms: float
    amplitudes: tuple[float, ...]
    beat: Optional[BeatEvent]
    beat_state: BeatDetectionState


class AnalysisSession:
    """
    Runs the full analysis for a single stream of frames.

    The amplitude branch (bands -> normalizer -> smoother) and the beat branch
    share the magnitude spectrum of each frame but keep independent state.
    ``process_frame`` and detection toggles are serialized by a lock; readers
    only ever see completed snapshots through ``latest``.
    """

    def __init__(self, config: Optional[SessionConfig] = None, clock: Optional[Clock] = None):
        self._config = config or SessionConfig()
        self._clock = clock or monotonic_ms
        self._lock = threading.Lock()

        self._extractor = SpectrumExtractor()
        self._mapper = BandMapper(self._config.bands)
        self._normalizer = Normalizer(
            reference_db=self._config.reference_db,
            gain=self._config.gain,
            tilt=self._config.tilt,
        )
        self._smoother = TemporalSmoother(
            self._config.bands.band_count,
            decay=self._config.decay,
            kernel=self._config.kernel,
            passes=self._config.smoothing_passes,
        )
        self._detector = BeatDetector(
            self._config.beat,
            enabled=self._config.beat_detection_enabled,
            clock=self._clock,
        )

        self._frame_index = 0
        self._latest = AnalysisSnapshot(
            frame_index=0,
            timestamp_ms=0.0,
            amplitudes=(0.0,) * self._config.bands.band_count,
            beat=None,
            beat_state=self._detector.state,
        )

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def band_count(self) -> int:
        return self._config.bands.band_count

    @property
    def latest(self) -> AnalysisSnapshot:
        """Most recently published snapshot."""
        return self._latest

    @property
    def beat_state(self) -> BeatDetectionState:
        return self._latest.beat_state

    @property
    def beat_detection_enabled(self) -> bool:
        return self._detector.enabled

    def set_beat_detection_enabled(self, enabled: bool) -> None:
        """Toggle beat detection; the reset happens under the session lock."""
        with self._lock:
            self._detector.set_enabled(enabled)
            self._latest = replace(self._latest, beat=None, beat_state=self._detector.state)

    def set_beat_detection_config(self, config: BeatDetectionConfig) -> None:
        with self._lock:
            self._detector.update_config(config)

    def process_frame(self,
                      frame: Optional[FrameData],
                      sample_rate: Optional[int] = None,
                      timestamp_ms: Optional[float] = None) -> Optional[AnalysisSnapshot]:
        """
        Analyze one frame and publish a snapshot.

        Args:
            frame: Interleaved int8 FFT data from the capture side
            sample_rate: Capture sample rate in Hz
            timestamp_ms: Frame time, defaults to the session clock

        Returns:
            The new snapshot, or None if the frame carried no data (state untouched)
        """
        with self._lock:
            spectrum = self._extractor.extract(frame, sample_rate)
            if spectrum.is_empty:
                return None

            now = self._clock() if timestamp_ms is None else timestamp_ms

            raw_bands = self._mapper.map(spectrum)
            amplitudes = self._smoother.process(self._normalizer.normalize_bands(raw_bands))

            beat = self._detector.process_spectrum(spectrum, now)
            if beat is not None:
                logger.debug(f"Frame {self._frame_index + 1}: beat intensity={beat.intensity:.3f}")

            self._frame_index += 1
            snapshot = AnalysisSnapshot(
                frame_index=self._frame_index,
                timestamp_ms=now,
                amplitudes=tuple(float(a) for a in amplitudes),
                beat=beat,
                beat_state=self._detector.state,
            )
            self._latest = snapshot
            return snapshot

    def reset(self) -> None:
        """Clear smoothing feedback and beat history."""
        with self._lock:
            self._smoother.reset()
            self._detector.reset()
            self._frame_index = 0
            self._latest = AnalysisSnapshot(
                frame_index=0,
                timestamp_ms=0.0,
                amplitudes=(0.0,) * self.band_count,
                beat=None,
                beat_state=self._detector.state,
            )

