"""SpectraPulse - real-time spectrum bands and beat detection from FFT frames."""

from spectrapulse.analysis import (
    BandConfig,
    BandMapper,
    BeatDetectionConfig,
    BeatDetectionState,
    BeatDetector,
    BeatEvent,
    DistributionMode,
    EnergyHistory,
    FrequencyBand,
    FrequencyRange,
    MagnitudeSpectrum,
    Normalizer,
    ReductionMode,
    SpectrumExtractor,
    TemporalSmoother,
)
from spectrapulse.exceptions import ConfigurationError, SpectraPulseError
from spectrapulse.session import AnalysisSession, AnalysisSnapshot, SessionConfig
from spectrapulse.runner import AnalysisRunner, SnapshotBroadcaster

__version__ = "0.1.0"
__all__ = [
    "AnalysisRunner",
    "AnalysisSession",
    "AnalysisSnapshot",
    "BandConfig",
    "BandMapper",
    "BeatDetectionConfig",
    "BeatDetectionState",
    "BeatDetector",
    "BeatEvent",
    "ConfigurationError",
    "DistributionMode",
    "EnergyHistory",
    "FrequencyBand",
    "FrequencyRange",
    "MagnitudeSpectrum",
    "Normalizer",
    "ReductionMode",
    "SessionConfig",
    "SnapshotBroadcaster",
    "SpectraPulseError",
    "SpectrumExtractor",
    "TemporalSmoother",
]
