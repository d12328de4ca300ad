# Audio analysis module
from .spectrum import MagnitudeSpectrum, SpectrumExtractor
from .bands import BandConfig, BandMapper, DistributionMode, FrequencyBand, FrequencyRange, ReductionMode
from .normalize import Normalizer
from .smoothing import NeighborSmoother, PeakDecay, TemporalSmoother
from .energy import EnergyHistory
from .beat import BeatDetectionConfig, BeatDetectionState, BeatDetector, BeatEvent, DetectorPhase

__all__ = [
    "MagnitudeSpectrum", "SpectrumExtractor",
    "BandConfig", "BandMapper", "DistributionMode", "FrequencyBand", "FrequencyRange", "ReductionMode",
    "Normalizer",
    "NeighborSmoother", "PeakDecay", "TemporalSmoother",
    "EnergyHistory",
    "BeatDetectionConfig", "BeatDetectionState", "BeatDetector", "BeatEvent", "DetectorPhase",
]
