"""Classic spectrum bars."""

from spectrapulse.analysis.bands import BandConfig, DistributionMode, ReductionMode
from spectrapulse.session import SessionConfig

from .base import Mode, ModeRegistry


@ModeRegistry.register
class BarsMode(Mode):
    """Linear bands averaged and scaled against an 80 dB ceiling, no smoothing."""

    MODE_ID = "bars"
    MODE_NAME = "Audio Bars"
    DEFAULT_BAND_COUNT = 32

    def build_config(self) -> SessionConfig:
        return SessionConfig(
            bands=BandConfig(
                band_count=self._band_count,
                distribution=DistributionMode.LINEAR,
                reduction=ReductionMode.MEAN,
            ),
            reference_db=80.0,
        )
