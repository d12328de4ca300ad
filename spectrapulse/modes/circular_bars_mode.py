"""Bars arranged around a circle."""

from spectrapulse.analysis.bands import BandConfig, DistributionMode, ReductionMode
from spectrapulse.session import SessionConfig

from .base import Mode, ModeRegistry


@ModeRegistry.register
class CircularBarsMode(Mode):
    """Linear bands with a 60 dB ceiling and up to 30% attenuation towards the high bands."""

    MODE_ID = "circular_bars"
    MODE_NAME = "Circular Bars"
    DEFAULT_BAND_COUNT = 128

    def build_config(self) -> SessionConfig:
        return SessionConfig(
            bands=BandConfig(
                band_count=self._band_count,
                distribution=DistributionMode.LINEAR,
                reduction=ReductionMode.MEAN,
            ),
            reference_db=60.0,
            tilt=0.3,
        )
