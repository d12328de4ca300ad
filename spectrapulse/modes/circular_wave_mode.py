"""Smooth closed wave around a circle."""

from spectrapulse.analysis.bands import BandConfig, DistributionMode, ReductionMode
from spectrapulse.analysis.smoothing import KERNEL_5_TAP
from spectrapulse.session import SessionConfig

from .base import Mode, ModeRegistry


@ModeRegistry.register
class CircularWaveMode(Mode):
    """Point-sampled spectrum, 50 dB ceiling, three passes of the 5-tap kernel."""

    MODE_ID = "circular_wave"
    MODE_NAME = "Circular Wave"
    DEFAULT_BAND_COUNT = 128

    def build_config(self) -> SessionConfig:
        return SessionConfig(
            bands=BandConfig(
                band_count=self._band_count,
                distribution=DistributionMode.SAMPLED,
                reduction=ReductionMode.MEAN,
            ),
            reference_db=50.0,
            kernel=KERNEL_5_TAP,
            smoothing_passes=3,
        )
