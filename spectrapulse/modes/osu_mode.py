"""osu!-style circular logo visualizer."""

from spectrapulse.analysis.bands import BandConfig, DistributionMode, ReductionMode
from spectrapulse.analysis.smoothing import KERNEL_3_TAP
from spectrapulse.session import SessionConfig

from .base import Mode, ModeRegistry


@ModeRegistry.register
class OsuMode(Mode):
    """
    Logarithmic bands taking the loudest bin, scaled against 45 dB with a 1.2x
    boost. Bars fall with a 0.95 per-frame decay and are blended with their
    neighbours so the circle stays continuous.
    """

    MODE_ID = "osu"
    MODE_NAME = "osu! Circular"
    DEFAULT_BAND_COUNT = 160

    def build_config(self) -> SessionConfig:
        return SessionConfig(
            bands=BandConfig(
                band_count=self._band_count,
                distribution=DistributionMode.LOGARITHMIC,
                reduction=ReductionMode.MAX,
                log_base=1.05,
            ),
            reference_db=45.0,
            gain=1.2,
            decay=0.95,
            kernel=KERNEL_3_TAP,
            smoothing_passes=1,
        )
