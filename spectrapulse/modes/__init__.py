# Visualization modes module
from .base import Mode, ModeRegistry
from .bars_mode import BarsMode
from .circular_bars_mode import CircularBarsMode
from .circular_wave_mode import CircularWaveMode
from .osu_mode import OsuMode

__all__ = ["Mode", "ModeRegistry", "BarsMode", "CircularBarsMode", "CircularWaveMode", "OsuMode"]
