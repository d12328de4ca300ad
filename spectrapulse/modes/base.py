"""Base classes for visualization modes (analysis presets)."""

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Optional

from spectrapulse.analysis.beat import BeatDetectionConfig
from spectrapulse.session import SessionConfig


class Mode(ABC):
    """A named visualization style and the analysis settings it needs."""

    # Mode identifier (override in subclasses)
    MODE_ID: str = "base"
    MODE_NAME: str = "Base Mode"
    DEFAULT_BAND_COUNT: int = 32

    def __init__(self, band_count: Optional[int] = None):
        self._band_count = band_count if band_count is not None else self.DEFAULT_BAND_COUNT

    @property
    def band_count(self) -> int:
        return self._band_count

    @abstractmethod
    def build_config(self) -> SessionConfig:
        """Session configuration for this mode with default beat settings."""
        pass

    def session_config(self,
                       beat: Optional[BeatDetectionConfig] = None,
                       beat_detection_enabled: bool = True) -> SessionConfig:
        config = self.build_config()
        return replace(
            config,
            beat=beat or config.beat,
            beat_detection_enabled=beat_detection_enabled,
        )

    def get_parameters(self) -> dict[str, Any]:
        """Get mode parameters for display/logging."""
        config = self.build_config()
        return {
            "mode_id": self.MODE_ID,
            "band_count": config.bands.band_count,
            "distribution": config.bands.distribution.value,
            "reduction": config.bands.reduction.value,
            "reference_db": config.reference_db,
            "gain": config.gain,
            "tilt": config.tilt,
            "decay": config.decay,
            "kernel": config.kernel,
            "smoothing_passes": config.smoothing_passes,
        }


class ModeRegistry:
    """Registry for available visualization modes."""

    _modes: dict[str, type[Mode]] = {}

    @classmethod
    def register(cls, mode_class: type[Mode]) -> type[Mode]:
        """Register a mode class. Can be used as decorator."""
        cls._modes[mode_class.MODE_ID] = mode_class
        return mode_class

    @classmethod
    def get(cls, mode_id: str) -> Optional[type[Mode]]:
        """Get a mode class by ID."""
        return cls._modes.get(mode_id)

    @classmethod
    def create(cls, mode_id: str, band_count: Optional[int] = None) -> Optional[Mode]:
        """Create a mode instance by ID."""
        mode_class = cls._modes.get(mode_id)
        if mode_class:
            return mode_class(band_count)
        return None

    @classmethod
    def list_modes(cls) -> list[tuple[str, str]]:
        """List available modes as (id, name) tuples."""
        return [(m.MODE_ID, m.MODE_NAME) for m in cls._modes.values()]
