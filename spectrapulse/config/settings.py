"""Settings loading and validation for SpectraPulse."""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Union

import yaml

from spectrapulse.analysis.bands import BandConfig, DistributionMode, FrequencyBand, FrequencyRange, ReductionMode
from spectrapulse.analysis.beat import BeatDetectionConfig
from spectrapulse.exceptions import ConfigurationError
from spectrapulse.modes import ModeRegistry
from spectrapulse.session import SessionConfig

logger = logging.getLogger(__name__)


@dataclass
class CaptureSettings:
    """Capture collaborator settings."""
    device_index: Optional[int] = None
    sample_rate: int = 44100
    capture_size: int = 1024  # FFT size in samples, also the frame length in bytes
    capture_rate_hz: float = 20.0


@dataclass
class AnalysisSettings:
    """Band analysis settings. Unset overrides keep the mode's value."""
    mode: str = "bars"
    band_count: Optional[int] = None
    distribution: Optional[str] = None  # "linear", "logarithmic", "sampled"
    reduction: Optional[str] = None  # "mean", "max"
    min_hz: Optional[float] = None
    max_hz: Optional[float] = None
    reference_db: Optional[float] = None
    gain: Optional[float] = None
    decay: Optional[float] = None


@dataclass
class BeatSettings:
    """Beat detection settings."""
    enabled: bool = True
    sensitivity: float = 0.7
    refractory_ms: float = 100.0
    smoothing_factor: float = 0.8
    history_window_ms: float = 1500.0
    intensity_decay: float = 0.95
    frequency_band: str = "ALL_FREQUENCIES"


@dataclass
class RunnerSettings:
    """Analysis loop settings."""
    queue_size: int = 4
    subscriber_queue_size: int = 8


@dataclass
class AppSettings:
    """Complete application settings."""
    capture: CaptureSettings = field(default_factory=CaptureSettings)
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    beat: BeatSettings = field(default_factory=BeatSettings)
    runner: RunnerSettings = field(default_factory=RunnerSettings)
    log_level: str = "INFO"

    def beat_config(self) -> BeatDetectionConfig:
        return BeatDetectionConfig(
            sensitivity=self.beat.sensitivity,
            refractory_ms=self.beat.refractory_ms,
            smoothing_factor=self.beat.smoothing_factor,
            history_window_ms=self.beat.history_window_ms,
            intensity_decay=self.beat.intensity_decay,
            frequency_band=FrequencyBand.from_name(self.beat.frequency_band),
        )

    def to_session_config(self) -> SessionConfig:
        """Resolve the selected mode and apply overrides."""
        analysis = self.analysis
        mode = ModeRegistry.create(analysis.mode, analysis.band_count)
        if mode is None:
            known = ", ".join(mode_id for mode_id, _ in ModeRegistry.list_modes())
            raise ConfigurationError(f"Unknown mode '{analysis.mode}' (available: {known})")

        config = mode.session_config(beat=self.beat_config(), beat_detection_enabled=self.beat.enabled)

        band_changes = {}
        if analysis.distribution is not None:
            band_changes["distribution"] = _parse_enum(DistributionMode, analysis.distribution, "distribution")
        if analysis.reduction is not None:
            band_changes["reduction"] = _parse_enum(ReductionMode, analysis.reduction, "reduction")
        if analysis.min_hz is not None or analysis.max_hz is not None:
            band_changes["frequency_range"] = FrequencyRange(
                min_hz=analysis.min_hz if analysis.min_hz is not None else 0.0,
                max_hz=analysis.max_hz if analysis.max_hz is not None else self.capture.sample_rate / 2,
            )
        if band_changes:
            config = replace(config, bands=replace(config.bands, **band_changes))

        overrides = {}
        if analysis.reference_db is not None:
            overrides["reference_db"] = analysis.reference_db
        if analysis.gain is not None:
            overrides["gain"] = analysis.gain
        if analysis.decay is not None:
            overrides["decay"] = analysis.decay
        if overrides:
            config = replace(config, **overrides)
        return config


def _parse_enum(enum_class, value: str, name: str):
    try:
        return enum_class(value.lower())
    except ValueError:
        allowed = ", ".join(e.value for e in enum_class)
        raise ConfigurationError(f"Invalid {name} '{value}' (expected one of: {allowed})") from None


def _as_int(value) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(value)
    return int(value)


def _as_bool(value) -> bool:
    if not isinstance(value, bool):
        raise ValueError(value)
    return value


def _field(section: dict, section_name: str, key: str, default, convert):
    """Read and convert one field. None stays None for optional fields."""
    value = section.get(key, default)
    if value is None:
        if default is not None:
            raise ConfigurationError(f"{section_name}.{key} must not be empty")
        return None
    if isinstance(value, bool) and convert is not _as_bool:
        raise ConfigurationError(f"{section_name}.{key}: invalid value {value!r}")
    try:
        return convert(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{section_name}.{key}: invalid value {value!r}") from None


def _section(raw: dict, key: str) -> dict:
    section = raw.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Section '{key}' must be a mapping")
    return section


def parse_settings(raw: Optional[dict]) -> AppSettings:
    """Build settings from a parsed YAML document."""
    raw = raw or {}
    if not isinstance(raw, dict):
        raise ConfigurationError("Settings document must be a mapping")

    # Parse capture settings
    capture_raw = _section(raw, "capture")
    capture = CaptureSettings(
        device_index=_field(capture_raw, "capture", "device_index", None, _as_int),
        sample_rate=_field(capture_raw, "capture", "sample_rate", 44100, _as_int),
        capture_size=_field(capture_raw, "capture", "capture_size", 1024, _as_int),
        capture_rate_hz=_field(capture_raw, "capture", "capture_rate_hz", 20.0, float),
    )
    if capture.sample_rate <= 0:
        raise ConfigurationError(f"capture.sample_rate must be positive, got {capture.sample_rate}")
    if capture.capture_size < 4 or capture.capture_size % 2:
        raise ConfigurationError(f"capture.capture_size must be an even number >= 4, got {capture.capture_size}")
    if capture.capture_rate_hz <= 0:
        raise ConfigurationError(f"capture.capture_rate_hz must be positive, got {capture.capture_rate_hz}")

    # Parse analysis settings
    analysis_raw = _section(raw, "analysis")
    analysis = AnalysisSettings(
        mode=_field(analysis_raw, "analysis", "mode", "bars", str),
        band_count=_field(analysis_raw, "analysis", "band_count", None, _as_int),
        distribution=_field(analysis_raw, "analysis", "distribution", None, str),
        reduction=_field(analysis_raw, "analysis", "reduction", None, str),
        min_hz=_field(analysis_raw, "analysis", "min_hz", None, float),
        max_hz=_field(analysis_raw, "analysis", "max_hz", None, float),
        reference_db=_field(analysis_raw, "analysis", "reference_db", None, float),
        gain=_field(analysis_raw, "analysis", "gain", None, float),
        decay=_field(analysis_raw, "analysis", "decay", None, float),
    )

    # Parse beat settings
    beat_raw = _section(raw, "beat")
    beat = BeatSettings(
        enabled=_field(beat_raw, "beat", "enabled", True, _as_bool),
        sensitivity=_field(beat_raw, "beat", "sensitivity", 0.7, float),
        refractory_ms=_field(beat_raw, "beat", "refractory_ms", 100.0, float),
        smoothing_factor=_field(beat_raw, "beat", "smoothing_factor", 0.8, float),
        history_window_ms=_field(beat_raw, "beat", "history_window_ms", 1500.0, float),
        intensity_decay=_field(beat_raw, "beat", "intensity_decay", 0.95, float),
        frequency_band=_field(beat_raw, "beat", "frequency_band", "ALL_FREQUENCIES", str),
    )

    # Parse runner settings
    runner_raw = _section(raw, "runner")
    runner = RunnerSettings(
        queue_size=_field(runner_raw, "runner", "queue_size", 4, _as_int),
        subscriber_queue_size=_field(runner_raw, "runner", "subscriber_queue_size", 8, _as_int),
    )
    if runner.queue_size < 1 or runner.subscriber_queue_size < 1:
        raise ConfigurationError("runner queue sizes must be >= 1")

    settings = AppSettings(
        capture=capture,
        analysis=analysis,
        beat=beat,
        runner=runner,
        log_level=str(raw.get("log_level", "INFO")).upper(),
    )

    # Surface invalid analysis values now rather than on the first frame
    settings.to_session_config()
    return settings


def load_settings(path: Union[str, Path]) -> AppSettings:
    """Load settings from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    settings = parse_settings(raw)
    logger.info(f"Loaded settings from {path} (mode: {settings.analysis.mode})")
    return settings
