"""Tests for YAML settings loading."""

import pytest

from spectrapulse.analysis.bands import DistributionMode, FrequencyBand, FrequencyRange, ReductionMode
from spectrapulse.config import AppSettings, load_settings, parse_settings
from spectrapulse.exceptions import ConfigurationError
from spectrapulse.main import main

SETTINGS_YAML = """
log_level: debug
capture:
  sample_rate: 48000
  capture_size: 512
analysis:
  mode: osu
  band_count: 64
  min_hz: 60
  max_hz: 8000
  reference_db: 50
beat:
  enabled: false
  sensitivity: 1.2
  frequency_band: bass
runner:
  queue_size: 2
"""


def test_defaults():
    settings = parse_settings(None)
    assert settings.analysis.mode == "bars"
    assert settings.beat.frequency_band == "ALL_FREQUENCIES"
    config = settings.to_session_config()
    assert config.bands.band_count == 32
    assert config.beat_detection_enabled


def test_load_yaml(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(SETTINGS_YAML, encoding="utf-8")

    settings = load_settings(path)
    assert settings.log_level == "DEBUG"
    assert settings.capture.sample_rate == 48000
    assert settings.runner.queue_size == 2

    config = settings.to_session_config()
    assert config.bands.band_count == 64
    assert config.bands.distribution is DistributionMode.LOGARITHMIC
    assert config.bands.frequency_range == FrequencyRange(60, 8000)
    assert config.reference_db == 50
    assert config.gain == pytest.approx(1.2)
    assert not config.beat_detection_enabled
    assert config.beat.sensitivity == 1.2
    assert config.beat.frequency_band is FrequencyBand.BASS


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_settings(path) == AppSettings()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_overrides_distribution_and_reduction():
    settings = parse_settings({"analysis": {"distribution": "Sampled", "reduction": "MAX"}})
    bands = settings.to_session_config().bands
    assert bands.distribution is DistributionMode.SAMPLED
    assert bands.reduction is ReductionMode.MAX


def test_max_hz_defaults_to_nyquist():
    settings = parse_settings({"capture": {"sample_rate": 32000}, "analysis": {"min_hz": 100}})
    assert settings.to_session_config().bands.frequency_range == FrequencyRange(100, 16000)


@pytest.mark.parametrize("raw", [
    {"analysis": {"mode": "unknown"}},
    {"analysis": {"band_count": 0}},
    {"analysis": {"distribution": "cubic"}},
    {"analysis": {"min_hz": 500, "max_hz": 100}},
    {"analysis": {"reference_db": -1}},
    {"capture": {"capture_size": 1023}},
    {"capture": {"sample_rate": 0}},
    {"beat": {"sensitivity": -0.5}},
    {"runner": {"queue_size": 0}},
    {"capture": "not a mapping"},
    ["not", "a", "mapping"],
])
def test_invalid_settings(raw):
    with pytest.raises(ConfigurationError):
        parse_settings(raw)


def test_unknown_mode_lists_available():
    with pytest.raises(ConfigurationError, match="osu"):
        parse_settings({"analysis": {"mode": "unknown"}})


@pytest.mark.parametrize("raw", [
    {"capture": {"sample_rate": "44.1k"}},
    {"capture": {"capture_size": 1023.5}},
    {"capture": {"sample_rate": None}},
    {"capture": {"sample_rate": True}},
    {"analysis": {"band_count": "many"}},
    {"analysis": {"reference_db": "loud"}},
    {"analysis": {"min_hz": [60]}},
    {"beat": {"sensitivity": "high"}},
    {"beat": {"enabled": "maybe"}},
    {"runner": {"queue_size": "four"}},
])
def test_wrong_value_types(raw):
    with pytest.raises(ConfigurationError):
        parse_settings(raw)


def test_numeric_strings_are_converted():
    settings = parse_settings({"capture": {"sample_rate": "48000"}, "beat": {"sensitivity": "1.5"}})
    assert settings.capture.sample_rate == 48000
    assert settings.beat.sensitivity == 1.5


def test_cli_rejects_bad_value_types(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("beat:\n  sensitivity: high\n", encoding="utf-8")
    assert main(["--config", str(path), "--list-modes"]) == 2
