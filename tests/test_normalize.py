"""Tests for dB normalization."""

import numpy as np
import pytest

from spectrapulse.analysis.normalize import Normalizer
from spectrapulse.exceptions import ConfigurationError


def test_silence_maps_to_zero():
    assert Normalizer().normalize(0.0) == 0.0


def test_known_value():
    # 20 * log10(9 + 1) = 20 dB
    assert Normalizer(reference_db=80).normalize(9.0) == pytest.approx(0.25)
    assert Normalizer(reference_db=40).normalize(9.0) == pytest.approx(0.5)


def test_monotonic_and_bounded():
    values = np.linspace(0, 1e5, 1000)
    result = Normalizer(reference_db=45).normalize(values)
    assert np.all(np.diff(result) >= 0)
    assert np.all((result >= 0) & (result <= 1))


def test_saturates_at_one():
    assert Normalizer(reference_db=80).normalize(1e6) == 1.0


def test_negative_input_clamped():
    assert Normalizer().normalize(-5.0) == 0.0


def test_scalar_returns_float():
    assert isinstance(Normalizer().normalize(3.0), float)


def test_gain():
    assert Normalizer(reference_db=80, gain=2.0).normalize(9.0) == pytest.approx(0.5)


def test_tilt_attenuates_high_bands():
    result = Normalizer(reference_db=80, tilt=0.4).normalize_bands(np.full(4, 9.0))
    np.testing.assert_allclose(result, [0.25, 0.225, 0.2, 0.175])


def test_normalize_bands_empty():
    assert len(Normalizer(tilt=0.3).normalize_bands(np.array([]))) == 0


@pytest.mark.parametrize("kwargs", [
    {"reference_db": 0},
    {"reference_db": -10},
    {"gain": -1},
    {"tilt": 1.5},
])
def test_invalid_parameters(kwargs):
    with pytest.raises(ConfigurationError):
        Normalizer(**kwargs)
