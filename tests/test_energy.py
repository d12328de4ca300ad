"""Tests for the energy history window."""

import pytest

from spectrapulse.analysis.energy import EnergyHistory
from spectrapulse.exceptions import ConfigurationError


def test_evicts_samples_outside_window():
    history = EnergyHistory(window_ms=1500)
    for ts, energy in [(0, 1.0), (500, 2.0), (1000, 3.0), (2000, 4.0), (2500, 5.0)]:
        history.add_sample(energy, ts)
    assert [s.timestamp_ms for s in history.samples()] == [1000, 2000, 2500]
    assert history.get_average() == pytest.approx(4.0)


def test_sample_on_window_edge_is_kept():
    history = EnergyHistory(window_ms=1000)
    history.add_sample(1.0, 0)
    history.add_sample(2.0, 1000)
    assert len(history) == 2


def test_uses_clock_when_no_timestamp(clock):
    history = EnergyHistory(window_ms=100, clock=clock)
    history.add_sample(1.0)
    clock.advance(150)
    history.add_sample(2.0)
    assert len(history) == 1
    assert history.samples()[0].timestamp_ms == 150


def test_empty_statistics():
    history = EnergyHistory()
    assert history.get_average() == 0.0
    assert history.get_variance() == 0.0


def test_single_sample_has_zero_variance():
    history = EnergyHistory()
    history.add_sample(7.0, 0)
    assert history.get_average() == 7.0
    assert history.get_variance() == 0.0


def test_population_variance():
    history = EnergyHistory()
    history.add_sample(1.0, 0)
    history.add_sample(3.0, 10)
    assert history.get_variance() == pytest.approx(1.0)


def test_clear():
    history = EnergyHistory()
    history.add_sample(1.0, 0)
    history.clear()
    assert len(history) == 0
    assert history.get_average() == 0.0


def test_shrinking_window_evicts():
    history = EnergyHistory(window_ms=1500)
    for ts in (0, 500, 1000):
        history.add_sample(1.0, ts)
    history.window_ms = 600
    assert [s.timestamp_ms for s in history.samples()] == [500, 1000]


@pytest.mark.parametrize("window", [0, -100])
def test_invalid_window(window):
    with pytest.raises(ConfigurationError):
        EnergyHistory(window_ms=window)


@pytest.mark.parametrize("value", [0.1, 1 / 3, 2 ** 0.5, 1e6 / 3])
def test_identical_samples_have_exact_statistics(value):
    history = EnergyHistory()
    for ts in range(0, 1000, 50):
        history.add_sample(value, ts)
    assert history.get_average() == value
    assert history.get_variance() == 0.0
