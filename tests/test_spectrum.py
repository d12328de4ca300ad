"""Tests for magnitude spectrum extraction."""

import numpy as np
import pytest

from spectrapulse.analysis.spectrum import MagnitudeSpectrum, SpectrumExtractor


@pytest.fixture
def extractor():
    return SpectrumExtractor()


@pytest.mark.parametrize("size", [4, 6, 8, 10, 12, 64, 512, 1024, 1026])
def test_spectrum_length(extractor, size):
    rng = np.random.default_rng(size)
    frame = rng.integers(-128, 128, size=size).astype(np.int8)
    spectrum = extractor.extract(frame)
    assert len(spectrum) == (size // 2 - 1) // 2
    assert np.all(spectrum.magnitudes >= 0)


def test_magnitudes_skip_dc_and_use_first_half(extractor):
    # DC pair, then (3, 4) and (-6, 8); everything after the first half ignored
    frame = [100, 100, 3, 4, -6, 8, 127, 127, 127, 127, 127, 127]
    spectrum = extractor.extract(frame)
    np.testing.assert_allclose(spectrum.magnitudes, [5.0, 10.0])


def test_bytes_are_read_as_signed(extractor):
    frame = np.array([0, 0, -6, -8, 0, 0, 0, 0], dtype=np.int8).tobytes()
    spectrum = extractor.extract(frame)
    np.testing.assert_allclose(spectrum.magnitudes, [10.0])


def test_uint8_array_is_reinterpreted(extractor):
    frame = np.array([0, 0, 250, 8, 0, 0, 0, 0], dtype=np.uint8)  # 250 == -6
    spectrum = extractor.extract(frame)
    np.testing.assert_allclose(spectrum.magnitudes, [10.0])


def test_extreme_values(extractor):
    frame = np.full(16, -128, dtype=np.int8)
    spectrum = extractor.extract(frame)
    np.testing.assert_allclose(spectrum.magnitudes, np.hypot(128, 128))


@pytest.mark.parametrize("frame", [None, b"", bytes(2), [1, 2, 3]])
def test_degenerate_frames_give_empty_spectrum(extractor, frame):
    spectrum = extractor.extract(frame)
    assert spectrum.is_empty
    assert len(spectrum) == 0


def test_sample_rate_is_carried(extractor):
    spectrum = extractor.extract(bytes(1024), sample_rate=44100)
    assert spectrum.sample_rate == 44100
    assert spectrum.frame_size == 1024
    assert spectrum.bin_hz == pytest.approx(44100 / 1024)
    assert spectrum.frequency_of(0) == pytest.approx(44100 / 1024)


def test_frequency_helpers_without_sample_rate():
    spectrum = MagnitudeSpectrum(np.arange(5.0), frame_size=24)
    assert spectrum.bin_hz is None
    assert spectrum.frequency_of(2) is None
    assert spectrum.index_range(100, 200) == (0, 5)
    assert spectrum.dominant_frequency() is None


def test_index_range_selects_bins_inside_range():
    # 100 Hz per bin, bin i centred at (i + 1) * 100 Hz
    spectrum = MagnitudeSpectrum(np.arange(1.0, 11.0), frame_size=1024, sample_rate=102400)
    assert spectrum.index_range(60, 250) == (0, 2)
    assert spectrum.index_range(150, 450) == (1, 4)
    np.testing.assert_allclose(spectrum.restrict(150, 450), [2.0, 3.0, 4.0])
    assert spectrum.index_range(5000, 9000) == (10, 10)


def test_dominant_frequency():
    magnitudes = np.zeros(10)
    magnitudes[4] = 7.0
    spectrum = MagnitudeSpectrum(magnitudes, frame_size=1024, sample_rate=102400)
    assert spectrum.dominant_frequency() == pytest.approx(500.0)


def test_dominant_frequency_of_silence_is_none():
    spectrum = MagnitudeSpectrum(np.zeros(10), frame_size=1024, sample_rate=102400)
    assert spectrum.dominant_frequency() is None
