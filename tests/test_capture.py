"""Tests for frame sources and PCM-to-FFT packing (no audio hardware needed)."""

import logging

import numpy as np
import pytest

from spectrapulse.analysis.spectrum import SpectrumExtractor
from spectrapulse.audio import mic
from spectrapulse.audio.base import CaptureFrame, FrameSource, RingBuffer
from spectrapulse.audio.mic import MicrophoneFrameSource, hann_window, pcm_to_fft_frame
from spectrapulse.runner import AnalysisRunner
from spectrapulse.session import AnalysisSession


class ScriptedSource(FrameSource):
    """Emits a fixed list of frames when started."""

    def __init__(self, frames):
        super().__init__()
        self._frames = frames

    def list_devices(self):
        return [(0, "scripted")]

    def start(self, device_index=None):
        if self._released:
            return False
        self._running = True
        for i, frame in enumerate(self._frames):
            self._emit_frame(frame, 44100, i * 0.05)
        return True

    def stop(self):
        self._running = False


class TestPcmToFftFrame:
    def test_length_and_type(self):
        frame = pcm_to_fft_frame(np.zeros(2048), capture_size=1024)
        assert isinstance(frame, bytes)
        assert len(frame) == 1024

    def test_silence_is_all_zero(self):
        assert pcm_to_fft_frame(np.zeros(256), 256) == bytes(256)

    def test_short_input_is_padded(self):
        assert len(pcm_to_fft_frame(np.ones(10) * 0.1, 64)) == 64

    def test_sine_peaks_in_its_bin(self):
        n = 256
        t = np.arange(n)
        samples = np.sin(2 * np.pi * 16 * t / n)
        spectrum = SpectrumExtractor().extract(pcm_to_fft_frame(samples, n))
        # Magnitude index 15 is FFT bin 16
        assert int(np.argmax(spectrum.magnitudes)) == 15
        # A full-scale sine lands near 127
        assert 115 <= spectrum.magnitudes[15] <= 135

    @pytest.mark.parametrize("size", [0, 2, 255])
    def test_invalid_capture_size(self, size):
        with pytest.raises(ValueError):
            pcm_to_fft_frame(np.zeros(16), size)


class TestRingBuffer:
    def test_read_most_recent(self):
        buf = RingBuffer(capacity=5)
        buf.write(np.array([1, 2, 3], dtype=np.float32))
        buf.write(np.array([4, 5, 6, 7], dtype=np.float32))
        np.testing.assert_array_equal(buf.read(5), [3, 4, 5, 6, 7])
        np.testing.assert_array_equal(buf.read(2), [6, 7])

    def test_read_more_than_available(self):
        buf = RingBuffer(capacity=8)
        buf.write(np.array([1, 2], dtype=np.float32))
        assert buf.available == 2
        np.testing.assert_array_equal(buf.read(10), [1, 2])

    def test_oversized_write(self):
        buf = RingBuffer(capacity=3)
        buf.write(np.arange(10, dtype=np.float32))
        np.testing.assert_array_equal(buf.read(3), [7, 8, 9])

    def test_clear(self):
        buf = RingBuffer(capacity=3)
        buf.write(np.ones(2, dtype=np.float32))
        buf.clear()
        assert len(buf.read(3)) == 0


class TestFrameSource:
    def test_frames_reach_callback(self):
        received = []
        source = ScriptedSource([b"\x01" * 8, b"\x02" * 8])
        source.set_callback(received.append)
        assert source.start()
        assert [f.data for f in received] == [b"\x01" * 8, b"\x02" * 8]
        assert all(isinstance(f, CaptureFrame) for f in received)
        assert received[1].timestamp == pytest.approx(0.05)

    def test_missing_callback_warns_once(self, caplog):
        source = ScriptedSource([bytes(8)] * 3)
        with caplog.at_level(logging.WARNING):
            source.start()
        assert sum("no callback" in r.message for r in caplog.records) == 1

    def test_release(self):
        received = []
        source = ScriptedSource([bytes(8)])
        source.set_callback(received.append)
        source.start()
        source.release()
        assert source.is_released
        assert not source.is_running
        assert not source.start()

    def test_feeds_runner(self):
        frame = np.tile(np.array([3, 4], dtype=np.int8), 512).tobytes()
        runner = AnalysisRunner(AnalysisSession())
        snapshots = runner.subscribe()
        source = ScriptedSource([frame] * 3)
        source.set_callback(runner.on_capture)
        source.start()
        assert runner.process_pending() == 3
        assert snapshots.qsize() == 3


class TestMicrophoneFrameSource:
    def test_without_sounddevice(self, monkeypatch):
        monkeypatch.setattr(mic, "sd", None)
        source = MicrophoneFrameSource()
        assert source.list_devices() == []
        assert not source.start()
        assert source.last_error == "sounddevice not available"
        assert not source.is_running

    def test_released_source_cannot_start(self):
        source = MicrophoneFrameSource()
        source.release()
        assert not source.start()
        assert source.last_error == "source already released"


def test_hann_window_is_built_once():
    first = hann_window(512)
    assert hann_window(512) is first
    assert not first.flags.writeable
    assert hann_window(256) is not first
