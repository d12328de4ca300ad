"""Shared fixtures for the SpectraPulse test suite."""

import numpy as np
import pytest

FRAME_SIZE = 1024
SAMPLE_RATE = 44100


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> float:
        self.now_ms += ms
        return self.now_ms


def make_frame(real: int, imaginary: int, size: int = FRAME_SIZE) -> bytes:
    """Frame where every (real, imaginary) pair, DC included, has the given values."""
    pairs = np.tile(np.array([real, imaginary], dtype=np.int8), size // 2)
    return pairs.tobytes()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def zero_frame():
    return bytes(FRAME_SIZE)


@pytest.fixture
def constant_frame():
    # Every pair is (3, 4): magnitude exactly 5
    return make_frame(3, 4)
