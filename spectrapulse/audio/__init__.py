# Frame capture module
from .base import CaptureFrame, FrameSource, RingBuffer
from .mic import MicrophoneFrameSource, hann_window, pcm_to_fft_frame

__all__ = ["CaptureFrame", "FrameSource", "RingBuffer", "MicrophoneFrameSource", "hann_window", "pcm_to_fft_frame"]
