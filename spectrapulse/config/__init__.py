# Settings module
from .settings import AnalysisSettings, AppSettings, BeatSettings, CaptureSettings, RunnerSettings, load_settings, parse_settings

__all__ = [
    "AnalysisSettings", "AppSettings", "BeatSettings", "CaptureSettings", "RunnerSettings",
    "load_settings", "parse_settings",
]
