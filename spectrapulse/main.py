"""SpectraPulse command line entry point.

Captures the microphone, runs the analysis loop and logs beats and band
levels until interrupted.
"""

import argparse
import logging
import queue
import time
from typing import Optional, Sequence

from spectrapulse.audio.mic import MicrophoneFrameSource
from spectrapulse.config.settings import AppSettings, load_settings
from spectrapulse.exceptions import ConfigurationError
from spectrapulse.modes import ModeRegistry
from spectrapulse.runner import AnalysisRunner
from spectrapulse.session import AnalysisSession

logger = logging.getLogger(__name__)


def _level_bar(amplitudes: Sequence[float], width: int = 16) -> str:
    # Coarse text meter: average of each group of bands
    if not amplitudes:
        return ""
    groups = min(width, len(amplitudes))
    size = len(amplitudes) / groups
    chars = " .:-=+*#%@"
    out = []
    for g in range(groups):
        chunk = amplitudes[int(g * size):int((g + 1) * size)]
        level = sum(chunk) / len(chunk)
        out.append(chars[min(len(chars) - 1, int(level * (len(chars) - 1) + 0.5))])
    return "".join(out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spectrapulse", description=__doc__.splitlines()[0])
    parser.add_argument("-c", "--config", help="YAML settings file")
    parser.add_argument("-m", "--mode", help="Visualization mode (overrides the settings file)")
    parser.add_argument("-d", "--device", type=int, help="Input device index")
    parser.add_argument("--duration", type=float, help="Stop after this many seconds")
    parser.add_argument("--list-devices", action="store_true", help="List input devices and exit")
    parser.add_argument("--list-modes", action="store_true", help="List visualization modes and exit")
    return parser


def run(settings: AppSettings, duration: Optional[float] = None) -> int:
    session = AnalysisSession(settings.to_session_config())
    runner = AnalysisRunner(session, queue_size=settings.runner.queue_size)
    snapshots = runner.subscribe(settings.runner.subscriber_queue_size)

    source = MicrophoneFrameSource(
        sample_rate=settings.capture.sample_rate,
        capture_size=settings.capture.capture_size,
        capture_rate_hz=settings.capture.capture_rate_hz,
    )
    source.set_callback(runner.on_capture)

    runner.start()
    if not source.start(settings.capture.device_index):
        logger.error(f"Could not start capture: {source.last_error}")
        runner.stop()
        return 1

    deadline = time.monotonic() + duration if duration else None
    last_report = 0.0
    try:
        while deadline is None or time.monotonic() < deadline:
            try:
                snapshot = snapshots.get(timeout=0.5)
            except queue.Empty:
                continue
            if snapshot.beat is not None:
                freq = f" @ {snapshot.beat.frequency:.0f}Hz" if snapshot.beat.frequency else ""
                logger.info(f"BEAT intensity={snapshot.beat.intensity:.2f}{freq}")
            now = time.monotonic()
            if now - last_report >= 1.0:
                last_report = now
                logger.info(f"[{_level_bar(snapshot.amplitudes)}] {runner.stats.actual_fps:.1f} fps")
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        source.release()
        runner.stop()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config) if args.config else AppSettings()
        if args.mode:
            settings.analysis.mode = args.mode
        if args.device is not None:
            settings.capture.device_index = args.device
        settings.to_session_config()
    except (ConfigurationError, FileNotFoundError) as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(str(e))
        return 2

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.list_modes:
        for mode_id, name in ModeRegistry.list_modes():
            print(f"{mode_id:15s} {name}")
        return 0
    if args.list_devices:
        for index, name in MicrophoneFrameSource().list_devices():
            print(f"{index:3d}  {name}")
        return 0

    return run(settings, args.duration)


if __name__ == "__main__":
    raise SystemExit(main())
