"""Background run-loop feeding frames through an analysis session."""

import logging
import queue
import threading
import time
from collections import deque
from dataclasses import dataclass, replace
from typing import Optional

from spectrapulse.analysis.spectrum import FrameData
from spectrapulse.audio.base import CaptureFrame
from spectrapulse.session import AnalysisSession, AnalysisSnapshot

logger = logging.getLogger(__name__)


@dataclass
class RunnerStats:
    """Statistics for the analysis loop."""
    frames_received: int = 0
    frames_processed: int = 0
    frames_dropped: int = 0
    beats: int = 0
    errors: int = 0
    actual_fps: float = 0.0
    last_process_ms: float = 0.0


def _put_dropping_oldest(q: queue.Queue, item) -> int:
    """Non-blocking put; evicts the oldest entries until the item fits. Returns how many were evicted."""
    dropped = 0
    while True:
        try:
            q.put_nowait(item)
            return dropped
        except queue.Full:
            pass
        try:
            q.get_nowait()
            dropped += 1
        except queue.Empty:
            pass


class SnapshotBroadcaster:
    """Fans snapshots out to any number of bounded subscriber queues."""

    def __init__(self, maxsize: int = 8):
        self._maxsize = maxsize
        self._subscribers: list[queue.Queue] = []
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, maxsize: Optional[int] = None) -> queue.Queue:
        """Register a reader. Slow readers lose their oldest snapshots."""
        q: queue.Queue = queue.Queue(maxsize=maxsize or self._maxsize)
        with self._lock:
            self._subscribers.append(q)
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            if q in self._subscribers:
                self._subscribers.remove(q)

    def publish(self, snapshot: AnalysisSnapshot) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for q in subscribers:
            _put_dropping_oldest(q, snapshot)


class AnalysisRunner:
    """
    Pulls frames from a bounded queue and analyzes them on a worker thread.

    The capture side calls ``submit`` (or passes ``on_capture`` as its
    callback); every processed frame is published to the broadcaster. When the
    capture side outpaces analysis the oldest pending frame is dropped.
    """

    def __init__(self,
                 session: AnalysisSession,
                 queue_size: int = 4,
                 broadcaster: Optional[SnapshotBroadcaster] = None):
        self._session = session
        self._frames: queue.Queue = queue.Queue(maxsize=queue_size)
        self._broadcaster = broadcaster or SnapshotBroadcaster()

        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._stats = RunnerStats()
        self._stats_lock = threading.Lock()
        self._frame_times: deque = deque(maxlen=60)
        self._last_error: Optional[str] = None

    @property
    def session(self) -> AnalysisSession:
        return self._session

    @property
    def broadcaster(self) -> SnapshotBroadcaster:
        return self._broadcaster

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def stats(self) -> RunnerStats:
        """Consistent copy of the counters."""
        with self._stats_lock:
            return replace(self._stats)

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def subscribe(self, maxsize: Optional[int] = None) -> queue.Queue:
        return self._broadcaster.subscribe(maxsize)

    def submit(self, frame: Optional[FrameData], sample_rate: Optional[int] = None) -> bool:
        """Queue a frame for analysis. Returns False if an older frame was dropped."""
        dropped = _put_dropping_oldest(self._frames, (frame, sample_rate))
        with self._stats_lock:
            self._stats.frames_received += 1
            self._stats.frames_dropped += dropped
        if dropped:
            logger.debug("Analysis queue full, dropped oldest frame")
        return dropped == 0

    def on_capture(self, frame: CaptureFrame) -> None:
        """FrameSource callback."""
        self.submit(frame.data, frame.sample_rate)

    def start(self) -> bool:
        """Start the analysis loop. Returns True on success."""
        if self._running:
            return True

        self._running = True
        with self._stats_lock:
            self._stats = RunnerStats()
        self._last_error = None
        self._thread = threading.Thread(target=self._run_loop, name="spectrapulse-analysis", daemon=True)
        self._thread.start()
        logger.info("Analysis loop started")
        return True

    def stop(self) -> None:
        """Stop the analysis loop; pending frames are discarded."""
        if not self._running:
            return
        self._running = False
        if self._thread:
            self._thread.join(timeout=2)
            self._thread = None
        while True:
            try:
                self._frames.get_nowait()
            except queue.Empty:
                break
        logger.info(
            f"Analysis loop stopped ({self._stats.frames_processed} processed, "
            f"{self._stats.frames_dropped} dropped, {self._stats.beats} beats)"
        )

    def process_pending(self) -> int:
        """Synchronously drain the queue on the calling thread. Returns frames processed."""
        count = 0
        while True:
            try:
                frame, sample_rate = self._frames.get_nowait()
            except queue.Empty:
                return count
            self._process(frame, sample_rate)
            count += 1

    def _run_loop(self) -> None:
        while self._running:
            try:
                frame, sample_rate = self._frames.get(timeout=0.1)
            except queue.Empty:
                continue
            self._process(frame, sample_rate)

    def _process(self, frame: Optional[FrameData], sample_rate: Optional[int]) -> None:
        start = time.perf_counter()
        try:
            snapshot = self._session.process_frame(frame, sample_rate)
        except Exception as e:
            self._last_error = str(e)
            with self._stats_lock:
                self._stats.errors += 1
            logger.error(f"Analysis error: {e}")
            return

        elapsed = time.perf_counter() - start
        with self._stats_lock:
            self._stats.last_process_ms = elapsed * 1000.0
            if snapshot is None:
                return
            self._stats.frames_processed += 1
            if snapshot.beat is not None:
                self._stats.beats += 1

            # Update FPS stats
            self._frame_times.append(start)
            if len(self._frame_times) >= 2:
                duration = self._frame_times[-1] - self._frame_times[0]
                if duration > 0:
                    self._stats.actual_fps = (len(self._frame_times) - 1) / duration
        self._broadcaster.publish(snapshot)
