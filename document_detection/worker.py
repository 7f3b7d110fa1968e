"""
Single background worker per frame source with latest-frame-wins backpressure
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from .bounds import RegionOfInterest
from .detector import DocumentDetector
from .types import DetectionResult, Frame

logger = logging.getLogger(__name__)

ResultCallback = Callable[[DetectionResult], None]


class LatestFrameWorker:
    """
    Runs detection for one frame source on one background thread.

    At most one detection is in flight. A frame submitted while the worker
    is busy is dropped rather than queued, which bounds both memory and
    the latency between a frame and its result.

    Usage:
        with LatestFrameWorker(on_result) as worker:
            for frame in camera:
                worker.submit(frame)
    """

    def __init__(self, callback: ResultCallback, detector: Optional[DocumentDetector] = None):
        """
        Args:
            callback: Receives each DetectionResult on the worker thread
            detector: Detector to run (a default one when omitted)
        """
        self.callback = callback
        self.detector = detector or DocumentDetector()
        self.submitted = 0
        self.dropped = 0

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="document-detection")
        self._lock = threading.Lock()
        self._in_flight: Optional[Future] = None
        self._closed = False

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._in_flight is not None and not self._in_flight.done()

    def submit(self, frame: Frame, roi: Optional[RegionOfInterest] = None) -> bool:
        """
        Schedule detection on a frame unless one is already running.

        Returns:
            True if the frame was accepted, False if it was dropped
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("LatestFrameWorker is closed")
            if self._in_flight is not None and not self._in_flight.done():
                self.dropped += 1
                return False
            self.submitted += 1
            self._in_flight = self._executor.submit(self._run, frame, roi)
            return True

    def _run(self, frame: Frame, roi: Optional[RegionOfInterest]) -> DetectionResult:
        try:
            result = self.detector.detect(frame, roi)
        except Exception:
            logger.exception("Detection failed on worker thread")
            raise
        self.callback(result)
        return result

    def wait(self, timeout: Optional[float] = None) -> Optional[DetectionResult]:
        """Block until the in-flight detection (if any) finishes and return its result."""
        with self._lock:
            future = self._in_flight
        if future is None:
            return None
        return future.result(timeout)

    def close(self):
        """Stop accepting frames and wait for the in-flight detection."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "LatestFrameWorker":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
