"""
Caller-side state across frames: capture gating and rectangle smoothing.

Nothing in here is used by the detector itself. A preview loop feeds
per-frame results in and reads back whether to capture and what to draw.
"""

import logging
from collections import deque
from enum import Enum
from typing import Optional

import numpy as np

from .types import Quality, Rectangle

logger = logging.getLogger(__name__)


class StabilizerState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    READY = "ready"


class TemporalStabilizer:
    """
    Bounded confidence counter in [0, required_count].

    GOOD results count up, BAD_ANGLE and TOO_FAR count down (or reset,
    depending on `decay`), a frame without a rectangle resets to zero.
    The counter is owned by a single caller loop and is not thread-safe.

    Args:
        required_count: Consecutive good frames needed to become READY
        decay: "decrement" or "reset" on a non-GOOD verdict
        max_center_shift: When set, a rectangle whose center moved at least
            this many pixels since the previous frame resets the counter
    """

    DECAY_MODES = ("decrement", "reset")

    def __init__(self, required_count: int = 15, decay: str = "decrement", max_center_shift: Optional[float] = None):
        if required_count < 1:
            raise ValueError(f"required_count must be positive, got {required_count}")
        if decay not in self.DECAY_MODES:
            raise ValueError(f"decay must be one of {self.DECAY_MODES}, got {decay!r}")

        self.required_count = required_count
        self.decay = decay
        self.max_center_shift = max_center_shift
        self.count = 0
        self._last: Optional[Rectangle] = None

    @property
    def state(self) -> StabilizerState:
        if self.count <= 0:
            return StabilizerState.IDLE
        if self.count >= self.required_count:
            return StabilizerState.READY
        return StabilizerState.ACCUMULATING

    @property
    def progress(self) -> float:
        """Counter as a fraction of `required_count`, for progress indicators."""
        return self.count / self.required_count

    def update(self, rectangle: Optional[Rectangle], quality: Optional[Quality]) -> StabilizerState:
        """
        Feed one detection cycle.

        Args:
            rectangle: Detected rectangle, None when nothing was found
            quality: Verdict for the rectangle (ignored when rectangle is None)

        Returns:
            State after the update
        """
        if rectangle is None:
            self.reset()
            return self.state

        moved = (
            self.max_center_shift is not None and
            self._last is not None and
            rectangle.center().distance_to(self._last.center()) >= self.max_center_shift
        )
        self._last = rectangle

        if moved:
            self.count = 0
        elif quality is Quality.GOOD:
            self.count = min(self.count + 1, self.required_count)
        elif self.decay == "reset":
            self.count = 0
        else:
            self.count = max(self.count - 1, 0)

        return self.state

    def consume(self) -> bool:
        """
        Take the READY state if present.

        Returns True at most once per accumulation, so auto-capture fires
        a single time; the counter restarts from zero afterwards.
        """
        if self.state is not StabilizerState.READY:
            return False
        logger.debug("Stable for %d frames, capture triggered", self.count)
        self.reset()
        return True

    def reset(self):
        self.count = 0
        self._last = None


class RectangleSmoother:
    """
    Recency-weighted average of the last few rectangles, to keep an
    on-screen outline from jittering between frames.

    Args:
        history: Number of rectangles averaged
        reset_distance: Mean corner distance above which the history is
            dropped, so the outline jumps to a new document immediately
    """

    def __init__(self, history: int = 5, reset_distance: float = 50.0):
        if history < 1:
            raise ValueError(f"history must be positive, got {history}")
        self.reset_distance = reset_distance
        self._history = deque(maxlen=history)

    def __len__(self) -> int:
        return len(self._history)

    def update(self, rectangle: Optional[Rectangle]) -> Optional[Rectangle]:
        """
        Add a measurement and return the smoothed rectangle.

        A None measurement clears the history and returns None.
        """
        if rectangle is None:
            self.reset()
            return None

        if self._history:
            last = self._history[-1]
            if last.space is not rectangle.space or last.distance_to(rectangle) > self.reset_distance:
                self._history.clear()

        self._history.append(rectangle)

        stacked = np.stack([r.as_array().astype(np.float64) for r in self._history])
        weights = np.arange(1, len(self._history) + 1, dtype=np.float64)
        averaged = np.tensordot(weights / weights.sum(), stacked, axes=1)
        return Rectangle.from_array(averaged, rectangle.space)

    def reset(self):
        self._history.clear()
