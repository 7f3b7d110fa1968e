"""
Sub-pixel corner refinement
"""

import logging
from typing import Optional

import cv2
import numpy as np

from .config import DetectionConfig
from .ordering import order_points

logger = logging.getLogger(__name__)

__all__ = ["CornerRefiner"]


class CornerRefiner:
    """
    Moves corner estimates to the local intensity-gradient corner.

    Refinement only improves precision; whenever it fails or produces
    something implausible the unrefined corners are returned unchanged.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    def refine(self, gray: np.ndarray, corners: np.ndarray) -> np.ndarray:
        """
        Refine corner positions using sub-pixel accuracy.

        Args:
            gray: Enhanced grayscale image the corners were found in
            corners: (4, 2) corners in canonical order

        Returns:
            (4, 2) float32 refined corners in canonical order, or the input
            corners if refinement failed
        """
        original = np.asarray(corners, dtype=np.float32).reshape(4, 2)
        h, w = gray.shape[:2]
        if h < 2 or w < 2:
            return original

        max_x = float(max(w - 1, 1))
        max_y = float(max(h - 1, 1))
        clamped = original.copy()
        clamped[:, 0] = np.clip(clamped[:, 0], 0.0, max_x)
        clamped[:, 1] = np.clip(clamped[:, 1], 0.0, max_y)

        cfg = self.config
        criteria = (
            cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_MAX_ITER,
            cfg.subpix_max_iter,
            cfg.subpix_epsilon
        )

        points = clamped.reshape(-1, 1, 2).copy()
        try:
            refined = cv2.cornerSubPix(gray, points, tuple(cfg.subpix_window), (-1, -1), criteria)
        except cv2.error as e:
            logger.warning("Corner refinement failed, keeping unrefined corners: %s", e)
            return original

        refined = np.asarray(refined, dtype=np.float32).reshape(4, 2)
        if not np.all(np.isfinite(refined)):
            logger.warning("Corner refinement diverged, keeping unrefined corners")
            return original

        shifts = np.linalg.norm(refined - clamped, axis=1)
        if np.any(shifts > cfg.subpix_max_shift):
            logger.debug("Corner refinement moved a corner %.1f px, discarded", float(shifts.max()))
            return original

        ordered = order_points(refined).astype(np.float32)
        if len({tuple(p) for p in ordered.tolist()}) != 4:
            logger.debug("Refined corners collapsed, discarded")
            return original

        return ordered
