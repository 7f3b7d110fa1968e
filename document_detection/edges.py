"""
Binary edge maps for contour search
"""

import cv2
import numpy as np
from typing import Optional, Tuple

from .config import DetectionConfig


class EdgeExtractor:
    """
    Produces the two binary images the contour stage searches.

    The primary map is an adaptive-threshold Canny edge map: precise on
    high-contrast edges, brittle on low-contrast documents. The fallback
    map comes from adaptive Gaussian thresholding, which has the opposite
    trade-off. Both are closed with a small rectangular kernel to bridge
    gaps left by glare or shadow.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()
        k = self.config.morph_kernel
        self._kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (k, k))

    def canny_thresholds(self, blurred: np.ndarray) -> Tuple[float, float]:
        """
        Canny low/high thresholds derived from the intensity median.

        low = max(floor, (1 - sigma) * median), high = max(floor, (1 + sigma) * median)
        """
        median = float(np.median(blurred))
        sigma = self.config.canny_sigma
        low = max(self.config.canny_low_floor, (1.0 - sigma) * median)
        high = max(self.config.canny_high_floor, (1.0 + sigma) * median)
        return low, high

    def close(self, binary: np.ndarray) -> np.ndarray:
        return cv2.morphologyEx(binary, cv2.MORPH_CLOSE, self._kernel)

    def canny_edges(self, blurred: np.ndarray) -> np.ndarray:
        """Closed Canny edge map of the blurred grayscale image."""
        low, high = self.canny_thresholds(blurred)
        edges = cv2.Canny(blurred, low, high)
        return self.close(edges)

    def adaptive_binary(self, blurred: np.ndarray) -> np.ndarray:
        """
        Closed adaptive-threshold map of the blurred grayscale image.

        Locally darker pixels become foreground: on a plain card that is the
        desk side of the boundary. The band breaks up at the card corners,
        so it is dilated before closing to give a ring that an external
        contour search can pick up, just like a Canny edge.
        """
        binary = cv2.adaptiveThreshold(
            blurred,
            255,
            cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
            cv2.THRESH_BINARY_INV,
            self.config.adaptive_block_size,
            self.config.adaptive_c
        )
        if self.config.adaptive_dilate_iterations:
            binary = cv2.dilate(binary, self._kernel, iterations=self.config.adaptive_dilate_iterations)
        return self.close(binary)
