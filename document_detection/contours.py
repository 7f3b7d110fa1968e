"""
Contour search and quadrilateral scoring
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import cv2
import numpy as np

from .config import DetectionConfig
from .ordering import order_points

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    """Best quadrilateral found in one binary image."""
    corners: np.ndarray = field(repr=False)  # (4, 2) float32, canonical order
    area: float
    rectangularity: float
    score: float
    from_box: bool = False


@dataclass
class ScoringStats:
    contours: int = 0
    candidates: int = 0
    best_score: float = 0.0


def geometry_is_sane(
    corners: np.ndarray,
    short_side: float,
    config: DetectionConfig
) -> bool:
    """
    Edge-length and aspect sanity check for an ordered candidate.

    Args:
        corners: (4, 2) corners in canonical order (TL, TR, BL, BR)
        short_side: Short side of the analysed frame in pixels
        config: Detection parameters

    Returns:
        True if every edge is long enough and width/height is plausible
    """
    tl, tr, bl, br = corners.astype(np.float64)
    top = np.linalg.norm(tr - tl)
    right = np.linalg.norm(br - tr)
    bottom = np.linalg.norm(br - bl)
    left = np.linalg.norm(bl - tl)

    min_edge = max(config.min_edge_floor, config.min_edge_ratio * short_side)
    if min(top, right, bottom, left) < min_edge:
        return False

    aspect = ((top + bottom) / 2) / ((left + right) / 2)
    return config.min_aspect <= aspect <= config.max_aspect


class ContourScorer:
    """
    Picks the most document-like quadrilateral among external contours.

    Each contour is filtered by area, approximated to a polygon (1% then
    2% of the perimeter) and scored as area * rectangularity. Contours
    that do not reduce to a convex quad fall back to their rotated
    minimum-area box under a looser rectangularity requirement.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    def _approximate(self, contour: np.ndarray) -> np.ndarray:
        peri = cv2.arcLength(contour, True)
        approx = cv2.approxPolyDP(contour, self.config.approx_epsilon * peri, True)
        if len(approx) != 4:
            approx = cv2.approxPolyDP(contour, self.config.approx_epsilon_relaxed * peri, True)
        return approx

    def find_best(self, binary: np.ndarray, stats: Optional[ScoringStats] = None) -> Optional[Candidate]:
        """
        Find the best-scoring quadrilateral in a binary image.

        Args:
            binary: Closed edge map or threshold map (uint8, 0/255)
            stats: Optional counters filled in for debug logging

        Returns:
            Best candidate (unrefined corners) or None
        """
        cfg = self.config
        h, w = binary.shape[:2]
        frame_area = float(h * w)
        short_side = float(min(h, w))
        min_area = max(cfg.min_area_floor, cfg.min_area_ratio * frame_area)
        max_area = cfg.max_area_ratio * frame_area

        contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        if stats is not None:
            stats.contours += len(contours)

        best = None
        for contour in contours:
            area = cv2.contourArea(contour)
            if area < min_area or area > max_area:
                continue

            approx = self._approximate(contour)

            if len(approx) == 4 and cv2.isContourConvex(approx):
                points = approx.reshape(4, 2).astype(np.float32)
                box = cv2.minAreaRect(points)
                required = cfg.min_rectangularity
                from_box = False
            else:
                # Noise broke the outline into a non-quad polygon; its
                # rotated bounding box may still be the document
                box = cv2.minAreaRect(contour.reshape(-1, 2).astype(np.float32))
                points = cv2.boxPoints(box).astype(np.float32)
                required = cfg.fallback_min_rectangularity
                from_box = True

            box_area = box[1][0] * box[1][1]
            rectangularity = area / box_area if box_area > 1.0 else 0.0
            if rectangularity < required:
                continue

            corners = order_points(points).astype(np.float32)
            if len({tuple(p) for p in corners.tolist()}) != 4:
                continue
            if not geometry_is_sane(corners, short_side, cfg):
                continue

            if stats is not None:
                stats.candidates += 1

            score = area * rectangularity
            # Strict comparison keeps the first contour on ties
            if best is None or score > best.score:
                best = Candidate(corners, area, rectangularity, score, from_box)

        if stats is not None and best is not None:
            stats.best_score = max(stats.best_score, best.score)

        return best
