"""
Quality verdict for a detected rectangle
"""

from enum import Enum
from typing import Optional

from .config import QualityConfig
from .types import Quality, Rectangle


class ReferenceSpace(Enum):
    """Space of the reference size a rectangle is judged against."""
    IMAGE = "image"
    VIEW = "view"


class QualityEvaluator:
    """
    Classifies a rectangle as GOOD, BAD_ANGLE or TOO_FAR.

    The image-space rule uses absolute pixel margins and suits the raw
    detection output. The view-space rule uses ratios and is resolution
    independent, which makes it the one to gate automatic capture on.
    """

    def __init__(self, config: Optional[QualityConfig] = None):
        self.config = config or QualityConfig()

    def evaluate(
        self,
        rectangle: Rectangle,
        ref_width: float,
        ref_height: float,
        space: ReferenceSpace = ReferenceSpace.VIEW
    ) -> Quality:
        """
        Judge a rectangle against a reference frame.

        Args:
            rectangle: Rectangle in the same space as the reference size
            ref_width: Reference frame width
            ref_height: Reference frame height
            space: Which rule to apply

        Returns:
            Quality verdict
        """
        if space is ReferenceSpace.IMAGE:
            return self.evaluate_in_image(rectangle, ref_width, ref_height)
        return self.evaluate_in_view(rectangle, ref_width, ref_height)

    def evaluate_in_image(self, rectangle: Rectangle, image_width: float, image_height: float) -> Quality:
        cfg = self.config
        tl, tr, bl, br = rectangle.corners

        misalignment = max(
            abs(tr.y - tl.y),
            abs(bl.y - br.y),
            abs(tl.x - bl.x),
            abs(tr.x - br.x),
        )
        if misalignment > cfg.image_angle_threshold:
            return Quality.BAD_ANGLE

        margin = cfg.image_margin
        if (
            tl.y > margin or
            tr.y > margin or
            bl.y < image_height - margin or
            br.y < image_height - margin
        ):
            return Quality.TOO_FAR

        return Quality.GOOD

    def evaluate_in_view(self, rectangle: Rectangle, view_width: float, view_height: float) -> Quality:
        cfg = self.config
        if view_width <= 0 or view_height <= 0:
            return Quality.TOO_FAR

        tl, tr, bl, br = rectangle.corners
        top, right, bottom, left = rectangle.edge_lengths()

        approx_area = max(top, bottom) * max(left, right)
        area_ratio = approx_area / (view_width * view_height)
        # Too small is too far; almost the whole viewport is usually the
        # screen border rather than a document
        if area_ratio < cfg.min_area_ratio or area_ratio > cfg.max_area_ratio:
            return Quality.TOO_FAR

        skews = (
            _skew(tr.y - tl.y, top),
            _skew(br.y - bl.y, bottom),
            _skew(bl.x - tl.x, left),
            _skew(br.x - tr.x, right),
        )
        if max(skews) > cfg.max_skew_ratio:
            return Quality.BAD_ANGLE

        for a, b in ((top, bottom), (left, right)):
            if b <= 0:
                return Quality.BAD_ANGLE
            ratio = a / b
            if ratio < cfg.min_edge_ratio or ratio > cfg.max_edge_ratio:
                return Quality.BAD_ANGLE

        return Quality.GOOD


def _skew(delta: float, length: float) -> float:
    if length <= 0:
        return float("inf")
    return abs(delta) / length
