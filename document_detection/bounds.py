"""
Axis-aligned region of interest in upright image space
"""

import math
from typing import Optional, Tuple


class RegionOfInterest:
    """
    Axis-aligned box used to restrict detection, for example around the
    bounding box reported by an external object detector.
    """

    def __init__(self, left: float, top: float, width: float, height: float):
        self.left = left
        self.top = top
        self.width = width
        self.height = height

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "RegionOfInterest":
        """Build a region from two opposite corners (any order)."""
        left, right = min(x1, x2), max(x1, x2)
        top, bottom = min(y1, y2), max(y1, y2)
        return cls(left, top, right - left, bottom - top)

    def __repr__(self) -> str:
        return f"RegionOfInterest({self.left}, {self.top}, {self.width}, {self.height})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, RegionOfInterest):
            return NotImplemented
        return (self.left, self.top, self.width, self.height) == (other.left, other.top, other.width, other.height)

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2, self.top + self.height / 2)

    def area(self) -> float:
        """
        Calculate the area of the region.

        Returns:
            Area in square pixels (0 for empty or inverted regions)
        """
        return max(0, self.width) * max(0, self.height)

    def is_inside(self, other: "RegionOfInterest", check_center_only: bool = False) -> bool:
        """
        Check if this region lies completely inside another region.

        Args:
            other: Region to compare against
            check_center_only: Only require the center of this region to be inside

        Returns:
            True if this region (or its center) is inside the other region
        """
        if check_center_only:
            cx, cy = self.center()
            return RegionOfInterest(cx, cy, 0, 0).is_inside(other)

        return (
            self.left >= other.left and
            self.right <= other.right and
            self.top >= other.top and
            self.bottom <= other.bottom
        )

    def expanded(self, ratio: float) -> "RegionOfInterest":
        """
        Grow the region by a ratio of its size on every side.

        An object detector box usually hugs the printed content, so a small
        expansion recovers the paper edge around it. Negative ratios shrink.
        """
        dx = self.width * ratio
        dy = self.height * ratio
        return RegionOfInterest(
            self.left - dx,
            self.top - dy,
            max(0, self.width + 2 * dx),
            max(0, self.height + 2 * dy)
        )

    def inset(self, ratio: float) -> "RegionOfInterest":
        """Shrink the region by a ratio of its size on every side."""
        return self.expanded(-ratio)

    def clamp(self, width: int, height: int) -> Optional[Tuple[int, int, int, int]]:
        """
        Clamp the region to an image of the given size.

        Args:
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            Integer (x, y, w, h) inside the image, or None when the region
            does not overlap the image at all or has a non-finite
            coordinate
        """
        if not all(math.isfinite(v) for v in (self.left, self.top, self.width, self.height)):
            return None

        x1 = int(max(0, min(width, round(self.left))))
        y1 = int(max(0, min(height, round(self.top))))
        x2 = int(max(0, min(width, round(self.right))))
        y2 = int(max(0, min(height, round(self.bottom))))

        if x2 <= x1 or y2 <= y1:
            return None

        return x1, y1, x2 - x1, y2 - y1
