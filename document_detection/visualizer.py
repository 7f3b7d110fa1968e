"""
Visualization of detected documents
"""

import cv2
import numpy as np
from typing import Dict, Optional, Tuple

from .types import Quality, Rectangle

# BGR colors per quality verdict
QUALITY_COLORS: Dict[Quality, Tuple[int, int, int]] = {
    Quality.GOOD: (0, 200, 0),
    Quality.BAD_ANGLE: (0, 165, 255),
    Quality.TOO_FAR: (0, 0, 255),
}


class DocumentVisualizer:
    """
    Draws a detected document outline with a transparent fill.

    The outline color follows the quality verdict when one is given, so a
    preview shows at a glance whether the frame is ready for capture.
    """

    def __init__(
        self,
        border_color: Tuple[int, int, int] = (255, 100, 0),  # Blue in BGR
        border_thickness: int = 3,
        overlay_alpha: float = 0.3
    ):
        """
        Initialize the visualizer.

        Args:
            border_color: Outline color in BGR when no quality is given
            border_thickness: Outline thickness in pixels
            overlay_alpha: Fill transparency (0.0 = transparent, 1.0 = opaque)
        """
        self.border_color = border_color
        self.border_thickness = border_thickness
        self.overlay_alpha = overlay_alpha

    def color_for(self, quality: Optional[Quality]) -> Tuple[int, int, int]:
        if quality is None:
            return self.border_color
        return QUALITY_COLORS[quality]

    def _draw_outline(self, image: np.ndarray, polygon: np.ndarray, color: Tuple[int, int, int]):
        """Outline and corner dots, with edges clipped to the image."""
        h, w = image.shape[:2]
        points = [tuple(int(round(v)) for v in p) for p in polygon]

        for p1, p2 in zip(points, points[1:] + points[:1]):
            visible, p1, p2 = cv2.clipLine((0, 0, w, h), p1, p2)
            if visible:
                cv2.line(image, p1, p2, color, self.border_thickness)

        for x, y in points:
            if 0 <= x < w and 0 <= y < h:
                cv2.circle(image, (x, y), radius=5, color=color, thickness=-1)

    def visualize(
        self,
        image: np.ndarray,
        rectangle: Optional[Rectangle],
        quality: Optional[Quality] = None,
        draw_border: bool = True,
        draw_overlay: bool = True
    ) -> np.ndarray:
        """
        Draw a detected document on the image.

        Args:
            image: Input image (BGR format)
            rectangle: Detected rectangle in the image's coordinates
            quality: Optional verdict selecting the outline color
            draw_border: Whether to draw the outline
            draw_overlay: Whether to draw the transparent fill

        Returns:
            Image with visualization
        """
        if image is None or rectangle is None:
            return image

        result = image.copy()
        polygon = rectangle.as_polygon()
        color = self.color_for(quality)

        if draw_overlay:
            overlay = result.copy()
            cv2.fillPoly(overlay, [polygon.astype(np.int32)], color)
            result = cv2.addWeighted(overlay, self.overlay_alpha, result, 1 - self.overlay_alpha, 0)

        # Corners may lie outside the frame after mapping, draw clipped edges
        if draw_border:
            self._draw_outline(result, polygon, color)

        return result

    def visualize_with_info(
        self,
        image: np.ndarray,
        rectangle: Optional[Rectangle],
        quality: Optional[Quality] = None
    ) -> np.ndarray:
        """
        Draw a detected document with its size and quality verdict.

        Args:
            image: Input image (BGR format)
            rectangle: Detected rectangle
            quality: Optional quality verdict

        Returns:
            Image with visualization and information
        """
        result = self.visualize(image, rectangle, quality)
        if rectangle is None:
            return result

        top, right, bottom, left = rectangle.edge_lengths()
        info_text = [
            f"Width: {int(max(top, bottom))}px",
            f"Height: {int(max(left, right))}px",
            f"Area: {int(rectangle.area())}px2",
        ]
        if quality is not None:
            info_text.append(f"Quality: {quality.name}")

        y_offset = 30
        for i, text in enumerate(info_text):
            # White outline, black text
            cv2.putText(result, text, (10, y_offset + i * 30), cv2.FONT_HERSHEY_SIMPLEX,
                        0.7, (255, 255, 255), 2, cv2.LINE_AA)
            cv2.putText(result, text, (10, y_offset + i * 30), cv2.FONT_HERSHEY_SIMPLEX,
                        0.7, (0, 0, 0), 1, cv2.LINE_AA)

        return result

    def create_side_by_side(self, original: np.ndarray, visualized: np.ndarray) -> np.ndarray:
        """
        Create an image with two images side by side.

        The right image is scaled to the height of the left one and
        converted to its channel count when they differ.
        """
        if original is None or visualized is None:
            return original if original is not None else visualized

        if visualized.ndim != original.ndim:
            code = cv2.COLOR_GRAY2BGR if visualized.ndim == 2 else cv2.COLOR_BGR2GRAY
            visualized = cv2.cvtColor(visualized, code)

        if original.shape[0] != visualized.shape[0]:
            height = original.shape[0]
            width = max(1, int(visualized.shape[1] * height / visualized.shape[0]))
            visualized = cv2.resize(visualized, (width, height))

        return np.hstack([original, visualized])
