"""
Perspective-correct cropping
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from .preprocessor import Preprocessor
from .types import Frame, PixelFormat, Rectangle

logger = logging.getLogger(__name__)


def destination_size(rectangle: Rectangle) -> Tuple[int, int]:
    """
    Output size of the flattened document.

    Returns:
        (width, height) = rounded max of the top/bottom and left/right edges
    """
    top, right, bottom, left = rectangle.edge_lengths()
    return int(round(max(top, bottom))), int(round(max(left, right)))


class PerspectiveWarper:
    """
    Flattens the quadrilateral region of an image into an axis-aligned
    rectangle, correcting keystone distortion and cropping in one step.
    """

    def __init__(self, interpolation: int = cv2.INTER_LINEAR):
        self.interpolation = interpolation
        self._preprocessor = Preprocessor()

    def warp_image(self, image: np.ndarray, rectangle: Rectangle) -> Optional[np.ndarray]:
        """
        Warp an upright image array.

        Args:
            image: Upright source image
            rectangle: Document corners in the image's coordinate space

        Returns:
            Warped image, or None if the rectangle is degenerate
        """
        corners = rectangle.as_array()
        if not np.all(np.isfinite(corners)):
            return None

        width, height = destination_size(rectangle)
        if width < 1 or height < 1 or rectangle.area() < 1.0:
            return None

        dst = np.array([
            [0, 0],
            [width, 0],
            [0, height],
            [width, height],
        ], dtype=np.float32)

        matrix = cv2.getPerspectiveTransform(corners, dst)
        if not np.all(np.isfinite(matrix)):
            return None

        return cv2.warpPerspective(image, matrix, (width, height), flags=self.interpolation)

    def warp(self, frame: Frame, rectangle: Rectangle) -> Frame:
        """
        Crop the document out of a frame.

        Args:
            frame: Source frame; rotated frames are brought upright first
            rectangle: Document corners in upright image space

        Returns:
            Flattened document, or the upright original frame when the
            rectangle is degenerate or the warp fails
        """
        upright_format = PixelFormat.RGB if frame.pixel_format is PixelFormat.NV21 else frame.pixel_format
        if frame.is_empty:
            return frame

        upright = self._preprocessor.to_upright(frame)

        try:
            warped = self.warp_image(upright, rectangle)
        except cv2.error as e:
            logger.warning("Perspective warp failed, returning original image: %s", e)
            warped = None

        if warped is None:
            if frame.rotation == 0 and frame.pixel_format is not PixelFormat.NV21:
                logger.warning("Degenerate rectangle, returning original image")
                return frame
            logger.warning("Degenerate rectangle, returning upright original image")
            return Frame.from_array(upright, upright_format)

        return Frame.from_array(warped, upright_format)

