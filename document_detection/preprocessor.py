"""
Frame decoding and grayscale enhancement
"""

import cv2
import numpy as np
from typing import Optional

from .config import DetectionConfig
from .types import Frame, PixelFormat

_ROTATE_CODES = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}

_TO_GRAY = {
    PixelFormat.RGB: cv2.COLOR_RGB2GRAY,
    PixelFormat.BGR: cv2.COLOR_BGR2GRAY,
    PixelFormat.RGBA: cv2.COLOR_RGBA2GRAY,
    PixelFormat.BGRA: cv2.COLOR_BGRA2GRAY,
}


def rotate_image(image: np.ndarray, rotation: int) -> np.ndarray:
    """Rotate an image clockwise by 0, 90, 180 or 270 degrees."""
    code = _ROTATE_CODES.get(rotation)
    if code is None:
        return image
    return cv2.rotate(image, code)


class Preprocessor:
    """
    Turns a frame into the enhanced grayscale image the edge stage works on.

    Steps: decode (NV21 to RGB), rotate upright, grayscale, CLAHE, Gaussian blur.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    def to_upright(self, frame: Frame) -> np.ndarray:
        """
        Decode the frame and rotate it to upright orientation.

        Args:
            frame: Input frame in any supported format

        Returns:
            Upright image. NV21 input is decoded to RGB, every other
            format keeps its channel layout.
        """
        image = frame.data
        if frame.pixel_format is PixelFormat.NV21:
            image = cv2.cvtColor(image, cv2.COLOR_YUV2RGB_NV21)
        return rotate_image(image, frame.rotation)

    def to_gray(self, image: np.ndarray, pixel_format: PixelFormat) -> np.ndarray:
        """
        Convert an upright image to single-channel grayscale.

        Args:
            image: Output of `to_upright`
            pixel_format: Format of the original frame
        """
        if image.ndim == 2:
            return image
        if pixel_format is PixelFormat.NV21:
            return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
        return cv2.cvtColor(image, _TO_GRAY[pixel_format])

    def enhance(self, gray: np.ndarray) -> np.ndarray:
        """
        Boost local contrast, then blur lightly.

        CLAHE recovers edges of low-contrast documents (white card on a
        white desk); the blur suppresses sensor noise without erasing
        thin document edges.
        """
        # CLAHE objects carry state, one per call keeps the stage reentrant
        clahe = cv2.createCLAHE(
            clipLimit=self.config.clahe_clip_limit,
            tileGridSize=tuple(self.config.clahe_tile_grid)
        )
        equalized = clahe.apply(gray)
        k = self.config.blur_kernel
        return cv2.GaussianBlur(equalized, (k, k), 0)

    def process(self, frame: Frame) -> np.ndarray:
        """Full preprocessing: upright, grayscale, enhanced."""
        upright = self.to_upright(frame)
        gray = self.to_gray(upright, frame.pixel_format)
        return self.enhance(gray)
