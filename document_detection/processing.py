"""
Post-processing of a captured still: crop and color controls
"""

import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from .types import Frame, PixelFormat, Rectangle
from .warper import PerspectiveWarper

logger = logging.getLogger(__name__)

_TO_HSV = {
    PixelFormat.RGB: (cv2.COLOR_RGB2HSV, cv2.COLOR_HSV2RGB),
    PixelFormat.BGR: (cv2.COLOR_BGR2HSV, cv2.COLOR_HSV2BGR),
    PixelFormat.RGBA: (cv2.COLOR_RGB2HSV, cv2.COLOR_HSV2RGB),
    PixelFormat.BGRA: (cv2.COLOR_BGR2HSV, cv2.COLOR_HSV2BGR),
}


@dataclass(frozen=True, eq=False)
class ProcessedCapture:
    cropped: Frame
    initial: Frame
    rectangle: Optional[Rectangle]


def apply_color_controls(
    image: np.ndarray,
    brightness: float = 0.0,
    contrast: float = 1.0,
    saturation: float = 1.0,
    pixel_format: PixelFormat = PixelFormat.BGR
) -> np.ndarray:
    """
    Adjust brightness, contrast and saturation of an image.

    Args:
        image: uint8 image in `pixel_format`
        brightness: Offset as a fraction of full scale (-1.0 .. 1.0)
        contrast: Gain, 1.0 leaves the image unchanged
        saturation: Saturation gain, ignored for grayscale images
        pixel_format: Channel layout of `image`

    Returns:
        Adjusted copy of the image
    """
    result = image.copy()

    if saturation != 1.0 and pixel_format in _TO_HSV:
        to_hsv, from_hsv = _TO_HSV[pixel_format]
        color = result[:, :, :3]
        hsv = cv2.cvtColor(np.ascontiguousarray(color), to_hsv)
        hsv[:, :, 1] = cv2.convertScaleAbs(hsv[:, :, 1], alpha=saturation)
        result[:, :, :3] = cv2.cvtColor(hsv, from_hsv)

    if brightness == 0.0 and contrast == 1.0:
        return result

    # Alpha is left untouched
    if pixel_format in (PixelFormat.RGBA, PixelFormat.BGRA):
        result[:, :, :3] = cv2.convertScaleAbs(result[:, :, :3], alpha=contrast, beta=brightness * 255.0)
        return result
    return cv2.convertScaleAbs(result, alpha=contrast, beta=brightness * 255.0)


def process_capture(
    frame: Frame,
    rectangle: Optional[Rectangle] = None,
    brightness: float = 0.0,
    contrast: float = 1.0,
    saturation: float = 1.0,
    should_crop: bool = True,
    warper: Optional[PerspectiveWarper] = None
) -> ProcessedCapture:
    """
    Crop a captured frame to the document and apply color controls.

    Cropping fails soft (the uncropped image is kept); a failed color
    adjustment keeps the unadjusted image.

    Args:
        frame: Captured frame
        rectangle: Document corners in the frame's upright image space
        brightness: See `apply_color_controls`
        contrast: See `apply_color_controls`
        saturation: See `apply_color_controls`
        should_crop: Skip perspective cropping when False
        warper: Warper to use (a default one when omitted)

    Returns:
        ProcessedCapture with the final image, the original frame and the
        rectangle that was used
    """
    warper = warper or PerspectiveWarper()
    cropped = frame

    if should_crop and rectangle is not None:
        cropped = warper.warp(frame, rectangle)

    if cropped.is_empty or cropped.pixel_format is PixelFormat.NV21:
        return ProcessedCapture(cropped, frame, rectangle)

    try:
        adjusted = apply_color_controls(
            cropped.data, brightness, contrast, saturation, cropped.pixel_format
        )
    except cv2.error as e:
        logger.warning("Color adjustment failed, keeping unadjusted image: %s", e)
        return ProcessedCapture(cropped, frame, rectangle)

    result = Frame(adjusted, cropped.width, cropped.height, cropped.pixel_format, cropped.rotation)
    return ProcessedCapture(result, frame, rectangle)
